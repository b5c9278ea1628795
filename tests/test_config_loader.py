"""Tests for the launcher config loader."""
import dataclasses

import pytest

from config_loader import ConfigError, load_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_config_reads_required_values(self, launcher_env):
        """Test ECS settings are read from the environment."""
        config = load_config(launcher_env)

        assert config.ecs.cluster == 'agents-cluster'
        assert config.ecs.task_definition == 'ado-agent:3'
        assert config.ecs.subnets == ('subnet-1', 'subnet-2')
        assert config.ecs.security_groups == ('sg-1',)

    def test_load_config_applies_defaults(self, launcher_env):
        """Test optional Azure DevOps settings fall back to defaults."""
        del launcher_env['POLL_INTERVAL_SECONDS']

        config = load_config(launcher_env)

        assert config.ado.instance == 'dev.azure.com/myorg'
        assert config.ado.api_version == '7.1-preview.3'
        assert config.ado.auth_username == 'ado-callback'
        assert config.poll_interval_seconds == 1.0
        assert config.deadline_margin_seconds == 5.0

    def test_load_config_overrides_defaults(self, launcher_env):
        """Test optional settings can be overridden."""
        launcher_env.update({
            'ADO_DOMAIN': 'ado.example.com',
            'ADO_API_VERSION': '7.0',
            'ADO_AUTH_USERNAME': 'svc',
            'POLL_INTERVAL_SECONDS': '2.5',
            'DEADLINE_MARGIN_SECONDS': '10'
        })

        config = load_config(launcher_env)

        assert config.ado.instance == 'ado.example.com/myorg'
        assert config.ado.api_version == '7.0'
        assert config.ado.auth_username == 'svc'
        assert config.poll_interval_seconds == 2.5
        assert config.deadline_margin_seconds == 10.0

    def test_load_config_empty_optional_uses_default(self, launcher_env):
        """Test an empty optional variable is treated as unset."""
        launcher_env['ADO_DOMAIN'] = ''

        config = load_config(launcher_env)

        assert config.ado.instance == 'dev.azure.com/myorg'

    def test_load_config_strips_id_lists(self, launcher_env):
        """Test whitespace and empty entries are dropped from ID lists."""
        launcher_env['SUBNET_IDS'] = ' subnet-1 , ,subnet-2,'

        config = load_config(launcher_env)

        assert config.ecs.subnets == ('subnet-1', 'subnet-2')

    def test_load_config_reports_all_missing_variables(self):
        """Test every missing required variable is named in the error."""
        with pytest.raises(ConfigError) as exc_info:
            load_config({'ECS_CLUSTER': 'agents-cluster'})

        message = str(exc_info.value)
        for name in ['ECS_TASK_DEFINITION', 'SUBNET_IDS', 'SECURITY_GROUP_IDS', 'ADO_ORG']:
            assert name in message
        assert 'ECS_CLUSTER,' not in message

    def test_load_config_rejects_blank_required_value(self, launcher_env):
        """Test a whitespace-only required variable counts as missing."""
        launcher_env['ADO_ORG'] = '   '

        with pytest.raises(ConfigError, match='ADO_ORG'):
            load_config(launcher_env)

    def test_load_config_rejects_list_without_ids(self, launcher_env):
        """Test an ID list made only of separators is rejected."""
        launcher_env['SECURITY_GROUP_IDS'] = ',,'

        with pytest.raises(ConfigError, match='SECURITY_GROUP_IDS'):
            load_config(launcher_env)

    def test_load_config_rejects_invalid_poll_interval(self, launcher_env):
        """Test a non-numeric poll interval is rejected."""
        launcher_env['POLL_INTERVAL_SECONDS'] = 'soon'

        with pytest.raises(ConfigError, match='POLL_INTERVAL_SECONDS'):
            load_config(launcher_env)

    def test_load_config_rejects_negative_poll_interval(self, launcher_env):
        """Test a negative poll interval is rejected."""
        launcher_env['POLL_INTERVAL_SECONDS'] = '-1'

        with pytest.raises(ConfigError, match='POLL_INTERVAL_SECONDS'):
            load_config(launcher_env)

    @pytest.mark.parametrize('name', ['POLL_INTERVAL_SECONDS', 'DEADLINE_MARGIN_SECONDS'])
    @pytest.mark.parametrize('raw', ['nan', 'inf', '-inf', 'Infinity'])
    def test_load_config_rejects_non_finite_numbers(self, launcher_env, name, raw):
        """Test NaN and infinite timing values are rejected at load time."""
        launcher_env[name] = raw

        with pytest.raises(ConfigError, match=name):
            load_config(launcher_env)

    def test_load_config_log_level_default(self, launcher_env):
        """Test the log level defaults to INFO."""
        assert load_config(launcher_env).log_level == 'INFO'

    def test_load_config_log_level_is_normalized(self, launcher_env):
        """Test the log level is accepted in any case."""
        launcher_env['LOG_LEVEL'] = ' debug '

        assert load_config(launcher_env).log_level == 'DEBUG'

    def test_load_config_rejects_unknown_log_level(self, launcher_env):
        """Test an unknown log level is a configuration error."""
        launcher_env['LOG_LEVEL'] = 'verbose'

        with pytest.raises(ConfigError, match='LOG_LEVEL'):
            load_config(launcher_env)

    def test_config_is_immutable(self, launcher_env):
        """Test the loaded config cannot be modified."""
        config = load_config(launcher_env)

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.ecs.cluster = 'other-cluster'
