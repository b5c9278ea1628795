"""Configuration loader for the agent launcher Lambda."""
import math
import os
from dataclasses import dataclass

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(RuntimeError):
    """Raised when required environment variables are missing or invalid."""


@dataclass(frozen=True)
class EcsTaskConfig:
    """Parameters for the ECS RunTask API call."""
    cluster: str
    task_definition: str
    subnets: tuple
    security_groups: tuple


@dataclass(frozen=True)
class AdoConfig:
    """Connection settings for the Azure DevOps REST API."""
    instance: str
    api_version: str
    # Username half of a basic auth pair; the events API ignores it
    auth_username: str


@dataclass(frozen=True)
class LauncherConfig:
    ecs: EcsTaskConfig
    ado: AdoConfig
    poll_interval_seconds: float = 1.0
    deadline_margin_seconds: float = 5.0
    log_level: str = 'INFO'


def _split_ids(value: str) -> tuple:
    return tuple(item.strip() for item in value.split(',') if item.strip())


def _read_float(environ, name: str, default: float) -> float:
    raw = environ.get(name) or str(default)
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def _read_log_level(environ) -> str:
    level = (environ.get('LOG_LEVEL') or 'INFO').strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level


def load_config(environ=None) -> LauncherConfig:
    """Build the launcher configuration from environment variables.

    Required: ECS_CLUSTER, ECS_TASK_DEFINITION, SUBNET_IDS, SECURITY_GROUP_IDS
    and ADO_ORG. Optional: ADO_DOMAIN (default dev.azure.com), ADO_API_VERSION
    (default 7.1-preview.3), ADO_AUTH_USERNAME (default ado-callback),
    POLL_INTERVAL_SECONDS (default 1), DEADLINE_MARGIN_SECONDS (default 5)
    and LOG_LEVEL (default INFO).

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        LauncherConfig: The immutable configuration.

    Raises:
        ConfigError: If any required variable is unset or empty, or an
            optional one holds an invalid value.
    """
    if environ is None:
        environ = os.environ

    required = ['ECS_CLUSTER', 'ECS_TASK_DEFINITION', 'SUBNET_IDS', 'SECURITY_GROUP_IDS', 'ADO_ORG']
    missing = [name for name in required if not environ.get(name, '').strip()]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    subnets = _split_ids(environ['SUBNET_IDS'])
    security_groups = _split_ids(environ['SECURITY_GROUP_IDS'])
    if not subnets:
        raise ConfigError("SUBNET_IDS does not contain any subnet IDs")
    if not security_groups:
        raise ConfigError("SECURITY_GROUP_IDS does not contain any security group IDs")

    ecs = EcsTaskConfig(
        cluster=environ['ECS_CLUSTER'].strip(),
        task_definition=environ['ECS_TASK_DEFINITION'].strip(),
        subnets=subnets,
        security_groups=security_groups
    )

    ado_domain = environ.get('ADO_DOMAIN') or 'dev.azure.com'
    ado = AdoConfig(
        instance=f"{ado_domain}/{environ['ADO_ORG'].strip()}",
        api_version=environ.get('ADO_API_VERSION') or '7.1-preview.3',
        auth_username=environ.get('ADO_AUTH_USERNAME') or 'ado-callback'
    )

    return LauncherConfig(
        ecs=ecs,
        ado=ado,
        poll_interval_seconds=_read_float(environ, 'POLL_INTERVAL_SECONDS', 1.0),
        deadline_margin_seconds=_read_float(environ, 'DEADLINE_MARGIN_SECONDS', 5.0),
        log_level=_read_log_level(environ)
    )
