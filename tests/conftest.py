"""Pytest configuration and fixtures."""
import sys
import os
import json
import pytest

# Add Lambda and infrastructure directories to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'launcher_lambda'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'infrastructure'))

# The handler loads its config and the ECS client at import time
LAUNCHER_ENV = {
    'AWS_DEFAULT_REGION': 'us-east-1',
    'ECS_CLUSTER': 'agents-cluster',
    'ECS_TASK_DEFINITION': 'ado-agent:3',
    'SUBNET_IDS': 'subnet-1,subnet-2',
    'SECURITY_GROUP_IDS': 'sg-1',
    'ADO_ORG': 'myorg',
    'POLL_INTERVAL_SECONDS': '0',
}
for _name, _value in LAUNCHER_ENV.items():
    os.environ.setdefault(_name, _value)


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables between tests."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def launcher_env():
    """Return a complete launcher environment."""
    return dict(LAUNCHER_ENV)


@pytest.fixture
def ado_message():
    """Return a valid Azure DevOps check payload."""
    return {
        'PlanUrl': 'https://dev.azure.com/myorg/',
        'PlanId': 'PLAN1',
        'ProjectId': 'P1',
        'HubName': 'build',
        'JobId': 'job-123',
        'TimelineId': 'timeline-456',
        'TaskInstanceId': 'task-789',
        'AuthToken': 'abc123'
    }


@pytest.fixture
def sqs_event(ado_message):
    """Return an SQS event carrying one Azure DevOps payload."""
    return {
        'Records': [{
            'messageId': 'message-1',
            'receiptHandle': 'receipt-1',
            'body': json.dumps(ado_message),
            'eventSource': 'aws:sqs',
            'eventSourceARN': 'arn:aws:sqs:us-east-1:123456789012:ado-agent-launcher-queue'
        }]
    }


@pytest.fixture
def launcher_config():
    """Return a LauncherConfig for tests that inject their own clients."""
    from config_loader import AdoConfig, EcsTaskConfig, LauncherConfig

    return LauncherConfig(
        ecs=EcsTaskConfig(
            cluster='agents-cluster',
            task_definition='ado-agent:3',
            subnets=('subnet-1', 'subnet-2'),
            security_groups=('sg-1',)
        ),
        ado=AdoConfig(
            instance='dev.azure.com/myorg',
            api_version='7.1-preview.3',
            auth_username='ado-callback'
        ),
        poll_interval_seconds=0
    )


@pytest.fixture
def task_arn():
    return 'arn:aws:ecs:us-east-1:123456789012:task/agents-cluster/0123456789abcdef'
