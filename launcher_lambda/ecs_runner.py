"""ECS task runner for launching Azure DevOps agent tasks and waiting on them."""
import base64
import hashlib
import logging
import time

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger()

ecs = boto3.client(
    'ecs',
    config=Config(
        connect_timeout=5,
        read_timeout=30,
        retries={'max_attempts': 3, 'mode': 'standard'}
    )
)

# RunTask accepts client tokens of up to 64 ASCII characters
MAX_CLIENT_TOKEN_LENGTH = 64

STATUS_RUNNING = 'RUNNING'
STATUS_STOPPED = 'STOPPED'

OUTCOME_SUCCEEDED = 'succeeded'
OUTCOME_FAILED = 'failed'


class TaskLaunchError(RuntimeError):
    """Raised when ECS refuses or fails to start the task."""


class TaskStatusError(RuntimeError):
    """Raised when the status of a launched task cannot be read."""


class PollingCancelled(RuntimeError):
    """Raised when the invocation deadline is reached while waiting on a task."""


def generate_client_token(seed: str) -> str:
    """Derive a RunTask client token from an arbitrary string.

    The seed is hashed with SHA-256 and base64 encoded, so the same seed
    always yields the same token and a retried launch is deduplicated by ECS.

    See https://docs.aws.amazon.com/AmazonECS/latest/APIReference/ECS_Idempotency.html
    """
    digest = hashlib.sha256(seed.encode('utf-8')).digest()
    return base64.b64encode(digest).decode('ascii')[:MAX_CLIENT_TOKEN_LENGTH]


def run_agent_task(task_config, client_token: str, client=None) -> str:
    """Launch a single Fargate task for the agent.

    Args:
        task_config: EcsTaskConfig with cluster, task definition and network settings.
        client_token: Idempotency token for the RunTask request.
        client: ECS client to use. Defaults to the module-level client.

    Returns:
        str: The ARN of the launched ECS task.

    Raises:
        TaskLaunchError: If the RunTask call fails or returns no task.
    """
    client = client or ecs
    try:
        response = client.run_task(
            cluster=task_config.cluster,
            taskDefinition=task_config.task_definition,
            count=1,
            launchType='FARGATE',
            propagateTags='TASK_DEFINITION',
            enableECSManagedTags=True,
            enableExecuteCommand=True,
            clientToken=client_token,
            networkConfiguration={
                'awsvpcConfiguration': {
                    'subnets': list(task_config.subnets),
                    'securityGroups': list(task_config.security_groups),
                    'assignPublicIp': 'ENABLED'
                }
            }
        )
    except (BotoCoreError, ClientError) as e:
        raise TaskLaunchError(f"RunTask failed on cluster {task_config.cluster}: {e}") from e

    tasks = response.get('tasks') or []
    if not tasks:
        failures = response.get('failures') or []
        reasons = ', '.join(f.get('reason', 'unknown') for f in failures) or 'no tasks returned'
        raise TaskLaunchError(f"RunTask did not start a task on cluster {task_config.cluster}: {reasons}")

    task_arn = tasks[0]['taskArn']
    logger.info(f"[TASK_LAUNCHED] Task {task_arn} on cluster {task_config.cluster} "
                f"(lastStatus={tasks[0].get('lastStatus')})")
    return task_arn


def get_task_last_status(cluster: str, task_arn: str, client=None) -> str:
    """Return the last known status of an ECS task.

    Raises:
        TaskStatusError: If the DescribeTasks call fails or the task is not found.
    """
    client = client or ecs
    try:
        response = client.describe_tasks(cluster=cluster, tasks=[task_arn])
    except (BotoCoreError, ClientError) as e:
        raise TaskStatusError(f"DescribeTasks failed for task {task_arn}: {e}") from e

    tasks = response.get('tasks') or []
    if not tasks:
        raise TaskStatusError(f"Failed to describe task {task_arn}")

    return tasks[0].get('lastStatus', '')


def wait_for_task_outcome(cluster: str, task_arn: str, poll_interval: float = 1.0,
                          should_stop=None, client=None, sleep=time.sleep) -> str:
    """Poll a task until it is RUNNING or STOPPED.

    RUNNING means the agent came up and is reported as succeeded. STOPPED
    means the task exited before reaching RUNNING and is reported as failed.
    Every other status is polled again after poll_interval seconds. There is
    no iteration limit; the only bound is should_stop, which is checked
    before every query and before every sleep.

    Args:
        cluster: ECS cluster name.
        task_arn: ARN of the task to watch.
        poll_interval: Seconds to wait between queries.
        should_stop: Callable returning True when waiting must be abandoned.
        client: ECS client to use. Defaults to the module-level client.
        sleep: Sleep function, replaceable in tests.

    Returns:
        str: 'succeeded' or 'failed'.

    Raises:
        TaskStatusError: If a status query fails.
        PollingCancelled: If should_stop returns True. The task is left running.
    """
    polls = 0
    while True:
        if should_stop is not None and should_stop():
            raise PollingCancelled(f"Stopped waiting for task {task_arn} after {polls} polls")

        status = get_task_last_status(cluster, task_arn, client=client)
        polls += 1

        if status == STATUS_RUNNING:
            outcome = OUTCOME_SUCCEEDED
        elif status == STATUS_STOPPED:
            outcome = OUTCOME_FAILED
        else:
            logger.debug(f"[TASK_POLL] Task {task_arn} is {status}")
            if should_stop is not None and should_stop():
                raise PollingCancelled(f"Stopped waiting for task {task_arn} after {polls} polls")
            sleep(poll_interval)
            continue

        logger.info(f"[TASK_TERMINAL] Task {task_arn} reached {status} after {polls} polls: {outcome}")
        return outcome
