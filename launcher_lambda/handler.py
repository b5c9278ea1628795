"""Agent launcher Lambda handler.

Consumes Azure DevOps check payloads from SQS, runs one ECS Fargate agent
task per message, waits until the task is RUNNING or STOPPED and reports
the outcome back to the Azure DevOps plan.
"""
import logging
import sys

from ado_callback import CallbackError, send_task_completed
from config_loader import ConfigError, load_config
from ecs_runner import (
    PollingCancelled,
    TaskLaunchError,
    TaskStatusError,
    generate_client_token,
    run_agent_task,
    wait_for_task_outcome,
)
from payload import PayloadDecodeError, parse_payload

logger = logging.getLogger()

# Load config at cold start (module level); an invalid variable aborts the init
try:
    config = load_config()
except ConfigError as e:
    logger.error(f"[CONFIG_ERROR] {e}")
    sys.exit(1)

logger.setLevel(config.log_level)


def deadline_check(context, margin_seconds: float):
    """Return a callable telling whether the invocation is about to time out.

    Returns None when the context does not expose the remaining time.
    """
    if context is None or not hasattr(context, 'get_remaining_time_in_millis'):
        return None
    margin_ms = margin_seconds * 1000
    return lambda: context.get_remaining_time_in_millis() <= margin_ms


def process_message(body: str, launcher_config, ecs_client=None, session=None, should_stop=None) -> str:
    """Launch an agent task for one message and report its outcome.

    Args:
        body: Raw SQS message body.
        launcher_config: LauncherConfig for the ECS task and the callback.
        ecs_client: ECS client to use. Defaults to the ecs_runner client.
        session: requests session for the callback.
        should_stop: Callable returning True when the deadline is near.

    Returns:
        str: The Azure DevOps response body.
    """
    try:
        payload = parse_payload(body)
    except PayloadDecodeError as e:
        logger.error(f"[PAYLOAD_INVALID] Failed to parse message body: {e}")
        raise

    client_token = generate_client_token(payload.auth_token)

    try:
        task_arn = run_agent_task(launcher_config.ecs, client_token, client=ecs_client)
    except TaskLaunchError as e:
        logger.error(f"[TASK_LAUNCH_FAILED] Job {payload.job_id}: {e}")
        raise

    try:
        outcome = wait_for_task_outcome(
            launcher_config.ecs.cluster,
            task_arn,
            poll_interval=launcher_config.poll_interval_seconds,
            should_stop=should_stop,
            client=ecs_client
        )
    except (TaskStatusError, PollingCancelled) as e:
        logger.error(f"[TASK_STATUS_FAILED] Job {payload.job_id}, task {task_arn}: {e}")
        raise

    try:
        response = send_task_completed(launcher_config.ado, payload, outcome, session=session)
    except CallbackError as e:
        logger.error(f"[CALLBACK_FAILED] Job {payload.job_id}, task {task_arn}: {e}")
        raise

    logger.info(f"[JOB_COMPLETE] Job {payload.job_id}, task {task_arn}: {outcome}, ADO response: {response}")
    return response


def handler(event, context):
    """Process SQS messages one at a time, in delivery order.

    The first failing message fails the whole invocation so that SQS
    redelivers the batch (and eventually moves it to the DLQ).

    Args:
        event: SQS event containing Azure DevOps payload records.
        context: Lambda context object.

    Returns:
        dict: Response with status code and the number of processed messages.
    """
    records = event.get('Records', [])
    should_stop = deadline_check(context, config.deadline_margin_seconds)

    for record in records:
        logger.info(f"[MESSAGE_START] Processing message {record.get('messageId', 'unknown')}")
        process_message(record['body'], config, should_stop=should_stop)

    return {'statusCode': 200, 'processed': len(records)}
