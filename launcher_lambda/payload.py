"""Parsing of the Azure DevOps check payload carried in SQS messages."""
import json
from dataclasses import dataclass, field


class PayloadDecodeError(ValueError):
    """Raised when a message body is not a valid Azure DevOps payload."""


# JSON key -> attribute name
PAYLOAD_FIELDS = {
    'PlanUrl': 'plan_url',
    'PlanId': 'plan_id',
    'ProjectId': 'project_id',
    'HubName': 'hub_name',
    'JobId': 'job_id',
    'TimelineId': 'timeline_id',
    'TaskInstanceId': 'task_instance_id',
    'AuthToken': 'auth_token',
}


@dataclass(frozen=True)
class AdoPayload:
    """Payload sent by an Azure DevOps 'Invoke REST API' check.

    The check is configured to put these pipeline variables in the body:
    system.CollectionUri, system.PlanId, system.TeamProjectId,
    system.HostType, system.JobId, system.TimelineId,
    system.TaskInstanceId and system.AccessToken.
    """
    plan_url: str
    plan_id: str
    project_id: str
    hub_name: str
    job_id: str
    timeline_id: str
    task_instance_id: str
    # Job access token, kept out of logs and tracebacks
    auth_token: str = field(repr=False)


def validate_payload(message: dict) -> list:
    """Return the payload keys that are missing or not strings.

    Args:
        message: The decoded message dictionary.

    Returns:
        list: Offending keys, empty when the message is valid.
    """
    return [key for key in PAYLOAD_FIELDS if not isinstance(message.get(key), str)]


def parse_payload(body: str) -> AdoPayload:
    """Decode an SQS message body into an AdoPayload.

    Raises:
        PayloadDecodeError: If the body is not JSON, not an object,
            or lacks any of the required fields.
    """
    try:
        message = json.loads(body)
    except (TypeError, ValueError) as e:
        raise PayloadDecodeError(f"Message body is not valid JSON: {e}") from e

    if not isinstance(message, dict):
        raise PayloadDecodeError(f"Message body must be a JSON object, got {type(message).__name__}")

    invalid = validate_payload(message)
    if invalid:
        raise PayloadDecodeError(f"Missing or non-string payload fields: {', '.join(invalid)}")

    return AdoPayload(**{attr: message[key] for key, attr in PAYLOAD_FIELDS.items()})
