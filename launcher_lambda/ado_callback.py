"""Callback client for reporting task outcomes to Azure DevOps."""
import json
import logging

import requests

logger = logging.getLogger()

EVENTS_URL_TEMPLATE = (
    'https://{instance}/{project_id}/_apis/distributedtask/hubs/{hub_name}'
    '/plans/{plan_id}/events?api-version={api_version}'
)

REQUEST_TIMEOUT_SECONDS = 30


class CallbackError(RuntimeError):
    """Base class for failures while calling back to Azure DevOps."""


class CallbackEncodingError(CallbackError):
    """Raised when the callback body cannot be serialized."""


class CallbackTransportError(CallbackError):
    """Raised when the callback request cannot be delivered."""


class CallbackStatusError(CallbackError):
    """Raised when Azure DevOps answers with a status outside 200-399."""

    def __init__(self, status_code: int, body: str = ''):
        super().__init__(f"Unexpected status code from Azure DevOps: {status_code}")
        self.status_code = status_code
        self.body = body


def events_url(ado_config, payload) -> str:
    """Build the distributed task events URL for a plan.

    See https://learn.microsoft.com/en-us/rest/api/azure/devops/distributedtask/events/post-event
    """
    return EVENTS_URL_TEMPLATE.format(
        instance=ado_config.instance,
        project_id=payload.project_id,
        hub_name=payload.hub_name,
        plan_id=payload.plan_id,
        api_version=ado_config.api_version
    )


def send_task_completed(ado_config, payload, result: str, session=None) -> str:
    """Send a TaskCompleted event for the job that triggered the launch.

    The job access token from the payload is sent as a bearer token.

    Args:
        ado_config: AdoConfig with the instance and API version.
        payload: AdoPayload the launch was triggered with.
        result: 'succeeded' or 'failed'.
        session: requests session to use. Defaults to the requests module.

    Returns:
        str: The raw response body.

    Raises:
        CallbackEncodingError: If the body cannot be serialized.
        CallbackTransportError: If the request cannot be sent.
        CallbackStatusError: If the response status is outside 200-399.
    """
    http = session or requests

    try:
        body = json.dumps({
            'name': 'TaskCompleted',
            'jobId': payload.job_id,
            'taskId': payload.task_instance_id,
            'result': result
        })
    except (TypeError, ValueError) as e:
        raise CallbackEncodingError(f"Failed to encode callback body: {e}") from e

    url = events_url(ado_config, payload)

    try:
        response = http.post(
            url,
            headers={
                'Accept': 'application/json',
                'Content-Type': 'application/json',
                'Authorization': f'Bearer {payload.auth_token}'
            },
            data=body,
            timeout=REQUEST_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        raise CallbackTransportError(f"Failed to send callback to {url}: {e}") from e

    if response.status_code < 200 or response.status_code > 399:
        raise CallbackStatusError(response.status_code, response.text)

    logger.info(f"[CALLBACK_SENT] Reported {result} for job {payload.job_id} "
                f"(status {response.status_code})")
    return response.text
