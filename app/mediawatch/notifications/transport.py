"""HTTP transport shared by webhook-style agents."""

from typing import Any, Dict, Optional

import requests

from mediawatch.logging import get_module_logger
from mediawatch.notifications.errors import WebhookDeliveryError

logger = get_module_logger()


def _check_response(response: requests.Response, label: str) -> requests.Response:
    if 200 <= response.status_code < 300:
        return response

    body = response.text or ""
    logger.warning(
        "webhook_request_rejected",
        label=label,
        status_code=response.status_code,
        response_body=body,
    )
    raise WebhookDeliveryError(label, response.status_code, body)


def post_json(
    url: str,
    payload: Any,
    label: str,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """POST ``payload`` as JSON.

    Args:
        url: Destination URL
        payload: JSON-serializable body
        label: Channel label used in error messages ("Ntfy webhook")
        timeout: Request timeout in seconds
        headers: Extra headers (e.g. Authorization)

    Returns:
        The successful response.

    Raises:
        WebhookDeliveryError: Non-2xx response.
        requests.RequestException: Network errors and timeouts.
    """
    request_headers = {"Content-Type": "application/json"}
    if headers:
        request_headers.update(headers)

    response = requests.post(url, json=payload, headers=request_headers, timeout=timeout)
    return _check_response(response, label)


def post_form(
    url: str,
    data: Dict[str, str],
    label: str,
    timeout: float,
) -> requests.Response:
    """POST ``data`` form-encoded; same error contract as ``post_json``."""
    response = requests.post(
        url,
        data=data,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=timeout,
    )
    return _check_response(response, label)
