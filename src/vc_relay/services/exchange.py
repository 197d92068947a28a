"""Helpers shared by the issuance and presentation flows."""

import json

from pydantic import ValidationError

from vc_relay.domain.requests import CallbackBody, CallbackSettings, VcApiResponse
from vc_relay.errors import InvalidRequestError

CALLBACK_API_KEY_HEADER = "api-key"
BUTTON_COLOR = "#000080"


def point_callback(
    callback: CallbackSettings, url: str, state: str, nonce: str, api_key: str
) -> None:
    """Address the VC Client API callback for one request."""
    callback.url = url
    callback.state = state
    callback.nonce = nonce
    callback.headers[CALLBACK_API_KEY_HEADER] = api_key


def parse_callback(body: bytes) -> tuple[CallbackBody, dict[str, object]]:
    """Parse a callback body into its model and the raw JSON object."""
    try:
        raw = json.loads(body)
    except ValueError as exc:
        raise InvalidRequestError(f"Error parsing json body. error={exc}") from exc
    if not isinstance(raw, dict):
        raise InvalidRequestError("Callback body must be a JSON object")
    try:
        callback = CallbackBody.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRequestError(f"Invalid callback body: {exc}") from exc
    if not callback.correlation_key():
        raise InvalidRequestError("Missing argument 'state'")
    return callback, raw


def parse_api_response(payload: dict[str, object]) -> VcApiResponse:
    """Validate a request submission response."""
    try:
        return VcApiResponse.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError(f"Unexpected VC Client API response: {exc}") from exc
