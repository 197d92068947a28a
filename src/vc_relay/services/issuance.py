"""Issuance request lifecycle."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from vc_relay.adapters.vc_client_api import VcClientApi
from vc_relay.domain.correlation import CallbackCode, CorrelationRecord
from vc_relay.errors import InvalidRequestError
from vc_relay.services.correlation import CorrelationService, generate_pin
from vc_relay.services.exchange import (
    BUTTON_COLOR,
    parse_api_response,
    parse_callback,
    point_callback,
)
from vc_relay.services.templates import RequestTemplateLoader

_logger = logging.getLogger(__name__)

RETRIEVED_MESSAGE = "QR Code is scanned. Waiting for issuance to complete."
ISSUED_MESSAGE = "Credential successfully issued"


@dataclass
class IssuanceService:
    """Submit issuance requests and track their callbacks."""

    client: VcClientApi
    templates: RequestTemplateLoader
    correlation: CorrelationService
    api_key: str

    async def create_request(
        self, api_base_url: str, claims: Mapping[str, str] | None = None
    ) -> dict[str, object]:
        """Submit an issuance request and return the API response with its id."""
        request = await self.templates.issuance_request()
        section = request.issuance
        if section.claims is not None:
            supplied = claims or {}
            section.claims = {name: supplied.get(name, "") for name in section.claims}

        correlation_id = self.correlation.create_correlation()
        point_callback(
            request.callback,
            url=f"{api_base_url}/issuanceCallback",
            state=correlation_id,
            nonce=str(uuid4()),
            api_key=self.api_key,
        )

        pin = generate_pin(section.pin.length) if section.pin else None
        if section.pin is not None and pin is not None:
            section.pin.value = pin
            _logger.debug("Issuance pin generated: id=%s", correlation_id)

        payload = await self.client.create_request(request.to_wire())
        response = parse_api_response(payload).to_wire()
        if pin is not None:
            response["pin"] = pin
        response["id"] = correlation_id
        _logger.info("Issuance request submitted: id=%s", correlation_id)
        return response

    def handle_callback(self, body: bytes) -> CorrelationRecord | None:
        """Record progress reported by an issuance callback."""
        callback, raw = parse_callback(body)
        key = callback.correlation_key() or ""
        _logger.debug("issuanceCallback body: %s", raw)

        if callback.code == CallbackCode.REQUEST_RETRIEVED:
            return self.correlation.record_retrieved(key, RETRIEVED_MESSAGE)
        if callback.code == CallbackCode.ISSUANCE_SUCCESSFUL:
            return self.correlation.record_verified(key, ISSUED_MESSAGE, payload=raw)

        _logger.warning(
            "issuanceCallback ignored unsupported code=%s state=%s",
            callback.code,
            key,
        )
        return None

    def poll(self, correlation_id: str) -> dict[str, object] | None:
        """Return browser-facing status for an issuance, or None if not ready."""
        record = self.correlation.poll(correlation_id)
        if record is None:
            return None
        return record.browser_view()

    async def describe(self, host: str, api_base_url: str) -> dict[str, object]:
        """Return the echo document for the configured credential."""
        request = await self.templates.issuance_request()
        manifest = self.templates.issuance_manifest()
        if manifest is None:
            raise InvalidRequestError("Issuance manifest not loaded")
        return {
            "date": datetime.now(tz=UTC).isoformat(),
            "host": host,
            "api": api_base_url,
            "didIssuer": manifest.input.issuer,
            "credentialType": manifest.id,
            "displayCard": manifest.display.card,
            "buttonColor": BUTTON_COLOR,
            "contract": manifest.display.contract,
            "selfAssertedClaims": request.issuance.claims,
        }

    def logo_uri(self) -> str | None:
        """Return the credential card logo URI."""
        manifest = self.templates.issuance_manifest()
        return manifest.logo_uri() if manifest else None
