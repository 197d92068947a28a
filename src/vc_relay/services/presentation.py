"""Presentation (verifier) request lifecycle."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from vc_relay.adapters.vc_client_api import VcClientApi
from vc_relay.domain.correlation import CallbackCode, CorrelationRecord
from vc_relay.errors import InvalidRequestError
from vc_relay.services.correlation import CorrelationService
from vc_relay.services.exchange import (
    BUTTON_COLOR,
    parse_api_response,
    parse_callback,
    point_callback,
)
from vc_relay.services.templates import RequestTemplateLoader
from vc_relay.tokens import decode_unverified_token_payload, select_json_path

_logger = logging.getLogger(__name__)

RETRIEVED_MESSAGE = "QR Code is scanned. Waiting for validation..."
NOT_PRESENTED_MESSAGE = "Verifiable Credentials not presented"


def display_name_from_claims(claims: dict[str, object]) -> str:
    """Build a display name from presented credential claims."""
    display_name = claims.get("displayName")
    if display_name:
        return str(display_name)
    return f"{claims.get('firstName', '')} {claims.get('lastName', '')}"


def _first_issuer_claims(payload: dict[str, object]) -> dict[str, object]:
    issuers = payload.get("issuers")
    if not isinstance(issuers, list) or not issuers:
        raise ValueError("no issuers in presentation response")
    claims = issuers[0].get("claims") if isinstance(issuers[0], dict) else None
    if not isinstance(claims, dict):
        raise ValueError("no claims in presentation response")
    return claims


@dataclass
class PresentationService:
    """Submit presentation requests and track their callbacks."""

    client: VcClientApi
    templates: RequestTemplateLoader
    correlation: CorrelationService
    api_key: str

    async def create_request(self, api_base_url: str) -> dict[str, object]:
        """Submit a presentation request and return the API response with its id."""
        request = await self.templates.presentation_request()
        correlation_id = self.correlation.create_correlation()
        point_callback(
            request.callback,
            url=f"{api_base_url}/presentationCallback",
            state=correlation_id,
            nonce=str(uuid4()),
            api_key=self.api_key,
        )

        payload = await self.client.create_request(request.to_wire())
        response = parse_api_response(payload).to_wire()
        response["id"] = correlation_id
        _logger.info("Presentation request submitted: id=%s", correlation_id)
        return response

    def handle_callback(self, body: bytes) -> CorrelationRecord | None:
        """Record progress reported by a presentation callback."""
        callback, raw = parse_callback(body)
        key = callback.correlation_key() or ""
        _logger.debug("presentationCallback body: %s", raw)

        if callback.code == CallbackCode.REQUEST_RETRIEVED:
            return self.correlation.record_retrieved(key, RETRIEVED_MESSAGE)

        if callback.code == CallbackCode.PRESENTATION_VERIFIED:
            try:
                claims = _first_issuer_claims(raw)
            except ValueError as exc:
                raise InvalidRequestError(str(exc)) from exc
            return self.correlation.record_verified(
                key, display_name_from_claims(claims), payload=raw
            )

        _logger.warning(
            "presentationCallback ignored unsupported code=%s state=%s",
            callback.code,
            key,
        )
        return None

    def poll(
        self, correlation_id: str, request_id: str | None = None, *, consume: bool = True
    ) -> dict[str, object] | None:
        """Return browser-facing status for a request, or None if not ready."""
        record = self.correlation.poll(correlation_id, request_id, consume=consume)
        if record is None:
            return None
        return record.browser_view()

    def poll_b2c(self, correlation_id: str) -> dict[str, object] | None:
        """Return flattened claims for Azure AD B2C, or None if not presented."""
        record = self.correlation.take(correlation_id)
        if record is None:
            return None
        # removed before parsing so a bad payload is not served again
        if record.payload is None:
            raise InvalidRequestError(
                f"Error parsing presentationResponse from cache. CI={correlation_id}"
            )
        return _b2c_claims(correlation_id, record.payload)

    async def describe(self, host: str, api_base_url: str) -> dict[str, object]:
        """Return the echo document describing the configured credential."""
        await self.templates.presentation_request()
        manifest = self.templates.presentation_manifest()
        if manifest is None:
            raise InvalidRequestError("Presentation manifest not loaded")
        return {
            "date": datetime.now(tz=UTC).isoformat(),
            "host": host,
            "api": api_base_url,
            "didIssuer": manifest.input.issuer,
            "didVerifier": manifest.input.issuer,
            "credentialType": manifest.id,
            "displayCard": manifest.display.card,
            "buttonColor": BUTTON_COLOR,
            "contract": manifest.display.contract,
        }

    def logo_uri(self) -> str | None:
        """Return the credential card logo URI."""
        manifest = self.templates.presentation_manifest()
        return manifest.logo_uri() if manifest else None


def _b2c_claims(correlation_id: str, payload: dict[str, object]) -> dict[str, object]:
    """Flatten a verified presentation into the claims B2C expects."""
    step = "vcClaims"
    try:
        claims = _first_issuer_claims(payload)
        step = "didIdToken"
        receipt = payload.get("receipt")
        if not isinstance(receipt, dict):
            raise ValueError("no receipt in presentation response")
        id_token = decode_unverified_token_payload(str(receipt["id_token"]))
        step = "credentialType"
        descriptor = id_token["presentation_submission"]["descriptor_map"][0]
        credential_type = str(descriptor["id"])
        step = "presentation"
        presentation_token = select_json_path(id_token, str(descriptor["path"]))
        presentation = decode_unverified_token_payload(str(presentation_token))
        step = "vcToken"
        vc_token = str(presentation["vp"]["verifiableCredential"][0])
        step = "vc"
        credential = decode_unverified_token_payload(vc_token)
        subject = str(credential["sub"])
        issuer = str(credential["iss"])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        _logger.exception("B2C claims parsing failed at %s: CI=%s", step, correlation_id)
        raise InvalidRequestError(
            f"Error parsing {step} from presentationResponse. "
            f"CI={correlation_id} error={exc}"
        ) from exc

    return {
        "id": correlation_id,
        "credentialsVerified": True,
        "credentialType": credential_type,
        "displayName": display_name_from_claims(claims),
        "givenName": _optional_claim(claims, "firstName"),
        "surName": _optional_claim(claims, "lastName"),
        "iss": issuer,
        "sub": subject,
        "key": subject.replace("did:ion:", "did.ion.").split(":")[0],
        "oid": _optional_claim(claims, "sub"),
        "tid": _optional_claim(claims, "tid"),
        "username": _optional_claim(claims, "username"),
    }


def _optional_claim(claims: dict[str, object], name: str) -> str | None:
    value = claims.get(name)
    return None if value is None else str(value)
