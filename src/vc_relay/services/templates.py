"""Loading and preparing request templates."""

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from vc_relay.adapters.vc_client_api import VcClientApi
from vc_relay.domain.requests import (
    CredentialManifest,
    IssuanceRequest,
    PinSettings,
    PresentationRequest,
)
from vc_relay.errors import InvalidRequestError
from vc_relay.services.cache import Cache

_logger = logging.getLogger(__name__)

_PRESENTATION_TEMPLATE_KEY = "template:presentation"
_PRESENTATION_MANIFEST_KEY = "manifest:presentation"
_ISSUANCE_TEMPLATE_KEY = "template:issuance"
_ISSUANCE_MANIFEST_KEY = "manifest:issuance"


@dataclass
class RequestTemplateLoader:
    """Read request templates from disk and fill in manifest defaults.

    Prepared templates and manifests are cached without expiry. Every call
    returns a fresh model, so per-request mutation never leaks into the cache.
    """

    client: VcClientApi
    cache: Cache
    requests_dir: Path
    presentation_file: str
    issuance_file: str
    client_name: str
    pin_code_length: int | None = None

    async def presentation_request(self) -> PresentationRequest:
        """Return a fresh copy of the prepared presentation request."""
        cached = self.cache.get(_PRESENTATION_TEMPLATE_KEY)
        if isinstance(cached, dict):
            return PresentationRequest.model_validate(cached)

        raw = self._read(self.presentation_file, "Presentation")
        try:
            template = PresentationRequest.model_validate_json(raw)
        except ValidationError as exc:
            raise InvalidRequestError(
                f"Presentation Request Config File is invalid: {exc}"
            ) from exc
        credential = template.presentation.requested_credentials[0]
        manifest = await self._download_manifest(
            credential.manifest, _PRESENTATION_MANIFEST_KEY
        )

        if not template.authority.startswith("did:ion:"):
            template.authority = manifest.input.issuer
        template.registration.client_name = self.client_name
        if not credential.type:
            credential.type = manifest.id
        if credential.trusted_issuers:
            credential.trusted_issuers[0] = manifest.input.issuer
        else:
            credential.trusted_issuers.append(manifest.input.issuer)

        self.cache.set_no_expiry(_PRESENTATION_TEMPLATE_KEY, template.to_wire())
        _logger.info("Presentation request template loaded: %s", self.presentation_file)
        return PresentationRequest.model_validate(template.to_wire())

    async def issuance_request(self) -> IssuanceRequest:
        """Return a fresh copy of the prepared issuance request."""
        cached = self.cache.get(_ISSUANCE_TEMPLATE_KEY)
        if isinstance(cached, dict):
            return IssuanceRequest.model_validate(cached)

        raw = self._read(self.issuance_file, "Issuance")
        try:
            template = IssuanceRequest.model_validate_json(raw)
        except ValidationError as exc:
            raise InvalidRequestError(
                f"Issuance Request Config File is invalid: {exc}"
            ) from exc
        manifest = await self._download_manifest(
            template.issuance.manifest, _ISSUANCE_MANIFEST_KEY
        )

        if not template.authority.startswith("did:ion:"):
            template.authority = manifest.input.issuer
        if not template.issuance.type:
            template.issuance.type = manifest.id
        template.registration.client_name = self.client_name

        if self.pin_code_length is not None:
            if template.issuance.pin is None:
                template.issuance.pin = PinSettings()
            template.issuance.pin.length = self.pin_code_length
        # the VC Client API rejects a pin section with zero length
        if template.issuance.pin is not None and template.issuance.pin.length <= 0:
            template.issuance.pin = None

        self.cache.set_no_expiry(_ISSUANCE_TEMPLATE_KEY, template.to_wire())
        _logger.info("Issuance request template loaded: %s", self.issuance_file)
        return IssuanceRequest.model_validate(template.to_wire())

    def presentation_manifest(self) -> CredentialManifest | None:
        """Return the manifest downloaded for the presentation template."""
        return self._cached_manifest(_PRESENTATION_MANIFEST_KEY)

    def issuance_manifest(self) -> CredentialManifest | None:
        """Return the manifest downloaded for the issuance template."""
        return self._cached_manifest(_ISSUANCE_MANIFEST_KEY)

    def _read(self, file_name: str, label: str) -> str:
        path = Path(file_name)
        if not path.is_absolute():
            path = self.requests_dir / path
        if not path.is_file():
            _logger.error("File not found: %s", path)
            raise InvalidRequestError(
                f"{label} Request Config File not found: {file_name}"
            )
        return path.read_text(encoding="utf-8")

    async def _download_manifest(self, url: str, cache_key: str) -> CredentialManifest:
        payload = await self.client.get_manifest(url)
        try:
            manifest = CredentialManifest.model_validate(payload)
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid manifest at {url}: {exc}") from exc
        self.cache.set_no_expiry(cache_key, manifest.to_wire())
        return manifest

    def _cached_manifest(self, cache_key: str) -> CredentialManifest | None:
        cached = self.cache.get(cache_key)
        if not isinstance(cached, dict):
            return None
        return CredentialManifest.model_validate(cached)
