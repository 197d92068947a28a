"""Shared test fixtures."""

import base64
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from vc_relay.adapters.vc_client_api import VcClientApi
from vc_relay.config import Settings
from vc_relay.containers import AppContainer, build_services
from vc_relay.errors import ExternalApiError
from vc_relay.services.cache import InMemoryCache

ISSUER_DID = "did:ion:issuer123"


def _manifest() -> dict[str, object]:
    return {
        "id": "VerifiedCredentialExpert",
        "input": {
            "issuer": ISSUER_DID,
            "credentialIssuer": "https://issuer.example/issue",
        },
        "display": {
            "card": {
                "title": "Verified Credential Expert",
                "logo": {"uri": "https://issuer.example/logo.png"},
            },
            "contract": "https://issuer.example/contract",
        },
    }


@dataclass
class FakeVcClientApi(VcClientApi):
    """Fake VC Client API that records submitted requests."""

    manifest: dict[str, object] = field(default_factory=_manifest)
    response: dict[str, object] = field(
        default_factory=lambda: {
            "requestId": "req-123",
            "url": "openid://vc/?request_uri=https://vcapi.test/request/req-123",
            "expiry": 1700000000,
        }
    )
    error: ExternalApiError | None = None
    requests: list[dict[str, object]] = field(default_factory=list)
    manifest_urls: list[str] = field(default_factory=list)

    async def create_request(self, payload: dict[str, object]) -> dict[str, object]:
        self.requests.append(payload)
        if self.error is not None:
            raise self.error
        return dict(self.response)

    async def get_manifest(self, url: str) -> dict[str, object]:
        self.manifest_urls.append(url)
        return self.manifest


@dataclass
class ManualClock:
    """Clock that only moves when told to."""

    now: datetime = field(default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _b64url(data: dict[str, object]) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def make_token(payload: dict[str, object]) -> str:
    """Build an unsigned JWT-shaped token around a payload."""
    return f"{_b64url({'alg': 'ES256K', 'typ': 'JWT'})}.{_b64url(payload)}.c2ln"


def verified_callback(
    state: str, claims: dict[str, object] | None = None
) -> dict[str, object]:
    """Return a presentation_verified callback with a full receipt."""
    vc_token = make_token(
        {"iss": ISSUER_DID, "sub": "did:ion:holder456:extension", "vc": {}}
    )
    vp_token = make_token({"vp": {"verifiableCredential": [vc_token]}})
    id_token = make_token(
        {
            "presentation_submission": {
                "descriptor_map": [
                    {
                        "id": "VerifiedCredentialExpert",
                        "path": "$.attestations.presentations.VerifiedCredentialExpert",
                    }
                ]
            },
            "attestations": {"presentations": {"VerifiedCredentialExpert": vp_token}},
        }
    )
    return {
        "code": "presentation_verified",
        "state": state,
        "requestId": "req-123",
        "issuers": [
            {
                "type": ["VerifiableCredential", "VerifiedCredentialExpert"],
                "claims": claims or {"firstName": "Jane", "lastName": "Doe"},
            }
        ],
        "receipt": {"id_token": id_token},
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        vc_api_endpoint="https://vcapi.test/request",
        vc_api_key="callback-key",
        client_name="Relay Test",
        environment="test",
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> InMemoryCache:
    return InMemoryCache(clock=clock)


@pytest.fixture
def vc_client() -> FakeVcClientApi:
    return FakeVcClientApi()


@pytest.fixture
def container(
    settings: Settings, cache: InMemoryCache, vc_client: FakeVcClientApi
) -> AppContainer:
    templates, correlation_service, presentation_service, issuance_service = (
        build_services(settings, vc_client, cache)
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        cache=cache,
        vc_client=vc_client,
        templates=templates,
        correlation_service=correlation_service,
        presentation_service=presentation_service,
        issuance_service=issuance_service,
        close_resources=close_resources,
    )
