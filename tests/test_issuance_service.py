"""Tests for the issuance request lifecycle."""

import asyncio
import json

import pytest

from tests.conftest import ISSUER_DID, FakeVcClientApi
from vc_relay.config import Settings
from vc_relay.containers import AppContainer, build_services
from vc_relay.services.cache import InMemoryCache
from vc_relay.services.issuance import (
    ISSUED_MESSAGE,
    RETRIEVED_MESSAGE,
    IssuanceService,
)

BASE_URL = "https://relay.example/api/issuer"


@pytest.fixture
def service(container: AppContainer) -> IssuanceService:
    return container.issuance_service


def test_create_request_fills_claims_and_pin(
    service: IssuanceService, vc_client: FakeVcClientApi
) -> None:
    response = asyncio.run(
        service.create_request(BASE_URL, {"given_name": "Jane", "ignored": "x"})
    )

    sent = vc_client.requests[0]
    assert sent["issuance"]["claims"] == {"given_name": "Jane", "family_name": ""}
    assert sent["issuance"]["type"] == "VerifiedCredentialExpert"
    assert sent["authority"] == ISSUER_DID
    assert sent["callback"]["url"] == f"{BASE_URL}/issuanceCallback"
    assert sent["callback"]["state"] == response["id"]
    pin = response["pin"]
    assert len(pin) == 4
    assert 0 < int(pin) < 10**4
    assert sent["issuance"]["pin"]["value"] == pin


def test_template_cache_is_not_mutated_between_requests(
    service: IssuanceService, vc_client: FakeVcClientApi
) -> None:
    asyncio.run(service.create_request(BASE_URL, {"given_name": "Jane"}))
    asyncio.run(service.create_request(BASE_URL))

    assert vc_client.requests[1]["issuance"]["claims"]["given_name"] == ""


def test_zero_pin_length_drops_pin(
    settings: Settings, cache: InMemoryCache, vc_client: FakeVcClientApi
) -> None:
    settings.pin_code_length = 0
    _, _, _, service = build_services(settings, vc_client, cache)

    response = asyncio.run(service.create_request(BASE_URL))

    assert "pin" not in response
    assert "pin" not in vc_client.requests[0]["issuance"]


def test_pin_length_override(
    settings: Settings, cache: InMemoryCache, vc_client: FakeVcClientApi
) -> None:
    settings.pin_code_length = 6
    _, _, _, service = build_services(settings, vc_client, cache)

    response = asyncio.run(service.create_request(BASE_URL))

    assert len(response["pin"]) == 6


def test_callbacks_drive_poll_status(service: IssuanceService) -> None:
    service.handle_callback(
        json.dumps({"code": "request_retrieved", "state": "corr-1"}).encode()
    )
    assert service.poll("corr-1") == {"status": 1, "message": RETRIEVED_MESSAGE}

    service.handle_callback(
        json.dumps({"code": "issuance_successful", "state": "corr-1"}).encode()
    )
    assert service.poll("corr-1") == {"status": 2, "message": ISSUED_MESSAGE}
    assert service.poll("corr-1") is None


def test_issuance_error_code_is_ignored(service: IssuanceService) -> None:
    result = service.handle_callback(
        json.dumps({"code": "issuance_error", "state": "corr-1"}).encode()
    )

    assert result is None
    assert service.poll("corr-1") is None


def test_describe_includes_self_asserted_claims(service: IssuanceService) -> None:
    info = asyncio.run(service.describe("https://relay.example", BASE_URL))

    assert info["selfAssertedClaims"] == {"given_name": "", "family_name": ""}
    assert info["didIssuer"] == ISSUER_DID
