"""Tests for issuer endpoints."""

from fastapi.testclient import TestClient

from tests.conftest import FakeVcClientApi
from vc_relay.api.app import create_app
from vc_relay.containers import AppContainer
from vc_relay.services.issuance import ISSUED_MESSAGE, RETRIEVED_MESSAGE


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def test_issue_request_uses_query_claims(
    container: AppContainer, vc_client: FakeVcClientApi
) -> None:
    client = _client(container)

    response = client.get(
        "/api/issuer/issue-request",
        params={"given_name": "Jane", "family_name": "Doe"},
        headers={"x-original-host": "relay.example"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"]
    assert len(data["pin"]) == 4
    sent = vc_client.requests[0]
    assert sent["issuance"]["claims"] == {"given_name": "Jane", "family_name": "Doe"}
    assert sent["callback"]["url"] == (
        "https://relay.example/api/issuer/issuanceCallback"
    )
    assert sent["callback"]["headers"]["api-key"] == "callback-key"


def test_issuance_progress_over_http(container: AppContainer) -> None:
    client = _client(container)
    correlation_id = client.post("/api/issuer/issue-request").json()["id"]

    client.post(
        "/api/issuer/issuanceCallback",
        json={"code": "request_retrieved", "state": correlation_id},
    )
    retrieved = client.get("/api/issuer/issue-response", params={"id": correlation_id})
    client.post(
        "/api/issuer/issuanceCallback",
        json={"code": "issuance_successful", "state": correlation_id},
    )
    issued = client.get("/api/issuer/issue-response", params={"id": correlation_id})
    again = client.get("/api/issuer/issue-response", params={"id": correlation_id})

    assert retrieved.json() == {"status": 1, "message": RETRIEVED_MESSAGE}
    assert issued.json() == {"status": 2, "message": ISSUED_MESSAGE}
    assert again.status_code == 200
    assert again.content == b""


def test_issue_response_missing_id_is_400(container: AppContainer) -> None:
    response = _client(container).get("/api/issuer/issue-response")

    assert response.status_code == 400
    assert response.json()["error_description"] == "Missing argument 'id'"


def test_issuance_callback_without_state_is_400(container: AppContainer) -> None:
    response = _client(container).post(
        "/api/issuer/issuanceCallback", json={"code": "request_retrieved"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "400"


def test_echo_and_logo(container: AppContainer) -> None:
    client = _client(container)

    echo = client.get("/api/issuer/echo")
    logo = client.get("/api/issuer/logo.png", follow_redirects=False)

    assert echo.json()["selfAssertedClaims"] == {"given_name": "", "family_name": ""}
    assert logo.status_code == 307
    assert logo.headers["location"] == "https://issuer.example/logo.png"
