"""Request-scoped helpers shared by the API routers."""

from fastapi import Request

from vc_relay.config import resolve_base_url
from vc_relay.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def request_host(request: Request) -> str:
    """Return the scheme and host the caller reached us on."""
    container = get_container(request)
    return resolve_base_url(
        container.settings.public_base_url,
        request.headers.get("x-original-host"),
        request.headers.get("host") or request.url.netloc,
    )


def api_base_url(request: Request, prefix: str) -> str:
    """Return the absolute base URL of a router, used for callbacks."""
    return f"{request_host(request)}{prefix}"
