"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from vc_relay.adapters.vc_client_api import HttpxVcClientApi, VcClientApi
from vc_relay.config import Settings
from vc_relay.services.cache import Cache, InMemoryCache
from vc_relay.services.correlation import CorrelationService
from vc_relay.services.issuance import IssuanceService
from vc_relay.services.presentation import PresentationService
from vc_relay.services.templates import RequestTemplateLoader


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: Cache
    vc_client: VcClientApi
    templates: RequestTemplateLoader
    correlation_service: CorrelationService
    presentation_service: PresentationService
    issuance_service: IssuanceService
    close_resources: Callable[[], Awaitable[None]]


def build_services(
    settings: Settings, vc_client: VcClientApi, cache: Cache
) -> tuple[RequestTemplateLoader, CorrelationService, PresentationService, IssuanceService]:
    """Create the services that share one cache and one VC Client API client."""
    templates = RequestTemplateLoader(
        client=vc_client,
        cache=cache,
        requests_dir=settings.requests_dir,
        presentation_file=settings.presentation_request_file,
        issuance_file=settings.issuance_request_file,
        client_name=settings.client_name,
        pin_code_length=settings.pin_code_length,
    )
    correlation_service = CorrelationService(
        cache=cache, ttl_seconds=settings.cache_expires_in_seconds
    )
    presentation_service = PresentationService(
        client=vc_client,
        templates=templates,
        correlation=correlation_service,
        api_key=settings.vc_api_key,
    )
    issuance_service = IssuanceService(
        client=vc_client,
        templates=templates,
        correlation=correlation_service,
        api_key=settings.vc_api_key,
    )
    return templates, correlation_service, presentation_service, issuance_service


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    cache = InMemoryCache()
    vc_client = HttpxVcClientApi.create(
        endpoint=resolved_settings.vc_api_endpoint,
        timeout_seconds=resolved_settings.http_timeout_seconds,
    )
    templates, correlation_service, presentation_service, issuance_service = (
        build_services(resolved_settings, vc_client, cache)
    )

    async def close_resources() -> None:
        await vc_client.close()

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        vc_client=vc_client,
        templates=templates,
        correlation_service=correlation_service,
        presentation_service=presentation_service,
        issuance_service=issuance_service,
        close_resources=close_resources,
    )
