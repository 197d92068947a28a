"""Issuer endpoints: issuance requests, callbacks and polling."""

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from vc_relay.api.dependencies import api_base_url, get_container, request_host
from vc_relay.containers import AppContainer
from vc_relay.errors import InvalidRequestError

PREFIX = "/api/issuer"

router = APIRouter(prefix=PREFIX, tags=["issuer"])


@router.get("/echo")
async def echo(
    request: Request, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Describe the credential this issuer hands out."""
    return await container.issuance_service.describe(
        request_host(request), api_base_url(request, PREFIX)
    )


@router.get("/logo.png")
async def logo(container: AppContainer = Depends(get_container)) -> RedirectResponse:
    """Redirect to the credential card logo."""
    uri = container.issuance_service.logo_uri()
    if not uri:
        raise InvalidRequestError("Issuance manifest has no logo")
    return RedirectResponse(uri)


@router.api_route("/issue-request", methods=["GET", "POST"])
async def issue_request(
    request: Request, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Create an issuance request; query parameters fill self-asserted claims."""
    return await container.issuance_service.create_request(
        api_base_url(request, PREFIX), dict(request.query_params)
    )


@router.post("/issuanceCallback")
async def issuance_callback(
    request: Request, container: AppContainer = Depends(get_container)
) -> Response:
    """Receive progress notifications from the VC Client API."""
    container.issuance_service.handle_callback(await request.body())
    return Response(status_code=200)


@router.get("/issue-response")
async def issue_response(
    correlation_id: str | None = Query(default=None, alias="id"),
    container: AppContainer = Depends(get_container),
) -> Response:
    """Report issuance progress to a polling browser."""
    if not correlation_id:
        raise InvalidRequestError("Missing argument 'id'")
    result = container.issuance_service.poll(correlation_id)
    if result is None:
        return Response(status_code=200)
    return JSONResponse(result)
