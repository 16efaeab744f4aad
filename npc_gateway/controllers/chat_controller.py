"""API controller for NPC chat operations.

Defines the ``/api/chat`` and ``/api/ping`` routes, registered in
``npc_gateway.main``.  Failures raised by the service are rendered by the
``GatewayError`` exception handler.  OPTIONS pre-flight requests never
reach these handlers; the CORS middleware answers them.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from ..models.chat_response import HealthStatus
from ..services.chat_service import ChatService, get_chat_service

router = APIRouter(prefix="/api", tags=["Chat"])


# All methods are routed here so wrong methods get the service's error body.
@router.api_route("/chat", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"])
async def chat_endpoint(
    request: Request,
    service: ChatService = Depends(get_chat_service),
) -> JSONResponse:
    """Accept a conversation turn and return the NPC's reply.

    The body carries the NPC profile, optional player/scene objects, the
    player's message and an optional transcript.  The response is always
    ``{reply, intent, targets}`` on success or ``{error, detail?}``.
    """
    logger.info("Received chat request: {} from {}", request.method, request.headers.get("origin"))
    body = await request.body()
    reply = await service.handle(request.method, request.headers, body)
    return JSONResponse(status_code=200, content=reply.model_dump(mode="json"))


@router.get("/ping", response_model=HealthStatus, response_model_by_alias=True)
async def ping_endpoint(
    service: ChatService = Depends(get_chat_service),
) -> HealthStatus:
    """Report whether the model key and shared secret are configured."""
    logger.debug("Health check invoked")
    return service.health()
