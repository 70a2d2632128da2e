"""FastAPI application exposing the Messenger webhook."""

from __future__ import annotations

import logging

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from responder.audit.logger import AuditLogger
from responder.catalog.quick_replies import QuickReplyCatalog
from responder.config import Settings
from responder.errors import AuthError
from responder.flow.engine import ConversationFlowEngine
from responder.gateway.messenger import OutboundMessenger
from responder.gateway.places import PlacesClient
from responder.gateway.profile import UserProfileClient
from responder.routing.location import LocationHandler
from responder.routing.router import EventRouter
from responder.webhook.endpoint import MessengerWebhook
from responder.webhook.signature import SIGNATURE_HEADER, SignatureVerifier

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return create_app(settings)


def build_router(
    settings: Settings,
    catalog: QuickReplyCatalog,
    audit_logger: AuditLogger | None = None,
) -> EventRouter:
    messenger = OutboundMessenger(
        settings.page_access_token, settings.graph_api_url, audit_logger=audit_logger,
    )
    engine = ConversationFlowEngine(
        catalog=catalog,
        messenger=messenger,
        profiles=UserProfileClient(settings.page_access_token, settings.graph_api_url),
        server_url=settings.server_url,
    )
    places = PlacesClient(settings.places_api_key, settings.places_api_url)
    return EventRouter(engine, LocationHandler(places, messenger))


def create_app(
    settings: Settings,
    catalog: QuickReplyCatalog | None = None,
    router: EventRouter | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the webhook app. Collaborators default to ones built from ``settings``."""
    if audit_logger is None and settings.audit_log_path:
        audit_logger = AuditLogger.from_env(settings.audit_log_path)
    if catalog is None:
        catalog = QuickReplyCatalog.from_file(settings.quick_replies_path)
    if router is None:
        router = build_router(settings, catalog, audit_logger)

    webhook = MessengerWebhook(
        settings.validation_token,
        SignatureVerifier(settings.app_secret, audit_logger=audit_logger),
        audit_logger=audit_logger,
    )

    app = FastAPI(docs_url=None, redoc_url=None)
    app.state.catalog = catalog
    app.state.router = router

    @app.exception_handler(AuthError)
    async def auth_error(request: Request, exc: AuthError) -> JSONResponse:
        logger.error("Rejected webhook from %s: %s",
                     request.client.host if request.client else "unknown", exc)
        return JSONResponse({"error": "Invalid webhook signature"}, status_code=403)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/webhook")
    async def verify_webhook(request: Request) -> Response:
        result = webhook.handle_verification(dict(request.query_params))
        if result["status_code"] != 200:
            return JSONResponse({"error": result["error"]}, status_code=result["status_code"])
        return PlainTextResponse(result["content"])

    @app.post("/webhook")
    async def receive_webhook(request: Request, background: BackgroundTasks) -> Response:
        body = await request.body()
        events = webhook.ingest(body, request.headers.get(SIGNATURE_HEADER))
        if events:
            # Replies go out after the acknowledgement has been sent
            background.add_task(router.dispatch, events)
        return PlainTextResponse("EVENT_RECEIVED")

    return app
