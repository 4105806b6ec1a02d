"""Webhook HTTP server for the TxMS relay.

Exposes the relay on ``POST /`` together with the informational and
monitoring endpoints:

    GET  /         teapot greeting
    GET  /info     application name and version
    GET  /ping     plain liveness check
    GET  /live     JSON liveness probe
    GET  /metrics  Prometheus metrics
    POST /         relay an SMS/MMS webhook payload
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

from txms_relay import __version__
from txms_relay.errors import MalformedRequestError
from txms_relay.relay.formatter import ResponseFormatter
from txms_relay.relay.models import DEFAULT_BODY_FIELD, DEFAULT_MEDIA_FIELD, IncomingPayload
from txms_relay.relay.pipeline import RelayPipeline

if TYPE_CHECKING:
    from txms_relay.config import Settings

logger = logging.getLogger(__name__)

APP_NAME = "txms-relay"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_HTTP_PORT = 8080

REQUESTS_TOTAL = Counter(
    "txms_relay_requests_total",
    "Relay requests handled, by response status",
    ["status"],
)


class RelayServer:
    """aiohttp server that relays webhook messages through a RelayPipeline.

    Example:
        ```python
        server = RelayServer.from_settings(settings)
        await server.start(port=8080)
        ...
        await server.stop()
        ```
    """

    def __init__(
        self,
        pipeline: RelayPipeline,
        *,
        body_field: str = DEFAULT_BODY_FIELD,
        media_field: str = DEFAULT_MEDIA_FIELD,
    ) -> None:
        """Initialize the server.

        Args:
            pipeline: Pipeline that handles relay requests.
            body_field: Request field carrying the message text.
            media_field: Request field carrying attachment URLs.
        """
        self.pipeline = pipeline
        self.body_field = body_field
        self.media_field = media_field

        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> RelayServer:
        """Build a server and its pipeline from application settings."""
        return cls(
            RelayPipeline.from_settings(settings),
            body_field=settings.body_name,
            media_field=settings.media_name,
        )

    @property
    def is_running(self) -> bool:
        """Return True if the HTTP server is running."""
        return self._runner is not None

    async def _handle_root(self, _request: web.Request) -> web.Response:
        """Handle GET /."""
        return web.Response(text="I'm a cyber", status=418)

    async def _handle_info(self, _request: web.Request) -> web.Response:
        """Handle GET /info."""
        return web.Response(text=f"{APP_NAME} v{__version__}")

    async def _handle_ping(self, _request: web.Request) -> web.Response:
        """Handle GET /ping."""
        return web.Response(text="OK")

    async def _handle_live(self, _request: web.Request) -> web.Response:
        """Handle /live endpoint for k8s liveness probe."""
        return web.json_response({"live": True}, status=200)

    async def _handle_metrics(self, _request: web.Request) -> web.Response:
        """Handle /metrics endpoint (Prometheus format)."""
        response = web.Response(body=generate_latest())
        response.content_type = CONTENT_TYPE_LATEST.split(";")[0]
        return response

    async def _handle_relay(self, request: web.Request) -> web.Response:
        """Handle POST / with an SMS/MMS webhook payload."""
        try:
            data: Any = await request.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            error = MalformedRequestError()
            logger.warning("Err(%d): request body is not a JSON object", error.errno)
            payload = ResponseFormatter().format_error(error)
            REQUESTS_TOTAL.labels(status=str(payload.status)).inc()
            return web.json_response(payload.to_dict(), status=payload.status)

        incoming = IncomingPayload.from_dict(
            data, body_field=self.body_field, media_field=self.media_field
        )
        logger.info(
            "Message from %s (%d attachments)",
            incoming.sender or "unknown",
            len(incoming.attachments),
        )

        result = await self.pipeline.handle(incoming)
        REQUESTS_TOTAL.labels(status=str(result.status)).inc()
        return web.json_response(result.body(), status=result.status)

    def create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_get("/", self._handle_root)
        app.router.add_post("/", self._handle_relay)
        app.router.add_get("/info", self._handle_info)
        app.router.add_get("/ping", self._handle_ping)
        app.router.add_get("/live", self._handle_live)
        app.router.add_get("/metrics", self._handle_metrics)
        return app

    async def start(self, host: str = DEFAULT_HOST, port: int = DEFAULT_HTTP_PORT) -> None:
        """Start the HTTP server.

        Handlers are cancelled when the client disconnects, which aborts any
        in-flight provider or attachment request.

        Args:
            host: Address to bind.
            port: Port to listen on.
        """
        if self._runner:
            logger.warning("HTTP server already running")
            return

        self._app = self.create_app()
        self._runner = web.AppRunner(self._app, handler_cancellation=True)
        await self._runner.setup()

        site = web.TCPSite(self._runner, host, port)
        await site.start()

        logger.info("Relay HTTP server started on %s:%d", host, port)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None
            logger.info("Relay HTTP server stopped")

    async def __aenter__(self) -> RelayServer:
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.stop()
