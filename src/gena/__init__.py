"""
The main entrypoint for the GENA package.

This module contains the ``Gena`` application class, which composes the
message-generation pipeline (rate limiter, context builder, response
extractor, generation backend) and exposes it over three front doors: the
``/api`` HTTP endpoints, Socket.IO events and the browser chat widget.
"""

import logging
from typing import Optional

from dash import Dash
from flask_socketio import SocketIO

from . import config, context, extract, llm, rate_limit
from .api import create_api_blueprint, register_error_handlers
from .realtime import register_socketio_handlers
from .service import GenerationService

__version__ = "2.0.0"

logger = logging.getLogger(__name__)


class Gena(Dash):
    """
    The GENA assistant server.

    This class acts as the central orchestrator, wiring the injected pipeline
    components into a single ``GenerationService`` shared by every transport.
    Any component left out is built from ``settings``.
    """

    def __init__(
        self,
        llm: Optional[llm.LLM] = None,
        limiter: Optional[rate_limit.RateLimiter] = None,
        context_builder: Optional[context.ContextBuilder] = None,
        extractor: Optional[extract.ResponseExtractor] = None,
        layout: Optional["layout.Layout"] = None,
        settings: Optional[config.Settings] = None,
        **kwargs,
    ) -> None:
        """
        Initialize the GENA application with configurable components.

        Parameters
        ----------
        llm : llm.LLM, optional
            Generation backend. Defaults to the backend named by
            ``settings.provider``; left as ``None`` (not configured) when no
            credential is available.
        limiter : rate_limit.RateLimiter, optional
            Admission control. Defaults to 10 requests per 60 seconds.
        context_builder : context.ContextBuilder, optional
            Prompt assembly. Defaults to the MEDI-ASSIST system prompt and
            the last 6 turns.
        extractor : extract.ResponseExtractor, optional
            Result-shape normalization. Defaults to the built-in strategy table.
        layout : layout.Layout, optional
            Chat widget builder. Defaults to layout.Bootstrap().
        settings : config.Settings, optional
            Loaded with ``config.load_settings()`` when omitted.
        **kwargs
            Additional arguments passed to the Dash constructor.

        Examples
        --------
        >>> app = Gena(llm=llm.Echo())
        >>> app.serve()
        """
        self.settings = settings if settings is not None else config.load_settings()

        if layout is None:
            from .layout import Bootstrap

            layout = Bootstrap()
        self.layout_builder = layout

        llm_module = globals()["llm"]
        if llm is None:
            llm = llm_module.from_settings(self.settings)

        kwargs.setdefault("title", "GENA")
        kwargs.setdefault("external_stylesheets", [])
        kwargs["external_stylesheets"].extend(
            self.layout_builder.get_external_stylesheets()
        )
        kwargs.setdefault("external_scripts", [])
        kwargs["external_scripts"].extend(self.layout_builder.get_external_scripts())

        super().__init__(**kwargs)

        self.service = GenerationService(
            llm=llm,
            limiter=limiter,
            context_builder=context_builder,
            extractor=extractor,
        )
        if not self.service.is_configured:
            logger.warning("AI service not configured; chat requests will fail with CONFIG_ERROR")

        self.server.register_blueprint(
            create_api_blueprint(self.service, self.settings.allowed_origins)
        )
        register_error_handlers(self.server)

        self.socketio = SocketIO(
            self.server,
            cors_allowed_origins=list(self.settings.allowed_origins),
            async_mode="threading",
            ping_timeout=60,
            ping_interval=25,
        )
        register_socketio_handlers(self.socketio, self.service)

        self.layout = self.layout_builder.build_layout()
        self._register_callbacks()

    @property
    def llm(self) -> Optional["llm.LLM"]:
        return self.service.llm

    @property
    def limiter(self) -> rate_limit.RateLimiter:
        return self.service.limiter

    def _register_callbacks(self) -> None:
        """Registers the chat widget callbacks."""
        from .callbacks import register_callbacks

        register_callbacks(self)

    def serve(self, host: Optional[str] = None, port: Optional[int] = None, **kwargs) -> None:
        """Runs the HTTP and Socket.IO server until interrupted."""
        host = host or self.settings.host
        port = port or self.settings.port
        logger.info("GENA - General Purpose AI Assistant on http://%s:%s", host, port)
        logger.info("Health check: http://localhost:%s/api/health", port)
        logger.info(
            "AI Service: %s", "Connected" if self.service.is_configured else "Not Configured"
        )
        kwargs.setdefault("allow_unsafe_werkzeug", True)
        self.socketio.run(self.server, host=host, port=port, **kwargs)


__all__ = ["Gena", "GenerationService", "__version__"]
