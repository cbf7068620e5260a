"""Realtime transport: Socket.IO event handlers."""

import logging

from flask import request
from flask_socketio import SocketIO, emit

from .api import InvalidMessage, build_request, error_envelope, success_envelope
from .models import GenerationFailure, utc_timestamp
from .service import GenerationService, failure_for

logger = logging.getLogger(__name__)

READY_CAPABILITIES = ["General Q&A", "Problem Solving", "Creative Writing", "Technical Help"]


def register_socketio_handlers(socketio: SocketIO, service: GenerationService) -> None:
    """Wires the chat events onto ``socketio``.

    Each ``send_message`` event is handled on its own; nothing is queued per
    connection, so replies to concurrent messages may arrive in any order.
    """

    @socketio.on("connect")
    def on_connect(auth=None):
        logger.info("Socket connected: %s", request.sid)
        emit(
            "bot_ready",
            {
                "message": "GENA is ready to help!",
                "capabilities": READY_CAPABILITIES,
                "timestamp": utc_timestamp(),
            },
        )

    @socketio.on("send_message")
    def on_send_message(payload=None):
        try:
            generation_request = build_request(payload)
        except InvalidMessage as e:
            emit("error_message", e.to_envelope())
            return

        emit("typing_start")
        try:
            result = service.generate(generation_request)
        except Exception as e:
            logger.exception("Realtime generation error")
            result = failure_for(e)
        emit("typing_end")

        if isinstance(result, GenerationFailure):
            emit("error_message", error_envelope(result, timestamped=False))
        else:
            emit("receive_message", success_envelope(result))

    @socketio.on("ping_bot")
    def on_ping(*args):
        emit("pong_bot", {"timestamp": utc_timestamp()})

    @socketio.on("disconnect")
    def on_disconnect(*args):
        logger.info("Socket disconnected: %s", request.sid)
