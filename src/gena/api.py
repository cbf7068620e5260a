"""HTTP transport: the ``/api`` blueprint and its wire envelopes."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from flask import Blueprint, Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .models import (
    MAX_MESSAGE_LENGTH,
    FailureKind,
    GenerationFailure,
    GenerationRequest,
    GenerationSuccess,
    parse_history,
    utc_timestamp,
)
from .service import GenerationService

logger = logging.getLogger(__name__)

SERVICE_NAME = "GENA - General Purpose AI Assistant"
VERSION = "2.0.0"

AVAILABLE_ENDPOINTS = ["/api/chat", "/api/health", "/api/usage", "/api/bot-info"]

CAPABILITIES = [
    "General Q&A",
    "Problem Solving",
    "Creative Writing",
    "Technical Help",
    "Educational Support",
    "Conversation",
]

BOT_CAPABILITIES = [
    "Answer questions on any topic",
    "Provide explanations and tutorials",
    "Help with problem-solving",
    "Assist with creative writing",
    "Offer educational support",
    "Engage in meaningful conversation",
]

BOT_LIMITATIONS = [
    "Cannot browse the internet for real-time information",
    "Knowledge cutoff may apply to very recent events",
    "Cannot perform actions outside of conversation",
    "Should not replace professional advice for medical/legal/financial matters",
]

# failure kind -> (code, user-facing error)
FAILURE_RESPONSES: Dict[FailureKind, Tuple[str, str]] = {
    FailureKind.NOT_CONFIGURED: (
        "CONFIG_ERROR",
        "AI service configuration issue. Please contact support.",
    ),
    FailureKind.RATE_LIMITED: (
        "RATE_LIMIT",
        "I'm getting a lot of requests right now. Please wait a moment and try again.",
    ),
}
DEFAULT_FAILURE_RESPONSE = (
    "INTERNAL_ERROR",
    "I'm having trouble processing your request right now. Please try again in a moment.",
)


class InvalidMessage(ValueError):
    """Raised at the transport boundary before the service is called."""

    def __init__(self, code: str, error: str):
        super().__init__(error)
        self.code = code
        self.error = error

    def to_envelope(self) -> Dict[str, Any]:
        return {"error": self.error, "code": self.code}


def validate_message(message: Any) -> str:
    """Returns ``message`` if it is a usable chat message, else raises ``InvalidMessage``."""
    if not message or not isinstance(message, str):
        raise InvalidMessage(
            "INVALID_MESSAGE", "Message is required and must be a string"
        )
    if len(message) > MAX_MESSAGE_LENGTH:
        raise InvalidMessage(
            "MESSAGE_TOO_LONG",
            f"Message too long. Please limit to {MAX_MESSAGE_LENGTH} characters.",
        )
    return message


def build_request(payload: Any) -> GenerationRequest:
    """Validates a raw ``{message, conversationHistory}`` payload."""
    payload = payload if isinstance(payload, dict) else {}
    message = validate_message(payload.get("message"))
    return GenerationRequest(
        user_message=message,
        history=parse_history(payload.get("conversationHistory")),
    )


def success_envelope(result: GenerationSuccess) -> Dict[str, Any]:
    return {
        "response": result.text,
        "timestamp": result.timestamp,
        "messageId": result.id,
        "status": "success",
    }


def error_envelope(
    failure: GenerationFailure, timestamped: bool = True
) -> Dict[str, Any]:
    code, error = FAILURE_RESPONSES.get(failure.kind, DEFAULT_FAILURE_RESPONSE)
    envelope: Dict[str, Any] = {"error": error, "code": code}
    if timestamped:
        envelope["timestamp"] = utc_timestamp()
    if failure.retry_after is not None:
        envelope["retry_after"] = failure.retry_after
    return envelope


def create_api_blueprint(
    service: GenerationService, allowed_origins: Optional[Iterable[str]] = None
) -> Blueprint:
    """Builds the ``/api`` blueprint bound to ``service``."""
    api = Blueprint("api", __name__, url_prefix="/api")
    origins = set(allowed_origins or ())

    @api.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            response.headers["Vary"] = "Origin"
        return response

    @api.route("/chat", methods=["POST"])
    def chat():
        try:
            generation_request = build_request(request.get_json(silent=True))
        except InvalidMessage as e:
            return jsonify(e.to_envelope()), 400

        result = service.generate(generation_request)
        if isinstance(result, GenerationFailure):
            logger.warning("Chat request failed: %s (%s)", result.kind.value, result.message)
            return jsonify(error_envelope(result)), 500
        return jsonify(success_envelope(result))

    @api.route("/health", methods=["GET"])
    def health():
        return jsonify(
            {
                "status": "OK",
                "timestamp": utc_timestamp(),
                "service": SERVICE_NAME,
                "version": VERSION,
                "ai_service": "Connected" if service.is_configured else "Not Configured",
                "capabilities": CAPABILITIES,
            }
        )

    @api.route("/usage", methods=["GET"])
    def usage():
        snapshot = service.limiter.snapshot()
        recent = snapshot.requests_last_minute
        return jsonify(
            {
                "requests_last_minute": recent,
                "total_requests_today": snapshot.total_requests,
                "rate_limit_status": (
                    "OK" if recent < snapshot.max_requests else "APPROACHING_LIMIT"
                ),
                "next_reset": utc_timestamp(snapshot.next_reset),
                "recommendations": [
                    (
                        "Slow down requests"
                        if recent > snapshot.max_requests - 2
                        else "Rate limit OK"
                    ),
                    "Use Gemini Flash for better quota efficiency",
                    "Keep messages concise to reduce token usage",
                ],
            }
        )

    @api.route("/bot-info", methods=["GET"])
    def bot_info():
        return jsonify(
            {
                "name": "GENA",
                "version": VERSION,
                "description": "General Purpose AI Assistant",
                "capabilities": BOT_CAPABILITIES,
                "limitations": BOT_LIMITATIONS,
                "last_updated": utc_timestamp(),
            }
        )

    @api.route("/<path:path>", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def not_found(path):
        return jsonify(not_found_envelope()), 404

    return api


def not_found_envelope() -> Dict[str, Any]:
    return {
        "error": "Endpoint not found",
        "code": "NOT_FOUND",
        "available_endpoints": AVAILABLE_ENDPOINTS,
    }


def register_error_handlers(server: Flask) -> None:
    """Installs the outermost handler so every failure yields a JSON body."""

    @server.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            if e.code == 404 and request.path.startswith("/api/"):
                return jsonify(not_found_envelope()), 404
            return e
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return (
            jsonify(
                {
                    "error": "Internal server error",
                    "code": "INTERNAL_ERROR",
                    "timestamp": utc_timestamp(),
                }
            ),
            500,
        )
