"""
Defines the core Pydantic data models for the message-generation pipeline.

These models are the contract between the transports (HTTP, Socket.IO, the
chat widget) and the generation service. Nothing here is persisted: turns
live only as long as a single ``generate`` call.
"""

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field

# --- Constants ---
USER_ROLE = "User"
ASSISTANT_ROLE = "Assistant"
Role = Literal[USER_ROLE, ASSISTANT_ROLE]

MAX_MESSAGE_LENGTH = 4000
HISTORY_WINDOW = 6

_ASSISTANT_ALIASES = {"assistant", "bot", "model", "ai"}


def utc_timestamp(epoch: Optional[float] = None) -> str:
    """Formats an epoch (default: now) as ISO-8601 UTC with milliseconds."""
    moment = (
        datetime.now(timezone.utc)
        if epoch is None
        else datetime.fromtimestamp(epoch, tz=timezone.utc)
    )
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_message_id() -> str:
    return str(int(time.time() * 1000))


# --- Models ---
class ConversationTurn(BaseModel):
    """A single prior message in a conversation."""

    role: Role = USER_ROLE
    text: str = ""

    @classmethod
    def from_record(cls, record: Any) -> "ConversationTurn":
        """Builds a turn from a loosely shaped client record.

        The role comes from an explicit ``role`` field when present, otherwise
        from the boolean ``isUser`` flag, otherwise it defaults to User. The
        text is the first non-empty of ``text``, ``message`` and ``content``.
        """
        if isinstance(record, ConversationTurn):
            return record
        if not isinstance(record, Mapping):
            return cls(text=str(record) if record is not None else "")

        raw_role = record.get("role")
        if isinstance(raw_role, str) and raw_role.strip():
            role = (
                ASSISTANT_ROLE
                if raw_role.strip().lower() in _ASSISTANT_ALIASES
                else USER_ROLE
            )
        elif "isUser" in record:
            role = USER_ROLE if record.get("isUser") else ASSISTANT_ROLE
        else:
            role = USER_ROLE

        text = ""
        for key in ("text", "message", "content"):
            value = record.get(key)
            if value:
                text = value if isinstance(value, str) else str(value)
                break
        return cls(role=role, text=text)


def parse_history(records: Any) -> List[ConversationTurn]:
    """Converts a client-supplied history payload into turns.

    Anything that is not a list is treated as an empty history.
    """
    if not isinstance(records, (list, tuple)):
        return []
    return [ConversationTurn.from_record(record) for record in records]


class GenerationRequest(BaseModel):
    """A validated request to generate a reply."""

    user_message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    history: List[ConversationTurn] = Field(default_factory=list)


class FailureKind(str, Enum):
    NOT_CONFIGURED = "NotConfigured"
    RATE_LIMITED = "RateLimited"
    QUOTA_EXCEEDED = "QuotaExceeded"
    EMPTY = "Empty"
    UNKNOWN = "Unknown"


class GenerationSuccess(BaseModel):
    ok: Literal[True] = True
    text: str
    timestamp: str = Field(default_factory=utc_timestamp)
    id: str = Field(default_factory=new_message_id)


class GenerationFailure(BaseModel):
    ok: Literal[False] = False
    kind: FailureKind
    message: str
    retry_after: Optional[int] = None


GenerationResult = Union[GenerationSuccess, GenerationFailure]


class UsageSnapshot(BaseModel):
    """Point-in-time view of the rate-limit window."""

    requests_last_minute: int
    total_requests: int
    last_reset: float
    next_reset: float
    max_requests: int
