"""
Frame codec and channel addressing.
"""

from __future__ import annotations

from typing import Literal
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ValidationError

from kiosk._types import Result, Ok, Error, PaymentStatus, RequestId
from kiosk.channel._types import ChannelEvent, FrameError

CHANNEL_PATH = "/ws/payment-requests/{request_id}"

_SCHEMES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


class StatusFrame(BaseModel):
    """Wire shape of a pushed status update. Extra keys are ignored."""

    status: Literal["PENDING", "COMPLETED", "FAILED", "EXPIRED"]
    message: str | None = None


def decode_frame(raw: str | bytes) -> Result[ChannelEvent, FrameError]:
    """
    Decode one inbound frame.

    Example:
        decode_frame('{"status": "COMPLETED"}')
        # Ok(ChannelEvent(status=PaymentStatus.COMPLETED, message=None))
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    try:
        frame = StatusFrame.model_validate_json(text)
    except ValidationError as exc:
        return Error(FrameError(reason=str(exc.errors()[0]["msg"]), raw=text))
    return Ok(ChannelEvent(status=PaymentStatus(frame.status), message=frame.message))


def channel_url(api_url: str, request_id: RequestId) -> str:
    """
    Push-channel URL for a request, derived from the HTTP API base URL.

    Example:
        channel_url("https://api.example.com/api", "42")
        # "wss://api.example.com/api/ws/payment-requests/42"
    """
    parts = urlsplit(api_url)
    scheme = _SCHEMES.get(parts.scheme)
    if scheme is None:
        raise ValueError(f"unsupported API URL scheme: {parts.scheme!r}")
    path = parts.path.rstrip("/") + CHANNEL_PATH.format(request_id=request_id)
    return urlunsplit((scheme, parts.netloc, path, "", ""))


__all__ = ("StatusFrame", "decode_frame", "channel_url", "CHANNEL_PATH")
