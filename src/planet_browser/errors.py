"""Error taxonomy for remote fetch/search failures.

Every failure that can reach the consumer-facing error slot is a
``PlanetsError`` subclass carrying a short, stable ``user_message``.
"""

from __future__ import annotations

import httpx


class PlanetsError(Exception):
    """Base class for classified fetch/search failures."""

    @property
    def user_message(self) -> str:
        return "Something went wrong."


class NetworkUnavailable(PlanetsError):
    """The request never produced a response (DNS, connect, timeout...)."""

    @property
    def user_message(self) -> str:
        return "Network connection appears to be offline."


class DecodeFailure(PlanetsError):
    """The payload matched none of the known response shapes."""

    @property
    def user_message(self) -> str:
        return "We couldn't read the server response."


class HttpStatus(PlanetsError):
    """The server answered with a non-success status code."""

    def __init__(self, code: int) -> None:
        super().__init__(f"HTTP {code}")
        self.code = code

    @property
    def user_message(self) -> str:
        return f"Server responded with status {self.code}."


class Message(PlanetsError):
    """Catch-all carrying its own user-facing text (injected/test failures)."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text

    @property
    def user_message(self) -> str:
        return self.text


def classify_http_error(exc: Exception) -> PlanetsError:
    """Map an httpx (or decoding) exception onto the error taxonomy."""
    if isinstance(exc, PlanetsError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        return HttpStatus(exc.response.status_code)
    if isinstance(exc, httpx.DecodingError):
        return DecodeFailure(str(exc))
    if isinstance(exc, (httpx.RequestError, OSError)):
        return NetworkUnavailable(str(exc))
    if isinstance(exc, ValueError):
        return DecodeFailure(str(exc))
    return Message(str(exc) or type(exc).__name__)


__all__ = [
    "DecodeFailure",
    "HttpStatus",
    "Message",
    "NetworkUnavailable",
    "PlanetsError",
    "classify_http_error",
]
