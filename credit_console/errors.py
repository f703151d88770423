# credit_console/errors.py
from __future__ import annotations

import json
from typing import Any, List, Optional


class ConsoleError(Exception):
    """Base class for every failure the console surfaces to the operator."""

    kind = "error"

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def display(self) -> str:
        if self.detail is None:
            return self.message
        if isinstance(self.detail, str):
            return f"{self.message}: {self.detail}"
        return f"{self.message}: {json.dumps(self.detail, default=str)}"


class TransportError(ConsoleError):
    """Timeout, refused connection, DNS failure..."""

    kind = "transport"


class HTTPError(ConsoleError):
    kind = "http"

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message, detail)
        self.status_code = status_code


class ValidationError(ConsoleError):
    """Client-side precondition failed; nothing was sent."""

    kind = "validation"

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message, problems or None)
        self.problems = list(problems or [])

    def display(self) -> str:
        if not self.problems:
            return self.message
        return f"{self.message}: " + "; ".join(self.problems)


class TransitionError(ConsoleError):
    kind = "transition"


class ConcurrencyConflict(ConsoleError):
    """Someone else finalized the application before our decision landed."""

    kind = "conflict"

    def __init__(self, message: str, expected: Optional[str], actual: Optional[str]):
        super().__init__(message, {"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual


def from_pydantic(message: str, exc) -> ValidationError:
    """Flatten a pydantic ValidationError into our own."""
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = err.get("msg", "invalid value")
        problems.append(f"{loc}: {msg}" if loc else msg)
    return ValidationError(message, problems)
