"""
Transient toast notifications.

Operations queue toasts while a request is handled. When the route answers
with a redirect, the queue is flashed into the signed session and shown by
the next rendered page; when the route renders directly, the queue is shown
right away.
"""

from dataclasses import asdict, dataclass
from typing import Iterable, List

from fastapi import Request

SESSION_KEY = "toasts"
LEVELS = ("success", "error")


@dataclass(frozen=True)
class Toast:
    level: str
    message: str


class ToastQueue:
    """Toasts raised while handling the current request."""

    def __init__(self) -> None:
        self.items: List[Toast] = []

    def push(self, level: str, message: str) -> None:
        if level not in LEVELS:
            raise ValueError(f"Unknown toast level: {level}")
        self.items.append(Toast(level=level, message=message))

    def success(self, message: str) -> None:
        self.push("success", message)

    def error(self, message: str) -> None:
        self.push("error", message)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


def flash(request: Request, toasts: Iterable[Toast]) -> None:
    """Keep ``toasts`` in the session for the next rendered page."""
    pending = [asdict(toast) for toast in toasts]
    if pending:
        request.session[SESSION_KEY] = request.session.get(SESSION_KEY, []) + pending


def pop(request: Request) -> List[Toast]:
    """Toasts flashed by earlier responses. They are shown once."""
    return [
        Toast(level=item["level"], message=item["message"])
        for item in request.session.pop(SESSION_KEY, [])
    ]
