"""Test doubles for the HTTP layer, durable storage and Tk timers."""

from __future__ import annotations

import itertools
from typing import Any, Callable, Optional


class FakeScheduler:
    """Manual clock with the ``after`` / ``after_cancel`` widget API."""

    def __init__(self) -> None:
        self.now: int = 0
        self._ids = itertools.count(1)
        self._jobs: dict[int, tuple[int, Callable[[], None]]] = {}

    def after(self, ms: int, func: Callable[[], None]) -> int:
        job = next(self._ids)
        self._jobs[job] = (self.now + ms, func)
        return job

    def after_cancel(self, job: int) -> None:
        self._jobs.pop(job, None)

    @property
    def pending(self) -> int:
        return len(self._jobs)

    def advance(self, ms: int) -> None:
        """Move the clock forward, firing due callbacks in time order."""
        target = self.now + ms
        while True:
            due = [
                (when, job) for job, (when, _) in self._jobs.items() if when <= target
            ]
            if not due:
                break
            when, job = min(due)
            _, func = self._jobs.pop(job)
            self.now = when
            func()
        self.now = target


class MemoryStorage:
    """In-memory ``KeyValueStorage``."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None) -> None:
        self.status_code = status_code
        self._body = body

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeHttp:
    """Stand-in for ``requests.Session`` keyed by ``(method, path)``.

    Routes map to a list of responses consumed in order (the last one
    repeats) or to an exception instance to raise.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed: bool = False
        self.before_response: Optional[Callable[[str, str], None]] = None

    def on(self, method: str, path: str, *responses: Any) -> "FakeHttp":
        self.routes[(method, path)] = list(responses)
        return self

    def request(self, method: str, url: str, json: Any = None,
                headers: Optional[dict[str, str]] = None, timeout: float = 0) -> Any:
        path = "/" + url.split("/api/", 1)[-1]
        self.calls.append({
            "method": method, "path": path, "json": json,
            "headers": dict(headers or {}), "timeout": timeout,
        })
        if self.before_response is not None:
            self.before_response(method, path)
        queue = self.routes.get((method, path))
        if not queue:
            return FakeResponse(404, {"success": False, "message": "Route not found"})
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def paths(self) -> list[str]:
        return [call["path"] for call in self.calls]

    def close(self) -> None:
        self.closed = True


def envelope(data: Any = None, message: str = "OK", status: int = 200) -> FakeResponse:
    return FakeResponse(status, {"success": True, "message": message, "data": data})


def failure(status: int, message: str) -> FakeResponse:
    return FakeResponse(status, {"success": False, "message": message})


def user_payload(verified: bool = True, role: str = "user", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "_id": "u-1",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "role": role,
        "isEmailVerified": verified,
    }
    payload.update(overrides)
    return payload


