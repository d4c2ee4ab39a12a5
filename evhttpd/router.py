"""Dispatch of HTTP requests to handlers by method and path."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Pattern, Union

Callback = Callable[[Any, Any], Any]


@dataclass(frozen=True)
class _RegexRoute:
    method: Hashable
    pattern: Pattern[str]
    target: Any


def _compile(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


def _with_path_params(request, match: re.Match):
    """Return a copy of *request* carrying the groups of *match*."""
    params = dict(getattr(request, "path_params", None) or {})
    for index, value in enumerate(match.groups(), start=1):
        params[f"param{index}"] = value
    params.update({k: v for k, v in match.groupdict().items() if v is not None})
    new_request = copy.copy(request)
    new_request.path_params = params
    return new_request


class Router:
    """Routes requests by (method, path).

    Lookup order: exact handlers, exact callbacks, regex handlers, regex
    callbacks. Handlers are objects with ``handle(request, response)``;
    callbacks are plain callables taking ``(request, response)``.
    """

    def __init__(self) -> None:
        self._handlers: dict[tuple[Hashable, str], Any] = {}
        self._callbacks: dict[tuple[Hashable, str], Callback] = {}
        self._regex_handlers: list[_RegexRoute] = []
        self._regex_callbacks: list[_RegexRoute] = []

    def register_handler(self, method, path: str, handler) -> None:
        self._handlers[(method, path)] = handler

    def register_callback(self, method, path: str, callback: Callback) -> None:
        self._callbacks[(method, path)] = callback

    def add_regex_handler(self, method, pattern, handler) -> None:
        """Route paths that fully match *pattern*; groups become path params."""
        self._regex_handlers.append(_RegexRoute(method, _compile(pattern), handler))

    def add_regex_callback(self, method, pattern, callback: Callback) -> None:
        """Route paths that fully match *pattern* to *callback*.

        The callback receives the request unchanged.
        """
        self._regex_callbacks.append(_RegexRoute(method, _compile(pattern), callback))

    def route(self, request, response) -> bool:
        """Run the matching route; return False when none matches."""
        key = (request.method, request.path)

        handler = self._handlers.get(key)
        if handler is not None:
            handler.handle(request, response)
            return True

        callback = self._callbacks.get(key)
        if callback is not None:
            callback(request, response)
            return True

        for entry in self._regex_handlers:
            if entry.method != request.method:
                continue
            match = entry.pattern.fullmatch(request.path)
            if match:
                entry.target.handle(_with_path_params(request, match), response)
                return True

        for entry in self._regex_callbacks:
            if entry.method == request.method and entry.pattern.fullmatch(request.path):
                entry.target(request, response)
                return True

        return False