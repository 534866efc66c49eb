"""Navigation collaborator contract.

Guards and the post-authentication router never touch a browser history
or a web framework directly. They talk to a ``Navigator``: something that
knows the current ``Location``, can navigate, and remembers the location a
guard bounced a visitor away from.

``HistoryNavigator`` is the in-process implementation used by server-side
composition and tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from urllib.parse import parse_qs, urlsplit

from src.lib.logging_utils import path_for_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    """A path plus its raw query string (no leading '?')."""

    path: str = "/"
    query: str = ""

    @classmethod
    def from_url(cls, url: str) -> Location:
        parts = urlsplit(url)
        return cls(path=parts.path or "/", query=parts.query)

    @property
    def href(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path

    def query_param(self, name: str) -> str | None:
        """First value of query parameter ``name``, or None if absent/blank."""
        values = parse_qs(self.query, keep_blank_values=False).get(name)
        if not values:
            return None
        value = values[0].strip()
        return value or None


@dataclass(frozen=True)
class NavigateOptions:
    """Extra instructions for a navigation.

    Attributes:
        replace: Replace the current history entry instead of pushing
        remember: Location to remember as the pre-redirect ("attempted")
            location, picked up after login
    """

    replace: bool = False
    remember: Location | None = None


@runtime_checkable
class Navigator(Protocol):
    """What guards need from the navigation layer."""

    @property
    def location(self) -> Location: ...

    @property
    def remembered_location(self) -> Location | None: ...

    def navigate(self, destination: str, options: NavigateOptions | None = None) -> None: ...

    def consume_remembered_location(self) -> Location | None: ...


class HistoryNavigator:
    """In-memory history stack implementing Navigator."""

    def __init__(self, start: Location | str = "/") -> None:
        if isinstance(start, str):
            start = Location.from_url(start)
        self._entries: list[Location] = [start]
        self._remembered: Location | None = None

    @property
    def location(self) -> Location:
        return self._entries[-1]

    @property
    def history(self) -> tuple[Location, ...]:
        return tuple(self._entries)

    @property
    def remembered_location(self) -> Location | None:
        return self._remembered

    def navigate(self, destination: str, options: NavigateOptions | None = None) -> None:
        options = options or NavigateOptions()
        target = Location.from_url(destination)
        if options.remember is not None:
            self._remembered = options.remember
        if options.replace:
            self._entries[-1] = target
        else:
            self._entries.append(target)
        logger.debug(
            "Navigated",
            extra={"destination": path_for_log(destination), "replace": options.replace},
        )

    def consume_remembered_location(self) -> Location | None:
        remembered, self._remembered = self._remembered, None
        return remembered
