"""Debounced, cancellable location suggestions driven by keystrokes.

Runs on a single asyncio event loop. Each keystroke cancels the pending
debounce timer and bumps a generation counter, so a lookup that resolves
after a newer keystroke is dropped instead of shown: the last keystroke
wins, regardless of the order responses arrive in.

The minimum query length counts the raw input, surrounding spaces included;
only whitespace-only input is skipped outright. The lookup itself receives
the trimmed text.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Set, Tuple

from estate_map.core.config import Settings
from estate_map.geo.proximity import zoom_for_location_type
from estate_map.models import Coordinate, GeocodeResult, Suggestion
from estate_map.vendors.nominatim import AsyncLookup

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3
MIN_QUERY_LENGTH = 3
MAX_SUGGESTIONS = 5

SelectCallback = Callable[[Coordinate, int], Any]
ChangeCallback = Callable[["SuggestionFetcher"], None]


class FetchState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class SuggestionFetcher:
    def __init__(
        self,
        lookup: AsyncLookup,
        *,
        on_select: Optional[SelectCallback] = None,
        on_change: Optional[ChangeCallback] = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        min_query_length: int = MIN_QUERY_LENGTH,
        max_suggestions: int = MAX_SUGGESTIONS,
    ) -> None:
        self._lookup = lookup
        self._on_select = on_select
        self._on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.min_query_length = min_query_length
        self.max_suggestions = max_suggestions

        self.input_value = ""
        self.state = FetchState.IDLE
        self.center: Optional[Coordinate] = None
        self.zoom: Optional[int] = None
        self.lookup_count = 0
        self._suggestions: Tuple[Suggestion, ...] = ()
        self._generation = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings, lookup: AsyncLookup, **kwargs: Any) -> "SuggestionFetcher":
        return cls(
            lookup,
            debounce_seconds=settings.debounce_ms / 1000.0,
            min_query_length=settings.min_query_length,
            max_suggestions=settings.max_suggestions,
            **kwargs,
        )

    @property
    def suggestions(self) -> Tuple[Suggestion, ...]:
        return self._suggestions

    def on_input(self, text: str) -> None:
        """Register a keystroke. Must be called from the event loop thread."""
        self.input_value = text
        self._generation += 1
        self._cancel_timer()
        self._apply(FetchState.IDLE, ())

        if len(text) < self.min_query_length or not text.strip():
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._fire, text, self._generation)

    def select(self, suggestion: Suggestion) -> Any:
        """Focus on a suggestion and end the current input cycle.

        Returns whatever the ``on_select`` callback returns, typically the
        records near the new center.
        """
        self._generation += 1
        self._cancel_timer()
        self.center = suggestion.result.coordinate
        self.zoom = zoom_for_location_type(suggestion.result.location_type)
        self._apply(FetchState.IDLE, ())
        logger.info("Selected %r -> center=%s zoom=%d", suggestion.text, self.center, self.zoom)
        if self._on_select is None:
            return None
        return self._on_select(self.center, self.zoom)

    async def drain(self) -> None:
        """Wait for in-flight lookups to settle."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        self._generation += 1
        self._cancel_timer()
        for task in list(self._tasks):
            task.cancel()

    def _fire(self, text: str, generation: int) -> None:
        self._timer = None
        if generation != self._generation:
            return
        self.lookup_count += 1
        self._apply(FetchState.PENDING, ())
        task = asyncio.get_running_loop().create_task(self._run_lookup(text, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_lookup(self, text: str, generation: int) -> None:
        try:
            results: Sequence[GeocodeResult] = await self._lookup(text.strip())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Suggestion lookup failed for query=%r: %s", text, exc)
            results = []

        if generation != self._generation or text != self.input_value:
            logger.debug("Discarding stale suggestions for %r (current input %r)", text, self.input_value)
            return

        if not results:
            self._apply(FetchState.ERROR, ())
            return
        suggestions = tuple(Suggestion(text=result.display_name, result=result) for result in results[: self.max_suggestions])
        self._apply(FetchState.SUCCESS, suggestions)

    def _apply(self, state: FetchState, suggestions: Tuple[Suggestion, ...]) -> None:
        self.state = state
        self._suggestions = suggestions
        if self._on_change is not None:
            self._on_change(self)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
