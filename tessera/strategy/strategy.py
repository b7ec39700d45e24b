"""Multi-step prompt strategies.

A Strategy runs a fixed sequence of compositions (draft, critique, refine,
...) and tracks where it is. Its state, a cursor and an append-only
history, lives in a private state object owned by the strategy and is only
reachable through the methods below.

States: positions ``0..N-1`` and Completed (``cursor >= N``).

    peek_current(data)  build the composition at the cursor, no state change
    advance(data)       record the current step, move on, build the next one
    reset()             back to position 0 with an empty history

A Strategy instance is meant for a single writer; callers sharing one
across threads must serialize access themselves.

Example:
    >>> strategy = Strategy(id="refinement", steps=[draft, critique, refine])
    >>> strategy.peek_current({"topic": "AI ethics"}).as_string()
    >>> strategy.advance({"topic": "AI ethics", "draft": "..."})
    >>> strategy.progress
    StrategyProgress(current=1, total=3, percentage=33.33333333333333)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from tessera.composition.composition import Composition
from tessera.composition.instance import PromptInstance
from tessera.core.exceptions import ConfigurationError
from tessera.core.identifiers import find_duplicates, require_identifier
from tessera.patterns.structure import enforce_strategy_structure
from tessera.strategy.pattern import StrategyPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyHistoryEntry:
    """A completed step.

    Attributes:
        index: Cursor position of the step when it was completed
        id: Composition id of the step
        timestamp: UTC time the step was recorded
    """

    index: int
    id: str
    timestamp: datetime


@dataclass(frozen=True)
class StrategyProgress:
    current: int
    total: int
    percentage: float


@dataclass
class _StrategyState:
    cursor: int = 0
    history: list[StrategyHistoryEntry] = field(default_factory=list)

    def record(self, composition_id: str) -> StrategyHistoryEntry:
        now = datetime.now(timezone.utc)
        # Keep timestamps non-decreasing even if the wall clock steps back.
        if self.history and now < self.history[-1].timestamp:
            now = self.history[-1].timestamp
        entry = StrategyHistoryEntry(index=self.cursor, id=composition_id, timestamp=now)
        self.history.append(entry)
        self.cursor += 1
        return entry

    def clear(self) -> None:
        self.cursor = 0
        self.history.clear()


class Strategy:
    """A sequence of compositions with cursor, history and progress.

    Attributes:
        id: Strategy identifier
        steps: Compositions in execution order
        pattern: Strategy pattern the steps were checked against
        description: Human-readable purpose

    Raises:
        ConfigurationError: On a malformed id, no steps or duplicate
            composition ids.
        PatternError: If the steps do not satisfy the pattern.
    """

    def __init__(
        self,
        id: str,
        steps: Sequence[Composition],
        pattern: Optional[StrategyPattern] = None,
        description: Optional[str] = None,
    ) -> None:
        self._id = require_identifier(id, "strategy ID")
        self._steps = tuple(steps)

        if not self._steps:
            raise ConfigurationError(
                f'Strategy "{id}" must have at least one step.\n'
                "> Provide a non-empty sequence of Composition objects in 'steps'.",
                config_key=id,
            )

        duplicates = find_duplicates(step.id for step in self._steps)
        if duplicates:
            raise ConfigurationError(
                f'Strategy "{id}" has duplicate composition IDs.\n'
                f"> Duplicate IDs: {', '.join(duplicates)}\n"
                "> All composition IDs must be unique within a strategy.",
                config_key=id,
            )

        if pattern is not None:
            enforce_strategy_structure(
                self._id,
                pattern.id,
                pattern.step_ids(),
                [step.id for step in self._steps],
            )

        self._pattern = pattern
        self._description = description
        self._state = _StrategyState()

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def steps(self) -> tuple[Composition, ...]:
        return self._steps

    @property
    def pattern(self) -> Optional[StrategyPattern]:
        return self._pattern

    @property
    def description(self) -> Optional[str]:
        return self._description

    def __repr__(self) -> str:
        return (
            f"Strategy(id={self._id!r}, steps={[step.id for step in self._steps]!r}, "
            f"cursor={self._state.cursor})"
        )

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def peek_current(
        self,
        data: Mapping[str, Any],
        context: Optional[Mapping[str, Any]] = None,
    ) -> Optional[PromptInstance]:
        """Build the composition at the cursor without changing state.

        Returns:
            The built prompt, or None once the strategy is completed.
        """
        if self.completed:
            return None
        return self._steps[self._state.cursor].build(data, context)

    def advance(
        self,
        data: Mapping[str, Any],
        context: Optional[Mapping[str, Any]] = None,
    ) -> Optional[PromptInstance]:
        """Complete the current step and build the next one.

        A completed strategy is left unchanged. Otherwise exactly one history
        entry is appended (its index is the cursor before the call) and the
        cursor moves forward by one.

        Returns:
            The next step's prompt, or None when the strategy is (or has just
            become) completed.
        """
        if self.completed:
            return None

        entry = self._state.record(self._steps[self._state.cursor].id)
        logger.debug(
            f'Strategy "{self._id}" completed step {entry.index} ("{entry.id}"), '
            f"cursor now {self._state.cursor}/{len(self._steps)}"
        )

        if self.completed:
            logger.debug(f'Strategy "{self._id}" completed')
            return None
        return self._steps[self._state.cursor].build(data, context)

    def reset(self) -> None:
        """Return to the first step and clear the history."""
        self._state.clear()
        logger.debug(f'Strategy "{self._id}" reset')

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def completed(self) -> bool:
        return self._state.cursor >= len(self._steps)

    @property
    def progress(self) -> StrategyProgress:
        total = len(self._steps)
        current = self._state.cursor
        return StrategyProgress(
            current=current,
            total=total,
            percentage=(current / total) * 100 if total > 0 else 0.0,
        )

    @property
    def current_index(self) -> int:
        return self._state.cursor

    @property
    def history(self) -> list[StrategyHistoryEntry]:
        """Completed steps, oldest first (a copy)."""
        return list(self._state.history)

    @property
    def next_step(self) -> Optional[Composition]:
        """The composition after the current one, if any."""
        next_index = self._state.cursor + 1
        return self._steps[next_index] if next_index < len(self._steps) else None

    def get_step(self, index: int) -> Composition:
        """Return the composition at a position.

        Raises:
            IndexError: If the index is outside ``0..len(steps) - 1``.
        """
        if index < 0 or index >= len(self._steps):
            raise IndexError(
                f'Strategy "{self._id}" step index out of bounds.\n'
                f"> Requested index: {index}\n"
                f"> Valid range: 0 to {len(self._steps) - 1}\n"
                f"> Total steps: {len(self._steps)}"
            )
        return self._steps[index]

    def get_step_by_id(self, composition_id: str) -> Optional[Composition]:
        for step in self._steps:
            if step.id == composition_id:
                return step
        return None


__all__ = ["Strategy", "StrategyHistoryEntry", "StrategyProgress"]
