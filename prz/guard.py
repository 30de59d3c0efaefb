"""
Loop guard (GOOSEGUARD).

Detects redundant, repeated actions inside a trailing time window and
refuses the candidate once too many similar ones have been seen.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from .config import Config, GuardConfig
from .similarity import text_similarity

logger = logging.getLogger(__name__)

LOOP_REASON = "GOOSEGUARD: Redundant loop detected. Breaking to preserve flow."
PIVOT_SUGGESTION = "Consider reformulating your request or exploring a different approach."


@dataclass(frozen=True)
class Action:
    id: str
    type: str
    payload: Any
    timestamp: int  # ms


@dataclass(frozen=True)
class GuardResult:
    proceed: bool
    reason: Optional[str] = None
    suggested_pivot: Optional[str] = None
    similar_count: int = 0


class LoopGuard:
    """
    Stateless redundancy check over a caller-owned action history.
    """

    def __init__(self, config: Optional[GuardConfig] = None):
        self.config = config or Config.guard

    def is_similar(self, candidate: Action, previous: Action) -> bool:
        if previous.type != candidate.type:
            return False
        # Structured payloads never count as repeats
        if isinstance(previous.payload, str) and isinstance(candidate.payload, str):
            return text_similarity(previous.payload, candidate.payload) > self.config.SIM_THRESHOLD
        return False

    def recent(self, candidate: Action, history: Iterable[Action]) -> List[Action]:
        """Actions strictly inside the window ending at the candidate."""
        window = self.config.WINDOW_MS
        return [h for h in history if candidate.timestamp - h.timestamp < window]

    def evaluate(self, candidate: Action, history: Iterable[Action]) -> GuardResult:
        similar = [h for h in self.recent(candidate, history) if self.is_similar(candidate, h)]

        if len(similar) >= self.config.MAX_SIMILAR:
            logger.warning(
                f"[GOOSEGUARD] '{candidate.type}' blocked: {len(similar)} similar actions "
                f"within {self.config.WINDOW_MS} ms"
            )
            return GuardResult(
                proceed=False,
                reason=LOOP_REASON,
                suggested_pivot=PIVOT_SUGGESTION,
                similar_count=len(similar),
            )

        return GuardResult(proceed=True, similar_count=len(similar))

    def suggest_pivot(self, history: Sequence[Action]) -> bool:
        """True when the last few actions all share a single type."""
        lookback = self.config.PIVOT_LOOKBACK
        history = list(history)
        if len(history) < lookback:
            return False
        return len({a.type for a in history[-lookback:]}) == 1


def before_action(action: Action, history: Iterable[Action]) -> GuardResult:
    return LoopGuard().evaluate(action, history)


def should_suggest_pivot(history: Sequence[Action]) -> bool:
    return LoopGuard().suggest_pivot(history)
