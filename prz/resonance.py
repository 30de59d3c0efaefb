"""
Resonance engine: measures intent alignment against a context baseline.

    score = w_d * direction_sim + w_m * magnitude_match + w_f * frequency_match

with weights 0.5 / 0.3 / 0.2 and a fixed crystallization threshold of 0.95.
Inputs are range-checked at construction; the scorer itself does not clamp,
so a negative direction similarity still pulls the score below zero.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from .config import Config, ResonanceConfig
from .errors import InvalidResonanceInputError
from .similarity import cosine_similarity


class ResonanceState(Enum):
    VAPOR = "vapor"
    CRYSTAL = "crystal"
    ACTIVE = "active"


def _unit_interval(name: str, value: float) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise InvalidResonanceInputError(f"{name} must be within [0, 1], got {value}")
    return value


def _direction(name: str, value: Sequence[float]) -> Tuple[float, float]:
    values = tuple(float(v) for v in value)
    if len(values) != 2:
        raise InvalidResonanceInputError(f"{name} must be a 2D vector, got {len(values)} components")
    return values


@dataclass(frozen=True)
class ResonanceInput:
    content: str
    direction: Tuple[float, float]
    magnitude: float
    frequency: float

    def __post_init__(self):
        object.__setattr__(self, "direction", _direction("direction", self.direction))
        object.__setattr__(self, "magnitude", _unit_interval("magnitude", self.magnitude))
        object.__setattr__(self, "frequency", _unit_interval("frequency", self.frequency))


@dataclass(frozen=True)
class ResonanceContext:
    state: ResonanceState
    patterns: Tuple[float, ...]
    expected_direction: Tuple[float, float]
    system_frequency: float

    def __post_init__(self):
        object.__setattr__(self, "state", ResonanceState(self.state))
        object.__setattr__(self, "patterns",
                           tuple(_unit_interval("pattern", p) for p in self.patterns))
        object.__setattr__(self, "expected_direction",
                           _direction("expected_direction", self.expected_direction))
        object.__setattr__(self, "system_frequency",
                           _unit_interval("system_frequency", self.system_frequency))


@dataclass(frozen=True)
class ResonanceResult:
    score: float
    direction_sim: float
    magnitude_match: float
    frequency_match: float
    threshold: float = 0.95

    @property
    def crystallized(self) -> bool:
        return should_crystallize(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": round(self.score, 4),
            "direction_sim": round(self.direction_sim, 4),
            "magnitude_match": round(self.magnitude_match, 4),
            "frequency_match": round(self.frequency_match, 4),
            "threshold": self.threshold,
        }


class ResonanceScorer:
    """Pure scorer; identical inputs always give identical results."""

    def __init__(self, config: Optional[ResonanceConfig] = None):
        self.config = config or Config.resonance

    def measure(self, signal: ResonanceInput, context: ResonanceContext) -> ResonanceResult:
        cfg = self.config
        baseline = context.patterns[0] if context.patterns else cfg.DEFAULT_PATTERN

        direction_sim = cosine_similarity(signal.direction, context.expected_direction)
        magnitude_match = 1.0 - abs(signal.magnitude - baseline)
        frequency_match = 1.0 - abs(signal.frequency - context.system_frequency)

        score = (
            direction_sim * cfg.DIRECTION_WEIGHT
            + magnitude_match * cfg.MAGNITUDE_WEIGHT
            + frequency_match * cfg.FREQUENCY_WEIGHT
        )
        return ResonanceResult(
            score=score,
            direction_sim=direction_sim,
            magnitude_match=magnitude_match,
            frequency_match=frequency_match,
            threshold=cfg.THRESHOLD,
        )

    def baseline(self, content: str) -> Tuple[ResonanceInput, ResonanceContext]:
        """The fixed synthetic input/context pair the pipeline scores against."""
        cfg = self.config
        signal = ResonanceInput(
            content=content,
            direction=cfg.BASELINE_DIRECTION,
            magnitude=cfg.BASELINE_MAGNITUDE,
            frequency=cfg.BASELINE_FREQUENCY,
        )
        context = ResonanceContext(
            state=ResonanceState.ACTIVE,
            patterns=cfg.BASELINE_PATTERNS,
            expected_direction=cfg.BASELINE_DIRECTION,
            system_frequency=cfg.BASELINE_SYSTEM_FREQUENCY,
        )
        return signal, context


def measure_resonance(signal: ResonanceInput, context: ResonanceContext) -> ResonanceResult:
    return ResonanceScorer().measure(signal, context)


def should_crystallize(result: Any) -> bool:
    """``result.score >= result.threshold``; accepts any object exposing both."""
    return result.score >= result.threshold


def state_for(score: float, threshold: Optional[float] = None) -> ResonanceState:
    if threshold is None:
        threshold = Config.resonance.THRESHOLD
    return ResonanceState.CRYSTAL if score >= threshold else ResonanceState.VAPOR
