"""
User feedback engine.

Turns sentiment + intensity feedback into a bounded resonance adjustment,
aggregates feedback streams, and flags flip-flopping feedback. Feedback is
run through the loop guard first so a user cannot hammer the same verdict.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from .config import Config, FeedbackConfig, ResonanceConfig
from .errors import InvalidFeedbackError
from .guard import Action, LoopGuard
from .history import now_ms as _now_ms
from .resonance import ResonanceState, state_for

logger = logging.getLogger(__name__)

FEEDBACK_ACTION_TYPE = "user_feedback"
REDUNDANT_FEEDBACK_REASON = "GOOSEGUARD: Redundant feedback pattern detected"
CONTRADICTION_ADVISORY = "Alternating positive/negative feedback detected. Consider stabilizing direction."


class Sentiment(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class FeedbackType(Enum):
    SATISFACTION = "satisfaction"
    ACCURACY = "accuracy"
    COMPLETENESS = "completeness"
    USEFULNESS = "usefulness"


def _unit_interval(name: str, value: float) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise InvalidFeedbackError(f"{name} must be within [0, 1], got {value}")
    return value


_RESPONSES = {
    Sentiment.POSITIVE: "Positive feedback accepted. Crystallizing for autonomous execution.",
    Sentiment.NEGATIVE: "Negative feedback received. Analyzing for improvement opportunities.",
    Sentiment.NEUTRAL: "Neutral feedback noted. Maintaining current trajectory.",
}


@dataclass(frozen=True)
class UserFeedback:
    id: str
    artifact_id: str
    sentiment: Sentiment
    type: FeedbackType
    confidence: float
    intensity: float
    timestamp: int  # ms
    comment: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "sentiment", Sentiment(self.sentiment))
        object.__setattr__(self, "type", FeedbackType(self.type))
        object.__setattr__(self, "confidence", _unit_interval("confidence", self.confidence))
        object.__setattr__(self, "intensity", _unit_interval("intensity", self.intensity))

    def to_action(self) -> Action:
        return Action(
            id=self.id,
            type=FEEDBACK_ACTION_TYPE,
            payload=f"{self.artifact_id}:{self.sentiment.value}:{self.type.value}",
            timestamp=self.timestamp,
        )


@dataclass(frozen=True)
class FeedbackResult:
    accepted: bool
    reason: Optional[str] = None
    suggested_action: Optional[str] = None
    adjusted_resonance: Optional[float] = None


@dataclass(frozen=True)
class FeedbackAggregation:
    total_feedback: int
    positive_count: int
    negative_count: int
    neutral_count: int
    average_confidence: float
    average_intensity: float
    dominant_sentiment: Sentiment
    resonance_adjustment: float

    def to_dict(self) -> dict:
        return {
            "total_feedback": self.total_feedback,
            "positive_count": self.positive_count,
            "negative_count": self.negative_count,
            "neutral_count": self.neutral_count,
            "average_confidence": round(self.average_confidence, 4),
            "average_intensity": round(self.average_intensity, 4),
            "dominant_sentiment": self.dominant_sentiment.value,
            "resonance_adjustment": round(self.resonance_adjustment, 4),
        }


@dataclass(frozen=True)
class TransitionResult:
    occurred: bool
    new_state: ResonanceState
    reason: str
    adjusted_resonance: float


@dataclass(frozen=True)
class ContradictionResult:
    has_contradiction: bool
    pattern: Optional[str] = None
    alternations: int = 0


FeedbackLike = Union[UserFeedback, FeedbackAggregation]


class FeedbackAdjuster:
    """
    Feedback processing against a caller-owned feedback history.

    Soft outcomes only: every rejection comes back as a FeedbackResult with
    ``accepted=False``, never as an exception.
    """

    def __init__(
        self,
        config: Optional[FeedbackConfig] = None,
        guard: Optional[LoopGuard] = None,
        resonance_config: Optional[ResonanceConfig] = None,
    ):
        self.config = config or Config.feedback
        self.guard = guard or LoopGuard()
        self.resonance_config = resonance_config or Config.resonance

    # ---------- single feedback ----------

    def adjustment_for(self, feedback: UserFeedback) -> float:
        if feedback.sentiment is Sentiment.POSITIVE:
            return self.config.BOOST * feedback.intensity
        if feedback.sentiment is Sentiment.NEGATIVE:
            return -self.config.PENALTY * feedback.intensity
        return 0.0

    def process(self, feedback: UserFeedback, history: Iterable[UserFeedback]) -> FeedbackResult:
        guard = self.guard.evaluate(feedback.to_action(), [f.to_action() for f in history])
        if not guard.proceed:
            logger.info(f"Feedback {feedback.id} rejected as redundant for {feedback.artifact_id}")
            return FeedbackResult(
                accepted=False,
                reason=REDUNDANT_FEEDBACK_REASON,
                suggested_action=guard.suggested_pivot,
            )

        min_confidence = self.config.MIN_CONFIDENCE
        if feedback.confidence < min_confidence:
            logger.info(f"Feedback {feedback.id} rejected: confidence {feedback.confidence:.2f}")
            return FeedbackResult(
                accepted=False,
                reason=(f"Feedback confidence {feedback.confidence:.2f} below minimum "
                        f"threshold {min_confidence}"),
                suggested_action="Please provide more specific feedback to increase confidence",
            )

        return FeedbackResult(
            accepted=True,
            adjusted_resonance=self.adjustment_for(feedback),
            suggested_action=_RESPONSES[feedback.sentiment],
        )

    # ---------- aggregates ----------

    def aggregate(self, feedback_list: Sequence[UserFeedback]) -> FeedbackAggregation:
        feedback_list = list(feedback_list)
        if not feedback_list:
            return FeedbackAggregation(
                total_feedback=0,
                positive_count=0,
                negative_count=0,
                neutral_count=0,
                average_confidence=0.0,
                average_intensity=0.0,
                dominant_sentiment=Sentiment.NEUTRAL,
                resonance_adjustment=0.0,
            )

        positive = sum(1 for f in feedback_list if f.sentiment is Sentiment.POSITIVE)
        negative = sum(1 for f in feedback_list if f.sentiment is Sentiment.NEGATIVE)
        neutral = sum(1 for f in feedback_list if f.sentiment is Sentiment.NEUTRAL)

        average_confidence = float(np.mean([f.confidence for f in feedback_list]))
        average_intensity = float(np.mean([f.intensity for f in feedback_list]))

        # Strict majority over both other sentiments, otherwise neutral
        dominant = Sentiment.NEUTRAL
        if positive > negative and positive > neutral:
            dominant = Sentiment.POSITIVE
        elif negative > positive and negative > neutral:
            dominant = Sentiment.NEGATIVE

        adjustment = (positive * self.config.BOOST - negative * self.config.PENALTY) * average_intensity

        return FeedbackAggregation(
            total_feedback=len(feedback_list),
            positive_count=positive,
            negative_count=negative,
            neutral_count=neutral,
            average_confidence=average_confidence,
            average_intensity=average_intensity,
            dominant_sentiment=dominant,
            resonance_adjustment=adjustment,
        )

    def adjust_resonance(self, original: float, feedback: FeedbackLike) -> float:
        if isinstance(feedback, FeedbackAggregation):
            adjustment = feedback.resonance_adjustment
        else:
            adjustment = self.adjustment_for(feedback)
        return max(0.0, min(1.0, original + adjustment))

    def transition_state(self, feedback: FeedbackLike, current_resonance: float) -> TransitionResult:
        threshold = self.resonance_config.THRESHOLD
        adjusted = self.adjust_resonance(current_resonance, feedback)
        current_state = state_for(current_resonance, threshold)
        potential_state = state_for(adjusted, threshold)

        if current_state is not potential_state:
            if potential_state is ResonanceState.CRYSTAL:
                reason = f"Positive feedback increased resonance to {adjusted:.2f} (>= {threshold})"
            else:
                reason = f"Negative feedback decreased resonance to {adjusted:.2f} (< {threshold})"
            return TransitionResult(True, potential_state, reason, adjusted)

        return TransitionResult(
            False,
            current_state,
            f"Feedback did not trigger state transition. Resonance: {adjusted:.2f}",
            adjusted,
        )

    def detect_contradiction(
        self,
        history: Sequence[UserFeedback],
        window_ms: Optional[int] = None,
        now_ms: Optional[int] = None,
    ) -> ContradictionResult:
        cfg = self.config
        history = list(history)
        if len(history) < cfg.MIN_CONTRADICTION_ENTRIES:
            return ContradictionResult(False)

        if window_ms is None:
            window_ms = cfg.CONTRADICTION_WINDOW_MS
        if now_ms is None:
            now_ms = _now_ms()
        recent = [f for f in history if now_ms - f.timestamp < window_ms]
        if len(recent) < cfg.MIN_CONTRADICTION_ENTRIES:
            return ContradictionResult(False)

        flips = {(Sentiment.POSITIVE, Sentiment.NEGATIVE), (Sentiment.NEGATIVE, Sentiment.POSITIVE)}
        alternations = sum(
            1 for prev, cur in zip(recent, recent[1:])
            if (prev.sentiment, cur.sentiment) in flips
        )

        if alternations >= cfg.MIN_ALTERNATIONS:
            logger.info(f"Contradictory feedback: {alternations} alternations in {len(recent)} entries")
            return ContradictionResult(True, CONTRADICTION_ADVISORY, alternations)
        return ContradictionResult(False, alternations=alternations)


def process_feedback(feedback: UserFeedback, history: Iterable[UserFeedback]) -> FeedbackResult:
    return FeedbackAdjuster().process(feedback, history)


def aggregate_feedback(feedback_list: Sequence[UserFeedback]) -> FeedbackAggregation:
    return FeedbackAdjuster().aggregate(feedback_list)


def adjust_resonance(original: float, feedback: FeedbackLike) -> float:
    return FeedbackAdjuster().adjust_resonance(original, feedback)


def transition_state(feedback: FeedbackLike, current_resonance: float) -> TransitionResult:
    return FeedbackAdjuster().transition_state(feedback, current_resonance)


def detect_contradiction(
    history: Sequence[UserFeedback],
    window_ms: Optional[int] = None,
    now_ms: Optional[int] = None,
) -> ContradictionResult:
    return FeedbackAdjuster().detect_contradiction(history, window_ms=window_ms, now_ms=now_ms)
