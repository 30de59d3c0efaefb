"""
PRZ pipeline runner: the Complete-Then-Validate protocol.

    loop guard -> pattern match -> deliverable -> resonance -> tier
    (optionally) -> feedback -> adjusted resonance -> tier + transition
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .config import Config
from .errors import LoopDetectedError
from .feedback import FeedbackAdjuster, TransitionResult, UserFeedback
from .feedback_registry import suggested_improvements
from .guard import Action, LoopGuard
from .history import now_ms as _now_ms
from .intent import IntentMatcher, PatternMatch
from .registry import ECHO_REGISTRY, EchoPattern
from .resonance import ResonanceResult, ResonanceScorer, should_crystallize

logger = logging.getLogger(__name__)

REQUEST_ACTION_TYPE = "request"


class Tier(Enum):
    AUTONOMOUS = "autonomous"
    MONITORED = "monitored"


def tier_for(score: float, threshold: Optional[float] = None) -> Tier:
    if threshold is None:
        threshold = Config.resonance.THRESHOLD
    return Tier.AUTONOMOUS if score >= threshold else Tier.MONITORED


@dataclass
class PipelineResult:
    deliverable: str
    resonance: ResonanceResult
    crystallized: bool
    tier: Tier
    artifact_id: str
    action: Action
    best_match: Optional[PatternMatch[EchoPattern]] = None

    def to_dict(self) -> dict:
        match = None
        if self.best_match is not None:
            match = {
                "id": self.best_match.pattern.id,
                "pattern": self.best_match.pattern.pattern,
                "confidence": round(self.best_match.confidence, 4),
                "applied": self.best_match.applied,
            }
        return {
            "deliverable": self.deliverable,
            "resonance": self.resonance.to_dict(),
            "crystallized": self.crystallized,
            "tier": self.tier.value,
            "artifact_id": self.artifact_id,
            "best_match": match,
        }


@dataclass
class PipelineWithFeedbackResult(PipelineResult):
    feedback_accepted: bool = False
    feedback_reason: Optional[str] = None
    adjusted_resonance: Optional[float] = None
    state_transition: Optional[TransitionResult] = None
    suggested_action: Optional[str] = None
    improvements: List[str] = field(default_factory=list)

    @property
    def effective_resonance(self) -> float:
        if self.adjusted_resonance is not None:
            return self.adjusted_resonance
        return self.resonance.score

    def to_dict(self) -> dict:
        data = super().to_dict()
        transition = None
        if self.state_transition is not None:
            transition = {
                "occurred": self.state_transition.occurred,
                "new_state": self.state_transition.new_state.value,
                "reason": self.state_transition.reason,
            }
        data.update({
            "feedback_accepted": self.feedback_accepted,
            "feedback_reason": self.feedback_reason,
            "adjusted_resonance": self.adjusted_resonance,
            "state_transition": transition,
            "suggested_action": self.suggested_action,
            "improvements": list(self.improvements),
        })
        return data


class PrzPipeline:
    """
    Sequences the heuristics for one request.

    The pipeline holds no history of its own; callers pass the session's
    action and feedback histories in and decide what to append afterwards.
    """

    def __init__(
        self,
        guard: Optional[LoopGuard] = None,
        matcher: Optional[IntentMatcher] = None,
        scorer: Optional[ResonanceScorer] = None,
        feedback: Optional[FeedbackAdjuster] = None,
        registry: Iterable[EchoPattern] = ECHO_REGISTRY,
    ):
        self.guard = guard or LoopGuard()
        self.matcher = matcher or IntentMatcher()
        self.scorer = scorer or ResonanceScorer()
        self.feedback = feedback or FeedbackAdjuster(guard=self.guard)
        self.registry = tuple(registry)

    def run(
        self,
        request_text: str,
        history: Optional[Iterable[Action]] = None,
        now_ms: Optional[int] = None,
        action_id: Optional[str] = None,
    ) -> PipelineResult:
        timestamp = now_ms if now_ms is not None else _now_ms()
        action = Action(
            id=action_id or f"request:{uuid.uuid4().hex[:12]}",
            type=REQUEST_ACTION_TYPE,
            payload=request_text,
            timestamp=timestamp,
        )

        # 1. Loop detection
        guard = self.guard.evaluate(action, list(history or []))
        if not guard.proceed:
            raise LoopDetectedError(guard)

        # 2. Pattern matching
        best = self.matcher.best_match(request_text, self.registry)

        # 3. Execution (simulated)
        artifact_id = f"artifact:{uuid.uuid4().hex}"
        deliverable = f"PRZ Deliverable for: {request_text}\n"
        if best is not None and best.applied:
            deliverable += f"Applied Pattern: {best.pattern.pattern}\n"

        # 4. Validation against the fixed synthetic baseline
        signal, context = self.scorer.baseline(request_text)
        resonance = self.scorer.measure(signal, context)
        tier = tier_for(resonance.score, resonance.threshold)

        logger.info(f"[Pipeline] {artifact_id} score={resonance.score:.3f} tier={tier.value}")

        return PipelineResult(
            deliverable=deliverable,
            resonance=resonance,
            crystallized=should_crystallize(resonance),
            tier=tier,
            artifact_id=artifact_id,
            action=action,
            best_match=best,
        )

    def run_with_feedback(
        self,
        request_text: str,
        feedback: Optional[UserFeedback] = None,
        history: Optional[Iterable[Action]] = None,
        feedback_history: Optional[Iterable[UserFeedback]] = None,
        now_ms: Optional[int] = None,
        action_id: Optional[str] = None,
    ) -> PipelineWithFeedbackResult:
        base = self.run(request_text, history=history, now_ms=now_ms, action_id=action_id)
        result = PipelineWithFeedbackResult(**vars(base))

        if feedback is None:
            return result

        outcome = self.feedback.process(feedback, list(feedback_history or []))
        result.suggested_action = outcome.suggested_action
        if feedback.comment:
            result.improvements = suggested_improvements(feedback.comment)

        if not outcome.accepted:
            result.feedback_reason = outcome.reason
            logger.info(f"[Pipeline] feedback {feedback.id} not applied: {outcome.reason}")
            return result

        threshold = base.resonance.threshold
        adjusted = self.feedback.adjust_resonance(base.resonance.score, feedback)
        result.feedback_accepted = True
        result.adjusted_resonance = adjusted
        result.tier = tier_for(adjusted, threshold)
        result.crystallized = adjusted >= threshold
        result.state_transition = self.feedback.transition_state(feedback, base.resonance.score)
        return result


def run_pipeline(request_text: str, history: Optional[Iterable[Action]] = None) -> PipelineResult:
    return PrzPipeline().run(request_text, history=history)


def run_pipeline_with_feedback(
    request_text: str,
    feedback: Optional[UserFeedback] = None,
    history: Optional[Iterable[Action]] = None,
    feedback_history: Optional[Iterable[UserFeedback]] = None,
) -> PipelineWithFeedbackResult:
    return PrzPipeline().run_with_feedback(
        request_text, feedback=feedback, history=history, feedback_history=feedback_history
    )
