"""
PRZ agent: one session's worth of state around the pipeline.

The agent owns the action, feedback and resonance histories that the
pipeline only reads, annotates each run with an emotional read of the
request, and tracks whether resonance is trending up or down.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import Config, HistoryConfig
from .emotion import EmotionalIntelligence, EmotionalState
from .feedback import ContradictionResult, FeedbackAggregation, UserFeedback
from .guard import Action
from .history import TimeWindowedHistory
from .history import now_ms as _now_ms
from .pipeline import PipelineWithFeedbackResult, PrzPipeline
from .resonance import ResonanceState, state_for

logger = logging.getLogger(__name__)

TREND_UP = "up"
TREND_DOWN = "down"
TREND_FLAT = "flat"


@dataclass
class AgentRunResult(PipelineWithFeedbackResult):
    emotional_state: Optional[EmotionalState] = None
    state: ResonanceState = ResonanceState.VAPOR
    resonance_trend: str = TREND_FLAT
    feedback_summary: Optional[FeedbackAggregation] = None
    pivot_suggested: bool = False
    contradiction: Optional[ContradictionResult] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        contradiction = None
        if self.contradiction is not None:
            contradiction = {
                "has_contradiction": self.contradiction.has_contradiction,
                "pattern": self.contradiction.pattern,
                "alternations": self.contradiction.alternations,
            }
        data.update({
            "emotional_state": self.emotional_state.to_dict() if self.emotional_state else None,
            "state": self.state.value,
            "resonance_trend": self.resonance_trend,
            "feedback_summary": self.feedback_summary.to_dict() if self.feedback_summary else None,
            "pivot_suggested": self.pivot_suggested,
            "contradiction": contradiction,
        })
        return data


class PrzAgent:
    """
    Session wrapper around PrzPipeline.

    A loop rejection propagates as LoopDetectedError and leaves every
    history untouched.
    """

    def __init__(
        self,
        emotional_intelligence: Optional[EmotionalIntelligence] = None,
        config: Optional[HistoryConfig] = None,
        pipeline: Optional[PrzPipeline] = None,
    ):
        self.config = config or Config.history
        self.ei = emotional_intelligence or EmotionalIntelligence()
        self.pipeline = pipeline or PrzPipeline()

        self.actions: TimeWindowedHistory[Action] = TimeWindowedHistory(
            self.config.RETENTION_MS, self.config.MAX_ENTRIES
        )
        self.feedback: TimeWindowedHistory[UserFeedback] = TimeWindowedHistory(
            self.config.RETENTION_MS, self.config.MAX_ENTRIES
        )
        self.resonance = deque(maxlen=self.config.RESONANCE_MAXLEN)

    def run(
        self,
        request_text: str,
        feedback: Optional[UserFeedback] = None,
        previous_interactions: Optional[List[str]] = None,
        action_id: Optional[str] = None,
        now_ms: Optional[int] = None,
    ) -> AgentRunResult:
        timestamp = now_ms if now_ms is not None else _now_ms()

        base = self.pipeline.run_with_feedback(
            request_text,
            feedback=feedback,
            history=self.actions.items(),
            feedback_history=self.feedback.items(),
            now_ms=timestamp,
            action_id=action_id,
        )
        self.actions.append(base.action)

        if feedback is not None and base.feedback_accepted:
            self.feedback.append(feedback)

        emotional_state = self.ei.analyze(request_text, previous_interactions)

        effective = base.effective_resonance
        self.resonance.append(effective)

        feedback_history = self.feedback.items()
        result = AgentRunResult(
            **vars(base),
            emotional_state=emotional_state,
            state=state_for(effective, base.resonance.threshold),
            resonance_trend=self.resonance_trend(),
            feedback_summary=self.pipeline.feedback.aggregate(feedback_history),
            pivot_suggested=self.pipeline.guard.suggest_pivot(self.actions.items()),
            contradiction=self.pipeline.feedback.detect_contradiction(feedback_history, now_ms=timestamp),
        )
        logger.debug(
            f"[Agent] {result.artifact_id} state={result.state.value} "
            f"trend={result.resonance_trend} sentiment={emotional_state.sentiment.value}"
        )
        return result

    def resonance_trend(self) -> str:
        if len(self.resonance) < 2:
            return TREND_FLAT
        delta = self.resonance[-1] - self.resonance[-2]
        if abs(delta) < self.config.TREND_EPSILON:
            return TREND_FLAT
        return TREND_UP if delta > 0 else TREND_DOWN

    def status(self) -> Dict[str, Any]:
        last = self.resonance[-1] if self.resonance else 0.0
        return {
            "feedback": self.pipeline.feedback.aggregate(self.feedback.items()).to_dict(),
            "resonance_history": list(self.resonance),
            "last_state": state_for(last).value,
            "actions": len(self.actions),
        }

    def reset(self):
        self.actions.clear()
        self.feedback.clear()
        self.resonance.clear()


def create_agent(emotional_intelligence: Optional[EmotionalIntelligence] = None) -> PrzAgent:
    return PrzAgent(emotional_intelligence)
