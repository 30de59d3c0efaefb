"""Public package interface for the PRZ agent pipeline."""

from .agent import AgentRunResult, PrzAgent, create_agent
from .errors import InvalidFeedbackError, InvalidResonanceInputError, LoopDetectedError, PrzError
from .feedback import FeedbackAdjuster, FeedbackType, Sentiment, UserFeedback
from .guard import Action, GuardResult, LoopGuard
from .intent import IntentMatcher, PatternMatch
from .pipeline import PipelineResult, PipelineWithFeedbackResult, PrzPipeline, Tier
from .registry import ECHO_REGISTRY, EchoPattern, find_best_echo
from .resonance import ResonanceContext, ResonanceInput, ResonanceResult, ResonanceScorer

__all__ = [
    "AgentRunResult", "PrzAgent", "create_agent",
    "InvalidFeedbackError", "InvalidResonanceInputError", "LoopDetectedError", "PrzError",
    "FeedbackAdjuster", "FeedbackType", "Sentiment", "UserFeedback",
    "Action", "GuardResult", "LoopGuard",
    "IntentMatcher", "PatternMatch",
    "PipelineResult", "PipelineWithFeedbackResult", "PrzPipeline", "Tier",
    "ECHO_REGISTRY", "EchoPattern", "find_best_echo",
    "ResonanceContext", "ResonanceInput", "ResonanceResult", "ResonanceScorer",
]
