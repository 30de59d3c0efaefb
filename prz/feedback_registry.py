"""
Feedback pattern registry.

Common feedback phrasings and the refinement each one calls for, matched by
keyword containment against a free-text comment.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import Config
from .feedback import FeedbackType, Sentiment


@dataclass(frozen=True)
class FeedbackPattern:
    id: str
    pattern: str               # comma-separated keywords
    sentiment: Sentiment
    category: FeedbackType
    improvement_action: str
    resonance_impact: float    # -1 .. 1

    @property
    def keywords(self) -> Tuple[str, ...]:
        return tuple(k.strip() for k in self.pattern.split(","))


@dataclass(frozen=True)
class FeedbackPatternMatch:
    pattern: FeedbackPattern
    confidence: float


FEEDBACK_PATTERNS: Tuple[FeedbackPattern, ...] = (
    # Positive
    FeedbackPattern("fp_perfect_match", "perfect, exactly what I needed, spot on",
                    Sentiment.POSITIVE, FeedbackType.SATISFACTION,
                    "Crystallize immediately. Autonomous tier approved.", 0.10),
    FeedbackPattern("fp_complete_accurate", "complete, accurate, thorough, comprehensive",
                    Sentiment.POSITIVE, FeedbackType.COMPLETENESS,
                    "Maintain pattern. High resonance achieved.", 0.08),
    FeedbackPattern("fp_very_useful", "very useful, helpful, valuable, practical",
                    Sentiment.POSITIVE, FeedbackType.USEFULNESS,
                    "Pattern validated. Continue approach.", 0.07),
    # Negative: accuracy
    FeedbackPattern("fn_incorrect", "wrong, incorrect, inaccurate, mistake, error",
                    Sentiment.NEGATIVE, FeedbackType.ACCURACY,
                    "Review accuracy. Return to vapor for correction.", -0.15),
    FeedbackPattern("fn_not_precise", "not precise, vague, unclear, ambiguous",
                    Sentiment.NEGATIVE, FeedbackType.ACCURACY,
                    "Add specificity and clarity. Refine details.", -0.10),
    # Negative: completeness
    FeedbackPattern("fn_incomplete", "incomplete, missing, partial, not finished",
                    Sentiment.NEGATIVE, FeedbackType.COMPLETENESS,
                    "Complete missing sections. Return to vapor.", -0.12),
    FeedbackPattern("fn_lacking", "lacking, insufficient, needs more, too short",
                    Sentiment.NEGATIVE, FeedbackType.COMPLETENESS,
                    "Expand content. Add more comprehensive coverage.", -0.08),
    # Negative: usefulness
    FeedbackPattern("fn_not_helpful", "not helpful, useless, not useful, doesn't help",
                    Sentiment.NEGATIVE, FeedbackType.USEFULNESS,
                    "Reassess user intent. May need pivot.", -0.12),
    FeedbackPattern("fn_not_relevant", "not relevant, off-topic, not what I asked, misunderstood",
                    Sentiment.NEGATIVE, FeedbackType.USEFULNESS,
                    "Re-analyze user intent. Major pivot needed.", -0.20),
    # Neutral
    FeedbackPattern("fn_okay", "okay, fine, acceptable, decent, adequate",
                    Sentiment.NEUTRAL, FeedbackType.SATISFACTION,
                    "Meets baseline. Consider minor enhancements.", 0.02),
    FeedbackPattern("fn_partial", "partially correct, some good parts, mixed",
                    Sentiment.NEUTRAL, FeedbackType.ACCURACY,
                    "Identify and fix incorrect portions.", -0.03),
)


def match_feedback_patterns(feedback_text: str) -> List[FeedbackPatternMatch]:
    """Patterns with at least one keyword present, best confidence first."""
    lower_text = (feedback_text or "").lower()
    matches = []
    for pattern in FEEDBACK_PATTERNS:
        keywords = pattern.keywords
        # Keywords are compared lowercased ("I" in "exactly what I needed")
        found = sum(1 for k in keywords if k.lower() in lower_text)
        if found:
            matches.append(FeedbackPatternMatch(pattern, found / len(keywords)))
    matches.sort(key=lambda m: m.confidence, reverse=True)
    return matches


def best_feedback_pattern(feedback_text: str, min_confidence: Optional[float] = None) -> Optional[FeedbackPattern]:
    if min_confidence is None:
        min_confidence = Config.feedback.PATTERN_MIN_CONFIDENCE
    matches = match_feedback_patterns(feedback_text)
    if not matches or matches[0].confidence < min_confidence:
        return None
    return matches[0].pattern


def suggested_improvements(feedback_text: str, min_confidence: Optional[float] = None) -> List[str]:
    if min_confidence is None:
        min_confidence = Config.feedback.PATTERN_MIN_CONFIDENCE
    return [
        m.pattern.improvement_action
        for m in match_feedback_patterns(feedback_text)
        if m.confidence >= min_confidence
    ]


def feedback_impact(feedback_text: str) -> float:
    """Confidence-weighted mean resonance impact of all matching patterns."""
    matches = match_feedback_patterns(feedback_text)
    total_confidence = sum(m.confidence for m in matches)
    if total_confidence <= 0:
        return 0.0
    return sum(m.pattern.resonance_impact * m.confidence for m in matches) / total_confidence
