"""Keyword-based emotional read of a request."""

from collections import deque
from dataclasses import dataclass
from typing import List, Optional

from .feedback import Sentiment

POSITIVE_KEYWORDS = ("great", "excellent", "good", "happy", "love", "perfect", "awesome", "thanks")
NEGATIVE_KEYWORDS = ("bad", "terrible", "hate", "awful", "error", "fail", "problem", "issue")

_SUGGESTIONS = {
    Sentiment.POSITIVE: "Maintain positive engagement and encourage continued interaction.",
    Sentiment.NEGATIVE: "Approach with empathy and focus on problem-solving.",
    Sentiment.NEUTRAL: "Maintain neutral, informative tone.",
}


@dataclass(frozen=True)
class EmotionalState:
    sentiment: Sentiment
    confidence: float
    intensity: float

    def to_dict(self) -> dict:
        return {
            "sentiment": self.sentiment.value,
            "confidence": round(self.confidence, 4),
            "intensity": round(self.intensity, 4),
        }


class EmotionalIntelligence:
    INTENSITY_SCALE = 3       # keywords needed for full intensity
    BASE_CONFIDENCE = 0.7
    CONFIDENCE_STEP = 0.1     # per keyword of difference
    MAX_CONFIDENCE = 1.0

    def __init__(self, max_history: int = 100):
        self._history = deque(maxlen=max_history)

    def analyze(self, text: str, previous_interactions: Optional[List[str]] = None) -> EmotionalState:
        # Only the current text is scored; previous_interactions does not affect the result
        lower = (text or "").lower()
        positive = sum(1 for k in POSITIVE_KEYWORDS if k in lower)
        negative = sum(1 for k in NEGATIVE_KEYWORDS if k in lower)

        if positive > negative:
            sentiment = Sentiment.POSITIVE
            intensity = min(positive / self.INTENSITY_SCALE, 1.0)
        elif negative > positive:
            sentiment = Sentiment.NEGATIVE
            intensity = min(negative / self.INTENSITY_SCALE, 1.0)
        else:
            sentiment = Sentiment.NEUTRAL
            intensity = 0.5

        confidence = min(
            self.BASE_CONFIDENCE + abs(positive - negative) * self.CONFIDENCE_STEP,
            self.MAX_CONFIDENCE,
        )
        state = EmotionalState(sentiment=sentiment, confidence=confidence, intensity=intensity)
        self._history.append(state)
        return state

    def history(self) -> List[EmotionalState]:
        return list(self._history)

    def clear_history(self):
        self._history.clear()

    @staticmethod
    def suggest_response(state: EmotionalState) -> str:
        return _SUGGESTIONS[state.sentiment]
