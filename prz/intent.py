"""
Intent matching ("harmonic field").

Scores how well a free-text request matches a known pattern by blending
keyword overlap, cosine alignment of token-frequency vectors and a
length-ratio term.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

import numpy as np

from .config import Config, IntentConfig
from .similarity import cosine_similarity, frequency_vector, jaccard, tokenize

logger = logging.getLogger(__name__)

P = TypeVar("P")

ACTION_VERBS = frozenset(["create", "build", "make", "generate", "develop"])
ANALYSIS_VERBS = frozenset(["analyze", "review", "check", "examine", "study"])
MODIFY_VERBS = frozenset(["update", "change", "modify", "fix", "improve"])


@dataclass(frozen=True)
class PatternMatch(Generic[P]):
    pattern: P
    confidence: float
    threshold: float

    @property
    def applied(self) -> bool:
        return self.confidence >= self.threshold


@dataclass(frozen=True)
class IntentVector:
    magnitude: float
    direction: Tuple[float, float]


def length_ratio_score(a: str, b: str, exponent: float = 0.5) -> float:
    """(shorter / longer) ** exponent over raw character lengths."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return (min(len(a), len(b)) / longest) ** exponent


def harmonic_alignment(tokens_a: List[str], tokens_b: List[str]) -> float:
    return cosine_similarity(frequency_vector(tokens_a), frequency_vector(tokens_b))


class IntentMatcher:
    """Weighted keyword / harmonic / length blend against text patterns."""

    def __init__(self, config: Optional[IntentConfig] = None):
        self.config = config or Config.intent

    def confidence(self, text: str, pattern: str) -> float:
        cfg = self.config
        text = text or ""
        pattern = pattern or ""
        tokens_text = tokenize(text)
        tokens_pattern = tokenize(pattern)

        keyword = jaccard(tokens_text, tokens_pattern)
        harmonic = harmonic_alignment(tokens_text, tokens_pattern)
        magnitude = length_ratio_score(text, pattern, cfg.LENGTH_EXPONENT)

        return (
            keyword * cfg.KEYWORD_WEIGHT
            + harmonic * cfg.HARMONIC_WEIGHT
            + magnitude * cfg.LENGTH_WEIGHT
        )

    def rank(self, text: str, patterns: Iterable[P], key=None) -> List[PatternMatch[P]]:
        """
        Score ``text`` against every pattern, best first.

        ``key`` extracts the pattern text from a registry row; by default rows
        expose a ``pattern`` attribute, and plain strings are used as-is.
        """
        if key is None:
            key = lambda p: p if isinstance(p, str) else p.pattern
        matches = [
            PatternMatch(pattern=p, confidence=self.confidence(text, key(p)),
                         threshold=self.config.ACCEPT_THRESHOLD)
            for p in patterns
        ]
        # Stable sort keeps registry order among ties
        matches.sort(key=lambda m: m.confidence, reverse=True)
        return matches

    def best_match(self, text: str, patterns: Iterable[P], key=None) -> Optional[PatternMatch[P]]:
        ranked = self.rank(text, patterns, key=key)
        if not ranked:
            return None
        best = ranked[0]
        logger.debug(f"Best pattern for '{text}': {best.confidence:.3f} (applied={best.applied})")
        return best


def match_confidence(text: str, pattern: str) -> float:
    return IntentMatcher().confidence(text, pattern)


def intent_to_vector(intent: str) -> IntentVector:
    """
    Encode a request as a magnitude and a 2D direction.

    Magnitude grows with token count (saturating at 10 tokens). The x axis
    collects building/modifying verbs, the y axis analysis verbs; with no
    recognised verb the direction defaults to (1, 0).
    """
    tokens = tokenize(intent)
    magnitude = min(len(tokens) / 10, 1.0)

    direction = np.zeros(2)
    for token in tokens:
        if token in ACTION_VERBS:
            direction[0] += 1.0
        if token in ANALYSIS_VERBS:
            direction[1] += 1.0
        if token in MODIFY_VERBS:
            direction[0] += 0.5

    norm = float(np.linalg.norm(direction))
    if norm > 0:
        direction = direction / norm
    else:
        direction = np.array([1.0, 0.0])

    return IntentVector(magnitude=magnitude, direction=(float(direction[0]), float(direction[1])))
