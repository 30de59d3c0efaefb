"""
ZAK echo registry: a static library of request patterns applied to
standard tasks. Loaded once at import, never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .intent import IntentMatcher, PatternMatch


class CompletionStrategy(Enum):
    DECODE_THEN_EXECUTE = "zak_decode_then_execute"
    COMPLETE_100_PERCENT = "zak_complete_100_percent"
    VALIDATE_AND_CRYSTALLIZE = "zak_validate_and_crystallize"

    @property
    def phases(self) -> Tuple[str, ...]:
        return _STRATEGY_PHASES[self]


# Every strategy must have an entry; checked at import below.
_STRATEGY_PHASES = {
    CompletionStrategy.DECODE_THEN_EXECUTE: ("decode", "execute"),
    CompletionStrategy.COMPLETE_100_PERCENT: ("complete", "deliver"),
    CompletionStrategy.VALIDATE_AND_CRYSTALLIZE: ("complete", "validate", "crystallize"),
}
_missing = set(CompletionStrategy) - set(_STRATEGY_PHASES)
if _missing:
    raise RuntimeError(f"Completion strategies without phases: {sorted(s.name for s in _missing)}")


@dataclass(frozen=True)
class EchoPattern:
    id: str
    pattern: str
    description: str
    resonance_threshold: float
    completion_strategy: CompletionStrategy

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pattern": self.pattern,
            "description": self.description,
            "resonance_threshold": self.resonance_threshold,
            "completion_strategy": self.completion_strategy.value,
        }


ECHO_REGISTRY: Tuple[EchoPattern, ...] = (
    EchoPattern(
        id="react_component_refactor",
        pattern="Refactor React component with improved structure",
        description="Restructures React components following best practices",
        resonance_threshold=0.95,
        completion_strategy=CompletionStrategy.DECODE_THEN_EXECUTE,
    ),
    EchoPattern(
        id="api_documentation",
        pattern="Generate comprehensive API documentation",
        description="Creates complete API documentation with examples",
        resonance_threshold=0.92,
        completion_strategy=CompletionStrategy.COMPLETE_100_PERCENT,
    ),
    EchoPattern(
        id="security_audit",
        pattern="Perform security audit and identify vulnerabilities",
        description="Analyzes code for security issues and suggests fixes",
        resonance_threshold=0.98,
        completion_strategy=CompletionStrategy.VALIDATE_AND_CRYSTALLIZE,
    ),
    EchoPattern(
        id="test_suite_generation",
        pattern="Create test suite for existing code",
        description="Generates comprehensive test coverage",
        resonance_threshold=0.93,
        completion_strategy=CompletionStrategy.COMPLETE_100_PERCENT,
    ),
    EchoPattern(
        id="performance_optimization",
        pattern="Optimize code for better performance",
        description="Identifies and fixes performance bottlenecks",
        resonance_threshold=0.94,
        completion_strategy=CompletionStrategy.DECODE_THEN_EXECUTE,
    ),
    EchoPattern(
        id="data_analysis_report",
        pattern="Analyze data and create comprehensive report",
        description="Performs data analysis and generates insights",
        resonance_threshold=0.91,
        completion_strategy=CompletionStrategy.COMPLETE_100_PERCENT,
    ),
    EchoPattern(
        id="developer_outreach",
        pattern="Find and engage developers who resonate with project vision",
        description="High-resonance developer discovery",
        resonance_threshold=0.96,
        completion_strategy=CompletionStrategy.COMPLETE_100_PERCENT,
    ),
)


def get_echo(echo_id: str) -> Optional[EchoPattern]:
    for echo in ECHO_REGISTRY:
        if echo.id == echo_id:
            return echo
    return None


def can_apply_echo(echo: EchoPattern, resonance_score: float) -> bool:
    return resonance_score >= echo.resonance_threshold


def find_best_echo(request: str, matcher: Optional[IntentMatcher] = None) -> Optional[PatternMatch[EchoPattern]]:
    """Highest-confidence registry row for a request, applied or not."""
    matcher = matcher or IntentMatcher()
    return matcher.best_match(request, ECHO_REGISTRY)
