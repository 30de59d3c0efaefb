"""
Tests for the loop guard.
"""
import pytest

from prz.config import GuardConfig
from prz.guard import (
    LOOP_REASON,
    PIVOT_SUGGESTION,
    Action,
    LoopGuard,
    before_action,
    should_suggest_pivot,
)

MINUTE = 60 * 1000


def request(ts, payload="Analyze data", type="request", id=None):
    return Action(id=id or f"a-{ts}", type=type, payload=payload, timestamp=ts)


class TestEvaluate:
    """Redundancy detection within the trailing window."""

    def test_empty_history_proceeds(self):
        result = before_action(request(0), [])
        assert result.proceed
        assert result.reason is None

    def test_fourth_identical_action_is_denied(self):
        history = [request(0), request(1 * MINUTE), request(2 * MINUTE)]
        result = before_action(request(3 * MINUTE), history)
        assert not result.proceed
        assert result.reason == LOOP_REASON
        assert result.suggested_pivot == PIVOT_SUGGESTION
        assert result.similar_count == 3

    def test_two_similar_is_allowed(self):
        history = [request(0), request(1 * MINUTE)]
        assert before_action(request(2 * MINUTE), history).proceed

    def test_spaced_beyond_window_is_allowed(self):
        history = [request(0), request(6 * MINUTE), request(12 * MINUTE)]
        assert before_action(request(18 * MINUTE), history).proceed

    def test_window_boundary_is_exclusive(self):
        # Entry exactly 5 minutes old is outside the window
        history = [request(0), request(1 * MINUTE), request(2 * MINUTE)]
        assert before_action(request(5 * MINUTE), history).proceed
        assert not before_action(request(5 * MINUTE - 1), history).proceed

    def test_different_type_never_matches(self):
        history = [request(0, type="search"), request(1, type="search"), request(2, type="search")]
        assert before_action(request(3), history).proceed

    def test_dissimilar_payloads_allowed(self):
        history = [
            request(0, "Analyze data"),
            request(1, "Refactor React component"),
            request(2, "Generate API docs"),
        ]
        assert before_action(request(3, "Analyze data"), history).proceed

    def test_near_identical_payloads_count(self):
        # 7 shared words out of 8 is 0.875 > 0.85
        base = "one two three four five six seven"
        history = [request(i, base) for i in range(3)]
        assert not before_action(request(3, base + " eight"), history).proceed

    def test_similarity_must_exceed_threshold(self):
        # 5 of 6 words shared is 0.833
        base = "one two three four five"
        history = [request(i, base) for i in range(3)]
        assert before_action(request(3, base + " six"), history).proceed

    def test_structured_payloads_never_block(self):
        payload = {"query": "Analyze data"}
        history = [request(i, payload) for i in range(5)]
        assert before_action(request(5, payload), history).proceed

    def test_custom_config(self):
        guard = LoopGuard(GuardConfig(MAX_SIMILAR=1))
        assert not guard.evaluate(request(1), [request(0)]).proceed


class TestSuggestPivot:

    def test_needs_five_actions(self):
        assert not should_suggest_pivot([request(i) for i in range(4)])

    def test_five_same_type(self):
        assert should_suggest_pivot([request(i, payload=f"p{i}") for i in range(5)])

    def test_mixed_types_in_last_five(self):
        history = [request(i) for i in range(4)] + [request(4, type="search")]
        assert not should_suggest_pivot(history)

    def test_only_last_five_considered(self):
        history = [request(0, type="search")] + [request(i) for i in range(1, 6)]
        assert should_suggest_pivot(history)

    def test_independent_of_window(self):
        history = [request(i * 60 * MINUTE) for i in range(5)]
        assert should_suggest_pivot(history)
