"""
Tests for the echo pattern registry.
"""
import dataclasses

import pytest

from prz.registry import (
    ECHO_REGISTRY,
    CompletionStrategy,
    can_apply_echo,
    find_best_echo,
    get_echo,
)


def test_registry_ids_are_unique():
    ids = [echo.id for echo in ECHO_REGISTRY]
    assert len(ids) == len(set(ids)) == 7


def test_every_strategy_has_phases():
    for strategy in CompletionStrategy:
        assert strategy.phases


def test_validate_strategy_phases():
    assert CompletionStrategy.VALIDATE_AND_CRYSTALLIZE.phases == ("complete", "validate", "crystallize")


def test_get_echo():
    echo = get_echo("security_audit")
    assert echo.resonance_threshold == 0.98
    assert echo.completion_strategy is CompletionStrategy.VALIDATE_AND_CRYSTALLIZE
    assert get_echo("missing") is None


@pytest.mark.parametrize("score,expected", [(0.91, True), (0.95, True), (0.9099, False)])
def test_can_apply_echo(score, expected):
    assert can_apply_echo(get_echo("data_analysis_report"), score) is expected


def test_find_best_echo_is_a_real_lookup():
    best = find_best_echo("Optimize code for better performance")
    assert best.pattern.id == "performance_optimization"
    assert best.applied


def test_to_dict_serializes_strategy():
    data = get_echo("react_component_refactor").to_dict()
    assert data["completion_strategy"] == "zak_decode_then_execute"
    assert data["resonance_threshold"] == 0.95


def test_registry_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        ECHO_REGISTRY[0].id = "changed"
