"""
Tests for the similarity helpers.
"""
import numpy as np
import pytest

from prz.similarity import (
    cosine_similarity,
    frequency_vector,
    jaccard,
    text_similarity,
    tokenize,
    word_set,
)


class TestTokenize:
    """Normalization and short-token filtering."""

    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Refactor the React-Component!") == ["refactor", "the", "react", "component"]

    def test_drops_tokens_of_two_chars_or_less(self):
        assert tokenize("a to be or API is it") == ["api"]

    def test_keeps_duplicates(self):
        assert tokenize("data data report") == ["data", "data", "report"]

    def test_empty_and_none(self):
        assert tokenize("") == []
        assert tokenize(None) == []

    def test_min_length_override(self):
        assert tokenize("go to the gym", min_length=2) == ["go", "to", "the", "gym"]

    def test_word_set_is_unfiltered(self):
        assert word_set("Fix a Bug a") == {"fix", "a", "bug"}


class TestJaccard:

    def test_identical(self):
        assert jaccard(["a", "b"], ["b", "a"]) == 1.0

    def test_partial_overlap(self):
        assert jaccard(["a", "b", "c"], ["b", "c", "d"]) == pytest.approx(2 / 4)

    def test_duplicates_collapse(self):
        assert jaccard(["a", "a", "b"], ["a", "b"]) == 1.0

    def test_both_empty_is_zero(self):
        assert jaccard([], []) == 0.0

    def test_symmetric(self):
        a = tokenize("Generate comprehensive API documentation")
        b = tokenize("Generate documentation for the API quickly")
        assert jaccard(a, b) == jaccard(b, a)

    def test_text_similarity_uses_raw_words(self):
        # Short words count here, unlike tokenize()
        assert text_similarity("do it", "do it") == 1.0
        assert text_similarity("do it", "do that") == pytest.approx(1 / 3)


class TestCosine:
    """Dense and sparse cosine similarity."""

    def test_parallel(self):
        assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)

    def test_opposite_is_not_clamped(self):
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_orthogonal(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    def test_zero_magnitude_returns_zero(self):
        assert cosine_similarity([0, 0], [1, 0]) == 0.0
        assert cosine_similarity([], []) == 0.0

    def test_numpy_arrays(self):
        a = np.array([3.0, 4.0])
        b = np.array([6.0, 8.0])
        assert cosine_similarity(a, b) == pytest.approx(1.0)

    def test_uneven_lengths_pad_with_zero(self):
        assert cosine_similarity([1, 0, 0], [1, 0]) == pytest.approx(1.0)

    def test_sparse_frequency_maps(self):
        a = frequency_vector(["data", "data", "report"])
        b = frequency_vector(["data", "report", "report"])
        # (2*1 + 1*2) / (sqrt(5) * sqrt(5))
        assert cosine_similarity(a, b) == pytest.approx(4 / 5)

    def test_sparse_empty(self):
        assert cosine_similarity(frequency_vector([]), frequency_vector(["x"])) == 0.0

    def test_symmetric(self):
        a = frequency_vector(tokenize("analyze data and create report"))
        b = frequency_vector(tokenize("create data report now"))
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
        assert cosine_similarity([0.3, 0.7], [0.9, -0.1]) == pytest.approx(
            cosine_similarity([0.9, -0.1], [0.3, 0.7]))

    def test_mixed_inputs_rejected(self):
        with pytest.raises(TypeError):
            cosine_similarity({"a": 1}, [1, 0])
