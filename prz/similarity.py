"""
prz.similarity
==============

Pure similarity helpers shared by the intent matcher, the loop guard and the
resonance scorer.

- tokenize          : normalized word tokens (short tokens dropped)
- word_set          : raw lowercase word set, used for payload comparison
- jaccard           : set overlap of two token collections
- frequency_vector  : token -> count mapping (a sparse vector)
- cosine_similarity : cosine over dense numeric vectors or sparse mappings
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, List, Mapping, Optional, Sequence, Set, Union

import numpy as np

from .config import Config

_NON_WORD = re.compile(r"[^\w\s]")

VectorLike = Union[Sequence[float], np.ndarray, Mapping[str, float]]


def tokenize(text: str, min_length: Optional[int] = None) -> List[str]:
    """
    Split text into normalized tokens.

    Lowercases, replaces non-word characters with spaces, splits on
    whitespace and drops tokens shorter than ``min_length`` (3 by default,
    i.e. tokens of length <= 2 are discarded).

    Parameters
    ----------
    text : str
        Raw text. ``None`` and empty strings yield an empty list.
    min_length : int, optional
        Overrides ``Config.similarity.MIN_TOKEN_LENGTH``.

    Returns
    -------
    list[str]
        Tokens in order of appearance, duplicates preserved.
    """
    if not text:
        return []
    if min_length is None:
        min_length = Config.similarity.MIN_TOKEN_LENGTH
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [t for t in cleaned.split() if len(t) >= min_length]


def word_set(text: str) -> Set[str]:
    """Lowercase whitespace-split words, no filtering."""
    if not text:
        return set()
    return set(text.lower().split())


def jaccard(tokens_a: Iterable[str], tokens_b: Iterable[str]) -> float:
    """
    Jaccard index ``|A & B| / |A | B|`` over token sets.

    Duplicates are collapsed. Returns 0.0 when both sets are empty.
    """
    set_a = set(tokens_a)
    set_b = set(tokens_b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def text_similarity(a: str, b: str) -> float:
    """Jaccard of the raw word sets of two strings."""
    return jaccard(word_set(a), word_set(b))


def frequency_vector(tokens: Iterable[str]) -> Counter:
    """Token frequency map, treated as a sparse vector keyed by token."""
    return Counter(tokens)


def _sparse_cosine(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    dot = 0.0
    for key in set(a) | set(b):
        dot += a.get(key, 0) * b.get(key, 0)
    mag_a = float(np.sqrt(sum(v * v for v in a.values())))
    mag_b = float(np.sqrt(sum(v * v for v in b.values())))
    magnitude = mag_a * mag_b
    if magnitude <= 0:
        return 0.0
    return dot / magnitude


def _dense_cosine(a: Sequence[float], b: Sequence[float]) -> float:
    va = np.asarray(a, dtype=float).ravel()
    vb = np.asarray(b, dtype=float).ravel()
    # Missing trailing components count as zero
    size = max(va.size, vb.size)
    if va.size < size:
        va = np.pad(va, (0, size - va.size))
    if vb.size < size:
        vb = np.pad(vb, (0, size - vb.size))

    na = float(np.linalg.norm(va))
    nb = float(np.linalg.norm(vb))
    if na == 0.0 or nb == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (na * nb))


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity ``a.b / (|a| |b|)``.

    Works over dense numeric vectors (lists, tuples, arrays) and over
    token-frequency mappings. Returns 0.0 when either magnitude is zero.
    The result is not clamped, so opposite vectors score -1.0.
    """
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            raise TypeError("cosine_similarity needs two mappings or two numeric vectors")
        return _sparse_cosine(a, b)
    return _dense_cosine(a, b)
