"""
Score normalization and weighted fusion of the lexical and semantic signals.

Each signal is normalized on its own:
    norm(s_i) = max(s_i, 0) / max(max_j s_j, floor)      (all zeros if divisor is 0)

and the two are blended:
    hybrid_i = semantic_i × embedding_weight + keyword_i × keyword_weight

With the default floor = 1 scores are only ever scaled down: raw scores below
1 (cosine similarity, BM25 over a handful of names) pass through unchanged,
so a weak signal stays weak. floor = 0 stretches the best candidate of each
signal to exactly 1.0.
"""

from dataclasses import dataclass
from typing import List, Sequence


def normalize_scores(scores: Sequence[float], floor: float = 1.0) -> List[float]:
    """
    Scale scores into [0, 1] by dividing by the largest one (or floor, if larger).

    Args:
        scores: Raw scores (BM25 or cosine similarity)
        floor: Lower bound of the divisor

    Returns:
        Normalized scores; all zeros when no score is positive

    Examples:
        >>> normalize_scores([2.0, 1.0, 0.0])
        [1.0, 0.5, 0.0]
        >>> normalize_scores([0.5, 0.25])
        [0.5, 0.25]
        >>> normalize_scores([0.5, 0.25], floor=0.0)
        [1.0, 0.5]
        >>> normalize_scores([0.0, 0.0])
        [0.0, 0.0]
    """
    if not scores:
        return []

    clamped = [max(float(s), 0.0) for s in scores]
    divisor = max(max(clamped), floor)
    if divisor <= 0:
        return [0.0] * len(clamped)
    return [min(s / divisor, 1.0) for s in clamped]


def weighted_fusion(
    semantic: Sequence[float],
    keyword: Sequence[float],
    embedding_weight: float,
    keyword_weight: float,
) -> List[float]:
    """
    Blend two normalized score vectors aligned to the same candidates.

    Raises:
        ValueError: vectors have different lengths
    """
    if len(semantic) != len(keyword):
        raise ValueError(f"Score vectors differ in length: {len(semantic)} != {len(keyword)}")
    return [s * embedding_weight + k * keyword_weight for s, k in zip(semantic, keyword)]


@dataclass(frozen=True)
class RankedCandidate:
    """One ranked candidate; unpacks as (name, score)"""
    name: str
    score: float  # Fused hybrid score
    index: int  # Position in the sanitized candidate list
    keyword_score: float = 0.0  # Normalized BM25 score
    semantic_score: float = 0.0  # Normalized cosine similarity

    def __iter__(self):
        yield self.name
        yield self.score


def rank_top_k(
    names: Sequence[str],
    scores: Sequence[float],
    top_k: int,
    keyword_scores: Sequence[float] = (),
    semantic_scores: Sequence[float] = (),
) -> List[RankedCandidate]:
    """
    Sort candidates by score (descending, ties keep input order) and keep top_k.
    """
    ranked = [
        RankedCandidate(
            name=name,
            score=score,
            index=i,
            keyword_score=keyword_scores[i] if keyword_scores else 0.0,
            semantic_score=semantic_scores[i] if semantic_scores else 0.0,
        )
        for i, (name, score) in enumerate(zip(names, scores))
    ]
    # sorted() is stable
    ranked = sorted(ranked, key=lambda item: item.score, reverse=True)
    return ranked[:top_k]
