"""
Token-overlap name matching used to reconcile an extracted person with the
candidates returned by an enrichment provider.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

MATCH_THRESHOLD = 0.7


def _tokens(name: Optional[str]) -> List[str]:
    return [t for t in (name or "").lower().split() if t]


def name_similarity(name_a: Optional[str], name_b: Optional[str]) -> float:
    """Share of tokens in common (equal or substring either way), in [0, 1]."""
    words_a = _tokens(name_a)
    words_b = _tokens(name_b)
    if not words_a or not words_b:
        return 0.0
    matches = 0
    for wa in words_a:
        for wb in words_b:
            if wa == wb or wb in wa or wa in wb:
                matches += 1
                break
    return matches / max(len(words_a), len(words_b))


def candidate_name(candidate: Mapping[str, Any]) -> str:
    first = candidate.get("first_name") or ""
    last = candidate.get("last_name") or ""
    return f"{first} {last}".strip()


def find_best_match(target_name: Optional[str], candidates: Iterable[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Best-scoring candidate by name, or None unless it scores above MATCH_THRESHOLD.

    Ties keep the first candidate seen.
    """
    if not target_name:
        return None
    best = None
    best_score = 0.0
    for cand in candidates or []:
        name = candidate_name(cand)
        if not name:
            continue
        score = name_similarity(target_name, name)
        if score > best_score and score > MATCH_THRESHOLD:
            best_score = score
            best = cand
    return best
