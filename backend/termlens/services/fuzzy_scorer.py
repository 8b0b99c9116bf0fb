"""Fuzzy similarity between a normalized token and a normalized candidate name.

score = min(1, edit_similarity + phonetic_bonus)

edit_similarity is 1 - Levenshtein / max(len), scaled down when one string is
less than half the length of the other. The phonetic bonus applies only when
the edit signal alone is below FUZZY_MEDIUM_CONFIDENCE and either the
Metaphone or the Soundex code of the two strings agree.
"""

from __future__ import annotations

import re
from functools import lru_cache

import jellyfish
from rapidfuzz.distance import Levenshtein

from termlens.infra import config
from termlens.utils.normalizer import strip_apostrophes

# Below this min/max length ratio the similarity is scaled by ratio / floor
LENGTH_RATIO_FLOOR = 0.5

_NON_LETTER_RE = re.compile(r"[^a-z]")


@lru_cache(maxsize=8192)
def phonetic_codes(text: str) -> tuple[str, str]:
    """(metaphone, soundex) of the letters in text; ("", "") if there are none."""
    letters = _NON_LETTER_RE.sub("", text)
    if not letters:
        return "", ""
    return jellyfish.metaphone(letters), jellyfish.soundex(letters)


def edit_similarity(token: str, candidate: str) -> float:
    if token == candidate:
        return 1.0
    longest = max(len(token), len(candidate))
    shortest = min(len(token), len(candidate))
    if shortest == 0:
        return 0.0
    similarity = 1.0 - Levenshtein.distance(token, candidate) / longest
    ratio = shortest / longest
    if ratio < LENGTH_RATIO_FLOOR:
        similarity *= ratio / LENGTH_RATIO_FLOOR
    return max(0.0, similarity)


def phonetic_match(token: str, candidate: str) -> bool:
    token_codes = phonetic_codes(token)
    candidate_codes = phonetic_codes(candidate)
    return any(a and a == b for a, b in zip(token_codes, candidate_codes))


def score(token: str, candidate: str) -> float:
    """Similarity of two normalized strings in [0, 1]. Deterministic."""
    if not token or not candidate:
        return 0.0
    # "tau" must still reach "t'au"
    if "'" not in token:
        candidate = strip_apostrophes(candidate)
    similarity = edit_similarity(token, candidate)
    if similarity >= 1.0:
        return 1.0
    bonus = 0.0
    if similarity < config.FUZZY_MEDIUM_CONFIDENCE and phonetic_match(token, candidate):
        bonus = config.PHONETIC_BONUS
    return min(1.0, similarity + bonus)
