"""
Approximate title search.

A query matches a title when some substring of the title is within a small
edit distance of the query. The score is

    best_distance / len(query) + start_offset / LOCATION_DISTANCE

where ``start_offset`` is the index in the title where the best-matching
substring begins, so a typo near the start of the title ranks above the
same typo further in. 0 means the query appears verbatim at the start;
anything at or below the threshold is a match.
"""
from typing import List, Sequence, Tuple

from schemas.product_schema import ProductSchema

DEFAULT_THRESHOLD = 0.3
LOCATION_DISTANCE = 100
SCORE_PRECISION = 4


def substring_distance(pattern: str, text: str) -> Tuple[int, int, int]:
    """
    Smallest Levenshtein distance between ``pattern`` and any substring of
    ``text``, with the start and end index of that substring.

    Same dynamic programme as plain Levenshtein, except the first row is all
    zeros (the match may start anywhere) and the answer is the minimum of the
    last row (it may end anywhere). Every cell carries the start index of
    its alignment; among equal distances the earliest start wins.
    """
    if not pattern:
        return 0, 0, 0
    if not text:
        return len(pattern), 0, 0

    # cells are (distance, start)
    previous = [(0, j) for j in range(len(text) + 1)]
    for i in range(1, len(pattern) + 1):
        current = [(i, 0)] + [(0, 0)] * len(text)
        for j in range(1, len(text) + 1):
            cost = 0 if pattern[i - 1] == text[j - 1] else 1
            deletion = (previous[j][0] + 1, previous[j][1])
            insertion = (current[j - 1][0] + 1, current[j - 1][1])
            substitution = (previous[j - 1][0] + cost, previous[j - 1][1])
            current[j] = min(deletion, insertion, substitution)
        previous = current

    best_end = min(range(len(previous)), key=lambda j: (previous[j], j))
    distance, start = previous[best_end]
    return distance, start, best_end


def match_score(query: str, title: str) -> float:
    """Normalized score in [0, inf): 0 identical, >= 1 unrelated."""
    pattern = " ".join(query.lower().split())
    text = " ".join(title.lower().split())
    if not pattern:
        return 0.0

    distance, start, _ = substring_distance(pattern, text)
    score = distance / len(pattern) + start / LOCATION_DISTANCE
    return round(score, SCORE_PRECISION)


class FuzzyMatcher:

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = threshold

    def match(self, candidates: Sequence[ProductSchema], query: str) -> List[ProductSchema]:
        """Candidates whose title matches ``query``, best first; ties keep input order."""
        scored = []
        for position, product in enumerate(candidates):
            score = match_score(query, product.title)
            if score <= self.threshold:
                scored.append((score, position, product))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [product for _, _, product in scored]
