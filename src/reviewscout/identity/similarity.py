"""String and record similarity primitives.

Edit distance comes from RapidFuzz's Levenshtein implementation (unit
cost insert/delete/substitute). Case folding is left to the caller for
the raw primitives; ``cross_field_similarity`` folds case itself.
"""

from rapidfuzz.distance import Levenshtein

from reviewscout.models.contributor import Contributor


def edit_distance(a: str, b: str) -> int:
    """Classic single-character edit distance between two strings."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1].

    ``1 - edit_distance / max(len(a), len(b))``; two empty strings are
    identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - edit_distance(a, b) / longest


def cross_field_similarity(c1: Contributor, c2: Contributor) -> float:
    """Best similarity between any pair of identifying fields.

    An exact case-insensitive email match short-circuits to 1.0.
    Otherwise the maximum of login/login, name/name, login/name and
    name/login similarity is returned, so two records are similar when
    any one pairing resembles strongly.
    """
    if c1.email and c2.email and c1.email.lower() == c2.email.lower():
        return 1.0

    login1, login2 = c1.login.lower(), c2.login.lower()
    name1, name2 = c1.canonical_name.lower(), c2.canonical_name.lower()

    pairs = [
        (login1, login2),
        (name1, name2),
        (login1, name2),
        (name1, login2),
    ]
    # Blank fields carry no evidence
    scores = [similarity(a, b) for a, b in pairs if a and b]
    return max(scores, default=0.0)
