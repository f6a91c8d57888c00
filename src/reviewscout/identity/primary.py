"""Primary selection for groups of duplicate contributors.

Each member of a duplicate group is scored on how trustworthy its
identifying fields look; the highest score survives the merge.
"""

from reviewscout.identity.normalize import is_noreply_email, is_valid_platform_login
from reviewscout.models.contributor import Contributor

NOREPLY_BONUS = 100
VALID_LOGIN_BONUS = 50
HAS_EMAIL_BONUS = 30
SHORT_LOGIN_BONUS = 20
DIGIT_LOGIN_BONUS = 15
NORMALIZED_PLACEHOLDER_PENALTY = 25

SHORT_LOGIN_MAX = 20


def primary_score(contributor: Contributor) -> int:
    """Score how likely a record is the person's real platform identity.

    Args:
        contributor: Candidate group member

    Returns:
        Integer score; higher is a better primary
    """
    login = contributor.login
    score = 0
    if is_noreply_email(contributor.email):
        score += NOREPLY_BONUS
    if is_valid_platform_login(login):
        score += VALID_LOGIN_BONUS
    if contributor.email:
        score += HAS_EMAIL_BONUS
    if len(login) <= SHORT_LOGIN_MAX:
        score += SHORT_LOGIN_BONUS
    if any(ch.isdigit() for ch in login):
        score += DIGIT_LOGIN_BONUS
    # A login equal to the normalized name was synthesized, not chosen
    if login == contributor.canonical_name:
        score -= NORMALIZED_PLACEHOLDER_PENALTY
    return score


def choose_primary(group: list[Contributor]) -> Contributor:
    """Pick the member that should survive a merge.

    Ties keep first-seen order.

    Raises:
        ValueError: If the group is empty
    """
    if not group:
        msg = "Cannot choose a primary from an empty group"
        raise ValueError(msg)
    # sorted() is stable, so equal scores keep their input order
    return sorted(group, key=primary_score, reverse=True)[0]
