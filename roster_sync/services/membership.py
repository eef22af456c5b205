from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

"""Membership (payor) message classification from a free-text program answer.

Rules are checked in order and the first rule with any keyword contained in
the normalized answer wins. Matching is by substring, so "CARE" also matches
inside longer words; earlier rules take precedence.
"""

__all__ = [
    "DEFAULT_MESSAGE",
    "MembershipRule",
    "MEMBERSHIP_RULES",
    "normalize_response",
    "classify_membership",
]

DEFAULT_MESSAGE = "SELF"

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class MembershipRule:
    keywords: tuple[str, ...]
    message: str


MEMBERSHIP_RULES: tuple[MembershipRule, ...] = (
    MembershipRule(("EOPS",), "EOPS"),
    MembershipRule(("CARE",), "CARE"),
    MembershipRule(("CALWORKS", "CAL WORKS"), "CALWORKS"),
    MembershipRule(("NEXTUP", "NEXT UP", "FOSTER"), "NEXTUP"),
    MembershipRule(("TRIO", "SSS"), "TRIO"),
    MembershipRule(("VETERAN", "VRC"), "VETERANS"),
    MembershipRule(("DSPS", "DISABILITY"), "DSPS"),
)


def normalize_response(text: str) -> str:
    upper = (text or "").upper()
    return _SPACE_RE.sub(" ", _PUNCT_RE.sub("", upper)).strip()


def classify_membership(text: str, rules: Sequence[MembershipRule] = MEMBERSHIP_RULES) -> str:
    """Return the message of the first matching rule, or SELF.

    >>> classify_membership("I am in the EOPS program")
    'EOPS'
    >>> classify_membership("none of the above")
    'SELF'
    """
    normalized = normalize_response(text)
    for rule in rules:
        if any(keyword in normalized for keyword in rule.keywords):
            return rule.message
    return DEFAULT_MESSAGE
