"""
LOINC Identifier Types

Validated value types for a LOINC code and its measurement scale.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from lab2hpo.utils import MalformedLoincCodeError, UnrecognizedScaleError

_LOINC_PATTERN = re.compile(r"^\d+-\d$")


@dataclass(frozen=True, order=True)
class LoincId:
    """
    A LOINC code such as ``2823-3``: digits, a hyphen, one check digit.

    Equality, hashing and ordering are by the normalized string.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise MalformedLoincCodeError(repr(self.value))
        normalized = self.value.strip()
        if not _LOINC_PATTERN.match(normalized):
            raise MalformedLoincCodeError(self.value)
        object.__setattr__(self, "value", normalized)

    def has_valid_check_digit(self) -> bool:
        """
        Verify the LOINC mod-10 check digit.

        Digits are read right to left; every other digit starting with the
        rightmost is doubled, the digit sums are added, and the check digit
        brings the total up to the next multiple of ten.
        """
        body, check = self.value.split("-")
        total = 0
        for position, char in enumerate(reversed(body)):
            digit = int(char)
            if position % 2 == 0:
                digit *= 2
                if digit > 9:
                    digit -= 9
            total += digit
        return (10 - total % 10) % 10 == int(check)

    def __str__(self) -> str:
        return self.value


class LoincScale(str, Enum):
    """
    LOINC scale type: how result values for a code are interpreted.

    Qn    – quantitative
    Ord   – ordinal (e.g. pos/neg, 1+ .. 4+)
    OrdQn – ordinal or quantitative
    Nom   – nominal
    Nar   – narrative text
    Multi – multiple answers
    Doc   – document
    Set   – panel / set
    """
    QN    = "Qn"
    ORD   = "Ord"
    ORDQN = "OrdQn"
    NOM   = "Nom"
    NAR   = "Nar"
    MULTI = "Multi"
    DOC   = "Doc"
    SET   = "Set"

    @classmethod
    def parse(cls, text: str) -> "LoincScale":
        """Case-insensitive lookup by scale code."""
        key = (text or "").strip().lower()
        for scale in cls:
            if scale.value.lower() == key:
                return scale
        raise UnrecognizedScaleError(text)
