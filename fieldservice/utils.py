"""Shared utilities used across the booking store."""

import random
import re
import string

_ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 8


def new_id(prefix: str = "id") -> str:
    """Generate an opaque identifier such as ``bk_k3j9x0qa``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=ID_LENGTH))
    return f"{prefix}_{suffix}"


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("98710 00001")
        '9871000001'
        >>> normalize_phone("+91 (987) 100-0001")
        '+919871000001'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def parse_skills(raw: str) -> list[str]:
    """Split a comma-separated skills string into trimmed, unique entries.

    Empty entries are dropped and first-seen order is kept.

        >>> parse_skills("Split AC, , Window AC,Split AC")
        ['Split AC', 'Window AC']
    """
    skills: list[str] = []
    for part in raw.split(","):
        skill = part.strip()
        if skill and skill not in skills:
            skills.append(skill)
    return skills
