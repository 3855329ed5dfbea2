"""Shape checks for user-entered form fields."""

from __future__ import annotations

import re
from typing import List, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SSN_LAST_FOUR_PATTERN = re.compile(r"^\d{4}$")
PASSWORD_SPECIAL_PATTERN = re.compile(r"[!@#$%^&*()+\-=\[\]{};':\"\\|,.<>/?]")

MIN_PASSWORD_LENGTH = 6
MIN_AGE = 1
MAX_AGE = 150


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: Optional[str]) -> bool:
    if not isinstance(email, str):
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def password_problems(password: Optional[str]) -> List[str]:
    """Return the unmet password rules, phrased to follow "Password must have: "."""
    pwd = password if isinstance(password, str) else ""
    problems: List[str] = []

    if len(pwd) < MIN_PASSWORD_LENGTH:
        problems.append(f"at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r"[A-Z]", pwd):
        problems.append("one uppercase letter")
    if not re.search(r"[a-z]", pwd):
        problems.append("one lowercase letter")
    if not PASSWORD_SPECIAL_PATTERN.search(pwd):
        problems.append("one special character")
    if re.search(r"[\s_]", pwd):
        problems.append("no spaces or underscores")

    return problems


def parse_age(value) -> Optional[int]:
    """Return ``value`` as an age in years, or ``None`` when it is not a plausible one."""
    try:
        age = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    if age < MIN_AGE or age > MAX_AGE:
        return None
    return age


def is_valid_ssn_last_four(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    return bool(SSN_LAST_FOUR_PATTERN.match(value.strip()))


def is_valid_phone(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    digits = re.sub(r"\D", "", value)
    return 10 <= len(digits) <= 15
