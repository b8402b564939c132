"""
Input validators — framework-agnostic, pure functions.

validate_password implements the password strength policy: an ordered
checklist where only the first violated rule is reported.
"""

from __future__ import annotations

from typing import Optional, Tuple

SPECIAL_CHARACTERS = frozenset("$!@#%&^*/\\")

PASSWORD_MIN_LENGTH = 8

MSG_TOO_SHORT = "password must be at least 8 characters long"
MSG_NO_DIGIT = "password must contain at-least one numeric digit"
MSG_NO_LOWERCASE = "password must contain at-least one lowercase alphabet"
MSG_NO_UPPERCASE = "password must contain at-least one uppercase alphabet"
MSG_NO_SPECIAL = "password must contain at-least one special character"


def normalize_email(email: str) -> str:
    """Return *email* trimmed and lowercased, the form used for every lookup."""
    return email.strip().lower()


def validate_password(password: str) -> Tuple[bool, Optional[str]]:
    """Check *password* against the strength policy.

    Rules, in order: at least 8 characters, one digit (0-9), one lowercase
    letter (a-z), one uppercase letter (A-Z), one character from
    ``$ ! @ # % & ^ * / \\``.

    The password is expected to be trimmed already.

    Returns:
        ``(True, None)`` when every rule passes, otherwise
        ``(False, reason)`` for the first rule that fails.
    """
    has_digit = has_lower = has_upper = has_special = False
    for ch in password:
        if "0" <= ch <= "9":
            has_digit = True
        elif "a" <= ch <= "z":
            has_lower = True
        elif "A" <= ch <= "Z":
            has_upper = True
        elif ch in SPECIAL_CHARACTERS:
            has_special = True

    if len(password) < PASSWORD_MIN_LENGTH:
        return False, MSG_TOO_SHORT
    if not has_digit:
        return False, MSG_NO_DIGIT
    if not has_lower:
        return False, MSG_NO_LOWERCASE
    if not has_upper:
        return False, MSG_NO_UPPERCASE
    if not has_special:
        return False, MSG_NO_SPECIAL
    return True, None
