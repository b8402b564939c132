"""
Random code generators — pure, side-effect-free functions.

All generators use the cryptographically secure ``secrets`` module.
"""

from __future__ import annotations

import secrets

OTP_MIN = 100_000
OTP_MAX = 999_999


def generate_otp_code() -> int:
    """Generate a cryptographically secure 6-digit OTP.

    Returns:
        Integer drawn uniformly from [100000, 999999].
    """
    return OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1)
