"""Sensitive-request detection.

Two call sites use these checks:

1. The last transcript line, to notice the counterparty asking for a secret
   (the human has to answer that one manually).
2. The user's free-text context, so secrets never reach a prompt.

This is a speed bump, not redaction. Patterns are word-bounded so ordinary
words such as "passport" or "spin" do not trip them; false negatives are
accepted.
"""

from __future__ import annotations

import re

__all__ = ["SENSITIVE_PATTERNS", "looks_sensitive", "sensitive_category"]

SENSITIVE_PATTERNS: dict[str, re.Pattern[str]] = {
    "one_time_code": re.compile(r"\botp\b|\bone[- ]time\b|verification code|\b2fa\b", re.I),
    "password": re.compile(r"\bpassword|\bpasscode|\bpin\b", re.I),
    "ssn": re.compile(r"\bssn\b|social security", re.I),
    "last_four": re.compile(r"\blast\s*4\b|\blast four\b", re.I),
    "card_security_code": re.compile(r"\bcvv\b|\bcvc\b|security code", re.I),
    "bank_details": re.compile(r"routing number|bank account", re.I),
}


def sensitive_category(text: str | None) -> str | None:
    """Return the first matching category name, or None."""
    if not text:
        return None
    for category, pattern in SENSITIVE_PATTERNS.items():
        if pattern.search(text):
            return category
    return None


def looks_sensitive(text: str | None) -> bool:
    return sensitive_category(text) is not None
