"""Pattern-based checks that keep secrets out of drafts and prompts."""

from chatdraft.safety.sensitivity import SENSITIVE_PATTERNS, looks_sensitive, sensitive_category

__all__ = ["SENSITIVE_PATTERNS", "looks_sensitive", "sensitive_category"]
