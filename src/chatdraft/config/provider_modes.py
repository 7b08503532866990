"""Provider mode helpers.

This centralizes the "effective provider mode" rules so routes, the CLI and
health checks agree on whether the reply model is real, mocked or disabled.

Rule:
- `reply_provider` is the source of truth ("real" | "fake" | "off")
- `use_fake_providers=True` downgrades "real" to "fake" (but never
  overrides "off")
"""

from __future__ import annotations

from typing import Literal

from chatdraft.config.settings import Settings

ProviderMode = Literal["real", "fake", "off"]


def _coerce_mode(value: object, *, default: ProviderMode) -> ProviderMode:
    """Best-effort normalize provider mode.

    Unknown/invalid values fall back to `default`.
    """
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in {"real", "fake", "off"}:
            return lowered  # type: ignore[return-value]
    return default


def _coerce_bool(value: object, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "y", "on"}:
            return True
        if lowered in {"0", "false", "no", "n", "off"}:
            return False
    return default


def _effective_mode(mode: ProviderMode, *, use_fake_providers: bool) -> ProviderMode:
    if use_fake_providers and mode == "real":
        return "fake"
    return mode


def effective_reply_provider(settings: Settings) -> ProviderMode:
    mode = _coerce_mode(getattr(settings, "reply_provider", "real"), default="real")
    use_fake = _coerce_bool(getattr(settings, "use_fake_providers", False), default=False)
    return _effective_mode(mode, use_fake_providers=use_fake)
