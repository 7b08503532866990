"""API route modules."""

from chatdraft.api.routes import analyze, health, intake, metrics

__all__ = ["analyze", "health", "intake", "metrics"]
