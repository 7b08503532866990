"""Rate limit helpers."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address


def key_namespace_or_ip(request: Request) -> str:
    """Extract rate limit key: X-Rate-Limit-Namespace > client IP."""
    namespace = request.headers.get("X-Rate-Limit-Namespace")
    if namespace:
        return f"ns:{namespace}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=key_namespace_or_ip)
