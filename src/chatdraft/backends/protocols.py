"""Protocol interface for the upstream reply model.

Intentionally small: the coordinator only needs ``prompt -> text``, which keeps
app logic testable and independent of vendor SDKs.
"""

from __future__ import annotations

from typing import Protocol


class ReplyBackend(Protocol):
    name: str

    async def generate_reply(self, prompt: str) -> str:
        """Return the model's text.

        Raise ``UpstreamError`` for non-2xx statuses, malformed bodies and
        transport failures; anything else is treated as a bug.
        """
        ...
