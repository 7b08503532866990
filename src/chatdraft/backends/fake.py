"""Deterministic in-process backend for local development and tests."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

MOCK_DRAFT = "MOCK: This is a short, plain English test reply."

# Few shared words, so the repetition guard lets each one through.
MOCK_REPLIES = (
    MOCK_DRAFT,
    "MOCK: Could we check whether an exchange works instead?",
    "MOCK: Please confirm the order number before continuing.",
    "MOCK: What happens if that option isn't available?",
    "MOCK: Let me pause here and review other choices.",
    "MOCK: Would store credit be acceptable as a backup?",
    "MOCK: Can a manager look into this request?",
    "MOCK: Thanks, I'd like to think about it first.",
    "MOCK: How long does processing usually take?",
    "MOCK: Is free return shipping included?",
    "MOCK: Great, that sounds fine to me.",
    "MOCK: Sorry, could you repeat that last part?",
)


@dataclass
class FakeBackend:
    """Returns scripted responses in order, then ``default``.

    A scripted item that is an exception instance is raised instead of
    returned. Every prompt is kept in ``prompts`` for assertions. With
    ``rotation`` set, unscripted calls cycle through it instead of repeating
    ``default``.
    """

    default: str = MOCK_DRAFT
    script: deque[str | BaseException] = field(default_factory=deque)
    prompts: list[str] = field(default_factory=list)
    rotation: tuple[str, ...] = ()
    name: str = "fake"
    _served: int = field(default=0, repr=False)

    @classmethod
    def scripted(cls, responses: Iterable[str | BaseException], default: str = MOCK_DRAFT) -> "FakeBackend":
        return cls(default=default, script=deque(responses))

    @classmethod
    def mock(cls) -> "FakeBackend":
        """The backend behind ``REPLY_PROVIDER=fake``: always a fresh draft."""
        return cls(rotation=MOCK_REPLIES)

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate_reply(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.script:
            item = self.script.popleft()
            if isinstance(item, BaseException):
                raise item
            return item
        if not self.rotation:
            return self.default
        reply = self.rotation[self._served % len(self.rotation)]
        self._served += 1
        return reply
