"""Per-conversation cooldown gate."""

from __future__ import annotations

from chatdraft.drafting.state import ConversationState


class ConversationThrottle:
    """Absorb bursts of transcript events into a single attempt.

    Dropped events are not errors: a later event is assumed to supersede them.
    With ``extend_on_reject`` (the default) every call refreshes
    ``last_attempt_at``, so a continuous burst keeps being absorbed until the
    conversation has been quiet for one cooldown. Without it, only calls that
    pass move the window.
    """

    def __init__(self, cooldown: float = 3.0, *, extend_on_reject: bool = True):
        self.cooldown = cooldown
        self.extend_on_reject = extend_on_reject

    def should_throttle(self, state: ConversationState, now: float) -> bool:
        last = state.last_attempt_at
        throttled = last is not None and (now - last) < self.cooldown
        if not throttled or self.extend_on_reject:
            state.last_attempt_at = now
        return throttled
