"""Draft coordination engine."""

from chatdraft.drafting.cache import CacheEntry, DraftCache
from chatdraft.drafting.coordinator import DraftCoordinator, TranscriptEvent
from chatdraft.drafting.errors import (
    ClientRejection,
    DraftingError,
    ExhaustedRetries,
    UpstreamError,
    UpstreamTimeout,
)
from chatdraft.drafting.fingerprint import conversation_key, fingerprint
from chatdraft.drafting.invoker import InvokeResult, ModelInvoker
from chatdraft.drafting.outcomes import Draft, Error, NeedsUser, Outcome, Stage, Waiting
from chatdraft.drafting.repetition import RepetitionGuard, similarity
from chatdraft.drafting.state import ConversationState, ConversationStore
from chatdraft.drafting.throttle import ConversationThrottle
from chatdraft.drafting.turns import is_assistant_turn

__all__ = [
    "CacheEntry",
    "ClientRejection",
    "ConversationState",
    "ConversationStore",
    "ConversationThrottle",
    "Draft",
    "DraftCache",
    "DraftCoordinator",
    "DraftingError",
    "Error",
    "ExhaustedRetries",
    "InvokeResult",
    "ModelInvoker",
    "NeedsUser",
    "Outcome",
    "RepetitionGuard",
    "Stage",
    "TranscriptEvent",
    "UpstreamError",
    "UpstreamTimeout",
    "Waiting",
    "conversation_key",
    "fingerprint",
    "is_assistant_turn",
    "similarity",
]
