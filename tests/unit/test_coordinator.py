"""Unit tests for the draft coordinator pipeline."""

from __future__ import annotations

import asyncio

import pytest

from chatdraft.backends.fake import MOCK_DRAFT, FakeBackend
from chatdraft.config import Settings
from chatdraft.drafting import DraftCoordinator, TranscriptEvent
from chatdraft.drafting.coordinator import QUOTA_MESSAGE, SENSITIVE_CONTEXT_MESSAGE
from chatdraft.drafting.errors import UpstreamError
from chatdraft.drafting.fingerprint import fingerprint
from chatdraft.drafting.outcomes import Draft, Error, ErrorKind, NeedsUser, Stage, Waiting


@pytest.fixture
def make_coordinator(clock, recording_sleep):
    def _make(backend=None, **overrides) -> DraftCoordinator:
        settings = Settings(**overrides)
        return DraftCoordinator.from_settings(
            settings,
            backend,
            disabled_reason=None if backend is not None else "Reply provider is disabled (REPLY_PROVIDER=off).",
            clock=clock,
            sleep=recording_sleep,
        )

    return _make


def _event(transcript: str, conversation_id: str = "c1", user_context: str = "") -> TranscriptEvent:
    return TranscriptEvent(
        conversation_id=conversation_id,
        transcript=transcript,
        user_context=user_context,
        provider="generic",
    )


@pytest.mark.anyio
async def test_agent_turn_produces_draft(make_coordinator, agent_transcript) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)

    outcome = await coordinator.handle(_event(agent_transcript, user_context="returning shoes"))

    assert outcome == Draft(MOCK_DRAFT)
    assert outcome.to_payload() == {"action": "DRAFT", "draft": MOCK_DRAFT}
    assert backend.calls == 1
    assert "returning shoes" in backend.prompts[0]
    assert "Rep: Sure, can I have the order number?" in backend.prompts[0]


@pytest.mark.anyio
async def test_user_turn_waits_without_calling_model(make_coordinator) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)

    outcome = await coordinator.handle(_event("Rep: Hi\nMe: Hello?"))

    assert outcome == Waiting(stage=Stage.TURN_GATE)
    assert outcome.to_payload() == {"action": "WAITING"}
    assert backend.calls == 0


@pytest.mark.anyio
async def test_sensitive_request_needs_user_regardless_of_throttle(
    make_coordinator, agent_transcript
) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)
    await coordinator.handle(_event(agent_transcript))

    # Same instant: the throttle would absorb anything else.
    transcript = agent_transcript + "\nRep: Please read me the OTP we just sent."
    outcome = await coordinator.handle(_event(transcript))

    assert isinstance(outcome, NeedsUser)
    assert outcome.to_payload() == {
        "action": "NEEDS_USER",
        "question": 'Sensitive info requested: "Rep: Please read me the OTP we just sent.". Please reply manually.',
    }
    assert backend.calls == 1


@pytest.mark.anyio
async def test_burst_is_throttled(make_coordinator, agent_transcript, clock) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)
    await coordinator.handle(_event(agent_transcript))

    clock.advance(1)
    outcome = await coordinator.handle(_event(agent_transcript + "\nRep: Are you there?"))

    assert outcome == Waiting(stage=Stage.THROTTLED)
    assert backend.calls == 1

    clock.advance(3)
    outcome = await coordinator.handle(_event(agent_transcript + "\nRep: Are you there?"))
    assert isinstance(outcome, Draft)
    assert backend.calls == 2


@pytest.mark.anyio
async def test_identical_input_across_conversations_hits_cache(
    make_coordinator, agent_transcript, clock
) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)

    first = await coordinator.handle(_event(agent_transcript, "tab-a", "returning shoes"))
    clock.advance(1)
    second = await coordinator.handle(_event(agent_transcript, "tab-b", "returning shoes"))

    assert isinstance(first, Draft)
    assert second == Draft(first.text, stage=Stage.CACHE_HIT)
    assert backend.calls == 1


@pytest.mark.anyio
async def test_cache_entry_expires(make_coordinator, agent_transcript, clock) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)
    await coordinator.handle(_event(agent_transcript, "tab-a"))

    clock.advance(61)
    outcome = await coordinator.handle(_event(agent_transcript, "tab-b"))

    assert outcome.stage is Stage.GENERATED
    assert backend.calls == 2


@pytest.mark.anyio
async def test_unchanged_transcript_does_not_retrigger(make_coordinator, agent_transcript, clock) -> None:
    backend = FakeBackend.scripted(["(waiting)"])
    coordinator = make_coordinator(backend)

    first = await coordinator.handle(_event(agent_transcript))
    clock.advance(4)
    second = await coordinator.handle(_event(agent_transcript))

    assert first == Waiting(stage=Stage.MODEL_WAITING)
    assert second == Waiting(stage=Stage.UNCHANGED)
    assert backend.calls == 1
    assert coordinator.cache.get(fingerprint(agent_transcript, "")) is None


@pytest.mark.anyio
async def test_sensitive_user_context_is_rejected(make_coordinator, agent_transcript) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)

    outcome = await coordinator.handle(
        _event(agent_transcript, user_context="my password is hunter2")
    )

    assert isinstance(outcome, Error)
    assert outcome.kind is ErrorKind.CLIENT_REJECTION
    assert outcome.status_code == 400
    assert outcome.to_payload() == {"action": "ERROR", "error": SENSITIVE_CONTEXT_MESSAGE}
    assert backend.calls == 0


@pytest.mark.anyio
async def test_disabled_provider_reports_reason(make_coordinator, agent_transcript) -> None:
    coordinator = make_coordinator(None)

    outcome = await coordinator.handle(_event(agent_transcript))

    assert isinstance(outcome, Error)
    assert outcome.stage is Stage.PROVIDER_DISABLED
    assert outcome.status_code == 500
    assert "REPLY_PROVIDER=off" in outcome.detail


@pytest.mark.anyio
async def test_upstream_failure_is_error_and_can_be_retried(
    make_coordinator, agent_transcript, clock, recording_sleep
) -> None:
    backend = FakeBackend.scripted([UpstreamError("Gemini returned 500: boom", status=500)] * 3)
    coordinator = make_coordinator(backend)

    outcome = await coordinator.handle(_event(agent_transcript))

    assert outcome == Error("Gemini returned 500: boom")
    assert outcome.status_code == 500
    assert backend.calls == 3
    assert recording_sleep.delays == [1.0, 2.0]

    # The failure is not remembered as "seen", so the same transcript tries again.
    clock.advance(4)
    retry = await coordinator.handle(_event(agent_transcript))
    assert retry == Draft(MOCK_DRAFT)
    assert backend.calls == 4


@pytest.mark.anyio
async def test_quota_errors_get_friendly_message(make_coordinator, agent_transcript) -> None:
    backend = FakeBackend.scripted(
        [UpstreamError("Gemini returned 429: Resource has been exhausted", status=429)] * 3
    )
    coordinator = make_coordinator(backend)

    outcome = await coordinator.handle(_event(agent_transcript))

    assert outcome == Error(QUOTA_MESSAGE)


@pytest.mark.anyio
async def test_repeated_question_is_suppressed(make_coordinator, clock) -> None:
    backend = FakeBackend.scripted(
        [
            "Do you want a refund or store credit?",
            "Would you prefer store credit or a refund?",
        ]
    )
    coordinator = make_coordinator(backend)
    first_transcript = "Rep: Hi, how can I help?\nMe: I want to return my shoes.\nRep: Sure, one moment."
    second_transcript = first_transcript + "\nMe: Ok.\nRep: Thanks for waiting."

    first = await coordinator.handle(_event(first_transcript))
    clock.advance(4)
    second = await coordinator.handle(_event(second_transcript))

    assert first == Draft("Do you want a refund or store credit?")
    assert second == Waiting(stage=Stage.DUPLICATE_QUESTION)
    assert coordinator.cache.get(fingerprint(second_transcript, "")) is None


@pytest.mark.anyio
async def test_mock_backend_keeps_drafting_every_agent_turn(make_coordinator, clock) -> None:
    coordinator = make_coordinator(FakeBackend.mock())
    transcript = "Rep: Hi, how can I help?"

    for turn in range(12):
        outcome = await coordinator.handle(_event(transcript))
        assert isinstance(outcome, Draft), (turn, outcome)
        transcript += f"\nMe: {outcome.text}\nRep: Noted, step {turn} is done."
        clock.advance(4)


_REFUND_STANDOFF = [
    "Me: These boots leak.",
    "Rep: Sorry to hear that.",
    "Me: Can I return them?",
    "Rep: We can offer store credit.",
    "Me: I just want a refund",
    "Rep: Store credit is our policy.",
    "Me: I just want a refund",
    "Rep: Credit is all we can do.",
]


@pytest.mark.anyio
@pytest.mark.parametrize("window", [None, 4], ids=["full", "capped"])
async def test_user_repeating_themselves_is_a_stuck_loop(make_coordinator, clock, window) -> None:
    drafts = [
        "Could you explain why a refund isn't possible?",
        "Is a manager available to review this?",
        "Would a supervisor be able to approve a refund?",
    ]
    backend = FakeBackend.scripted(drafts)
    coordinator = make_coordinator(backend)

    transcripts = []
    for end in (4, 6, 8):
        start = 0 if window is None else end - window
        transcripts.append("\n".join(_REFUND_STANDOFF[start:end]))

    outcomes = []
    for transcript in transcripts:
        outcomes.append(await coordinator.handle(_event(transcript)))
        clock.advance(4)

    assert outcomes[0] == Draft(drafts[0])
    assert outcomes[1] == Draft(drafts[1])
    assert outcomes[2] == Waiting(stage=Stage.STUCK_LOOP)

    state = coordinator.store.get("c1")
    assert list(state.recent_answers) == [
        "Can I return them?",
        "I just want a refund",
        "I just want a refund",
    ]
    assert list(state.asked_questions) == drafts
    assert state.last_fingerprint == fingerprint(transcripts[2], "")
    assert coordinator.cache.get(fingerprint(transcripts[2], "")) is None


@pytest.mark.anyio
async def test_busy_conversation_is_not_queued(make_coordinator, agent_transcript, clock) -> None:
    backend = FakeBackend()
    coordinator = make_coordinator(backend)
    state = coordinator.store.get("c1")

    async with state.lock:
        outcome = await coordinator.handle(_event(agent_transcript))

    assert outcome == Waiting(stage=Stage.BUSY)
    assert backend.calls == 0
    assert state.last_attempt_at == clock()

    after = await coordinator.handle(_event(agent_transcript))
    assert after == Waiting(stage=Stage.THROTTLED)


class GatedBackend:
    """Blocks inside generate_reply until released."""

    name = "gated"

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def generate_reply(self, prompt: str) -> str:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return "Could you share the order number?"


@pytest.mark.anyio
async def test_one_generation_in_flight_per_conversation(make_coordinator, agent_transcript) -> None:
    backend = GatedBackend()
    coordinator = make_coordinator(backend)

    first = asyncio.create_task(coordinator.handle(_event(agent_transcript)))
    await backend.started.wait()
    second = await coordinator.handle(_event(agent_transcript + "\nRep: Hello?"))
    backend.release.set()

    assert second == Waiting(stage=Stage.BUSY)
    assert await first == Draft("Could you share the order number?")
    assert backend.calls == 1
