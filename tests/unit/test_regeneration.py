from __future__ import annotations

import pytest

from copy_agent.core.draft_validator import DraftConstraints
from copy_agent.core.regeneration import RegenerationController
from copy_agent.errors import GenerationError
from copy_agent.prompts import SYSTEM_PROMPTS
from copy_agent.schemas.artifacts import MessageArchitecture
from tests.helpers import (
    CLEAN_FINAL,
    SLOPPY_FINAL,
    ScriptedLLMClient,
    make_service,
    sample_architecture,
    sample_final_package,
    sample_task,
)


def _controller(replies: list, max_attempts: int = 2) -> tuple[RegenerationController, ScriptedLLMClient]:
    client = ScriptedLLMClient(replies=replies)
    return RegenerationController(make_service(client), max_attempts=max_attempts), client


def _produce(controller: RegenerationController, **kwargs):
    return controller.produce_final(
        sample_task(),
        MessageArchitecture.model_validate(sample_architecture()),
        CLEAN_FINAL,
        **kwargs,
    )


def test_valid_first_attempt_returns_immediately() -> None:
    controller, client = _controller([sample_final_package(), sample_final_package()])

    outcome = _produce(controller)

    assert outcome.attempts == 1
    assert outcome.best_effort is False
    assert outcome.validation.is_valid
    assert outcome.package.final == CLEAN_FINAL
    assert len(client.calls) == 1


def test_violations_are_fed_back_into_the_next_attempt() -> None:
    controller, client = _controller([sample_final_package(final=SLOPPY_FINAL), sample_final_package()])

    outcome = _produce(controller)

    assert outcome.attempts == 2
    assert outcome.best_effort is False
    assert "YOUR DRAFT VIOLATED THESE RULES:" not in client.calls[0]["prompt"]
    assert "YOUR DRAFT VIOLATED THESE RULES:" in client.calls[1]["prompt"]
    assert 'The word "synergy" is forbidden' in client.calls[1]["prompt"]


def test_always_invalid_candidates_stop_at_max_attempts() -> None:
    second = "We offer synergy — and we empower your potential!"
    replies = [
        sample_final_package(final=SLOPPY_FINAL),
        sample_final_package(final=second),
        sample_final_package(final=SLOPPY_FINAL),
        sample_final_package(final=SLOPPY_FINAL),
    ]
    controller, client = _controller(replies, max_attempts=2)

    outcome = _produce(controller)

    assert len(client.calls) == 2
    assert all(call["system"] == SYSTEM_PROMPTS["final_package"] for call in client.calls)
    assert outcome.attempts == 2
    assert outcome.best_effort is True
    assert outcome.validation.violations
    assert outcome.package.final == "We offer synergy, and we empower your potential!"


def test_constraints_extend_the_forbidden_list() -> None:
    final = "Acme Ledger closes your books in 3 days, guaranteed.\n\nBook a demo today."
    controller, client = _controller([sample_final_package(final=final), sample_final_package(final=final)])

    outcome = _produce(controller, constraints=DraftConstraints(extra_forbidden_words=("guaranteed",)))

    assert outcome.best_effort is True
    assert "guaranteed" in client.calls[0]["prompt"]


def test_extra_context_reaches_every_prompt() -> None:
    controller, client = _controller([sample_final_package(final=SLOPPY_FINAL), sample_final_package()])

    _produce(controller, extra_context="KNOWN FACTS (use these):\n- 40 firms")

    assert all("- 40 firms" in call["prompt"] for call in client.calls)


def test_generation_errors_propagate() -> None:
    controller, _client = _controller([ConnectionError("down")])
    with pytest.raises(GenerationError):
        _produce(controller)


def test_max_attempts_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RegenerationController(make_service(ScriptedLLMClient()), max_attempts=0)
