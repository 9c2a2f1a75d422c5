"""Tests for the Orchestrator tool-calling loop."""

from __future__ import annotations

import asyncio
import itertools

import pytest

from todo_agent.conversation.models import ChatMessage
from todo_agent.conversation.transcript import ToolCall, TurnRole
from todo_agent.errors import InvalidArgumentError, ProviderError
from todo_agent.llm.client import ModelResponse
from todo_agent.llm.orchestrator import LoopState, Orchestrator
from todo_agent.todos.store import TaskStore
from todo_agent.tools import build_dispatcher

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ids = itertools.count(1)


def _call(name: str, **arguments) -> ToolCall:
    return ToolCall(id=f"call_{next(_ids)}", name=name, arguments=arguments)


def _tools(*calls: ToolCall, text: str = "") -> ModelResponse:
    return ModelResponse(text=text, tool_calls=calls, stop_reason="tool_use")


def _text(text: str) -> ModelResponse:
    return ModelResponse(text=text, stop_reason="end_turn")


def _orchestrator(model, store: TaskStore, images, **kwargs) -> Orchestrator:
    kwargs.setdefault("pacing_delay", 0)
    return Orchestrator(
        model, build_dispatcher(store, images), system_prompt="SYSTEM", **kwargs
    )


# ---------------------------------------------------------------------------
# Full round trips
# ---------------------------------------------------------------------------


async def test_calculate_scenario(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=[
            "Perform addition of 5+3",
            "Verify the result and check for errors",
            "Prepare final summary",
        ])),
        _tools(_call("mark_task_complete", index=0, completionNotes="Added 5 + 3 = 8")),
        _tools(_call("mark_task_complete", index=1, completionNotes="Verified: 8 is correct")),
        _tools(_call("mark_task_complete", index=2, completionNotes="Summary prepared")),
        _text("The sum of 5 and 3 is **8**"),
    )
    orchestrator = _orchestrator(model, task_store, fake_images)

    progress: list[str] = []

    async def on_progress(name: str) -> None:
        progress.append(name)

    run = await orchestrator.run("Calculate 5 + 3", on_progress=on_progress)

    assert "8" in run.text
    assert run.state is LoopState.DONE
    assert orchestrator.state is LoopState.DONE
    assert run.rounds == 5
    assert progress == ["create_tasks"] + ["mark_task_complete"] * 3

    todos = await task_store.get_all()
    assert [t.id for t in todos] == [1, 2, 3]
    assert all(t.is_completed for t in todos)
    assert todos[0].completion_notes == "Added 5 + 3 = 8"


async def test_every_round_advertises_three_tools(
    scripted_model, task_store, fake_images
) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["a", "b", "c"])),
        _text("done"),
    )
    await _orchestrator(model, task_store, fake_images).process_prompt("go")

    assert len(model.tools) == 2
    for tools in model.tools:
        assert [t["name"] for t in tools] == [
            "create_tasks",
            "mark_task_complete",
            "generate_image",
        ]


async def test_tool_results_are_fed_back(scripted_model, task_store, fake_images) -> None:
    create = _call("create_tasks", descriptions=["a", "b", "c"])
    model = scripted_model(_tools(create, text="Planning."), _text("done"))

    await _orchestrator(model, task_store, fake_images).process_prompt("go")

    second = model.calls[1]
    roles = [t.role for t in second.turns]
    assert roles == [TurnRole.SYSTEM, TurnRole.USER, TurnRole.ASSISTANT, TurnRole.TOOL]
    assistant, tool = second.turns[2], second.turns[3]
    assert assistant.content == "Planning."
    assert assistant.tool_calls == (create,)
    assert tool.tool_call_id == create.id
    assert tool.content.startswith("Created 3 todo(s):")


async def test_several_calls_in_one_round(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["a", "b", "c"])),
        _tools(
            _call("mark_task_complete", index=0, completionNotes="one"),
            _call("generate_image", prompt="a lighthouse"),
            _call("mark_task_complete", index=1, completionNotes="two"),
        ),
        _text("done"),
    )
    run = await _orchestrator(model, task_store, fake_images).run("go")

    tool_turns = [t for t in run.transcript.turns if t.role is TurnRole.TOOL]
    assert len(tool_turns) == 4
    assert "[IMAGE:data:image/png;base64,AAAA]" in tool_turns[2].content
    assert [t.is_completed for t in await task_store.get_all()] == [True, True, False]


async def test_blank_notes_do_not_abort(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["a", "b", "c"])),
        _tools(_call("mark_task_complete", index=0, completionNotes="")),
        _tools(_call("mark_task_complete", index=0, completionNotes="Really done")),
        _text("finished"),
    )
    run = await _orchestrator(model, task_store, fake_images).run("go")

    assert run.state is LoopState.DONE
    assert run.text == "finished"
    tool_turns = [t for t in run.transcript.turns if t.role is TurnRole.TOOL]
    assert tool_turns[1].content == "Error: Completion notes cannot be empty."
    assert tool_turns[1].is_error
    assert (await task_store.get_all())[0].completion_notes == "Really done"


async def test_workflow_rules_not_enforced(scripted_model, task_store, fake_images) -> None:
    """A single task and an out-of-order completion are the model's business."""
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["only one"])),
        _text("answered"),
    )
    run = await _orchestrator(model, task_store, fake_images).run("go")

    assert run.state is LoopState.DONE
    assert len(await task_store.get_all()) == 1


# ---------------------------------------------------------------------------
# Transcript lifetime
# ---------------------------------------------------------------------------


async def test_each_prompt_starts_fresh(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["a"])),
        _text("first answer"),
        _text("second answer"),
    )
    orchestrator = _orchestrator(model, task_store, fake_images)

    await orchestrator.process_prompt("first")
    await orchestrator.process_prompt("second")

    third = model.calls[2]
    assert [(t.role, t.content) for t in third.turns] == [
        (TurnRole.SYSTEM, "SYSTEM"),
        (TurnRole.USER, "second"),
    ]


async def test_history_ignored_by_default(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_text("ok"))
    orchestrator = _orchestrator(model, task_store, fake_images, carry_history=False)

    await orchestrator.process_prompt("now", history=[ChatMessage.user("before")])

    assert len(model.calls[0].turns) == 2


async def test_history_carried_when_enabled(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_text("ok"))
    orchestrator = _orchestrator(model, task_store, fake_images, carry_history=True)

    history = [ChatMessage.user("before"), ChatMessage.assistant("earlier reply")]
    await orchestrator.process_prompt("now", history=history)

    assert [t.content for t in model.calls[0].turns] == [
        "SYSTEM",
        "before",
        "earlier reply",
        "now",
    ]


# ---------------------------------------------------------------------------
# Validation and failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("prompt", ["", "   ", "x" * 10_001])
async def test_invalid_prompt_rejected_before_model_call(
    prompt: str, scripted_model, task_store, fake_images
) -> None:
    model = scripted_model(_text("never"))
    orchestrator = _orchestrator(model, task_store, fake_images)

    with pytest.raises(InvalidArgumentError):
        await orchestrator.process_prompt(prompt)
    assert model.calls == []


async def test_max_length_prompt_accepted(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_text("ok"))
    assert await _orchestrator(model, task_store, fake_images).process_prompt("x" * 10_000) == "ok"


async def test_provider_failure_becomes_report(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["a", "b", "c"])),
        ProviderError("Model request failed: overloaded"),
    )
    orchestrator = _orchestrator(model, task_store, fake_images)

    result = await orchestrator.process_prompt("go")

    assert result == "Error processing request: Model request failed: overloaded"
    assert orchestrator.state is LoopState.FAILED
    # Work done before the failure stays.
    assert len(await task_store.get_all()) == 3


async def test_failing_observer_becomes_report(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_tools(_call("create_tasks", descriptions=["a"])), _text("done"))

    async def on_progress(name: str) -> None:
        msg = "UI went away"
        raise RuntimeError(msg)

    result = await _orchestrator(model, task_store, fake_images).process_prompt(
        "go", on_progress=on_progress
    )
    assert result == "Error processing request: UI went away"


async def test_round_limit(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(
        _tools(_call("create_tasks", descriptions=["a"])),
        _tools(_call("create_tasks", descriptions=["b"])),
    )
    run = await _orchestrator(model, task_store, fake_images, max_rounds=2).run("go")

    assert run.state is LoopState.FAILED
    assert run.text.startswith("Error processing request: stopped after 2 model rounds")
    assert len(model.calls) == 2


async def test_zero_round_limit_is_respected(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_text("never"))
    run = await _orchestrator(model, task_store, fake_images, max_rounds=0).run("go")

    assert run.state is LoopState.FAILED
    assert run.text.startswith("Error processing request: stopped after 0 model rounds")
    assert model.calls == []


async def test_observer_sees_tools_executing(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_tools(_call("create_tasks", descriptions=["a"])), _text("done"))
    orchestrator = _orchestrator(model, task_store, fake_images)
    seen: list[LoopState] = []

    async def on_progress(name: str) -> None:
        seen.append(orchestrator.state)

    await orchestrator.process_prompt("go", on_progress=on_progress)

    assert seen == [LoopState.TOOLS_EXECUTING]
    assert orchestrator.state is LoopState.DONE


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


async def test_cancel_during_pacing_delay(scripted_model, task_store, fake_images) -> None:
    await task_store.create_tasks(["a", "b", "c"])
    model = scripted_model(
        _tools(
            _call("mark_task_complete", index=0, completionNotes="first done"),
            _call("mark_task_complete", index=1, completionNotes="second done"),
        ),
        _text("never reached"),
    )
    orchestrator = _orchestrator(model, task_store, fake_images, pacing_delay=30)

    first_tool_done = asyncio.Event()

    async def on_progress(name: str) -> None:
        first_tool_done.set()

    task = asyncio.create_task(orchestrator.process_prompt("go", on_progress=on_progress))
    await first_tool_done.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    todos = await task_store.get_all()
    assert [t.is_completed for t in todos] == [True, False, False]
    assert not any(t.is_active for t in todos)
    assert orchestrator.state is LoopState.CANCELLED
    assert len(model.calls) == 1


async def test_cancel_during_model_call(scripted_model, task_store, fake_images) -> None:
    model = scripted_model(_text("never"))
    model.release = asyncio.Event()
    orchestrator = _orchestrator(model, task_store, fake_images)

    task = asyncio.create_task(orchestrator.process_prompt("go"))
    while not model.calls:
        await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert await task_store.get_all() == []
