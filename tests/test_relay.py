import pytest

from recipe_finder.config import Settings
from recipe_finder.messages import RuntimeMessage, TextBlock, ToolUseBlock, Usage
from recipe_finder.relay import (
    DoneEvent,
    ResultEvent,
    TextEvent,
    ToolEvent,
    UsageEvent,
    event_to_dict,
    events_for,
    relay,
    stream_agent,
)


class FakeRuntime:
    def __init__(self, messages=(), error=None):
        self.messages = list(messages)
        self.error = error
        self.calls = []

    async def query(self, prompt, options):
        self.calls.append((prompt, options))
        for message in self.messages:
            yield message
        if self.error:
            raise self.error


async def collect(events):
    return [event async for event in events]


SAMPLE = [
    RuntimeMessage(content=(TextBlock("Searching AllRecipes"), TextBlock("for lasagna"))),
    RuntimeMessage(content=(ToolUseBlock(name="navigate_page", args={"url": "https://www.allrecipes.com"}),)),
    RuntimeMessage(usage=Usage(input_tokens=10, output_tokens=5)),
    RuntimeMessage(result="Found 3 recipes"),
]


@pytest.mark.asyncio
async def test_stream_agent_event_order():
    runtime = FakeRuntime(SAMPLE)
    events = await collect(stream_agent("lasagna", runtime))
    assert events == [
        TextEvent("Searching AllRecipes"),
        TextEvent("for lasagna"),
        ToolEvent("navigate_page"),
        UsageEvent(10, 5),
        ResultEvent("Found 3 recipes"),
        DoneEvent(),
    ]


@pytest.mark.asyncio
async def test_stream_agent_uses_standalone_options():
    runtime = FakeRuntime()
    settings = Settings(model="openai/test-model", chrome_path="/usr/bin/chromium")
    await collect(stream_agent("lasagna", runtime, settings))
    prompt, options = runtime.calls[0]
    assert prompt == "lasagna"
    assert options.model == "openai/test-model"
    assert options.max_turns == 50
    args = options.mcp_servers["chrome-devtools"].args
    assert "--executable-path=/usr/bin/chromium" in args


@pytest.mark.asyncio
async def test_stream_agent_runtime_needs_only_query(monkeypatch):
    monkeypatch.setenv("RECIPE_FINDER_MODEL", "openai/env-model")

    class BareRuntime:
        def __init__(self):
            self.options = None

        async def query(self, prompt, options):
            self.options = options
            yield RuntimeMessage(result="ok")

    runtime = BareRuntime()
    events = await collect(stream_agent("x", runtime))
    assert events == [ResultEvent("ok"), DoneEvent()]
    assert runtime.options.model == "openai/env-model"


@pytest.mark.asyncio
async def test_empty_stream_still_done():
    assert await collect(stream_agent("x", FakeRuntime())) == [DoneEvent()]


@pytest.mark.asyncio
async def test_error_before_any_message():
    runtime = FakeRuntime(error=RuntimeError("runtime exploded"))
    seen = []
    with pytest.raises(RuntimeError, match="runtime exploded"):
        async for event in stream_agent("x", runtime):
            seen.append(event)
    assert seen == []


@pytest.mark.asyncio
async def test_error_mid_stream_has_no_done():
    runtime = FakeRuntime(SAMPLE[:2], error=ConnectionError("mcp died"))
    seen = []
    with pytest.raises(ConnectionError):
        async for event in relay(runtime.query("x", None)):
            seen.append(event)
    assert seen == [TextEvent("Searching AllRecipes"), TextEvent("for lasagna"), ToolEvent("navigate_page")]


def test_usage_defaults_missing_counter_to_zero():
    assert events_for(RuntimeMessage(usage=Usage(input_tokens=12))) == [UsageEvent(12, 0)]
    assert events_for(RuntimeMessage(usage=Usage(output_tokens=4))) == [UsageEvent(0, 4)]
    assert events_for(RuntimeMessage(usage=Usage())) == [UsageEvent(0, 0)]


def test_one_message_with_every_shape():
    message = RuntimeMessage(
        content=(
            ToolUseBlock(name="take_snapshot"),
            TextBlock("Here it is"),
            TextBlock(""),
            ToolUseBlock(name="click", args={"uid": "1_4"}),
        ),
        usage=Usage(input_tokens=3, output_tokens=2),
        result="Done",
    )
    assert events_for(message) == [
        TextEvent("Here it is"),
        ToolEvent("take_snapshot"),
        ToolEvent("click"),
        UsageEvent(3, 2),
        ResultEvent("Done"),
    ]


def test_empty_result_is_skipped():
    assert events_for(RuntimeMessage(result="")) == []
    assert events_for(RuntimeMessage()) == []


def test_event_dicts():
    assert event_to_dict(TextEvent("hi")) == {"type": "text", "text": "hi"}
    assert event_to_dict(ToolEvent("click")) == {"type": "tool", "name": "click"}
    assert event_to_dict(UsageEvent(1, 2)) == {"type": "usage", "input": 1, "output": 2}
    assert event_to_dict(ResultEvent("ok")) == {"type": "result", "text": "ok"}
    assert event_to_dict(DoneEvent()) == {"type": "done"}
