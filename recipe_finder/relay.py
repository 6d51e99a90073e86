"""Relays an agent run as a flat stream of text, tool, usage and result events."""

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, AsyncIterable, AsyncIterator, Dict, List, Optional, Union

from recipe_finder.config import Settings
from recipe_finder.messages import RuntimeMessage, TextBlock, ToolUseBlock
from recipe_finder.options import get_options

if TYPE_CHECKING:
    from recipe_finder.runtime import AdkRuntime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextEvent:
    text: str
    type: str = "text"


@dataclass(frozen=True)
class ToolEvent:
    name: str
    type: str = "tool"


@dataclass(frozen=True)
class UsageEvent:
    input: int
    output: int
    type: str = "usage"


@dataclass(frozen=True)
class ResultEvent:
    text: str
    type: str = "result"


@dataclass(frozen=True)
class DoneEvent:
    type: str = "done"


RelayEvent = Union[TextEvent, ToolEvent, UsageEvent, ResultEvent, DoneEvent]


def event_to_dict(event: RelayEvent) -> Dict[str, Any]:
    """{"type": ..., **payload}, the shape consumers serialize."""
    data = asdict(event)
    return {"type": data.pop("type"), **data}


def events_for(message: RuntimeMessage) -> List[RelayEvent]:
    """Splits one runtime message into relay events.

    Text blocks come first, then tool calls (arguments dropped), then usage,
    then the final result.
    """
    events: List[RelayEvent] = []
    blocks = message.content or ()

    for block in blocks:
        if isinstance(block, TextBlock) and block.text:
            events.append(TextEvent(text=block.text))

    for block in blocks:
        if isinstance(block, ToolUseBlock):
            events.append(ToolEvent(name=block.name))

    if message.usage is not None:
        events.append(
            UsageEvent(
                input=message.usage.input_tokens or 0,
                output=message.usage.output_tokens or 0,
            )
        )

    if message.result:
        events.append(ResultEvent(text=message.result))

    return events


async def relay(messages: AsyncIterable[RuntimeMessage]) -> AsyncIterator[RelayEvent]:
    """Yields the events of each message in arrival order, then DoneEvent.

    Errors raised by ``messages`` propagate as-is and no DoneEvent follows.
    """
    async for message in messages:
        for event in events_for(message):
            logger.debug("Relay event: %s", event)
            yield event
    yield DoneEvent()


async def stream_agent(
    prompt: str,
    runtime: Optional["AdkRuntime"] = None,
    settings: Optional[Settings] = None,
) -> AsyncIterator[RelayEvent]:
    """Runs the recipe finder on ``prompt`` and streams its progress.

    ``runtime`` is anything with a ``query(prompt, options)`` async generator
    of RuntimeMessage; defaults to an ADK runtime built from ``settings``.
    ``settings`` (model, container signal) default to the environment.
    """
    if settings is None:
        settings = Settings.from_env()
    if runtime is None:
        from recipe_finder.runtime import AdkRuntime

        runtime = AdkRuntime(settings)

    options = get_options(standalone=True, model=settings.model, chrome_path=settings.chrome_path)
    async for event in relay(runtime.query(prompt, options)):
        yield event
