"""Runtime messages as seen by the relay.

ADK events are loosely shaped: any event may carry content parts, usage
metadata, a final answer, or several of these at once. ``from_adk_event``
folds one event into a ``RuntimeMessage`` whose three shapes are declared
up front and each may be absent.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from google.adk.events import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None


ContentBlock = Union[TextBlock, ToolUseBlock]


@dataclass(frozen=True)
class Usage:
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


@dataclass(frozen=True)
class RuntimeMessage:
    # assistant-authored blocks
    content: Optional[Tuple[ContentBlock, ...]] = None
    # token accounting for the model call that produced this message
    usage: Optional[Usage] = None
    # final synthesized answer
    result: Optional[str] = None
    author: Optional[str] = None


def from_adk_event(event: Event) -> RuntimeMessage:
    content = None
    result = None

    if event.author != "user" and event.content and event.content.parts:
        blocks = []
        for part in event.content.parts:
            if part.thought:
                logger.debug("Thought from %s: %s", event.author, part.text)
            elif part.text:
                blocks.append(TextBlock(text=part.text))

            if part.function_call:
                fc = part.function_call
                blocks.append(ToolUseBlock(name=fc.name, args=dict(fc.args or {}), id=fc.id))
        content = tuple(blocks)

        if event.is_final_response():
            text = "".join(b.text for b in blocks if isinstance(b, TextBlock))
            result = text or None

    usage = None
    if event.usage_metadata is not None:
        usage = Usage(
            input_tokens=event.usage_metadata.prompt_token_count,
            output_tokens=event.usage_metadata.candidates_token_count,
        )

    return RuntimeMessage(content=content, usage=usage, result=result, author=event.author)
