import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from recipe_finder.config import Settings
from recipe_finder.event_log import EventLog
from recipe_finder.relay import (
    DoneEvent,
    RelayEvent,
    ResultEvent,
    TextEvent,
    ToolEvent,
    UsageEvent,
    event_to_dict,
    stream_agent,
)
from recipe_finder.runtime import AdkRuntime

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="recipe-finder",
        description="Find recipes on AllRecipes with a browser-driving agent.",
    )
    parser.add_argument("prompt", help='what to look for, e.g. "easy vegan lasagna"')
    parser.add_argument("--log", metavar="PATH", help="JSONL event log (default: $RECIPE_FINDER_EVENT_LOG or agent_log.jsonl)")
    parser.add_argument("--no-log", action="store_true", help="do not write an event log")
    parser.add_argument("--json", action="store_true", help="print one JSON event per line")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


class UsageTally:
    def __init__(self):
        self.input = 0
        self.output = 0

    def add(self, event: UsageEvent):
        self.input += event.input
        self.output += event.output


def render(event: RelayEvent, tally: UsageTally) -> Optional[str]:
    """Human-readable line for an event, or None when it prints nothing."""
    if isinstance(event, TextEvent):
        return event.text
    if isinstance(event, ToolEvent):
        return f"  -> {event.name}"
    if isinstance(event, UsageEvent):
        tally.add(event)
        return None
    if isinstance(event, ResultEvent):
        return f"\n{event.text}"
    if isinstance(event, DoneEvent):
        return f"\n[done] tokens in: {tally.input}, out: {tally.output}"
    return None


async def run(args: argparse.Namespace, settings: Settings, runtime=None) -> int:
    runtime = runtime or AdkRuntime(settings)
    event_log = None if args.no_log else EventLog(args.log or settings.event_log)
    tally = UsageTally()

    if event_log:
        await event_log.start(args.prompt)

    error = None
    try:
        async for event in stream_agent(args.prompt, runtime, settings):
            if event_log:
                await event_log.write(event)
            if args.json:
                print(json.dumps(event_to_dict(event), ensure_ascii=False), flush=True)
            else:
                line = render(event, tally)
                if line is not None:
                    print(line, flush=True)
    except Exception as e:
        error = e
        logger.debug("Agent run failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
    finally:
        if event_log:
            await event_log.end(error)

    return 1 if error else 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args, Settings.from_env()))


if __name__ == "__main__":
    sys.exit(main())
