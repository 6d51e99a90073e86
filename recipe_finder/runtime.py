import logging
from collections import OrderedDict
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from google.adk.agents import LlmAgent
from google.adk.agents.callback_context import CallbackContext
from google.adk.agents.run_config import RunConfig
from google.adk.apps.app import App
from google.adk.models.lite_llm import LiteLlm
from google.adk.models.llm_request import LlmRequest
from google.adk.models.llm_response import LlmResponse
from google.adk.plugins.multimodal_tool_results_plugin import MultimodalToolResultsPlugin
from google.adk.runners import Runner
from google.adk.sessions import BaseSessionService, InMemorySessionService
from google.adk.tools.base_tool import BaseTool
from google.adk.tools.base_toolset import BaseToolset
from google.adk.tools.mcp_tool import McpToolset
from google.adk.tools.mcp_tool.mcp_session_manager import StdioConnectionParams
from google.adk.tools.tool_context import ToolContext
from google.genai import types
from mcp import StdioServerParameters

from recipe_finder.config import Settings
from recipe_finder.messages import RuntimeMessage, from_adk_event
from recipe_finder.options import AgentOptions
from recipe_finder.tools import is_allowed

logger = logging.getLogger(__name__)

APP_NAME = "recipe_finder"
AGENT_NAME = "recipe_finder"
USER_ID = "recipe_finder_user"


def reject_unlisted_tools(
    tool: BaseTool, args: Dict[str, Any], tool_context: ToolContext
) -> Optional[Dict[str, Any]]:
    """before_tool_callback: refuses any tool outside the allow-list.

    Returning a dict skips the tool and hands the dict to the model as the
    tool's response.
    """
    if is_allowed(tool.name):
        return None
    logger.warning("Refused call to non-permitted tool %s", tool.name)
    return {"error": f"Tool '{tool.name}' is not permitted"}


class TurnLimit:
    """before_model_callback: caps model calls per invocation.

    Once the cap is reached the model is not called again; the agent answers
    with a plain text response, which ends the run. Applies however the agent
    is run, including under adk web, whose own RunConfig allows far more calls.
    """

    # invocations tracked at once
    max_tracked = 256

    def __init__(self, max_turns: int):
        self.max_turns = max_turns
        self._calls: "OrderedDict[str, int]" = OrderedDict()

    def __call__(
        self, callback_context: CallbackContext, llm_request: LlmRequest
    ) -> Optional[LlmResponse]:
        invocation_id = callback_context.invocation_id
        calls = self._calls.pop(invocation_id, 0) + 1
        self._calls[invocation_id] = calls
        while len(self._calls) > self.max_tracked:
            self._calls.popitem(last=False)

        if calls <= self.max_turns:
            return None
        logger.warning("Invocation %s hit the %d turn limit", invocation_id, self.max_turns)
        return LlmResponse(
            content=types.Content(
                role="model",
                parts=[types.Part(text=f"Stopped after {self.max_turns} turns without finishing the request.")],
            ),
            turn_complete=True,
        )


def build_model(options: AgentOptions, settings: Settings) -> LiteLlm:
    return LiteLlm(
        model=options.model,
        api_base=settings.api_base,
        api_key=settings.require_api_key(),
    )


def build_toolsets(options: AgentOptions, settings: Settings) -> List[McpToolset]:
    """One stdio MCP toolset per declared server, filtered to the allow-list."""
    toolsets = []
    for name, server in (options.mcp_servers or {}).items():
        logger.info("Declaring MCP server %s: %s %s", name, server.command, " ".join(server.args))
        toolsets.append(
            McpToolset(
                connection_params=StdioConnectionParams(
                    server_params=StdioServerParameters(
                        command=server.command,
                        args=list(server.args),
                        env=dict(options.env),
                    ),
                    timeout=settings.mcp_timeout,
                ),
                tool_filter=list(options.allowed_tools),
            )
        )
    return toolsets


def build_agent(
    options: AgentOptions,
    settings: Settings,
    toolsets: Sequence[BaseToolset] = (),
) -> LlmAgent:
    """Builds the recipe finder agent around the given toolsets."""
    return LlmAgent(
        name=AGENT_NAME,
        model=build_model(options, settings),
        instruction=options.system_prompt,
        description="Finds recipes on AllRecipes and presents them in a clean format",
        tools=list(toolsets),
        before_model_callback=TurnLimit(options.max_turns),
        before_tool_callback=reject_unlisted_tools,
    )


def build_app(agent: LlmAgent) -> App:
    # take_screenshot returns images; the plugin passes them on to the model
    return App(name=APP_NAME, root_agent=agent, plugins=[MultimodalToolResultsPlugin()])


def run_config(options: AgentOptions) -> RunConfig:
    return RunConfig(max_llm_calls=options.max_turns)


class AdkRuntime:
    """Runs prompts through an ADK Runner and yields RuntimeMessages.

    ``toolsets`` is how embedded callers connect an already running browser
    tool server; they are attached to every run and left open afterwards.
    """

    def __init__(
        self,
        settings: Settings,
        toolsets: Optional[Sequence[BaseToolset]] = None,
        session_service: Optional[BaseSessionService] = None,
    ):
        self.settings = settings
        self.toolsets = list(toolsets or [])
        self.session_service = session_service or InMemorySessionService()

    async def query(self, prompt: str, options: AgentOptions) -> AsyncIterator[RuntimeMessage]:
        # Toolsets declared by the options belong to this run
        owned = build_toolsets(options, self.settings)
        agent = build_agent(options, self.settings, [*owned, *self.toolsets])
        runner = Runner(app=build_app(agent), session_service=self.session_service)

        # Stateless session
        session = await self.session_service.create_session(app_name=APP_NAME, user_id=USER_ID)
        logger.info("Starting session %s", session.id)

        new_message = types.Content(role="user", parts=[types.Part(text=prompt)])
        try:
            async for event in runner.run_async(
                user_id=USER_ID,
                session_id=session.id,
                new_message=new_message,
                run_config=run_config(options),
            ):
                yield from_adk_event(event)
        finally:
            # stops the MCP subprocess
            for toolset in owned:
                await toolset.close()
            logger.info("Closed session %s", session.id)
