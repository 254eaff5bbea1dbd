"""
Agentic loop with tool calling.

One turn: send the transcript to the provider, surface any text, run the
requested tools concurrently, fold the results back in, and repeat until the
model answers without asking for a tool.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Mapping, Optional, Sequence

from ..config import Settings
from ..errors import ProviderError
from ..skills import TOOL_SCHEMAS, build_tool_map
from .conversation import Conversation, ConversationEntry, NormalizedResponse, ToolSchema
from .display import Display, NullDisplay
from .tool_executor import ToolDispatcher

logger = logging.getLogger("agentflow.agent")

WELCOME_MESSAGE = (
    "Welcome to AgentFlow! 🧠 I'm your intelligent AI assistant with powerful multi-tool "
    "capabilities. I can help you with real-time web searches, AI-powered workflows, and code "
    "execution. Configure your API keys to unlock my full potential, or explore my capabilities "
    "right away. What would you like to accomplish today?"
)

WELCOME_BACK_MESSAGE = (
    "Welcome back to AgentFlow! 🧠 I'm ready to assist you with intelligent searches, "
    "AI workflows, and code execution. What can I help you accomplish?"
)


class Agent:
    """Owns the transcript and drives provider and tools for each user turn."""

    def __init__(
        self,
        provider,
        display: Optional[Display] = None,
        settings: Optional[Settings] = None,
        tool_map: Optional[Mapping[str, Callable]] = None,
        tools: Sequence[ToolSchema] = TOOL_SCHEMAS,
        dispatcher: Optional[ToolDispatcher] = None,
    ):
        self.provider = provider
        self.display = display or NullDisplay()
        self.settings = settings or Settings()
        self.tools = tuple(tools)
        # Outlives each asyncio.run so a hung call never blocks the turn from returning
        self.executor = ThreadPoolExecutor(thread_name_prefix="agentflow")
        self.dispatcher = dispatcher or ToolDispatcher(
            tool_map if tool_map is not None else build_tool_map(self.settings),
            schemas=self.tools,
            display=self.display,
            timeout=self.settings.tool_timeout,
            max_parallel=self.settings.max_parallel,
            executor=self.executor,
        )
        self.conversation = Conversation(ConversationEntry.assistant(WELCOME_MESSAGE))
        self.is_processing = False

    @property
    def message_count(self) -> int:
        return len(self.conversation)

    def greet(self) -> None:
        """Show the seed entry, for front ends that start with an empty screen."""
        seed = self.conversation[0]
        if seed.content:
            self.display.on_message(seed.role, seed.content)

    def clear(self) -> bool:
        """Start a fresh transcript. Refused while a turn is running."""
        if self.is_processing:
            return False
        self.conversation.reset(ConversationEntry.assistant(WELCOME_BACK_MESSAGE))
        self.display.on_message("assistant", WELCOME_BACK_MESSAGE)
        logger.info("Conversation cleared")
        return True

    async def handle_user_input(self, text: str) -> bool:
        """
        Run one user turn to completion.

        Returns False without doing anything when the text is blank or a
        turn is already in flight.
        """
        text = (text or "").strip()
        if not text or self.is_processing:
            return False

        self.is_processing = True
        try:
            self.conversation.append(ConversationEntry.user(text))
            self.display.on_message("user", text)
            await self._run_loop()
        except Exception as e:
            logger.exception("Agent turn failed")
            self.display.on_error(f"Unexpected error: {e}")
        finally:
            self.is_processing = False
        return True

    def run_turn(self, text: str) -> bool:
        """Synchronous wrapper around handle_user_input."""
        return asyncio.run(self.handle_user_input(text))

    def close(self) -> None:
        """Release worker threads without waiting on calls that already timed out."""
        self.executor.shutdown(wait=False, cancel_futures=True)

    async def _call_provider(self) -> NormalizedResponse:
        timeout = self.settings.provider_timeout
        loop = asyncio.get_running_loop()
        call = partial(self.provider.complete, self.conversation.entries, self.tools)
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self.executor, call),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            raise ProviderError(f"No response within {timeout}s", provider=self.provider.name)

    async def _run_loop(self) -> None:
        rounds = 0
        while True:
            try:
                response = await self._call_provider()
            except ProviderError as e:
                logger.error(f"Provider call failed: {e}")
                self.display.on_error(str(e))
                return

            if response.content:
                self.display.on_message("assistant", response.content)

            if not response.has_tool_calls:
                if response.content is None:
                    logger.warning(f"{self.provider.name} returned an empty response")
                self.conversation.append(ConversationEntry.assistant(response.content))
                return

            if rounds >= self.settings.max_tool_rounds:
                message = (
                    f"Stopped after {self.settings.max_tool_rounds} tool rounds "
                    f"without a final answer."
                )
                logger.warning(message)
                self.conversation.append(ConversationEntry.assistant(message))
                self.display.on_error(message)
                return

            rounds += 1
            self.conversation.append(ConversationEntry.assistant(response.content, response.tool_calls))
            logger.debug(
                f"Round {rounds}: dispatching {', '.join(c.name for c in response.tool_calls)}"
            )
            results = await self.dispatcher.invoke_all(response.tool_calls)
            for result in results:
                self.conversation.append(result.to_entry())
