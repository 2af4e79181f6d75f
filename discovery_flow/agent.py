"""Conversational runners that back a discovery session.

A runner owns one role's conversation: its message history and the
session's :class:`DiscoveryContext`. With an OpenAI key it runs a
chat-completions loop whose tool calls drive the facilitation core;
without one it answers through :class:`ScriptedFacilitator`.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional

from openai import APIError, AsyncOpenAI

from .commands import AgentRole
from .config import Settings, get_settings
from .errors import UpstreamAgentFailure
from .facilitation import describe_progress
from .offline import ScriptedFacilitator
from .prompts import ROLE_INSTRUCTIONS
from .schemas import DiscoveryContext
from .tools import run_tool, tool_specs

logger = logging.getLogger(__name__)

HistoryEntry = Dict[str, str]
CommitHook = Callable[[DiscoveryContext], None]

EMPTY_REPLY = "I'm sorry, I couldn't put together a response. Could you rephrase that?"

ClientCache = tuple[str, AsyncOpenAI]
_client_cache: ClientCache | None = None


def _get_client(settings: Settings) -> AsyncOpenAI | None:
    """Return a cached OpenAI client when an API key is configured."""

    global _client_cache
    api_key = settings.openai_api_key
    if not api_key:
        return None
    if _client_cache and _client_cache[0] == api_key:
        return _client_cache[1]
    client = AsyncOpenAI(api_key=api_key)
    _client_cache = (api_key, client)
    return client


def _context_summary(context: DiscoveryContext) -> str:
    summary = {
        "setupAnswers": context.setup_answers,
        "approachPresented": context.approach_presented,
        "facilitation": describe_progress(context.facilitation),
        "ideasCaptured": len(context.ideas),
        "mindMaps": len(context.mind_maps),
        "activeWorkflow": context.active_workflow_id,
    }
    return json.dumps(summary, default=str)


class DiscoveryRunner:
    """One live conversation for a discovery session.

    ``ask`` works on a deep copy of the context and records the exchange
    only once a reply exists; a failed upstream call leaves the session
    exactly as it was.
    """

    def __init__(
        self,
        role: AgentRole,
        context: Optional[DiscoveryContext] = None,
        *,
        greeting: str = "",
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        history: Iterable[HistoryEntry] = (),
        on_commit: Optional[CommitHook] = None,
        facilitator: Optional[ScriptedFacilitator] = None,
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self.role = role
        self.context = context if context is not None else DiscoveryContext()
        self.history: List[HistoryEntry] = [dict(entry) for entry in history]
        self._settings = settings or get_settings()
        self._client = client
        self._on_commit = on_commit
        self._facilitator = facilitator or ScriptedFacilitator(role, greeting)

    @property
    def uses_llm(self) -> bool:
        return self._client is not None

    @property
    def user_turns(self) -> int:
        return sum(1 for entry in self.history if entry["role"] == "user")

    async def ask(self, message: str) -> str:
        working = self.context.model_copy(deep=True)
        turn = self.user_turns

        # Opening replies are scripted in both modes.
        if self._client is None or turn == 0:
            reply = self._facilitator.reply(working, message, turn)
        else:
            reply = await self._ask_model(self._client, working, message)

        self._commit(working, message, reply)
        return reply

    def _commit(self, working: DiscoveryContext, message: str, reply: str) -> None:
        self.context = working
        self.history.append({"role": "user", "content": message})
        self.history.append({"role": "assistant", "content": reply})
        if self._on_commit is not None:
            self._on_commit(working)

    async def _ask_model(self, client: AsyncOpenAI, context: DiscoveryContext, message: str) -> str:
        settings = self._settings
        tools = tool_specs(self.role)
        messages: List[Dict[str, Any]] = [
            {
                "role": "system",
                "content": f"{ROLE_INSTRUCTIONS[self.role]}\n\nSession state: {_context_summary(context)}",
            },
            *self.history,
            {"role": "user", "content": message},
        ]

        try:
            for _ in range(settings.max_tool_rounds):
                response = await client.chat.completions.create(
                    model=settings.llm_model,
                    messages=messages,
                    tools=tools,
                    temperature=settings.llm_temperature,
                )
                choice = response.choices[0].message if response.choices else None
                if choice is None:
                    return EMPTY_REPLY
                if not choice.tool_calls:
                    return choice.content or EMPTY_REPLY

                messages.append(
                    {
                        "role": "assistant",
                        "content": choice.content or "",
                        "tool_calls": [
                            {
                                "id": call.id,
                                "type": "function",
                                "function": {"name": call.function.name, "arguments": call.function.arguments},
                            }
                            for call in choice.tool_calls
                        ],
                    }
                )
                for call in choice.tool_calls:
                    result = run_tool(context, call.function.name, call.function.arguments)
                    logger.debug("Tool %s -> %s", call.function.name, result.get("message"))
                    messages.append(
                        {"role": "tool", "tool_call_id": call.id, "content": json.dumps(result, default=str)}
                    )

            logger.info("Tool round limit reached for runner %s; requesting final answer", self.session_id)
            response = await client.chat.completions.create(
                model=settings.llm_model,
                messages=messages,
                tools=tools,
                tool_choice="none",
                temperature=settings.llm_temperature,
            )
        except APIError as exc:
            logger.exception("OpenAI call failed for runner %s", self.session_id)
            raise UpstreamAgentFailure("The discovery agent is unavailable right now, please try again.") from exc

        choice = response.choices[0].message if response.choices else None
        return (choice.content if choice else None) or EMPTY_REPLY


def build_runner(
    role: AgentRole,
    context: DiscoveryContext,
    *,
    greeting: str = "",
    history: Iterable[HistoryEntry] = (),
    on_commit: Optional[CommitHook] = None,
    settings: Optional[Settings] = None,
) -> DiscoveryRunner:
    """Default runner factory: live model when configured, scripted otherwise."""

    resolved = settings or get_settings()
    return DiscoveryRunner(
        role,
        context,
        greeting=greeting,
        settings=resolved,
        client=_get_client(resolved),
        history=history,
        on_commit=on_commit,
    )
