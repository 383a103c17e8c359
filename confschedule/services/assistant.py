"""Schedule assistant: routes a chat to a specialised agent and runs its tools."""

from __future__ import annotations

import json
import time

from confschedule.config import settings
from confschedule.domain.models import ChatMessage, ChatResponse
from confschedule.services.tools import TOOL_SPECS, ToolContext, run_tool
from confschedule.utils.logger import elapsed_ms, get_logger, log_action

logger = get_logger(__name__)

_ROUTER_PROMPT = """\
You are a routing agent for a conference schedule assistant.
Analyze the user's message and determine which specialized agent should handle it.

Choose "search" for:
- Searching for talks by topic, speaker, or keywords
- Getting recommendations based on interests
- Finding workshops, keynotes, or specific talk formats
- Checking for schedule conflicts
- Complex queries requiring reasoning about talks

Choose "info" for:
- Listing available tracks
- Viewing the user's current schedule
- Simple factual questions about the conference

Respond with ONLY the agent name: "search" or "info"
"""

_TRACK_LIST = """\
Available tracks:
- AI & Agents (id: ai)
- Performance (id: perf)
- Full Stack (id: fullstack)
- Developer Experience (id: dx)
- Platform (id: platform)
"""

_SEARCH_PROMPT = f"""\
You are a search specialist for Next.js Conf 2025.
Your job is to find relevant talks and make recommendations.

The conference is on October 22, 2025 in San Francisco. It's a single-day event.

{_TRACK_LIST}
When helping users:
1. Use search_talks to find relevant sessions
2. Use get_talk_details for more information on specific talks
3. Use check_conflicts before recommending multiple sessions
4. Explain why you're recommending each talk

Be concise but helpful.
"""

_INFO_PROMPT = f"""\
You are an info assistant for Next.js Conf 2025.
Your job is to provide quick information about tracks and the user's schedule.

{_TRACK_LIST}
Use the tools to fetch the requested information and present it clearly.
"""

AGENTS: dict[str, dict] = {
    "search": {
        "name": "search-agent",
        "model": lambda: settings.search_model,
        "prompt": _SEARCH_PROMPT,
        "tools": ["search_talks", "get_talk_details", "check_conflicts"],
    },
    "info": {
        "name": "info-agent",
        "model": lambda: settings.info_model,
        "prompt": _INFO_PROMPT,
        "tools": ["get_tracks", "get_user_schedule"],
    },
}

_GAVE_UP = "Sorry, I couldn't finish working through that request. Please try rephrasing it."


def _chat_completion(**kwargs):
    """Call the OpenAI chat completions API."""
    from openai import OpenAI

    client = OpenAI(api_key=settings.openai_api_key)
    return client.chat.completions.create(**kwargs)


def route_request(user_message: str) -> str:
    """Pick the agent for *user_message*: ``"info"`` or ``"search"``."""
    response = _chat_completion(
        model=settings.router_model,
        messages=[
            {"role": "system", "content": _ROUTER_PROMPT},
            {"role": "user", "content": user_message},
        ],
        temperature=0,
    )
    answer = (response.choices[0].message.content or "").strip().strip('"').lower()
    return "info" if answer == "info" else "search"


def _assistant_turn(message) -> dict:
    turn: dict = {"role": "assistant", "content": message.content}
    if message.tool_calls:
        turn["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in message.tool_calls
        ]
    return turn


def run_agent(agent: str, messages: list[ChatMessage], ctx: ToolContext) -> ChatResponse:
    """Run *agent*'s tool-calling loop until it answers or runs out of steps."""
    config = AGENTS[agent]
    conversation: list[dict] = [{"role": "system", "content": config["prompt"]}]
    conversation.extend({"role": m.role, "content": m.content} for m in messages)
    tools = [TOOL_SPECS[name] for name in config["tools"]]
    called: list[str] = []

    for _ in range(settings.assistant_max_steps):
        response = _chat_completion(
            model=config["model"](),
            messages=conversation,
            tools=tools,
        )
        message = response.choices[0].message
        if not message.tool_calls:
            return ChatResponse(agent=agent, reply=message.content or "", tool_calls=called)

        conversation.append(_assistant_turn(message))
        for call in message.tool_calls:
            called.append(call.function.name)
            result = run_tool(call.function.name, call.function.arguments, ctx, config["tools"])
            conversation.append({"role": "tool", "tool_call_id": call.id, "content": result})

    logger.warning("%s hit the step limit after tools %s", config["name"], json.dumps(called))
    return ChatResponse(agent=agent, reply=_GAVE_UP, tool_calls=called)


def run_pipeline(messages: list[ChatMessage], ctx: ToolContext) -> ChatResponse:
    """Route the conversation and run the selected agent.

    Messages with empty content are dropped. Raises ``ValueError`` when no
    user message remains.
    """
    started = time.perf_counter()
    conversation = [m for m in messages if m.content]
    user_messages = [m for m in conversation if m.role == "user"]
    if not user_messages:
        raise ValueError("No user message found")

    agent = route_request(user_messages[-1].content)
    result = run_agent(agent, conversation, ctx)

    log_action(
        logger,
        "AI chat request processed",
        action="ai.chat",
        user_id=ctx.user_id,
        agent=agent,
        message_count=len(messages),
        tool_calls=len(result.tool_calls),
        duration_ms=elapsed_ms(started),
    )
    return result
