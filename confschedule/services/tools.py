"""Tools exposed to the schedule assistant.

Each tool is a plain function returning JSON-serialisable data, paired with
an OpenAI function schema in ``TOOL_SPECS``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from confschedule.domain.models import TalkFormat, TalkLevel, TalkRef
from confschedule.repos.memory import Catalog, ScheduleRepository
from confschedule.services.catalog import get_talk, search_talks
from confschedule.services.formatting import format_date, format_duration, format_time
from confschedule.services.schedule import scheduled_talks, talk_conflicts


@dataclass
class ToolContext:
    catalog: Catalog
    schedule_repo: ScheduleRepository
    user_id: str


def _require_str(name: str, value: Any) -> None:
    # Model-supplied JSON can carry any type.
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}")


def tool_search_talks(
    ctx: ToolContext,
    query: str,
    track_id: str | None = None,
    level: str | None = None,
    format: str | None = None,
) -> list[dict]:
    _require_str("query", query)
    for name, value in (("track_id", track_id), ("level", level), ("format", format)):
        if value is not None:
            _require_str(name, value)
    talks = search_talks(
        ctx.catalog,
        query=query,
        track_id=track_id,
        level=TalkLevel(level) if level else None,
        format=TalkFormat(format) if format else None,
    )
    return [
        {
            "id": t.id,
            "title": t.title,
            "description": t.description,
            "start_time": format_time(t.start_time),
            "end_time": format_time(t.end_time),
            "level": t.level.value,
            "format": t.format.value,
            "speaker": t.speaker.name,
            "speaker_company": t.speaker.company,
            "track": t.track.name,
            "track_id": t.track.id,
            "room": t.room.name,
        }
        for t in talks
    ]


def tool_get_tracks(ctx: ToolContext) -> list[dict]:
    return [t.model_dump() for t in ctx.catalog.tracks.list_all()]


def tool_get_talk_details(ctx: ToolContext, talk_id: str) -> dict | None:
    _require_str("talk_id", talk_id)
    detail = get_talk(ctx.catalog, talk_id)
    if detail is None:
        return None
    return {
        "id": detail.id,
        "title": detail.title,
        "description": detail.description,
        "date": format_date(detail.start_time),
        "start_time": format_time(detail.start_time),
        "end_time": format_time(detail.end_time),
        "duration": format_duration(detail.start_time, detail.end_time),
        "level": detail.level.value,
        "format": detail.format.value,
        "speaker": {
            "name": detail.speaker.name,
            "bio": detail.speaker.bio,
            "company": detail.speaker.company,
            "role": detail.speaker.role,
        },
        "track": {"name": detail.track.name, "description": detail.track.description},
        "room": detail.room.name,
    }


def tool_check_conflicts(ctx: ToolContext, talk_ids: list[str]) -> dict:
    if not isinstance(talk_ids, list):
        raise TypeError(f"talk_ids must be an array, got {type(talk_ids).__name__}")
    for talk_id in talk_ids:
        _require_str("talk_ids[]", talk_id)
    if not talk_ids:
        return {"conflicts": [], "has_conflicts": False, "message": _conflict_message(0)}

    talks = ctx.catalog.talks.list_by_ids(talk_ids)
    titles = {t.id: t.title for t in talks}
    relation = talk_conflicts(talks)
    conflicts = [
        {
            "talk1": TalkRef(id=p.first, title=titles[p.first]).model_dump(),
            "talk2": TalkRef(id=p.second, title=titles[p.second]).model_dump(),
        }
        for p in relation.pairs
    ]
    return {
        "conflicts": conflicts,
        "has_conflicts": relation.has_conflicts,
        "message": _conflict_message(len(conflicts)),
    }


def _conflict_message(count: int) -> str:
    if count:
        return f"Found {count} conflict(s) between talks."
    return "No conflicts found - all talks can be attended."


def tool_get_user_schedule(ctx: ToolContext) -> list[dict]:
    talks = scheduled_talks(ctx.user_id, ctx.catalog, ctx.schedule_repo)
    result = []
    for talk in talks:
        track = ctx.catalog.tracks.get(talk.track_id)
        room = ctx.catalog.rooms.get(talk.room_id)
        result.append(
            {
                "talk_id": talk.id,
                "title": talk.title,
                "start_time": format_time(talk.start_time),
                "end_time": format_time(talk.end_time),
                "track": track.name if track else None,
                "room": room.name if room else None,
            }
        )
    return result


_LEVELS = [level.value for level in TalkLevel]
_FORMATS = [fmt.value for fmt in TalkFormat]


def _function(name: str, description: str, properties: dict, required: list[str]) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


TOOL_SPECS: dict[str, dict] = {
    "search_talks": _function(
        "search_talks",
        "Search for conference talks by topic, speaker name, or keywords. "
        "Returns matching talks with details.",
        {
            "query": {"type": "string", "description": "Search query (topic, keyword, or speaker name)"},
            "track_id": {
                "type": "string",
                "description": "Filter by track ID (ai, perf, fullstack, dx, platform)",
            },
            "level": {"type": "string", "enum": _LEVELS, "description": "Filter by difficulty level"},
            "format": {"type": "string", "enum": _FORMATS, "description": "Filter by talk format"},
        },
        ["query"],
    ),
    "get_tracks": _function(
        "get_tracks",
        "Get all available conference tracks with their descriptions.",
        {},
        [],
    ),
    "get_talk_details": _function(
        "get_talk_details",
        "Get complete details of a specific talk including speaker bio and track info.",
        {"talk_id": {"type": "string", "description": "The ID of the talk to get details for"}},
        ["talk_id"],
    ),
    "check_conflicts": _function(
        "check_conflicts",
        "Check if a list of talks have any time conflicts (overlapping schedules).",
        {
            "talk_ids": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Array of talk IDs to check for conflicts",
            }
        },
        ["talk_ids"],
    ),
    "get_user_schedule": _function(
        "get_user_schedule",
        "Get the user's currently saved schedule.",
        {},
        [],
    ),
}

TOOL_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "search_talks": tool_search_talks,
    "get_tracks": tool_get_tracks,
    "get_talk_details": tool_get_talk_details,
    "check_conflicts": tool_check_conflicts,
    "get_user_schedule": tool_get_user_schedule,
}


def run_tool(name: str, raw_arguments: str | None, ctx: ToolContext, allowed: list[str]) -> str:
    """Execute tool *name* with JSON *raw_arguments* and return a JSON result.

    Failures are reported to the model as ``{"error": ...}`` rather than raised.
    """
    if name not in allowed:
        return json.dumps({"error": f"Unknown tool: {name}"})
    try:
        arguments = json.loads(raw_arguments or "{}")
        result = TOOL_FUNCTIONS[name](ctx, **arguments)
    except (TypeError, ValueError) as exc:
        return json.dumps({"error": f"Invalid arguments for {name}: {exc}"})
    return json.dumps(result, default=str)
