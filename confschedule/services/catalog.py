"""Service for browsing the conference programme: talks, speakers and tracks."""

from __future__ import annotations

from confschedule.domain.models import (
    RoomSummary,
    Speaker,
    SpeakerSummary,
    SpeakerTalk,
    SpeakerWithTalks,
    Talk,
    TalkDetail,
    TalkFormat,
    TalkLevel,
    TalkView,
    TimeSlot,
    Track,
    TrackSummary,
)
from confschedule.repos.memory import Catalog
from confschedule.services.formatting import format_time


def to_view(catalog: Catalog, talk: Talk) -> TalkView:
    """Join *talk* with its speaker, track and room summaries."""
    speaker = catalog.speakers.get(talk.speaker_id)
    track = catalog.tracks.get(talk.track_id)
    room = catalog.rooms.get(talk.room_id)
    if speaker is None or track is None or room is None:
        raise LookupError(f"Talk {talk.id!r} references missing catalog data")

    return TalkView(
        id=talk.id,
        title=talk.title,
        description=talk.description,
        start_time=talk.start_time,
        end_time=talk.end_time,
        level=talk.level,
        format=talk.format,
        speaker=SpeakerSummary(**speaker.model_dump(include={"id", "name", "avatar", "company"})),
        track=TrackSummary(**track.model_dump(include={"id", "name", "color"})),
        room=RoomSummary(id=room.id, name=room.name),
    )


def list_talks(catalog: Catalog) -> list[TalkView]:
    return [to_view(catalog, t) for t in catalog.talks.list_all()]


def search_talks(
    catalog: Catalog,
    query: str | None = None,
    track_id: str | None = None,
    level: TalkLevel | None = None,
    format: TalkFormat | None = None,
) -> list[TalkView]:
    """Return talks matching all given filters, ordered by start time."""
    talks = catalog.talks.search(query=query, track_id=track_id, level=level, format=format)
    return [to_view(catalog, t) for t in talks]


def get_talk(catalog: Catalog, talk_id: str) -> TalkDetail | None:
    talk = catalog.talks.get(talk_id)
    if talk is None:
        return None
    return TalkDetail(
        **talk.model_dump(exclude={"speaker_id", "track_id", "room_id"}),
        speaker=catalog.speakers.get(talk.speaker_id),
        track=catalog.tracks.get(talk.track_id),
        room=catalog.rooms.get(talk.room_id),
    )


def list_tracks(catalog: Catalog) -> list[Track]:
    return catalog.tracks.list_all()


def list_speakers(catalog: Catalog) -> list[Speaker]:
    return catalog.speakers.list_all()


def get_speaker(catalog: Catalog, speaker_id: str) -> SpeakerWithTalks | None:
    """Return a speaker with their talks in start-time order."""
    speaker = catalog.speakers.get(speaker_id)
    if speaker is None:
        return None

    talks = []
    for talk in catalog.talks.list_by_speaker(speaker_id):
        view = to_view(catalog, talk)
        talks.append(SpeakerTalk(**view.model_dump(exclude={"speaker"})))
    return SpeakerWithTalks(**speaker.model_dump(), talks=talks)


def group_by_start_time(talks: list[TalkView]) -> list[TimeSlot]:
    """Group talks sharing a start time into slots, earliest first."""
    grouped: dict = {}
    for talk in talks:
        grouped.setdefault(talk.start_time, []).append(talk)

    return [
        TimeSlot(start_time=start, label=format_time(start), talks=grouped[start])
        for start in sorted(grouped)
    ]
