"""In-memory repositories for the conference catalog, users and schedules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from confschedule.domain.models import (
    ActivityEntry,
    Room,
    ScheduleEntry,
    Session,
    Speaker,
    Talk,
    TalkFormat,
    TalkLevel,
    Track,
    User,
)


class SpeakerRepository:
    """Dict-backed store for Speaker instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Speaker] = {}

    def add(self, speaker: Speaker) -> None:
        self._store[speaker.id] = speaker

    def get(self, speaker_id: str) -> Speaker | None:
        return self._store.get(speaker_id)

    def list_all(self) -> list[Speaker]:
        return sorted(self._store.values(), key=lambda s: s.name)


class TrackRepository:
    """Dict-backed store for Track instances; lists in insertion order."""

    def __init__(self) -> None:
        self._store: dict[str, Track] = {}

    def add(self, track: Track) -> None:
        self._store[track.id] = track

    def get(self, track_id: str) -> Track | None:
        return self._store.get(track_id)

    def list_all(self) -> list[Track]:
        return list(self._store.values())


class RoomRepository:
    def __init__(self) -> None:
        self._store: dict[str, Room] = {}

    def add(self, room: Room) -> None:
        self._store[room.id] = room

    def get(self, room_id: str) -> Room | None:
        return self._store.get(room_id)


class TalkRepository:
    """Dict-backed store for Talk instances, keyed by id.

    Every listing is ordered by start time.
    """

    def __init__(self) -> None:
        self._store: dict[str, Talk] = {}

    def add(self, talk: Talk) -> None:
        self._store[talk.id] = talk

    def get(self, talk_id: str) -> Talk | None:
        return self._store.get(talk_id)

    def list_all(self) -> list[Talk]:
        return _by_start(self._store.values())

    def list_by_ids(self, talk_ids: list[str]) -> list[Talk]:
        """Return each known talk in *talk_ids* once; repeats and unknown ids drop out."""
        wanted = set(talk_ids)
        return _by_start(t for t in self._store.values() if t.id in wanted)

    def list_by_speaker(self, speaker_id: str) -> list[Talk]:
        return _by_start(t for t in self._store.values() if t.speaker_id == speaker_id)

    def search(
        self,
        query: str | None = None,
        track_id: str | None = None,
        level: TalkLevel | None = None,
        format: TalkFormat | None = None,
    ) -> list[Talk]:
        """Return talks matching every given filter.

        *query* is a case-insensitive substring match against title or
        description.
        """
        needle = query.lower() if query else None
        result = []
        for talk in self._store.values():
            if needle and needle not in talk.title.lower() and needle not in talk.description.lower():
                continue
            if track_id and talk.track_id != track_id:
                continue
            if level and talk.level != level:
                continue
            if format and talk.format != format:
                continue
            result.append(talk)
        return _by_start(result)


def _by_start(talks) -> list[Talk]:
    return sorted(talks, key=lambda t: t.start_time)


class Catalog:
    """The read-mostly conference data: speakers, tracks, rooms and talks."""

    def __init__(
        self,
        speakers: SpeakerRepository | None = None,
        tracks: TrackRepository | None = None,
        rooms: RoomRepository | None = None,
        talks: TalkRepository | None = None,
    ) -> None:
        self.speakers = speakers or SpeakerRepository()
        self.tracks = tracks or TrackRepository()
        self.rooms = rooms or RoomRepository()
        self.talks = talks or TalkRepository()


class UserRepository:
    """Dict-backed store for User instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.id] = user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        wanted = email.lower()
        for user in self._store.values():
            if user.email.lower() == wanted:
                return user
        return None


class SessionRepository:
    """Dict-backed store for Session instances, keyed by token."""

    def __init__(self) -> None:
        self._store: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        self._store[session.token] = session

    def get(self, token: str) -> Session | None:
        return self._store.get(token)

    def delete(self, token: str) -> None:
        self._store.pop(token, None)

    def purge_expired(self, now: datetime) -> int:
        expired = [tok for tok, s in self._store.items() if s.is_expired(now)]
        for tok in expired:
            del self._store[tok]
        return len(expired)


class ScheduleRepository:
    """List-backed store for ScheduleEntry instances (user <-> talk links)."""

    def __init__(self) -> None:
        self._entries: list[ScheduleEntry] = []

    def add(self, entry: ScheduleEntry) -> None:
        self._entries.append(entry)

    def contains(self, user_id: str, talk_id: str) -> bool:
        return any(e.user_id == user_id and e.talk_id == talk_id for e in self._entries)

    def remove(self, user_id: str, talk_id: str) -> bool:
        """Remove the link; returns whether anything was removed."""
        before = len(self._entries)
        self._entries = [
            e for e in self._entries if not (e.user_id == user_id and e.talk_id == talk_id)
        ]
        return len(self._entries) != before

    def list_for_user(self, user_id: str) -> list[ScheduleEntry]:
        return [e for e in self._entries if e.user_id == user_id]


class ActivityRepository:
    """List-backed store for ActivityEntry instances."""

    def __init__(self) -> None:
        self._entries: list[ActivityEntry] = []

    def add(self, entry: ActivityEntry) -> None:
        self._entries.append(entry)

    def list_for_user(self, user_id: str) -> list[ActivityEntry]:
        return sorted(
            [e for e in self._entries if e.user_id == user_id],
            key=lambda e: e.timestamp,
        )


# ---------------------------------------------------------------------------
# Seed data: Next.js Conf 2025, a single day in San Francisco
# ---------------------------------------------------------------------------

# 09:00 America/Los_Angeles (PDT) on 2025-10-22
CONFERENCE_START = datetime(2025, 10, 22, 16, 0, tzinfo=timezone.utc)

_TRACKS = [
    ("ai", "AI & Agents", "#8b5cf6", "Build intelligent applications with AI agents and machine learning"),
    ("perf", "Performance", "#ef4444", "Optimize your applications for speed and efficiency"),
    ("fullstack", "Full Stack", "#3b82f6", "End-to-end application development patterns"),
    ("dx", "Developer Experience", "#22c55e", "Tools and patterns for better developer productivity"),
    ("platform", "Platform", "#06b6d4", "Infrastructure, deployment, and platform features"),
]

_ROOMS = [
    ("main", "Main Stage", 500),
    ("workshop", "Workshop Room", 100),
]

# id, name, company, role, twitter, bio
_SPEAKERS = [
    ("swyx", "Swyx", "Latent.Space", "Founder", "swyx",
     "Founder of Latent.Space. Writer, speaker, and developer advocate."),
    ("aurora", "Aurora Scharff", "Crayon Consulting", "Senior Consultant", "aurorascharff",
     "Senior consultant specializing in React and Next.js architecture at Crayon."),
    ("jude", "Jude Gao", "Vercel", "Software Engineer", "jude_gao",
     "Software Engineer at Vercel working on AI integrations and the Vercel AI SDK."),
    ("simeon", "Simeon Griggs", "Sanity", "Developer Relations", "simeonGriggs",
     "Developer Relations at Sanity. Passionate about content operations and the modern web."),
    ("ankita", "Ankita Kulkarni", "Independent", "Developer & Educator", "kulaborat",
     "Independent developer and educator. Building modern course platforms with Next.js."),
    ("rhys", "Rhys Sullivan", "Vercel", "Software Engineer", "rhyssull",
     "Software Engineer at Vercel working on state management and backend architecture."),
    ("fred", "Fred Patton", "Auth0", "Developer Advocate", None,
     "Developer Advocate at Auth0 specializing in AI agents and authentication."),
    ("ryan", "Ryan Vogel", "Databricks", "Software Engineer", None,
     "Software Engineer at Databricks working on AI integrations."),
    ("bryce", "Bryce Kalow", "Clerk", "Developer Experience", "brycekalow",
     "Developer Experience at Clerk. Focused on making authentication seamless for developers."),
    ("luke", "Luke Sandberg", "Vercel", "Software Engineer", None,
     "Software Engineer at Vercel working on Turbopack. Making JavaScript bundling fast."),
    ("francois", "François Best", "47ng", "Founder", "fortysevenfx",
     "Founder of 47ng. Creator of nuqs for type-safe URL state management."),
    ("christopher", "Christopher Burns", "Consent", "Founder", None,
     "Founder at Consent. Making privacy compliance developer-friendly."),
    ("lydia", "Lydia Hallie", "Bun", "Developer Advocate", "lydiahallie",
     "Developer Advocate at Bun. Known for visual explanations of JavaScript concepts."),
    ("tim", "Tim Neutkens", "Vercel", "Next.js Lead", "timneutkens",
     "Lead maintainer of Next.js. Building the future of React frameworks at Vercel."),
    ("kapehe", "Kapehe Sevilleja", "Vercel", "Developer Advocate", "kapaborat",
     "Developer Advocate at Vercel. Passionate about teaching and developer education."),
    ("goncy", "Goncy Pozzo", "Vercel", "Developer Advocate", "gonzypozzo",
     "Developer Advocate at Vercel. Teaching Next.js best practices and migrations."),
    ("james", "James Ward", "AWS", "Developer Advocate", "_JamesWard",
     "Developer Advocate at AWS. Building full stack applications with cloud services."),
]

# id, title, speaker, track, room, start offset (min), end offset (min), level, format, description
_TALKS = [
    ("coding-future", "Coding for the Future", "swyx", "ai", "main", 0, 25, "intermediate", "panel",
     "A panel discussion on how AI is transforming the way we write code. Featuring perspectives "
     "from Vercel, OpenAI, FactoryAI, and Latent.Space on the future of software development."),
    ("composition-caching", "Composition, Caching, and Architecture in Modern Next.js", "aurora",
     "fullstack", "main", 30, 60, "advanced", "talk",
     "Deep dive into composition patterns, caching strategies, and architectural decisions for "
     "building scalable Next.js applications."),
    ("nextjs-ai-agents", "Next.js for AI Agents", "jude", "ai", "main", 65, 90, "intermediate", "talk",
     "Learn how to build AI agents with Next.js and the Vercel AI SDK. Cover tool calling, "
     "streaming responses, and building production-ready AI applications."),
    ("clankers-content", "Clankers and Content Operations", "simeon", "fullstack", "main", 95, 115,
     "beginner", "talk",
     "Explore content operations and how modern headless CMS solutions integrate with Next.js."),
    ("course-platform", "Build. Scale. Teach: Architecting a Production-Ready Course Platform",
     "ankita", "fullstack", "main", 120, 145, "intermediate", "talk",
     "Learn how to architect and scale a modern course platform with Next.js. Covers "
     "authentication, payments, video streaming, and content delivery at scale."),
    ("reactive-state", "Reactive State for the Backend", "rhys", "platform", "main", 150, 165,
     "advanced", "talk",
     "Explore reactive state management patterns for backend services."),
    ("ambient-agents", "Ambient Agents on Next.js: Seven Levers for Token Efficiency", "fred", "ai",
     "main", 180, 205, "advanced", "talk",
     "Master token efficiency when building AI agents. Learn seven key strategies to reduce costs "
     "and improve performance of your AI-powered Next.js applications."),
    ("integrated-ai", "Fully Integrated AI that Actually Ships", "ryan", "ai", "main", 210, 230,
     "intermediate", "talk",
     "Learn how to ship AI features that work in production. Cover error handling, fallbacks, "
     "monitoring, and integration patterns for reliable AI applications."),
    ("dx-ai-age", "Developer Experience in the Age of AI", "bryce", "dx", "main", 240, 265,
     "beginner", "talk",
     "How AI is changing developer experience and what it means for tools, authentication, and "
     "the future of building applications."),
    ("turbo-yet", "Are We Turbo Yet?", "luke", "perf", "main", 270, 295, "intermediate", "talk",
     "The state of Turbopack and the future of JavaScript bundling."),
    ("type-safe-url", "Type-safe URL State in Next.js with nuqs", "francois", "dx", "main", 300, 325,
     "intermediate", "talk",
     "Master URL state management with nuqs. Build type-safe, shareable URL state that works with "
     "React Server Components and the App Router."),
    ("consent-banner", "Why Your Consent Banner Should Be in Your Bundle", "christopher", "platform",
     "main", 330, 355, "beginner", "talk",
     "Rethink privacy compliance for modern web apps and why consent management belongs in your "
     "application bundle."),
    ("bun-speed", "Next.js at the Speed of Bun", "lydia", "perf", "main", 360, 380, "intermediate",
     "talk",
     "Explore how Bun can supercharge your Next.js development experience. Faster installs, "
     "faster builds, and a better developer experience."),
    ("open-web", "The Open Web", "tim", "platform", "main", 390, 430, "beginner", "panel",
     "A panel featuring the creators of Next.js, Svelte, and Nuxt discussing the future of the "
     "open web, framework collaboration, and web standards."),
    ("closing-keynote", "Closing Keynote", "kapehe", "platform", "main", 435, 440, "beginner",
     "keynote",
     "Closing remarks and a look ahead to the future of Next.js and the web platform."),
    ("aws-ai-workshop", "Building Full Stack AI Applications with Vercel and AWS", "james", "ai",
     "workshop", 120, 150, "intermediate", "workshop",
     "Hands-on workshop building AI applications that combine Vercel's frontend platform with AWS "
     "backend services."),
    ("nextjs16-migration", "Hands On: How to Migrate to Next.js 16 and 'use cache'", "goncy",
     "fullstack", "workshop", 240, 280, "intermediate", "workshop",
     "Step-by-step workshop on migrating your application to Next.js 16. Learn the new caching "
     "APIs, 'use cache' directive, and migration strategies."),
]


def seed_catalog(catalog: Catalog) -> None:
    for track_id, name, color, description in _TRACKS:
        catalog.tracks.add(Track(id=track_id, name=name, color=color, description=description))

    for room_id, name, capacity in _ROOMS:
        catalog.rooms.add(Room(id=room_id, name=name, capacity=capacity))

    for speaker_id, name, company, role, twitter, bio in _SPEAKERS:
        catalog.speakers.add(
            Speaker(
                id=speaker_id,
                name=name,
                bio=bio,
                avatar=f"https://avatars.example.com/{speaker_id}.png",
                company=company,
                role=role,
                twitter=twitter,
            )
        )

    for talk_id, title, speaker, track, room, start, end, level, fmt, description in _TALKS:
        catalog.talks.add(
            Talk(
                id=talk_id,
                title=title,
                description=description,
                speaker_id=speaker,
                track_id=track,
                room_id=room,
                start_time=CONFERENCE_START + timedelta(minutes=start),
                end_time=CONFERENCE_START + timedelta(minutes=end),
                level=TalkLevel(level),
                format=TalkFormat(fmt),
            )
        )


def create_catalog() -> Catalog:
    """Return a Catalog pre-loaded with the conference programme."""
    catalog = Catalog()
    seed_catalog(catalog)
    return catalog
