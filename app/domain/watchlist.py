"""
Watch-list entries (doramas) and progress reconciliation.

The device keeps its own copy of the list; storage occasionally comes back
with default progress (episode 1 / season 1) after a failed write. The caller
passes that copy in as `prior` and the later progress wins.
"""
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

STATUS_WATCHING = "Watching"
STATUS_COMPLETED = "Completed"
STATUS_PLAN_TO_WATCH = "Plan to Watch"

LIST_WATCHING = "watching"
LIST_FAVORITES = "favorites"
LIST_COMPLETED = "completed"
VALID_LISTS = (LIST_WATCHING, LIST_FAVORITES, LIST_COMPLETED)

_LIST_TO_DB_STATUS = {
    LIST_WATCHING: "watching",
    LIST_FAVORITES: "plan_to_watch",
    LIST_COMPLETED: "completed",
}

# Ids not yet confirmed by storage
TEMP_ID_PREFIXES = ("temp-", "local-")

DEFAULT_EPISODES_WATCHED = 1
DEFAULT_TOTAL_EPISODES = 16
DEFAULT_SEASON = 1


def status_from_db(status: str | None) -> str:
    if not status:
        return STATUS_PLAN_TO_WATCH
    s = status.lower().strip()
    if s in ("watching", "assistindo"):
        return STATUS_WATCHING
    if s in ("completed", "finalizado"):
        return STATUS_COMPLETED
    return STATUS_PLAN_TO_WATCH


def status_to_db(status: str) -> str:
    if status == STATUS_WATCHING:
        return "watching"
    if status == STATUS_COMPLETED:
        return "completed"
    return "plan_to_watch"


def list_type_to_db_status(list_type: str) -> str:
    return _LIST_TO_DB_STATUS.get(list_type, "watching")


def is_temporary_id(dorama_id: str) -> bool:
    return str(dorama_id).startswith(TEMP_ID_PREFIXES)


@dataclass(frozen=True)
class Dorama:
    id: str
    title: str
    genre: str = "Dorama"
    thumbnail: str | None = None
    status: str = STATUS_PLAN_TO_WATCH
    episodes_watched: int = DEFAULT_EPISODES_WATCHED
    total_episodes: int = DEFAULT_TOTAL_EPISODES
    season: int = DEFAULT_SEASON
    rating: int = 0

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "Dorama":
        return cls(
            id=str(row.get("id")),
            title=row.get("title") or "",
            genre=row.get("genre") or "Dorama",
            thumbnail=row.get("thumbnail"),
            status=status_from_db(row.get("status")),
            episodes_watched=row.get("episodes_watched") or DEFAULT_EPISODES_WATCHED,
            total_episodes=row.get("total_episodes") or DEFAULT_TOTAL_EPISODES,
            season=row.get("season") or DEFAULT_SEASON,
            rating=row.get("rating") or 0,
        )


@dataclass
class WatchLists:
    watching: list[Dorama]
    favorites: list[Dorama]
    completed: list[Dorama]

    def all_items(self) -> list[Dorama]:
        return [*self.watching, *self.favorites, *self.completed]

    @classmethod
    def empty(cls) -> "WatchLists":
        return cls([], [], [])

    @classmethod
    def split(cls, items: list[Dorama]) -> "WatchLists":
        return cls(
            watching=[d for d in items if d.status == STATUS_WATCHING],
            favorites=[d for d in items if d.status == STATUS_PLAN_TO_WATCH],
            completed=[d for d in items if d.status == STATUS_COMPLETED],
        )


def _find_prior(prior: list[Dorama], item: Dorama) -> Dorama | None:
    for candidate in prior:
        if candidate.title == item.title or candidate.id == item.id:
            return candidate
    return None


def reconcile_progress(
    stored: list[Dorama],
    prior: list[Dorama],
) -> tuple[list[Dorama], list[Dorama]]:
    """
    Prefer the prior (device) value when it represents later progress.

    Returns (merged items, items whose stored progress must be repaired).
    Progress never goes down: only higher episode/season counts are taken.
    """
    merged: list[Dorama] = []
    healed: list[Dorama] = []
    for item in stored:
        match = _find_prior(prior, item)
        if match is None:
            merged.append(item)
            continue

        changes = {}
        if match.episodes_watched > item.episodes_watched:
            changes["episodes_watched"] = match.episodes_watched
        if match.season > item.season:
            changes["season"] = match.season

        if changes:
            item = replace(item, **changes)
            healed.append(item)
        merged.append(item)
    return merged, healed
