"""Normalize raw GW2 WvW match payloads into MatchMetrics."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from ..models import TEAM_COLORS, MatchMetrics, TeamColor, TeamSnapshot
from ..utils.rounding import round_half_up

# Match ids are "<region>-<tier>": 1-x is North America, 2-x is Europe
REGION_BY_PREFIX = {"1": "NA", "2": "EU"}
UNKNOWN_POPULATION = "Unknown"


def match_region(match_id: str) -> str | None:
    return REGION_BY_PREFIX.get(match_id.split("-", 1)[0])


def match_tier(match_id: str) -> int | None:
    _, _, tier = match_id.partition("-")
    return int(tier) if tier.isdigit() else None


def match_family(match_id: str) -> str:
    """Family key used to partition history snapshots (``na``, ``eu``, ...)."""
    region = match_region(match_id)
    if region:
        return region.lower()
    return match_id.split("-", 1)[0]


class WorldDirectory:
    """Resolves the world ids reported by a match to display names.

    Alliance worlds carry an ``associated_world_id`` pointing at the id the
    matches feed reports; they win over a direct id match. Unknown ids fall
    back to ``World {id}``.
    """

    def __init__(self, worlds: Iterable[dict[str, Any]] = ()) -> None:
        self._by_id: dict[int, dict[str, Any]] = {}
        self._by_associated: dict[int, dict[str, Any]] = {}
        for world in worlds:
            if "id" in world:
                self._by_id.setdefault(world["id"], world)
            associated = world.get("associated_world_id")
            if associated is not None:
                self._by_associated.setdefault(associated, world)

    def resolve(self, world_id: int) -> tuple[str, str]:
        """Return ``(name, population)`` for a world id."""
        world = self._by_associated.get(world_id) or self._by_id.get(world_id)
        if world is None:
            return f"World {world_id}", UNKNOWN_POPULATION
        return (
            world.get("name") or f"World {world_id}",
            world.get("population") or UNKNOWN_POPULATION,
        )


def _count(section: Any, color: TeamColor) -> int:
    if not isinstance(section, dict):
        return 0
    return int(section.get(color) or 0)


def _format_team(match: dict[str, Any], color: TeamColor, worlds: WorldDirectory) -> TeamSnapshot:
    skirmishes = match.get("skirmishes") or []
    total_score = sum(_count(s.get("scores"), color) for s in skirmishes)
    skirmish_score = _count(skirmishes[-1].get("scores"), color) if skirmishes else 0

    kills = _count(match.get("kills"), color)
    deaths = _count(match.get("deaths"), color)
    victory_points = _count(match.get("victory_points"), color)
    ratio = float(round_half_up(kills / deaths, 2)) if deaths > 0 else float(kills)
    world_id = _count(match.get("worlds"), color)
    world_name, world_population = worlds.resolve(world_id)

    return TeamSnapshot(
        kills=kills,
        deaths=deaths,
        victory_points=victory_points,
        total_score=total_score,
        skirmish_score=skirmish_score,
        ratio=ratio,
        activity=kills + deaths + victory_points,
        world_id=world_id,
        world_name=world_name,
        world_population=world_population,
    )


def format_matches(
    raw_matches: list[dict[str, Any]],
    worlds: Iterable[dict[str, Any]] = (),
) -> dict[str, MatchMetrics]:
    """Map raw API matches to ``{match_id: MatchMetrics}``.

    Missing counters default to 0; non-numeric counters raise.
    """
    directory = WorldDirectory(worlds)
    formatted: dict[str, MatchMetrics] = {}
    for match in raw_matches:
        match_id = str(match["id"])
        formatted[match_id] = MatchMetrics(
            id=match_id,
            region=match_region(match_id),
            tier=match_tier(match_id),
            start_time=match.get("start_time"),
            end_time=match.get("end_time"),
            **{color: _format_team(match, color, directory) for color in TEAM_COLORS},
        )
    return formatted


def group_by_family(matches: dict[str, MatchMetrics]) -> dict[str, dict[str, MatchMetrics]]:
    grouped: dict[str, dict[str, MatchMetrics]] = defaultdict(dict)
    for match_id, match in matches.items():
        grouped[match_family(match_id)][match_id] = match
    return dict(grouped)
