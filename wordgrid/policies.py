"""Starter-authorization policies.

Historical versions of the game disagreed on who may start a match, so the rule
is selected by name instead of being hard-coded.
"""

from __future__ import annotations

from collections.abc import Callable

from wordgrid.models import Player
from wordgrid.models import Role
from wordgrid.models import Room
from wordgrid.models import Team

FIRST_TURN_TEAM = Team.RED

StarterPolicy = Callable[[Room, Player], bool]


def any_member(room: Room, requester: Player) -> bool:
    return True


def first_team_member(room: Room, requester: Player) -> bool:
    """Any player on the team that takes the first turn."""
    return requester.team is FIRST_TURN_TEAM


def first_team_agent(room: Room, requester: Player) -> bool:
    """A non-spymaster on the team that takes the first turn."""
    return requester.team is FIRST_TURN_TEAM and requester.role is Role.AGENT


STARTER_POLICIES: dict[str, StarterPolicy] = {
    "any_member": any_member,
    "first_team_member": first_team_member,
    "first_team_agent": first_team_agent,
}
DEFAULT_STARTER_POLICY = "first_team_member"


def resolve_starter_policy(name: str) -> StarterPolicy:
    try:
        return STARTER_POLICIES[name]
    except KeyError:
        known = ", ".join(sorted(STARTER_POLICIES))
        raise ValueError(f"unknown starter policy {name!r}; expected one of: {known}") from None


__all__ = [
    "DEFAULT_STARTER_POLICY",
    "FIRST_TURN_TEAM",
    "STARTER_POLICIES",
    "StarterPolicy",
    "any_member",
    "first_team_agent",
    "first_team_member",
    "resolve_starter_policy",
]
