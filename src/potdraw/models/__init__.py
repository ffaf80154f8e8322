"""Model exports for potdraw."""

from potdraw.models.pairing import Match, MatchKey, PairingGraph, RevealItem
from potdraw.models.schedule import Round, Schedule, SlotAssignment
from potdraw.models.team import Group, Slot, Team

__all__ = [
    "Group",
    "Match",
    "MatchKey",
    "PairingGraph",
    "RevealItem",
    "Round",
    "Schedule",
    "Slot",
    "SlotAssignment",
    "Team",
]
