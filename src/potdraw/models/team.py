"""Team, Group and Slot models for potdraw."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Team(BaseModel):
    """A club entered into the draw. Immutable once the draw starts."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique team identifier, e.g. 'man-city'")
    name: str = Field(description="Display name")
    group_id: str = Field(description="Id of the owning pot")
    seed: int = Field(default=1, ge=1, description="1-based position within the pot")

    def __str__(self) -> str:
        return self.name


class Group(BaseModel):
    """A pot of teams. Opponent quotas are counted per group."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    label: str = Field(description="Display label, e.g. 'Pot 1'")
    position: int = Field(default=0, ge=0, description="Ordinal used for tie-breaks and reveal order")
    teams: tuple[Team, ...] = Field(default_factory=tuple)

    @property
    def size(self) -> int:
        return len(self.teams)

    @property
    def team_ids(self) -> list[str]:
        return [t.id for t in self.teams]


class Slot(BaseModel):
    """A day/time label a round's match can be played in."""
    model_config = ConfigDict(frozen=True)

    day: str
    time: str

    def __str__(self) -> str:
        return f"{self.day} {self.time}"
