from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class CharacterAction(BaseModel):
    name: str = Field(..., min_length=1)
    icon: str = ""


class Character(BaseModel):
    name: str
    emoji: str = ""
    thought: str = Field(..., min_length=1)
    action: CharacterAction


class Scenario(BaseModel):
    title: str
    goal: str
    scene_emoji: str = ""

    # Explicit viewpoint order; the first entry is the default viewpoint.
    character_keys: list[str]
    characters: dict[str, Character]

    solution: str

    @model_validator(mode="after")
    def _check_cast(self) -> "Scenario":
        if len(self.characters) != 3:
            raise ValueError(f"Scenario must have exactly 3 characters, got {len(self.characters)}")
        if list(self.characters.keys()) != self.character_keys:
            raise ValueError("character_keys must list the character keys in order")
        if self.solution not in self.characters:
            raise ValueError(f"solution {self.solution!r} is not one of the character keys")
        return self

    @property
    def first_character_key(self) -> str:
        return self.character_keys[0]


class GameMode(StrEnum):
    intro = "intro"
    playing = "playing"
    success = "success"
    loading = "loading"


class SessionState(BaseModel):
    mode: GameMode = GameMode.intro
    scenario: Scenario
    active_character_key: str

    wrong_attempt_count: int = Field(default=0, ge=0)
    coach_hint: str | None = None

    # True while a hint request is in flight. Informational only.
    hint_pending: bool = False

    @property
    def active_character(self) -> Character:
        return self.scenario.characters[self.active_character_key]


class SelectViewpointRequest(BaseModel):
    character_key: str = Field(..., min_length=1)


class ActionResponse(BaseModel):
    solved: bool
    wrong_attempt_count: int
    hint_requested: bool
    state: SessionState
