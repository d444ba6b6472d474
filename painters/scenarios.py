from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from painters.api.models import Character, CharacterAction, Scenario
from painters.errors import MalformedResponse, ScenarioValidationError

CAST_SIZE = 3

_DEFAULT_TITLE = "A New Story"
_DEFAULT_SCENE_EMOJI = "🎨"
_DEFAULT_CHARACTER_EMOJI = "🙂"
_DEFAULT_ACTION_ICON = "✨"


def default_scenario() -> Scenario:
    """The built-in scenario used at first start and whenever generation fails.

    Returns a fresh copy each time so callers can't mutate the shared fallback.
    """

    return Scenario(
        title="The Kitten in the Tree",
        goal="Help the little kitten get down from the tall tree safely!",
        scene_emoji="🌳",
        character_keys=["CHILD", "CAT", "FIREFIGHTER"],
        characters={
            "CHILD": Character(
                name="Mia",
                emoji="👧",
                thought="Oh no, the kitten is stuck! I'm too small to reach that high branch.",
                action=CharacterAction(name="Call for the kitten", icon="📣"),
            ),
            "CAT": Character(
                name="Whiskers",
                emoji="🐱",
                thought="It's so high up here! I'm scared to jump down.",
                action=CharacterAction(name="Meow loudly", icon="🔊"),
            ),
            "FIREFIGHTER": Character(
                name="Sam",
                emoji="🧑‍🚒",
                thought="I have a tall ladder on my truck. I can climb up and help!",
                action=CharacterAction(name="Climb the ladder", icon="🪜"),
            ),
        },
        solution="FIREFIGHTER",
    )


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _normalize_character(key: str, raw: Any) -> Character:
    if not isinstance(raw, dict):
        raise MalformedResponse(f"Character {key!r} is not an object")

    action = raw.get("action")
    if not isinstance(action, dict):
        raise MalformedResponse(f"Character {key!r} has no action object")

    thought = _text(raw.get("thought"))
    action_name = _text(action.get("name"))
    if not thought:
        raise ScenarioValidationError(f"Character {key!r} has an empty thought")
    if not action_name:
        raise ScenarioValidationError(f"Character {key!r} has an empty action name")

    return Character(
        name=_text(raw.get("name")) or key.title(),
        emoji=_text(raw.get("emoji")) or _DEFAULT_CHARACTER_EMOJI,
        thought=thought,
        action=CharacterAction(name=action_name, icon=_text(action.get("icon")) or _DEFAULT_ACTION_ICON),
    )


def normalize_scenario(data: Any) -> Scenario:
    """Validate a provider reply and turn it into a Scenario.

    Accepts both `sceneEmoji` (wire format) and `scene_emoji`. Cosmetic fields
    (title, emojis, icons) get defaults when missing; the goal, the three
    characters and the solution key are required.

    Raises MalformedResponse for structurally broken replies and
    ScenarioValidationError for replies that break scenario invariants.
    A solution key that doesn't name a character is rejected, never guessed.
    """

    if not isinstance(data, dict):
        raise MalformedResponse("Expected a JSON object")

    goal = _text(data.get("goal"))
    if not goal:
        raise MalformedResponse("Missing/invalid 'goal' field")

    raw_characters = data.get("characters")
    if not isinstance(raw_characters, dict):
        raise MalformedResponse("Missing/invalid 'characters' object")

    keys = [str(k).strip() for k in raw_characters.keys()]
    if any(not k for k in keys):
        raise ScenarioValidationError("Character keys must be non-empty")
    if len(set(keys)) != len(keys):
        raise ScenarioValidationError("Character keys must be distinct")
    if len(keys) != CAST_SIZE:
        raise ScenarioValidationError(f"Expected exactly {CAST_SIZE} characters, got {len(keys)}")

    solution = _text(data.get("solution"))
    if solution not in keys:
        raise ScenarioValidationError(f"Solution {solution!r} is not one of {keys}")

    characters = {key: _normalize_character(key, raw) for key, raw in zip(keys, raw_characters.values())}

    scene_emoji = data.get("sceneEmoji")
    if scene_emoji is None:
        scene_emoji = data.get("scene_emoji")

    try:
        return Scenario(
            title=_text(data.get("title")) or _DEFAULT_TITLE,
            goal=goal,
            scene_emoji=_text(scene_emoji) or _DEFAULT_SCENE_EMOJI,
            character_keys=keys,
            characters=characters,
            solution=solution,
        )
    except ValidationError as e:
        raise ScenarioValidationError(str(e)) from e
