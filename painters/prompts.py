from __future__ import annotations

from pathlib import Path


class PromptLoadError(RuntimeError):
    pass


def prompts_dir() -> Path:
    # Shipped as package data so installed (non-editable) copies find them too.
    return Path(__file__).resolve().parent / "prompt_templates"


def load_prompt(name: str) -> str:
    """Load a prompt text file from `painters/prompt_templates/`.

    Example:
        load_prompt("scenario.txt")
    """

    path = prompts_dir() / name
    try:
        return path.read_text(encoding="utf-8").strip() + "\n"
    except FileNotFoundError as e:
        raise PromptLoadError(f"Prompt not found: {path}") from e


def render_prompt(name: str, **values: str) -> str:
    """Load a prompt and fill its `{placeholders}` with `values`."""

    return load_prompt(name).format(**values)
