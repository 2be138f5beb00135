"""Prompt loading and rendering helpers for report analysis."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

DEFAULT_PRESET = "osint_structured_v1"
FALLBACK_PRESET = "basic"
DEFAULT_FOCUS = (
    "operational changes, strikes, cross-border effects, aid/logistics, "
    "diplomacy/sanctions, domestic developments, cyber/info ops."
)
NO_FOCUS = "(none provided)"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def available_presets() -> list[str]:
    return sorted(
        path.stem
        for path in _PROMPT_DIR.glob("*.md")
        if path.stem not in ("chunk_instructions", "synthesis")
    )


def build_system_prompt(preset: str, start: str, end: str, q: str, focus: str = "") -> str:
    """Render the system instruction; unknown presets use the basic template."""
    name = preset if preset in available_presets() else FALLBACK_PRESET
    focus_text = focus.strip() or DEFAULT_FOCUS
    return _render_template(name, start=start, end=end, q=q, focus=focus_text)


def build_chunk_instructions(part: int, total: int, focus: str = "") -> str:
    return _render_template(
        "chunk_instructions",
        part=str(part),
        total=str(total),
        focus=focus.strip() or NO_FOCUS,
    )


def build_synthesis_instructions(focus: str = "") -> str:
    return _render_template("synthesis", focus=focus.strip() or NO_FOCUS)
