# src/textdeck/parsing/normalizer.py
from __future__ import annotations
from typing import Any, Dict, Iterable, List

from textdeck.models.slide import Slide

MAX_ARGUMENTS = 5
PLACEHOLDER_CORE_IDEA = "Core idea"
PLACEHOLDER_ARGUMENT = "Add supporting arguments"

DEFAULT_SLIDE = {
    "title": "AI parsing result",
    "coreIdea": "Content extracted from the text",
    "arguments": ["Argument one: content one", "Argument two: content two", "Argument three: content three"],
}


def placeholder_title(position: int) -> str:
    return f"Slide {position}"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_mapping(candidate: Any) -> Dict[str, Any]:
    if isinstance(candidate, Slide):
        return candidate.model_dump(by_alias=True)
    if isinstance(candidate, dict):
        return candidate
    return {}


def clean_arguments(raw: Any) -> List[str]:
    """Strings only, blanks dropped, first MAX_ARGUMENTS kept, then case-insensitive de-dup in order."""
    if not isinstance(raw, (list, tuple)):
        return []
    kept = [a for a in raw if isinstance(a, str) and a.strip()][:MAX_ARGUMENTS]
    seen: set[str] = set()
    unique: List[str] = []
    for a in kept:
        key = a.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(a.strip())
    return unique


def normalize_slide(candidate: Any, position: int) -> Slide:
    c = _as_mapping(candidate)
    arguments = clean_arguments(c.get("arguments")) or [PLACEHOLDER_ARGUMENT]
    return Slide(
        id=str(position),
        title=_text(c.get("title")) or placeholder_title(position),
        coreIdea=_text(c.get("coreIdea")) or PLACEHOLDER_CORE_IDEA,
        arguments=arguments,
    )


def normalize_slides(candidates: Iterable[Any]) -> List[Slide]:
    """
    Canonical slide sequence from loosely-typed candidates.

    Never raises and never returns an empty list. Applying it to its own
    output yields an identical sequence.
    """
    slides = [normalize_slide(c, i) for i, c in enumerate(candidates or [], 1)]
    if not slides:
        slides = [normalize_slide(DEFAULT_SLIDE, 1)]
    return slides
