from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..domain.errors import InvalidArgument
from ..domain.models import AttributeValue, RecipeDocument

_TEXT_KEYS = ("id", "content")
_KEY_ALIASES = {"prepTime": "prep_time", "imageUrl": "image_url"}


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _as_attribute(key: str, value: Any) -> AttributeValue:
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise InvalidArgument(f"Attribute '{key}' must be a string, number, bool or list of strings")


def _build_content(entry: Dict[str, Any]) -> str:
    parts: List[str] = []
    for key in ("name", "description"):
        if isinstance(entry.get(key), str) and entry[key].strip():
            parts.append(entry[key].strip())
    for key, label in (("ingredients", "Ingredients"), ("instructions", "Instructions")):
        values = entry.get(key)
        if isinstance(values, list) and values:
            parts.append(f"{label}: " + ", ".join(str(v) for v in values))
    return "\n".join(parts)


def entry_to_document(entry: Any) -> RecipeDocument:
    """Convert one JSON object into a RecipeDocument.

    ``id`` falls back to a slug of ``name``; ``content`` falls back to text assembled
    from name, description, ingredients and instructions. Every other key becomes an
    attribute.
    """
    if not isinstance(entry, dict):
        raise InvalidArgument("Recipe entries must be JSON objects")
    rid = entry.get("id")
    if rid is None or not str(rid).strip():
        name = entry.get("name")
        if not isinstance(name, str) or not _slug(name):
            raise InvalidArgument("Recipe entry needs an 'id' or a 'name'")
        rid = _slug(name)
    content = entry.get("content")
    if not isinstance(content, str) or not content.strip():
        content = _build_content(entry)
    if not content.strip():
        raise InvalidArgument(f"Recipe '{rid}' has no text to embed")
    attributes: Dict[str, AttributeValue] = {}
    for key, value in entry.items():
        if key in _TEXT_KEYS or value is None:
            continue
        name = _KEY_ALIASES.get(key, key)
        attributes[name] = _as_attribute(name, value)
    return RecipeDocument(id=str(rid).strip(), content=content.strip(), attributes=attributes)


def load_recipe_documents(path: Path) -> List[RecipeDocument]:
    """Load recipes from a .json (array or {"recipes": [...]}) or .jsonl file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidArgument(f"Cannot read recipe file {path}: {exc}") from exc

    entries: List[Any] = []
    if path.suffix.lower() == ".jsonl":
        for idx, line in enumerate(text.splitlines()):
            if not line.strip():
                continue
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise InvalidArgument(f"Invalid JSON on line {idx + 1}: {exc}") from exc
    else:
        try:
            data = json.loads(text) if text.strip() else []
        except json.JSONDecodeError as exc:
            raise InvalidArgument(f"Invalid JSON file: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("recipes")
        if not isinstance(data, list):
            raise InvalidArgument("JSON input must be a list or contain a 'recipes' array")
        entries = data
    return [entry_to_document(e) for e in entries]


def first_documents(docs: Sequence[RecipeDocument], max_items: Optional[int]) -> List[RecipeDocument]:
    """The first ``max_items`` documents; all of them when ``max_items`` is None.

    Raises:
        InvalidArgument: ``max_items`` is not a positive integer.
    """
    if max_items is None:
        return list(docs)
    if isinstance(max_items, bool) or not isinstance(max_items, int) or max_items <= 0:
        raise InvalidArgument(f"max_items must be a positive integer, got {max_items!r}")
    return list(docs[:max_items])
