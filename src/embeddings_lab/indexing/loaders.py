"""
Readers for the lab's sample JSON files.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


UNTITLED_RECIPE = "Untitled Recipe"


@dataclass(frozen=True)
class SampleEmbedding:
    """A pre-computed embedding from a sample file."""

    activity: str
    embedding: list[float]


def _read_json(path: str | Path) -> Any:
    file_path = Path(path)
    if not file_path.is_file():
        raise ValueError(f"No such file: {file_path}")
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_recipe_titles(path: str | Path) -> list[str]:
    """Return the title of every recipe in a JSON array of recipe objects."""
    recipes = _read_json(path)
    if not isinstance(recipes, list):
        raise ValueError(f"Expected a JSON array of recipes in {path}")

    titles: list[str] = []
    for recipe in recipes:
        title = recipe.get("title") if isinstance(recipe, dict) else None
        titles.append(title if isinstance(title, str) and title else UNTITLED_RECIPE)
    return titles


def write_titles(titles: list[str], path: str | Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(titles, f, indent=2)


def load_sample_embeddings(path: str | Path) -> list[SampleEmbedding]:
    """Read ``[{"activity": ..., "embedding": [...]}, ...]``."""
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise ValueError(f"Expected a JSON array of embeddings in {path}")

    samples: list[SampleEmbedding] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Entry {index} in {path} is not an object.")
        activity = item.get("activity")
        embedding = item.get("embedding")
        if not isinstance(activity, str) or not isinstance(embedding, list):
            raise ValueError(
                f"Entry {index} in {path} needs `activity` and `embedding` fields."
            )
        samples.append(
            SampleEmbedding(
                activity=activity,
                embedding=[float(value) for value in embedding],
            )
        )
    return samples
