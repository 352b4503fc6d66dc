from __future__ import annotations

import json
from pathlib import Path

from ..services import MergeRule


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Cannot read {path}: {exc.strerror or exc}") from exc


def read_names(path: Path) -> list[str]:
    """
    Read customer names from a file.

    A file whose content starts with "[" is parsed as a JSON array of
    strings; anything else is read as one name per line, skipping blanks.
    """
    text = _read_text(path)
    if text.lstrip().startswith("["):
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
            raise SystemExit(f"{path} must contain a JSON array of strings")
        return payload
    return [line.strip() for line in text.splitlines() if line.strip()]


def read_rules(path: Path, division: str | None = None) -> list[MergeRule]:
    text = _read_text(path)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {path}: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("rules", [])
    if not isinstance(payload, list):
        raise SystemExit(f"{path} must contain a list of merge rules")
    try:
        return [MergeRule.from_dict(item, division) for item in payload]
    except (AttributeError, ValueError) as exc:
        raise SystemExit(f"Invalid merge rule in {path}: {exc}") from exc
