"""Reading of the ``starter.json`` descriptor shipped at a starter's root."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from create_starter.errors import ParseError

STARTER_FILE = "starter.json"


class StarterDescriptor(BaseModel):
    """Contents of ``starter.json``. Only ``template`` is required."""

    model_config = ConfigDict(extra="allow", frozen=True)

    template: str = Field(..., description="Backend template applied by the app generator")


def read_starter_json(path: str | Path) -> StarterDescriptor:
    """Load and validate a ``starter.json`` file.

    Args:
        path: The descriptor file, or the directory that contains it.

    Raises:
        ParseError: If the file is missing, is not valid JSON, or lacks a
            string ``template`` field. The underlying error is chained.
    """
    file_path = Path(path)
    if file_path.is_dir():
        file_path = file_path / STARTER_FILE

    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Could not read {file_path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in {file_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError(f"{file_path} must contain a JSON object")

    try:
        return StarterDescriptor.model_validate(data, strict=True)
    except ValidationError as exc:
        raise ParseError(f"Invalid starter descriptor {file_path}: {exc}") from exc
