"""Template model: a named set of source documents plus a field schema."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any

from fillable.model.field import FieldSchema, FieldSchemaError, parse_fields


@dataclass(slots=True)
class Template:
    name: str
    fields: list[FieldSchema] = field(default_factory=list)
    documents: list[Path] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base_dir: Path | None = None) -> Template:
        if not isinstance(data, Mapping):
            raise FieldSchemaError("Template must be an object")
        name = data.get("name")
        if not name or not isinstance(name, str):
            raise FieldSchemaError("Template is missing a name")

        base = base_dir or Path.cwd()
        documents = [base / str(entry) for entry in data.get("documents") or []]
        return cls(name=name, fields=parse_fields(data.get("fields") or []), documents=documents)


def load_template(path: str | Path) -> Template:
    source = Path(path)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise FieldSchemaError(f"Failed to read template: {source}") from exc
    return Template.from_dict(data, base_dir=source.parent)
