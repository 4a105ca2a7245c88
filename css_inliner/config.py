from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from .rules import AttributePolicy

TRUE_STRINGS = {"true", "1", "yes", "y", "on"}
FALSE_STRINGS = {"false", "0", "no", "n", "off", ""}


@dataclass
class InlinerConfig:
    directory: str | None = None
    base_url: str | None = None
    attribute_policy: AttributePolicy = AttributePolicy.PRESERVE
    importantize_preserved: bool = False
    handlebars: bool = False
    critical: bool = False
    less: bool = False

    def merged(self, overrides: Dict[str, Any]) -> "InlinerConfig":
        """Return a copy with non-None ``overrides`` applied."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data.update({key: value for key, value in overrides.items() if value is not None})
        return InlinerConfig(**_normalize_config(data))


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        raise ValueError(f"Expected a boolean, got {value!r}")
    return bool(value)


def _coerce_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_config(data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(InlinerConfig)}
    result: Dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            continue
        key_clean = key.strip().replace("-", "_")
        if key_clean not in known:
            continue
        if key_clean in ("directory", "base_url"):
            result[key_clean] = _coerce_optional_str(value)
        elif key_clean == "attribute_policy":
            result[key_clean] = AttributePolicy.coerce(value)
        else:
            result[key_clean] = _coerce_bool(value)
    return result


def load_config(path: Path | str | None) -> InlinerConfig:
    """Load inliner settings from a JSON file.

    A missing file gives the defaults. Unknown keys are ignored.
    """
    if path is None:
        return InlinerConfig()
    path = Path(path)
    if not path.exists():
        return InlinerConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return InlinerConfig(**_normalize_config(data))
