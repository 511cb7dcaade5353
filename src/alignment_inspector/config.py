"""
YAML configuration for alignment-inspector.

Example::

    documents:
      alignments: data/alignments.json
      glossary: data/glossary.json
      rules: data/rules.json
    patches: ~/.alignment_inspector_patches.db
    log_level: INFO
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from alignment_inspector.exceptions import ConfigError
from alignment_inspector.models import DocumentKind
from alignment_inspector.storage import DEFAULT_PATCH_DB

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class InspectorConfig:
    """Resolved configuration."""
    documents: Dict[DocumentKind, Path] = field(default_factory=dict)
    patches: Path = DEFAULT_PATCH_DB
    log_level: str = "WARNING"
    source_file: Optional[Path] = None

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level)


def load_config(source: Union[str, Path, Dict[str, Any]]) -> InspectorConfig:
    """Load configuration from a YAML file, YAML string or dictionary.

    Args:
        source: Path to YAML file, YAML string, or parsed dictionary

    Returns:
        InspectorConfig object

    Raises:
        ConfigError: If the YAML cannot be parsed or has the wrong shape
        FileNotFoundError: If the file does not exist
    """
    source_path: Optional[Path] = None

    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        source_path = Path(source)
        if not source_path.exists():
            raise FileNotFoundError(f"File not found: {source_path}")
        with open(source_path, "r", encoding="utf-8") as f:
            data = _safe_load(f)
    else:
        data = _safe_load(source)

    return _parse_config(data, source_path)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s or ":" in s.split("/")[0]:
        return False
    return "/" in s or "\\" in s or s.endswith((".yaml", ".yml"))


def _safe_load(stream: Any) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def _resolve_path(value: Any, name: str, base: Optional[Path]) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"Field {name!r} must be a non-empty string")
    path = Path(value).expanduser()
    if base is not None and not path.is_absolute():
        path = base / path
    return path


def _parse_config(data: Dict[str, Any], source_path: Optional[Path]) -> InspectorConfig:
    base = source_path.parent if source_path else None
    config = InspectorConfig(source_file=source_path)

    documents = data.get("documents") or {}
    if not isinstance(documents, dict):
        raise ConfigError("Field 'documents' must be a mapping")
    for name, value in documents.items():
        try:
            kind = DocumentKind(name)
        except ValueError:
            raise ConfigError(
                f"Unknown document {name!r}; expected one of "
                f"{', '.join(k.value for k in DocumentKind)}"
            ) from None
        config.documents[kind] = _resolve_path(value, f"documents.{name}", base)

    if data.get("patches") is not None:
        config.patches = _resolve_path(data["patches"], "patches", base)

    log_level = data.get("log_level")
    if log_level is not None:
        if not isinstance(log_level, str) or log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"Field 'log_level' must be one of {sorted(_LOG_LEVELS)}")
        config.log_level = log_level.upper()

    return config
