"""CLI configuration loader."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from html_query.config import VALID_PARSERS, Settings
from html_query.logging import LEVELS

DEFAULT_CONFIG_PATH = Path.home() / ".html-query" / "config.yaml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class CLIConfig:
    log_level: str = "WARNING"
    json_logs: bool = False
    fragment_parser: str = "html.parser"
    document_parser: str = "lxml"
    indent: int = 2

    @classmethod
    def load(cls, path: Path | None = None) -> CLIConfig:
        """Load config from a YAML file, then apply environment overrides."""
        env_path = os.getenv("HTML_QUERY_CONFIG")
        cfg_path = path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)

        raw: dict[str, Any] = {}
        if cfg_path.exists():
            loaded = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
            if loaded is not None and not isinstance(loaded, dict):
                raise ValueError(f"Config must be an object: {cfg_path}")
            raw = loaded or {}

        log_level = str(os.getenv("HTML_QUERY_LOG_LEVEL") or raw.get("log_level", "WARNING")).upper()
        if log_level not in LEVELS:
            raise ValueError(f"Invalid config.log_level '{log_level}', must be one of {sorted(LEVELS)}")

        json_logs = _coerce_bool(os.getenv("HTML_QUERY_JSON_LOGS", raw.get("json_logs", False)), "json_logs")

        fragment_parser = str(os.getenv("HTML_QUERY_PARSER") or raw.get("fragment_parser", "html.parser"))
        document_parser = str(raw.get("document_parser", "lxml"))
        for key, value in (("fragment_parser", fragment_parser), ("document_parser", document_parser)):
            if value not in VALID_PARSERS:
                raise ValueError(f"Invalid config.{key} '{value}', must be one of {sorted(VALID_PARSERS)}")

        indent = raw.get("indent", 2)
        if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
            raise ValueError("config.indent must be a non-negative integer")

        return cls(
            log_level=log_level,
            json_logs=json_logs,
            fragment_parser=fragment_parser,
            document_parser=document_parser,
            indent=indent,
        )

    def settings(self) -> Settings:
        return Settings(fragment_parser=self.fragment_parser, document_parser=self.document_parser)


def _coerce_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE:
        return True
    if isinstance(value, str) and value.strip().lower() in _FALSE:
        return False
    raise ValueError(f"Missing/invalid config.{key}")
