from __future__ import annotations

from dataclasses import dataclass

VALID_PARSERS = frozenset({"html.parser", "lxml", "lxml-xml"})


@dataclass(frozen=True)
class Settings:
    fragment_parser: str = "html.parser"
    document_parser: str = "lxml"
    text_separator: str = " "

    def __post_init__(self) -> None:
        if self.fragment_parser not in VALID_PARSERS:
            raise ValueError(f"Invalid settings.fragment_parser '{self.fragment_parser}', must be one of {sorted(VALID_PARSERS)}")
        if self.document_parser not in VALID_PARSERS:
            raise ValueError(f"Invalid settings.document_parser '{self.document_parser}', must be one of {sorted(VALID_PARSERS)}")


DEFAULT_SETTINGS = Settings()
