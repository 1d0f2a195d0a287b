from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

import toml

from .errors import UnknownFormatError


class TextFormat(Protocol):
    """
    A text serialization format over JSON-like documents (dicts, lists, scalars).
    """

    name: str
    suffixes: tuple[str, ...]

    def loads(self, text: str) -> Any:
        """Parse text; raise ValueError on malformed input."""
        ...

    def dumps(self, doc: Any) -> str:
        """Render a document; raise TypeError/ValueError if it cannot be represented."""
        ...


class TomlFormat(TextFormat):
    name = "toml"
    suffixes = (".toml",)

    def loads(self, text: str) -> Any:
        # toml.TomlDecodeError is a ValueError
        return toml.loads(text)

    def dumps(self, doc: Any) -> str:
        if not isinstance(doc, dict):
            raise TypeError(f"a TOML document must be a table, got {type(doc).__name__}")
        _reject_none(doc, "")
        text = toml.dumps(doc)
        # toml.dumps mangles some strings (control characters) without complaint;
        # refuse anything that does not read back as the same document.
        try:
            reparsed = toml.loads(text)
        except ValueError as e:
            raise ValueError(f"document cannot be represented in TOML: {e}") from e
        if reparsed != doc:
            raise ValueError("document cannot be represented in TOML (it does not read back unchanged)")
        return text


def _reject_none(node: Any, where: str) -> None:
    # TOML has no null; toml.dumps silently drops such keys.
    if node is None:
        raise TypeError(f"TOML cannot represent null at {where or '<root>'}")
    if isinstance(node, dict):
        for key, value in node.items():
            _reject_none(value, f"{where}.{key}" if where else str(key))
    elif isinstance(node, list):
        for i, value in enumerate(node):
            _reject_none(value, f"{where}[{i}]")


class JsonFormat(TextFormat):
    name = "json"
    suffixes = (".json",)

    def __init__(self, *, indent: int = 2, sort_keys: bool = True):
        self.indent = indent
        self.sort_keys = sort_keys

    def loads(self, text: str) -> Any:
        return json.loads(text)

    def dumps(self, doc: Any) -> str:
        return json.dumps(doc, indent=self.indent, sort_keys=self.sort_keys) + "\n"


def get_format(name: str, *, json_indent: int = 2) -> TextFormat:
    key = name.strip().lower()
    if key == TomlFormat.name:
        return TomlFormat()
    if key == JsonFormat.name:
        return JsonFormat(indent=json_indent)
    raise UnknownFormatError(f"unknown settings format {name!r} (expected 'toml' or 'json')")


def format_name_for_path(path: Path, default: str) -> str:
    suffix = path.suffix.lower()
    for fmt in (TomlFormat, JsonFormat):
        if suffix in fmt.suffixes:
            return fmt.name
    return default
