from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError
from .formats import TextFormat, format_name_for_path, get_format
from .options import StoreOptions

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Codec(Protocol[T]):
    """
    Opaque encode/decode pair over the stored value type.
    """

    def encode(self, value: T) -> bytes:
        """Serialize value; raise EncodeError if it is not representable."""
        ...

    def decode(self, data: bytes) -> T:
        """Deserialize data; raise DecodeError on malformed or mismatched input."""
        ...


class ModelCodec(Generic[T]):
    """
    Codec backed by a pydantic TypeAdapter and a text format.

    Works for anything pydantic can validate: BaseModel subclasses, dataclasses,
    TypedDicts, plain dict[str, Any], ...
    """

    def __init__(self, schema: Any, fmt: TextFormat, *, encoding: str = "utf-8"):
        self._schema = schema
        self._adapter: TypeAdapter[T] = TypeAdapter(schema)
        self._format = fmt
        self._encoding = encoding

    @property
    def schema(self) -> Any:
        return self._schema

    @property
    def format(self) -> TextFormat:
        return self._format

    def encode(self, value: T) -> bytes:
        try:
            # warnings="error": a value that no longer matches the schema must not be written
            doc = self._adapter.dump_python(value, mode="json", warnings="error")
            text = self._format.dumps(doc)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(f"cannot encode {type(value).__name__} as {self._format.name}: {e}") from e
        return text.encode(self._encoding)

    def decode(self, data: bytes) -> T:
        try:
            text = data.decode(self._encoding)
        except UnicodeDecodeError as e:
            raise DecodeError(f"content is not valid {self._encoding}: {e}") from e
        try:
            doc = self._format.loads(text)
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"malformed {self._format.name}: {e}") from e
        try:
            return self._adapter.validate_python(doc)
        except (ValidationError, RecursionError) as e:
            raise DecodeError(f"content does not match {_schema_name(self._schema)}: {e}") from e

    def __repr__(self) -> str:
        return f"ModelCodec({_schema_name(self._schema)}, {self._format.name})"


def _schema_name(schema: Any) -> str:
    return getattr(schema, "__name__", None) or repr(schema)


def codec_for(schema: Any, path: Path, *, fmt: str | None, options: StoreOptions) -> ModelCodec[Any]:
    name = fmt or format_name_for_path(path, options.default_format)
    codec: ModelCodec[Any] = ModelCodec(schema, get_format(name, json_indent=options.json_indent))
    logger.debug("codec for %s: %r", path, codec)
    return codec
