"""Topic names and partitionless topic metadata."""

from __future__ import annotations

import enum
import string
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar

TOPIC_NAME_MAX_LEN_BYTES = 255

EMPTY_TOPIC_NAME = "topic name must not be empty"
INVALID_TOPIC_NAME_CHARACTER = (
    "topic name must contain only ASCII letters, numbers, dots, underscores, or hyphens"
)
TOPIC_NAME_TOO_LONG = "topic name must be at most 255 bytes"

_ALLOWED_CHARACTERS = frozenset(string.ascii_letters + string.digits + "._-")


class TopicError(Exception):
    """Base class for topic model errors."""


class InvalidTopicNameError(TopicError, ValueError):
    """Raised when a topic name fails validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"invalid topic name: {reason}")
        self.reason = reason


def parse_topic_name(value: str) -> str:
    """Trim and validate a topic name, returning the normalised name."""
    name = value.strip()
    if not name:
        raise InvalidTopicNameError(EMPTY_TOPIC_NAME)
    if len(name.encode("utf-8")) > TOPIC_NAME_MAX_LEN_BYTES:
        raise InvalidTopicNameError(TOPIC_NAME_TOO_LONG)
    if not all(ch in _ALLOWED_CHARACTERS for ch in name):
        raise InvalidTopicNameError(INVALID_TOPIC_NAME_CHARACTER)
    return name


class TimeUnit(enum.Enum):
    """Resolution of a timestamp column."""

    SECOND = "s"
    MILLISECOND = "ms"
    MICROSECOND = "us"
    NANOSECOND = "ns"


@dataclass(frozen=True)
class DataType:
    """Logical type of a schema field."""

    kind: str
    unit: TimeUnit | None = None
    timezone: str | None = None

    BOOLEAN: ClassVar[DataType]
    INT32: ClassVar[DataType]
    INT64: ClassVar[DataType]
    FLOAT64: ClassVar[DataType]
    UTF8: ClassVar[DataType]
    BINARY: ClassVar[DataType]

    @classmethod
    def timestamp(cls, unit: TimeUnit, timezone: str | None = None) -> DataType:
        """Build a timestamp type with the given unit and optional timezone."""
        return cls("timestamp", unit, timezone)

    def __str__(self) -> str:
        if self.kind == "timestamp" and self.unit is not None:
            return f"timestamp[{self.unit.value}, {self.timezone or 'none'}]"
        return self.kind


DataType.BOOLEAN = DataType("boolean")
DataType.INT32 = DataType("int32")
DataType.INT64 = DataType("int64")
DataType.FLOAT64 = DataType("float64")
DataType.UTF8 = DataType("utf8")
DataType.BINARY = DataType("binary")


@dataclass(frozen=True)
class Field:
    """A named, typed column of a schema."""

    name: str
    data_type: DataType
    nullable: bool = True


@dataclass(frozen=True)
class Schema:
    """An ordered collection of fields."""

    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    def field(self, index: int) -> Field:
        """Return the field at the given position."""
        return self.fields[index]

    def field_names(self) -> list[str]:
        """Return the names of all fields in order."""
        return [f.name for f in self.fields]

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)


@dataclass(frozen=True)
class TopicDefinition:
    """Partitionless topic metadata: a validated name and its schema."""

    name: str
    schema: Schema

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", parse_topic_name(self.name))

    @classmethod
    def create(cls, name: str, schema: Schema) -> TopicDefinition:
        """Validate the name and build a topic definition."""
        return cls(name, schema)