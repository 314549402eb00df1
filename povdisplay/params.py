"""Adjustable parameters owned by patterns and effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class ParamType(Enum):
    INT = "int"
    BOOL = "bool"
    COLOR = "color"
    TEXT = "text"
    ENUM = "enum"


@dataclass(frozen=True)
class ParamOption:
    """One labelled choice of an enum parameter."""

    label: str
    value: int


@dataclass
class Param:
    """A named, typed value with its default and limits."""

    key: str
    label: str
    type: ParamType
    default: int = 0
    min: int = 0
    max: int = 0
    options: tuple[ParamOption, ...] = ()
    text_capacity: int = 0
    value: int | None = None
    text: str = ""
    _default_text: str = field(default="", init=False, repr=False)

    def __post_init__(self) -> None:
        self.options = tuple(self.options)
        if self.value is None:
            self.value = self.default
        self._default_text = ""

    def set_int(self, value: int) -> None:
        """Set a numeric value, normalised for the parameter's type."""
        value = int(value)
        if self.type is ParamType.TEXT:
            raise TypeError(f"parameter {self.key!r} holds text")
        if self.type is ParamType.BOOL:
            self.value = 1 if value else 0
        elif self.type is ParamType.COLOR:
            self.value = value & 0xFFFFFF
        elif self.type is ParamType.ENUM and self.options:
            if value not in {opt.value for opt in self.options}:
                raise ValueError(f"{value} is not an option of {self.key!r}")
            self.value = value
        else:
            self.value = max(self.min, min(self.max, value))

    def set_text(self, text: str) -> None:
        """Set the text of a text parameter, truncated to its capacity."""
        if self.type is not ParamType.TEXT:
            raise TypeError(f"parameter {self.key!r} does not hold text")
        if self.text_capacity > 0:
            raw = text.encode("utf-8")[: self.text_capacity - 1]
            text = raw.decode("utf-8", errors="ignore")
        self.text = text

    def reset(self) -> None:
        """Restore the default value; text parameters are emptied."""
        self.value = self.default
        if self.type is ParamType.TEXT:
            self.text = ""


class ParamOwner:
    """Something that exposes a list of parameters."""

    def __init__(self, params: Iterable[Param] = ()) -> None:
        self.params: list[Param] = list(params)

    def find_param(self, key: str) -> Param | None:
        return next((p for p in self.params if p.key == key), None)

    def reset_defaults(self) -> None:
        for p in self.params:
            p.reset()