"""Base class of all display patterns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterable

from ..config import Config
from ..framebuffer import Framebuffer
from ..params import Param, ParamOwner


class Pattern(ParamOwner, ABC):
    """Draws a frame into the back buffer of a framebuffer."""

    name: ClassVar[str] = ""

    def __init__(self, params: Iterable[Param] = ()) -> None:
        super().__init__(params)

    @property
    def key(self) -> str:
        """Identifier used in settings; the name unless overridden."""
        return self.name

    @abstractmethod
    def generate(self, fb: Framebuffer, cfg: Config, time_ms: int) -> None:
        """Render the pattern at the given time into fb's back buffer."""