"""Post-processing effects applied to the back buffer, and their slot stack."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Iterable

from .framebuffer import Framebuffer
from .params import ParamOwner

MAX_EFFECT_SLOTS = 4


@dataclass
class EffectState:
    """Side-channel results effects hand to the display pipeline."""

    slice_offset: int = 0


class Effect(ParamOwner, ABC):
    """Base class for effects; subclasses set name and key."""

    name: ClassVar[str] = ""
    key: ClassVar[str] = ""

    @property
    @abstractmethod
    def active(self) -> bool:
        """Whether the effect currently does anything."""

    @abstractmethod
    def apply(self, state: EffectState, fb: Framebuffer, time_ms: int) -> None:
        """Modify the back buffer and/or the effect state."""


class EffectStack:
    """A fixed number of slots, each empty or naming one known effect."""

    def __init__(self, effects: Iterable[Effect], slots: int = MAX_EFFECT_SLOTS) -> None:
        if slots < 0:
            raise ValueError("slot count must not be negative")
        self.effects: tuple[Effect, ...] = tuple(effects)
        self._stack: list[int | None] = [None] * slots

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def indices(self) -> tuple[int | None, ...]:
        return tuple(self._stack)

    def index_for_key(self, key: str | None) -> int | None:
        if not key:
            return None
        return next((i for i, e in enumerate(self.effects) if e.key == key), None)

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < len(self._stack):
            raise IndexError(f"effect slot {slot} out of range")

    def slot_key(self, slot: int) -> str:
        """Key of the effect in a slot, or "" when the slot is empty."""
        self._check_slot(slot)
        idx = self._stack[slot]
        return "" if idx is None else self.effects[idx].key

    def set_slot(self, slot: int, key: str | None) -> None:
        """Put an effect into a slot; an empty key or "none" clears it."""
        self._check_slot(slot)
        if not key or key == "none":
            self._stack[slot] = None
            return
        idx = self.index_for_key(key)
        if idx is None:
            raise KeyError(key)
        self._stack[slot] = idx

    def reset_defaults(self) -> None:
        self._stack = [None] * len(self._stack)

    def apply(self, state: EffectState, fb: Framebuffer, time_ms: int) -> None:
        """Run every active effect in slot order."""
        for idx in self._stack:
            if idx is None:
                continue
            effect = self.effects[idx]
            if effect.active:
                effect.apply(state, fb, time_ms)


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


class EffectPhase:
    """Remembers the slice offset effects produced for the displayed frame."""

    def __init__(self) -> None:
        self._slice_offset = 0

    @property
    def slice_offset(self) -> int:
        return self._slice_offset

    def reset(self) -> None:
        self._slice_offset = 0

    def update(self, state: EffectState) -> None:
        self._slice_offset = _int16(state.slice_offset)

    def phase_offset(self, base_phase: int) -> int:
        return _int16(base_phase + self._slice_offset)