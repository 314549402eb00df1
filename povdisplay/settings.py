"""Registry of user-facing settings, their JSON form and persistence."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from .config import STOP_PULSE_US, Config
from .effects import Effect, EffectStack
from .params import Param, ParamOption, ParamType
from .patterns.registry import PatternRegistry

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1

_LOG_LEVELS = {1: logging.ERROR, 2: logging.WARNING, 3: logging.INFO, 4: logging.DEBUG}

Store = MutableMapping[str, Any]


class Scope(Enum):
    """Which side of the system a setting is shown on."""

    BOTH = 0
    MCU_ONLY = 1
    SIM_ONLY = 2


@dataclass(frozen=True)
class Setting:
    """One top-level setting bound to accessor callables."""

    key: str
    label: str
    group: str
    section: str
    scope: Scope
    type: ParamType
    default: int = 0
    min: int = 0
    max: int = 0
    scale: int = 1
    options: tuple[ParamOption, ...] = ()
    get_int: Callable[[], int] | None = None
    set_int: Callable[[int], None] | None = None
    get_text: Callable[[], str] | None = None
    set_text: Callable[[str], None] | None = None
    nvs_key: str | None = None


@dataclass(frozen=True)
class _Section:
    group: str
    key: str
    label: str
    keep_when_empty: bool


_SECTIONS = (
    _Section("picture", "pattern", "Pattern", True),
    _Section("picture", "effects", "Effects", True),
    _Section("picture", "global", "Global", True),
    _Section("hardware", "hardware", "Hardware", False),
    _Section("hardware", "playback", "Playback", False),
    _Section("hardware", "timing", "Timing", False),
    _Section("hardware", "overlays", "Overlays", False),
)

_GROUPS = (("picture", "Picture"), ("hardware", "Hardware"))

_HZ_OPTIONS = tuple(ParamOption(label, value) for label, value in
                    (("12", 12), ("24", 24), ("25", 25), ("30", 30), ("60", 60)))
_PHASE_OPTIONS = tuple(ParamOption(label, value) for label, value in
                       (("0°", 0), ("90°", 90), ("180°", 180), ("-90°", -90)))
_LOG_LEVEL_OPTIONS = tuple(ParamOption(label, value) for label, value in
                           (("Error", 1), ("Warning", 2), ("Info", 3), ("Debug", 4)))


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _json_int(value: Any) -> int | None:
    """A JSON integer or boolean as an int32, or None if it is neither."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int) and _INT32_MIN <= value <= _INT32_MAX:
        return value
    return None


def _options_json(options: Iterable[ParamOption]) -> list[list[Any]]:
    return [[opt.label, opt.value] for opt in options]


def _param_json(p: Param) -> dict[str, Any]:
    obj: dict[str, Any] = {"key": p.key, "label": p.label, "type": p.type.value}
    if p.type is ParamType.TEXT:
        obj["value"] = p.text
        obj["default"] = ""
    else:
        obj["value"] = p.value
        obj["default"] = p.default
    if p.type is ParamType.INT:
        obj["min"] = p.min
        obj["max"] = p.max
    if p.options:
        obj["options"] = _options_json(p.options)
    return obj


def _apply_param_value(p: Param, value: Any) -> None:
    try:
        if p.type is ParamType.TEXT:
            if isinstance(value, str):
                p.set_text(value)
            return
        number = _json_int(value)
        if number is not None:
            p.set_int(number)
    except (ValueError, TypeError):
        pass


class SettingsRegistry:
    """Top-level settings bound to a Config, plus pattern and effect params."""

    def __init__(self, config: Config, patterns: PatternRegistry,
                 effects: EffectStack, extra_settings: Iterable[Setting] = ()) -> None:
        self.config = config
        self.patterns = patterns
        self.effects = effects
        self.settings: tuple[Setting, ...] = self._build_settings()
        self.extra_settings: tuple[Setting, ...] = tuple(extra_settings)
        self.reset_to_defaults()

    # --- accessors bound to config fields ---

    def _build_settings(self) -> tuple[Setting, ...]:
        cfg = self.config

        def set_brightness(v: int) -> None:
            cfg.brightness = min(v, cfg.max_brightness) & 0xFF

        def set_phase_offset(v: int) -> None:
            cfg.phase_offset = _int16(v)

        def set_active_pattern(v: int) -> None:
            if 0 <= v < len(self.patterns):
                cfg.active_pattern = v

        def get_color() -> int:
            return (cfg.color_r << 16) | (cfg.color_g << 8) | cfg.color_b

        def set_color(v: int) -> None:
            cfg.color_r = (v >> 16) & 0xFF
            cfg.color_g = (v >> 8) & 0xFF
            cfg.color_b = v & 0xFF

        def set_target_hz(v: int) -> None:
            cfg.target_hz = v & 0xFF

        def set_mirror(v: int) -> None:
            cfg.mirror_pattern = v != 0

        def set_radial_balance(v: int) -> None:
            cfg.radial_balance = v != 0

        def set_log_level(v: int) -> None:
            v = max(1, min(4, v))
            cfg.log_level = v
            logging.getLogger("povdisplay").setLevel(_LOG_LEVELS[v])

        return (
            Setting("brightness", "Brightness", "picture", "global", Scope.BOTH,
                    ParamType.INT, 16, 0, 31,
                    get_int=lambda: cfg.brightness, set_int=set_brightness,
                    nvs_key="brightness"),
            Setting("color", "Color", "picture", "global", Scope.BOTH,
                    ParamType.COLOR, 0xFF0000, 0, 0xFFFFFF,
                    get_int=get_color, set_int=set_color, nvs_key="color"),
            Setting("activePattern", "Pattern", "picture", "pattern", Scope.BOTH,
                    ParamType.ENUM, 3, 0, 5,
                    get_int=lambda: cfg.active_pattern, set_int=set_active_pattern,
                    nvs_key="pattern"),
            Setting("mirrorPattern", "Mirror", "picture", "global", Scope.BOTH,
                    ParamType.BOOL, 1, 0, 1,
                    get_int=lambda: int(cfg.mirror_pattern), set_int=set_mirror,
                    nvs_key="mirror"),
            Setting("radialBalance", "Radial balance", "picture", "global", Scope.BOTH,
                    ParamType.BOOL, 1, 0, 1,
                    get_int=lambda: int(cfg.radial_balance), set_int=set_radial_balance,
                    nvs_key="rad_bal"),
            Setting("phaseOffset", "Phase offset", "picture", "global", Scope.BOTH,
                    ParamType.ENUM, 0, -360, 360, options=_PHASE_OPTIONS,
                    get_int=lambda: cfg.phase_offset, set_int=set_phase_offset,
                    nvs_key="phase_off"),
            Setting("targetHz", "Refresh rate", "hardware", "hardware", Scope.BOTH,
                    ParamType.ENUM, 12, 0, 240, options=_HZ_OPTIONS,
                    get_int=lambda: cfg.target_hz, set_int=set_target_hz,
                    nvs_key="target_hz"),
            Setting("logLevel", "Log level", "hardware", "hardware", Scope.MCU_ONLY,
                    ParamType.ENUM, 3, 1, 4, options=_LOG_LEVEL_OPTIONS,
                    get_int=lambda: cfg.log_level, set_int=set_log_level,
                    nvs_key="log_level"),
        )

    def _all_settings(self) -> tuple[Setting, ...]:
        return self.settings + self.extra_settings

    def entry_visible(self, setting: Setting, side: Scope) -> bool:
        """BOTH entries are always shown; others only on their own side."""
        return setting.scope is Scope.BOTH or setting.scope is side

    # --- JSON ---

    def _setting_json(self, s: Setting) -> dict[str, Any]:
        obj: dict[str, Any] = {"key": s.key, "label": s.label, "type": s.type.value}
        if s.type is ParamType.TEXT:
            obj["value"] = s.get_text() if s.get_text else ""
            obj["default"] = ""
        else:
            obj["value"] = s.get_int() if s.get_int else 0
            obj["default"] = s.default
        if s.type is ParamType.INT:
            obj["min"] = s.min
            obj["max"] = s.max
        if s.scale > 1:
            obj["scale"] = s.scale
        if s.options:
            obj["options"] = _options_json(s.options)
        if s.key == "activePattern":
            obj["options"] = [[p.name, i] for i, p in enumerate(self.patterns)]
        return obj

    def _in_section(self, s: Setting, group: str, section: str, side: Scope) -> bool:
        return self.entry_visible(s, side) and s.group == group and s.section == section

    def _group_json(self, group: str, label: str, side: Scope) -> dict[str, Any]:
        sections = []
        for section in _SECTIONS:
            if section.group != group:
                continue
            members = [s for s in self._all_settings()
                       if self._in_section(s, group, section.key, side)]
            if not members and not section.keep_when_empty:
                continue
            sections.append({
                "key": section.key,
                "label": section.label,
                "settings": [self._setting_json(s) for s in members],
            })
        return {"key": group, "label": label, "sections": sections}

    def to_json(self, side: Scope) -> dict[str, Any]:
        """The full settings document shown to the given side."""
        return {
            "activePattern": self.config.active_pattern,
            "groups": [self._group_json(g, label, side) for g, label in _GROUPS],
            "patterns": [
                {
                    "key": p.key,
                    "name": p.name,
                    "index": i,
                    "group": "picture",
                    "section": "pattern",
                    "params": [_param_json(par) for par in p.params],
                }
                for i, p in enumerate(self.patterns)
            ],
            "effectStack": [self.effects.slot_key(i) for i in range(len(self.effects))],
            "effects": [
                {
                    "key": e.key,
                    "name": e.name,
                    "group": "picture",
                    "section": "effects",
                    "params": [_param_json(par) for par in e.params],
                }
                for e in self.effects.effects
            ],
        }

    def _find_setting(self, key: str, side: Scope) -> Setting | None:
        return next((s for s in self._all_settings()
                     if self.entry_visible(s, side) and s.key == key), None)

    def _apply_setting_value(self, s: Setting, value: Any) -> bool:
        if s.type is ParamType.TEXT:
            if not isinstance(value, str):
                return False
            if s.set_text:
                s.set_text(value)
            return True
        val = _json_int(value)
        if val is None:
            return False
        if s.type is ParamType.INT:
            val = max(s.min, min(s.max, val))
        elif s.type is ParamType.BOOL:
            val = 1 if val else 0
        elif s.type is ParamType.COLOR:
            val &= 0xFFFFFF
        elif s.type is ParamType.ENUM:
            if s.key == "activePattern":
                if not 0 <= val < len(self.patterns):
                    return False
            elif val not in {opt.value for opt in s.options}:
                return False
        if s.set_int:
            s.set_int(val)
        return True

    def _find_effect(self, key: str) -> Effect | None:
        return next((e for e in self.effects.effects if e.key == key), None)

    def apply_json(self, patch: Mapping[str, Any], side: Scope) -> None:
        """Apply a partial settings document; unknown or invalid entries are skipped."""
        if not isinstance(patch, Mapping):
            raise TypeError("settings patch must be a JSON object")

        settings = patch.get("settings")
        if isinstance(settings, Mapping):
            for key, value in settings.items():
                s = self._find_setting(key, side)
                if s is not None:
                    self._apply_setting_value(s, value)

        active = patch.get("activePattern")
        if isinstance(active, int) and not isinstance(active, bool):
            s = self._find_setting("activePattern", side)
            if s is not None:
                self._apply_setting_value(s, active)

        patterns = patch.get("patterns")
        if isinstance(patterns, Mapping):
            for pattern_key, values in patterns.items():
                idx = self.patterns.index_of(pattern_key)
                if idx is None or not isinstance(values, Mapping):
                    continue
                pattern = self.patterns[idx]
                for param_key, value in values.items():
                    param = pattern.find_param(param_key)
                    if param is not None:
                        _apply_param_value(param, value)

        stack = patch.get("effectStack")
        if isinstance(stack, list):
            for slot, value in enumerate(stack[:len(self.effects)]):
                if isinstance(value, str):
                    try:
                        self.effects.set_slot(slot, value)
                    except KeyError:
                        pass

        effects = patch.get("effects")
        if isinstance(effects, Mapping):
            for effect_key, values in effects.items():
                effect = self._find_effect(effect_key)
                if effect is None or not isinstance(values, Mapping):
                    continue
                for param_key, value in values.items():
                    param = effect.find_param(param_key)
                    if param is not None:
                        _apply_param_value(param, value)

    def reset_to_defaults(self) -> None:
        """Restore every top-level setting and leave the motor stopped."""
        for s in self.settings:
            if s.type is ParamType.TEXT:
                if s.set_text:
                    s.set_text("")
            elif s.set_int:
                s.set_int(s.default)
        self.config.motor_stopped = True
        self.config.esc_pulse_us = STOP_PULSE_US

    # --- persistence ---

    def load_from_store(self, store: Mapping[str, Any]) -> None:
        """Load persisted top-level settings; missing keys keep current values."""
        for s in self.settings:
            if not s.nvs_key:
                continue
            if s.type is ParamType.TEXT:
                text = store.get(s.nvs_key)
                if s.set_text and isinstance(text, str) and text:
                    s.set_text(text)
            elif s.set_int:
                current = s.get_int() if s.get_int else s.default
                stored = store.get(s.nvs_key, current)
                s.set_int(stored if _json_int(stored) is not None else current)

    def save_to_store(self, store: Store) -> None:
        for s in self.settings:
            if not s.nvs_key:
                continue
            if s.type is ParamType.TEXT:
                if s.get_text:
                    store[s.nvs_key] = s.get_text()
            elif s.get_int:
                store[s.nvs_key] = s.get_int()

    @staticmethod
    def _pattern_key(pattern_key: str, param_key: str) -> str:
        return f"p_{pattern_key}_{param_key}"

    def load_patterns_from_store(self, store: Mapping[str, Any]) -> None:
        """Load pattern params; missing numeric params fall back to defaults."""
        for pattern in self.patterns:
            for param in pattern.params:
                key = self._pattern_key(pattern.key, param.key)
                if param.type is ParamType.TEXT:
                    text = store.get(key)
                    if isinstance(text, str):
                        param.set_text(text)
                    continue
                stored = store.get(key, param.default)
                _apply_param_value(param, stored if _json_int(stored) is not None
                                   else param.default)

    def save_patterns_to_store(self, store: Store) -> None:
        for pattern in self.patterns:
            for param in pattern.params:
                key = self._pattern_key(pattern.key, param.key)
                store[key] = param.text if param.type is ParamType.TEXT else param.value

    def load_effects_from_store(self, store: Mapping[str, Any]) -> None:
        """Load the effect stack and effect params."""
        self.effects.reset_defaults()
        for slot in range(len(self.effects)):
            key = store.get(f"fx_s{slot}")
            if isinstance(key, str) and key:
                try:
                    self.effects.set_slot(slot, key)
                except KeyError:
                    pass
        for effect in self.effects.effects:
            for param in effect.params:
                stored = store.get(f"fx_{effect.key}_{param.key}", param.default)
                number = _json_int(stored)
                param.value = param.default if number is None else number

    def save_effects_to_store(self, store: Store) -> None:
        for slot in range(len(self.effects)):
            store[f"fx_s{slot}"] = self.effects.slot_key(slot)
        for effect in self.effects.effects:
            for param in effect.params:
                store[f"fx_{effect.key}_{param.key}"] = param.value