"""The simulator: patterns, effects, timing model and renderer wired together."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

import numpy as np

from ..config import Config
from ..effects import EffectPhase, EffectStack, EffectState
from ..framebuffer import Framebuffer
from ..patterns.registry import default_registry
from ..settings import Scope, SettingsRegistry
from .renderer import Renderer
from .sim_settings import SimSettings, apply_geometry
from .timing import FrameResult, TimingState

_EFFECT_SLOTS = 4
_U32 = 0xFFFFFFFF


class Simulator:
    """A complete simulated display; settings persistence is not used."""

    def __init__(self) -> None:
        self.config = Config()
        self.patterns = default_registry()
        self.effects = EffectStack([], _EFFECT_SLOTS)
        self.timing = TimingState()
        self.renderer = Renderer()
        self.sim_settings = SimSettings(self.timing, self.config, self.renderer)
        self.registry = SettingsRegistry(self.config, self.patterns, self.effects,
                                         self.sim_settings.settings())

        self.timing.num_slices = self.config.num_slices
        self.timing.num_leds = self.config.num_leds
        self.timing.reset()
        self.effect_phase = EffectPhase()
        self.effect_phase.reset()
        self.fb = Framebuffer(self.config.num_slices, self.config.num_leds)
        apply_geometry(self.renderer, self.config.num_leds)
        self.last_frame: FrameResult | None = None

    @property
    def sim_speed(self) -> float:
        return self.sim_settings.sim_speed

    @property
    def pattern_gen_ms(self) -> float:
        return self.timing.pattern_gen_ms()

    def resize(self, num_slices: int, num_leds: int) -> None:
        """Resize the framebuffer and timing model; the config is left as is."""
        self.timing.num_slices = num_slices
        self.timing.num_leds = num_leds
        self.fb.resize(num_slices, num_leds)

    def pattern_names(self) -> list[str]:
        return [p.name for p in self.patterns]

    def _render(self, result: FrameResult) -> np.ndarray:
        cfg = self.config
        saved = cfg.phase_offset
        cfg.phase_offset = self.effect_phase.phase_offset(saved)
        try:
            return self.renderer.render(
                self.fb, cfg, result.arm_angle, result.arm_sweep,
                result.hall_offset_angle, result.has_overruns,
                self.fb.num_slices)
        finally:
            cfg.phase_offset = saved

    def frame(self, dt_ms: float, sim_time_ms: float,
              pattern_index: int) -> np.ndarray:
        """Advance the timing model, regenerate if due, and render the disc.

        A pattern index outside the registry renders without regenerating.
        """
        result = self.timing.frame(dt_ms, sim_time_ms)
        self.last_frame = result

        if result.should_generate and 0 <= pattern_index < len(self.patterns):
            time_ms = int(sim_time_ms) & _U32
            self.patterns[pattern_index].generate(self.fb, self.config, time_ms)
            state = EffectState()
            self.effects.apply(state, self.fb, time_ms)
            self.effect_phase.update(state)
            self.fb.swap()

        return self._render(result)

    def load_image(self, rgb_data: bytes, width: int, height: int) -> None:
        """Load packed RGB pixels into the image pattern."""
        self.patterns.image_pattern().load_image(rgb_data, width, height)

    def settings_json(self) -> str:
        """The simulator's settings document as compact JSON."""
        doc = self.registry.to_json(Scope.SIM_ONLY)
        return json.dumps(doc, ensure_ascii=False, separators=(",", ":"))

    def apply_settings_json(self, text: str) -> None:
        """Apply a JSON settings patch; raises ValueError on malformed JSON."""
        patch = json.loads(text)
        self.registry.apply_json(patch, Scope.SIM_ONLY)

        cfg = self.config
        ts = self.timing
        if cfg.num_leds != ts.num_leds or cfg.num_slices != ts.num_slices:
            ts.num_leds = cfg.num_leds
            ts.num_slices = cfg.num_slices
            self.fb.resize(cfg.num_slices, cfg.num_leds)
            apply_geometry(self.renderer, cfg.num_leds)

        self.renderer.num_arms = cfg.num_arms
        ts.spi_clock_mhz = float(cfg.spi_clock_mhz)
        # The motor speed follows the refresh rate shared between the arms.
        ts.rpm = float(cfg.target_hz) * 60.0 / float(cfg.num_arms)


def _frame_line(index: int, r: Any) -> str:
    return (f"frame {index}: rpm={r.actual_rpm:.1f} "
            f"slice_us={r.slice_interval_us:.2f} spi_us={r.spi_transfer_us:.2f} "
            f"headroom_us={r.headroom_us:.2f} overruns={r.has_overruns} "
            f"age={r.frame_age} generated={r.should_generate}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="povdisplay-sim", description="Run the display simulator.")
    parser.add_argument("--settings", action="store_true",
                        help="print the settings document as JSON")
    parser.add_argument("--apply", metavar="JSON",
                        help="apply a JSON settings patch first")
    parser.add_argument("--frames", type=int, default=0,
                        help="number of frames to simulate")
    parser.add_argument("--pattern", type=int, default=None,
                        help="pattern index (default: the active pattern)")
    parser.add_argument("--dt", type=float, default=16.0,
                        help="milliseconds per frame")
    parser.add_argument("--width", type=int, default=0)
    parser.add_argument("--height", type=int, default=0)
    args = parser.parse_args(argv)

    sim = Simulator()
    sim.renderer.resize(args.width, args.height)

    if args.apply is not None:
        try:
            sim.apply_settings_json(args.apply)
        except (ValueError, TypeError) as exc:
            print(f"invalid settings patch: {exc}", file=sys.stderr)
            return 1

    if args.settings:
        print(sim.settings_json())

    pattern = sim.config.active_pattern if args.pattern is None else args.pattern
    sim_time = 0.0
    for i in range(args.frames):
        sim.frame(args.dt, sim_time, pattern)
        print(_frame_line(i, sim.last_frame))
        sim_time += args.dt * sim.sim_speed
    return 0


if __name__ == "__main__":
    sys.exit(main())