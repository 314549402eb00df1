# povdisplay

A persistence-of-vision (POV) display engine. A spinning arm of LEDs draws
an image one angular *slice* at a time; this package produces those slices
and simulates the device on a desktop.

What is in it:

- `povdisplay.framebuffer` – a double-buffered `Framebuffer` of slices x LEDs
  in HD107S byte order (brightness byte with a 5-bit value, then blue, green,
  red), and the `Pixel` type.
- `povdisplay.canvas` – a Cartesian `Canvas` that patterns draw on.
- `povdisplay.transforms` – `PolarTransform`, which samples a canvas along
  each slice's radius, and `IdentityTransform` (canvas x = slice, y = LED).
- `povdisplay.patterns` – `SolidPattern`, `RainbowPattern`, `ScannerPattern`
  (in `simple`), `ImagePattern`, `MatrixPattern` (falling green glyphs) and a
  `PatternRegistry`; `default_registry()` returns them in that order
  (indices 0 to 4).
- `povdisplay.params` – typed, adjustable `Param`s owned by patterns and
  effects.
- `povdisplay.effects` – the `Effect` base class, an `EffectStack` of slots
  and `EffectPhase`, which carries an effect's slice offset to the display.
- `povdisplay.motor_control` – `MotorSpeedController`, a closed-loop ESC
  pulse controller, plus `target_refresh_hz_to_rpm` and `fresh_hall_rpm`.
- `povdisplay.hall_sensor` – `HallSensor`, turning trigger times into
  rotation period and RPM with debouncing.
- `povdisplay.scheduler` – `SliceScheduler`, stepping through the slices of
  each revolution and handing them to an LED output.
- `povdisplay.led_frame` – `build_frame`, `all_off_frame` and `LedDriver`,
  which encodes slices into strip frames and passes the bytes to a callable.
- `povdisplay.settings` – `SettingsRegistry`: settings as a JSON document,
  JSON patches, and saving/loading to any mutable mapping.
- `povdisplay.comm` – UDP timing packets (`TimingPacket`,
  `TimingBroadcaster`, `WifiTimingSource`) and `ConfigRelayReceiver` for
  relayed JSON settings patches.
- `povdisplay.sim` – the headless simulator: a timing model with RPM jitter,
  Hall jitter and misses and SPI transfer time (`TimingState`), a numpy
  software `Renderer`, simulator-only settings (`SimSettings`) and the
  `Simulator` that wires it all together.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Quick start

### Framebuffer

```python
from povdisplay.framebuffer import Framebuffer

fb = Framebuffer(360, 40)          # 360 slices, 40 LEDs per slice
fb.set_pixel(0, 5, 255, 0, 0, 31)  # drawn into the back buffer
fb.swap()                          # back buffer becomes the front buffer
front = fb.get_slice(0)            # list of Pixel for slice 0
```

### Patterns

```python
from povdisplay.config import Config
from povdisplay.framebuffer import Framebuffer
from povdisplay.patterns.registry import default_registry

registry = default_registry()
cfg = Config()
fb = Framebuffer(360, 40)

rainbow = registry[registry.index_of("rainbow")]
rainbow.generate(fb, cfg, time_ms=1000)
fb.swap()
```

`ImagePattern.load_image(rgb_data, width, height)` takes packed 8-bit RGB,
row-major; until an image is loaded the pattern draws nothing.

### Motor control

```python
from povdisplay.motor_control import MotorSpeedController, target_refresh_hz_to_rpm

target_refresh_hz_to_rpm(12, 2)    # 360 RPM for a 12 Hz image on two arms

ctl = MotorSpeedController()
ctl.start(12, 2)                   # pulse starts at 1160 µs
pulse_us = ctl.update(0)           # no Hall reading yet: ramps by 5 µs
```

`fresh_hall_rpm(measured_rpm, last_trigger_ms, now_ms)` decays a late
reading and returns 0 once the sensor has been quiet for more than 1.5 s.

### Settings

```python
from povdisplay.config import Config
from povdisplay.effects import EffectStack
from povdisplay.patterns.registry import default_registry
from povdisplay.settings import Scope, SettingsRegistry

cfg = Config()
registry = SettingsRegistry(cfg, default_registry(), EffectStack([]))
registry.apply_json({"settings": {"brightness": 10}}, Scope.MCU_ONLY)
doc = registry.to_json(Scope.MCU_ONLY)

store = {}
registry.save_to_store(store)      # any mutable mapping
```

### Simulator

```python
from povdisplay.sim.bridge import Simulator

sim = Simulator()
print(sim.pattern_names())
sim.renderer.resize(256, 256)
image = sim.frame(16.7, 0.0, 1)    # (256, 256, 3) float RGB array, rainbow
print(sim.last_frame.headroom_us)
sim.apply_settings_json('{"settings": {"brightness": 10}}')
text = sim.settings_json()
```

From the command line:

```
povdisplay-sim --settings
povdisplay-sim --frames 10 --pattern 1 --dt 16
povdisplay-sim --apply '{"settings": {"rpmJitter": 50}}' --frames 5
```

Options: `--settings` prints the settings document, `--apply JSON` applies a
patch first, `--frames N` simulates N frames and prints their timing figures,
`--pattern` picks a pattern index (default: the active pattern), `--dt` sets
milliseconds per frame, and `--width`/`--height` set the render size.

## What it does not do

- It does not drive hardware. `LedDriver` hands encoded bytes to a callable
  you supply; `HallSensor` is fed trigger times by the caller; the motor
  controller only computes pulse widths.
- It has no web or control-panel server, and no receive loop for UDP:
  datagrams are passed to `WifiTimingSource.handle_packet` and
  `ConfigRelayReceiver.handle_packet` by the caller.
- Persistence is to a mapping you provide, not to a file or device store.
- It ships no concrete effects; `EffectStack` holds effects you define by
  subclassing `Effect`. There is no text pattern.
- The renderer returns images as numpy arrays; it opens no window.