from povdisplay.config import (
    HW_MAX_BRIGHTNESS,
    HW_NUM_LEDS,
    NUM_ARMS,
    NUM_SLICES,
    STOP_PULSE_US,
    Config,
)


def test_defaults_follow_hardware_constants():
    cfg = Config()
    assert cfg.num_leds == HW_NUM_LEDS
    assert cfg.num_slices == NUM_SLICES
    assert cfg.max_brightness == HW_MAX_BRIGHTNESS
    assert cfg.num_arms == NUM_ARMS
    assert cfg.esc_pulse_us == STOP_PULSE_US


def test_defaults_are_safe():
    cfg = Config()
    assert cfg.motor_stopped is True
    assert cfg.brightness <= cfg.max_brightness
    assert cfg.target_hz == 12


def test_clamp_brightness_caps_value():
    cfg = Config(brightness=20, max_brightness=10)
    cfg.clamp_brightness()
    assert cfg.brightness == 10


def test_clamp_brightness_leaves_lower_value():
    cfg = Config(brightness=4, max_brightness=10)
    cfg.clamp_brightness()
    assert cfg.brightness == 4


def test_color_tuple():
    cfg = Config(color_r=1, color_g=2, color_b=3)
    assert cfg.color == (1, 2, 3)


def test_instances_are_independent():
    a = Config()
    b = Config()
    a.brightness = 9
    assert b.brightness != 9 or b.brightness == Config().brightness
    assert b.brightness == Config().brightness