import pytest

from povdisplay.params import Param, ParamOption, ParamOwner, ParamType


def make_int():
    return Param("speed", "Speed", ParamType.INT, default=12, min=1, max=48)


def test_value_starts_at_default():
    assert make_int().value == 12


def test_int_is_clamped():
    p = make_int()
    p.set_int(1000)
    assert p.value == 48
    p.set_int(-5)
    assert p.value == 1
    p.set_int(20)
    assert p.value == 20


def test_enum_accepts_only_options():
    p = Param(
        "mode", "Mode", ParamType.ENUM, default=0, min=0, max=3,
        options=(ParamOption("Static", 0), ParamOption("Marquee", 3)),
    )
    p.set_int(3)
    assert p.value == 3
    with pytest.raises(ValueError):
        p.set_int(2)
    assert p.value == 3


def test_bool_is_normalised():
    p = Param("on", "On", ParamType.BOOL, default=0, min=0, max=1)
    p.set_int(7)
    assert p.value == 1
    p.set_int(0)
    assert p.value == 0


def test_color_is_masked():
    p = Param("c", "Color", ParamType.COLOR, max=0xFFFFFF)
    p.set_int(0x7FFFFFFF)
    assert p.value == 0xFFFFFF


def test_text_is_truncated_to_capacity():
    p = Param("text", "Text", ParamType.TEXT, text_capacity=4)
    p.set_text("ABCDEFG")
    assert p.text == "ABC"


def test_text_on_int_raises():
    with pytest.raises(TypeError):
        make_int().set_text("x")


def test_int_on_text_raises():
    p = Param("text", "Text", ParamType.TEXT, text_capacity=8)
    with pytest.raises(TypeError):
        p.set_int(1)


def test_owner_find_and_reset():
    text = Param("text", "Text", ParamType.TEXT, text_capacity=16)
    speed = make_int()
    owner = ParamOwner([text, speed])
    assert owner.find_param("speed") is speed
    assert owner.find_param("missing") is None
    text.set_text("HELLO")
    speed.set_int(30)
    owner.reset_defaults()
    assert text.text == ""
    assert speed.value == speed.default