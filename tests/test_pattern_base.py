import pytest

from povdisplay.config import Config
from povdisplay.framebuffer import Framebuffer
from povdisplay.params import Param, ParamType
from povdisplay.patterns.base import Pattern


class _Dot(Pattern):
    name = "dot"

    def __init__(self, params):
        super().__init__(params)

    def generate(self, fb, cfg, time_ms):
        fb.set_pixel(0, 0, 1, 2, 3, self.find_param("size").value)


def test_pattern_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Pattern()


def test_key_defaults_to_name():
    dot = _Dot([Param("size", "Size", ParamType.INT, default=3, min=1, max=9)])
    assert dot.key == "dot"


def test_find_param_and_missing():
    size = Param("size", "Size", ParamType.INT, default=3, min=1, max=9)
    p = _Dot([size])
    assert p.find_param("size") is size
    assert p.find_param("size").default == 3
    assert p.find_param("nope") is None


def test_reset_defaults_restores_values_and_clears_text():
    size = Param("size", "Size", ParamType.INT, default=3, min=1, max=9)
    label = Param("label", "Label", ParamType.TEXT, text_capacity=8)
    p = _Dot([size, label])
    size.set_int(7)
    label.set_text("hello")
    p.reset_defaults()
    assert size.value == 3
    assert label.text == ""


def test_generate_uses_param():
    p = _Dot([
        Param("size", "Size", ParamType.INT, default=3, min=1, max=9),
        Param("label", "Label", ParamType.TEXT, text_capacity=8),
    ])
    p.find_param("size").set_int(5)
    fb = Framebuffer(1, 1)
    p.generate(fb, Config(), 0)
    fb.swap()
    assert fb.get_slice(0)[0].brightness & 0x1F == 5