import pytest

from povdisplay.canvas import Canvas
from povdisplay.framebuffer import BRIGHTNESS_PREFIX, Pixel


def test_new_canvas_is_empty():
    c = Canvas(4, 3)
    assert (c.width, c.height) == (4, 3)
    assert c.pixel_at(3, 2) == Pixel(0, 0, 0, 0)


def test_set_then_read():
    c = Canvas(4, 3)
    c.set_pixel(3, 2, 10, 20, 30, 7)
    assert c.pixel_at(3, 2) == Pixel(BRIGHTNESS_PREFIX | 7, 30, 20, 10)
    assert c.pixel_at(2, 3) == Pixel(0, 0, 0, 0)


def test_out_of_bounds_is_ignored():
    c = Canvas(2, 2)
    c.set_pixel(5, 0, 1, 1, 1, 1)
    c.set_pixel(-1, 0, 1, 1, 1, 1)
    assert c.pixel_at(5, 0) == Pixel(0, 0, 0, 0)
    assert all(c.pixel_at(x, y).brightness == 0 for x in range(2) for y in range(2))


def test_clear():
    c = Canvas(2, 2)
    c.set_pixel(1, 1, 1, 2, 3, 31)
    c.clear()
    assert c.pixel_at(1, 1) == Pixel(0, 0, 0, 0)


def test_negative_size_raises():
    with pytest.raises(ValueError):
        Canvas(-2, 2)