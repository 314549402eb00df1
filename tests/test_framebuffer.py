import pytest

from povdisplay.framebuffer import (
    BLACK_PIXEL,
    BRIGHTNESS_MASK,
    BRIGHTNESS_PREFIX,
    PIXEL_BYTES,
    Framebuffer,
    Pixel,
)


def test_new_buffer_is_black():
    fb = Framebuffer(4, 3)
    assert fb.num_slices == 4 and fb.num_leds == 3
    assert fb.get_slice(2) == [BLACK_PIXEL] * 3


def test_set_pixel_writes_back_until_swap():
    fb = Framebuffer(4, 3)
    fb.set_pixel(1, 2, 10, 20, 30, 31)
    assert fb.get_slice(1)[2] == BLACK_PIXEL
    fb.swap()
    assert fb.get_slice(1)[2] == Pixel(BRIGHTNESS_PREFIX | 31, 30, 20, 10)


def test_brightness_is_masked_with_prefix():
    fb = Framebuffer(1, 1)
    fb.set_pixel(0, 0, 1, 1, 1, 0xFF)
    fb.swap()
    assert fb.get_slice(0)[0].brightness == BRIGHTNESS_PREFIX | BRIGHTNESS_MASK


def test_front_bytes_layout():
    fb = Framebuffer(2, 2)
    fb.set_pixel(1, 0, 1, 2, 3, 31)
    fb.swap()
    data = fb.front_bytes()
    assert len(data) == 2 * 2 * PIXEL_BYTES
    offset = (1 * 2 + 0) * PIXEL_BYTES
    assert data[offset:offset + 4] == bytes([0xFF, 3, 2, 1])
    assert data[:4] == BLACK_PIXEL.to_bytes()


def test_clear_back():
    fb = Framebuffer(2, 2)
    fb.set_pixel(0, 0, 9, 9, 9, 9)
    fb.clear_back()
    fb.swap()
    assert fb.get_slice(0) == [BLACK_PIXEL, BLACK_PIXEL]


def test_back_slice_is_writable_view():
    fb = Framebuffer(2, 2)
    fb.back_slice(1)[0] = (BRIGHTNESS_PREFIX | 5, 7, 8, 9)
    fb.swap()
    assert fb.get_slice(1)[0] == Pixel(BRIGHTNESS_PREFIX | 5, 7, 8, 9)


def test_resize_resets_contents():
    fb = Framebuffer(2, 2)
    fb.set_pixel(0, 0, 1, 1, 1, 1)
    fb.swap()
    fb.resize(5, 6)
    assert (fb.num_slices, fb.num_leds) == (5, 6)
    assert fb.get_slice(0) == [BLACK_PIXEL] * 6


def test_out_of_range_raises():
    fb = Framebuffer(2, 2)
    with pytest.raises(IndexError):
        fb.set_pixel(2, 0, 0, 0, 0, 0)
    with pytest.raises(IndexError):
        fb.get_slice(-1)


def test_negative_size_raises():
    with pytest.raises(ValueError):
        Framebuffer(-1, 3)