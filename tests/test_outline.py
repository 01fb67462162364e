import pytest
from PIL import Image

from sticker.errors import InputError
from sticker.outline import (
    MASK_COLOR,
    TRANSPARENT,
    compose_outline,
    dilate_mask,
    extract_mask,
    fit_to_canvas,
)

from conftest import RED, colours, red_square


def _single_pixel_mask(size, x, y):
    mask = Image.new("RGBA", (size, size), TRANSPARENT)
    mask.putpixel((x, y), MASK_COLOR)
    return mask


def test_transparent_cutout_gives_empty_mask_and_dilation():
    cutout = Image.new("RGBA", (64, 64), (10, 200, 30, 0))
    mask = extract_mask(cutout)
    assert mask.getbbox() is None
    assert colours(mask) == {TRANSPARENT}

    dilated = dilate_mask(mask, 5)
    assert colours(dilated) == {TRANSPARENT}


def test_mask_is_binary_white():
    cutout = Image.new("RGBA", (4, 1), (0, 0, 0, 0))
    cutout.putpixel((1, 0), (12, 34, 56, 1))
    cutout.putpixel((2, 0), (200, 0, 0, 128))
    cutout.putpixel((3, 0), (0, 0, 255, 255))

    mask = extract_mask(cutout)
    assert [mask.getpixel((x, 0)) for x in range(4)] == [TRANSPARENT, MASK_COLOR, MASK_COLOR, MASK_COLOR]


def test_mask_treats_rgb_input_as_opaque():
    mask = extract_mask(Image.new("RGB", (3, 3), (0, 0, 0)))
    assert colours(mask) == {MASK_COLOR}


def test_mask_rejects_zero_and_mismatched_sizes():
    with pytest.raises(InputError):
        extract_mask(Image.new("RGBA", (0, 10)))
    with pytest.raises(InputError):
        extract_mask(Image.new("RGBA", (10, 12)), size=(10, 10))


@pytest.mark.parametrize("method", ["stamp", "maxfilter"])
@pytest.mark.parametrize("x,y", [(8, 8), (0, 0), (15, 3)])
def test_single_pixel_dilates_to_chebyshev_square(method, x, y):
    size, radius = 16, 3
    dilated = dilate_mask(_single_pixel_mask(size, x, y), radius, method=method)

    for py in range(size):
        for px in range(size):
            inside = max(abs(px - x), abs(py - y)) <= radius
            expected = MASK_COLOR if inside else TRANSPARENT
            assert dilated.getpixel((px, py)) == expected, (px, py)


def test_stamp_and_maxfilter_agree():
    mask = extract_mask(red_square(48, (10, 20, 30, 26)))
    mask.putpixel((45, 2), MASK_COLOR)
    stamped = dilate_mask(mask, 4, method="stamp")
    filtered = dilate_mask(mask, 4, method="maxfilter")
    assert stamped.tobytes() == filtered.tobytes()


def test_dilation_radius_zero_is_a_copy():
    mask = _single_pixel_mask(8, 3, 3)
    out = dilate_mask(mask, 0)
    assert out is not mask
    assert out.tobytes() == mask.tobytes()


def test_dilation_rejects_bad_arguments():
    mask = _single_pixel_mask(8, 3, 3)
    with pytest.raises(InputError):
        dilate_mask(mask, -1)
    with pytest.raises(InputError):
        dilate_mask(mask, 2, method="distance")


def test_dilation_does_not_touch_input():
    mask = _single_pixel_mask(8, 3, 3)
    before = mask.tobytes()
    dilate_mask(mask, 2)
    assert mask.tobytes() == before


def test_compose_keeps_subject_and_shows_ring():
    cutout = red_square(64, (20, 20, 40, 40))
    silhouette = dilate_mask(extract_mask(cutout), 3)
    canvas = compose_outline(silhouette, cutout)

    for px in range(20, 40):
        for py in range(20, 40):
            assert canvas.getpixel((px, py)) == cutout.getpixel((px, py))

    assert canvas.getpixel((17, 30)) == MASK_COLOR
    assert canvas.getpixel((42, 42)) == MASK_COLOR
    assert canvas.getpixel((16, 30)) == TRANSPARENT
    assert canvas.getpixel((43, 30)) == TRANSPARENT


def test_compose_rejects_mismatched_sizes():
    with pytest.raises(InputError):
        compose_outline(Image.new("RGBA", (10, 10)), Image.new("RGBA", (12, 12)))


def test_fit_to_canvas_centres_wide_image():
    wide = Image.new("RGBA", (200, 100), RED)
    fitted = fit_to_canvas(wide, 100)

    assert fitted.size == (100, 100)
    assert fitted.getpixel((50, 10)) == TRANSPARENT
    r, g, b, a = fitted.getpixel((50, 50))
    assert a == 255 and r > 200 and g < 40
    assert fitted.getpixel((50, 90)) == TRANSPARENT


def test_fit_to_canvas_rejects_empty_image():
    with pytest.raises(InputError):
        fit_to_canvas(Image.new("RGBA", (0, 0)), 64)


def test_fit_to_canvas_scales_small_cutout_up():
    small = Image.new("RGBA", (20, 10), RED)
    fitted = fit_to_canvas(small, 100)

    # Longer side fills the canvas, aspect ratio kept.
    assert fitted.getchannel("A").getbbox() == (0, 25, 100, 75)
