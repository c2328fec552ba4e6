import io

import pytest
from PIL import Image

from iconforge.errors import InputError
from iconforge.layers import LayerSources, decode, parse_color


def test_decode_png_to_rgba(image_file):
    img = decode(image_file(size=(64, 32)))
    assert img.mode == "RGBA"
    assert img.size == (64, 32)


def test_decode_jpeg_and_bytes(image_file):
    img = decode(image_file("photo.jpg", color=(10, 20, 30), mode="RGB"))
    assert img.mode == "RGBA"
    buf = io.BytesIO()
    Image.new("L", (8, 8), 128).save(buf, "PNG")
    assert decode(buf.getvalue()).mode == "RGBA"


def test_decode_image_object():
    assert decode(Image.new("RGB", (2, 2))).mode == "RGBA"


def test_decode_missing_file(tmp_path):
    with pytest.raises(InputError, match="not found"):
        decode(str(tmp_path / "nope.png"), "foreground")


def test_decode_corrupt_file(corrupt_file):
    with pytest.raises(InputError, match="Failed to load monochrome"):
        decode(corrupt_file, "monochrome")


def test_decode_rejects_unsupported_format(tmp_path):
    path = tmp_path / "anim.gif"
    Image.new("P", (8, 8)).save(path)
    with pytest.raises(InputError, match="supported formats"):
        decode(str(path))


def test_decode_rejects_16_bit(tmp_path):
    path = tmp_path / "deep.png"
    Image.new("I;16", (4, 4)).save(path)
    with pytest.raises(InputError, match="8-bit"):
        decode(str(path))


def test_parse_color():
    assert parse_color("#abc") == (170, 187, 204)
    assert parse_color("#FF5722") == (255, 87, 34)
    with pytest.raises(InputError):
        parse_color("red")


def test_sources_need_exactly_one_primary(image_file):
    with pytest.raises(InputError):
        LayerSources().validate()
    path = image_file()
    with pytest.raises(InputError):
        LayerSources(source=path, foreground=path).validate()
    with pytest.raises(InputError):
        LayerSources(source=path, background="#000000").validate()


def test_load_layered_with_color_background(image_file):
    layers = LayerSources(foreground=image_file(), background="#FF5722").load()
    assert layers.layered
    assert layers.background_is_color
    assert layers.background == (255, 87, 34)
    assert layers.monochrome is None


def test_load_default_background(image_file):
    layers = LayerSources(foreground=image_file()).load()
    assert layers.background == (17, 17, 17)


def test_single_source_is_squared(image_file):
    layers = LayerSources(source=image_file(size=(200, 100))).load()
    assert not layers.layered
    assert layers.foreground.size == (200, 200)
    assert layers.foreground.getpixel((0, 0))[3] == 0
    assert layers.foreground.getpixel((100, 100))[3] == 255


def test_monochrome_only_read_when_asked(image_file, corrupt_file):
    sources = LayerSources(foreground=image_file(), monochrome=corrupt_file)
    assert sources.load(with_monochrome=False).monochrome is None
    with pytest.raises(InputError):
        sources.load()


def test_decode_rejects_oversized_image(image_file, monkeypatch):
    path = image_file("huge.png", size=(1300, 1300))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 500_000)
    with pytest.raises(InputError, match="Failed to load monochrome"):
        decode(path, "monochrome")
