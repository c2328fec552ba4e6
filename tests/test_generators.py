import json
import os

import pytest
from PIL import Image

from iconforge.android import AndroidGenerator
from iconforge.catalog import Platform, Role
from iconforge.compositor import LayerCompositor
from iconforge.customization import parse_customization
from iconforge.errors import InputError, PlatformGenerationError, RenderError, WriteError
from iconforge.generator import Stage
from iconforge.ios import IOSGenerator, build_manifest
from iconforge.layers import LayerSources
from .conftest import content_bbox


class FailingCompositor(LayerCompositor):
    def render_one(self, layers, spec, platform):
        if spec.width == 180:
            raise RenderError("boom", spec)
        return super().render_one(layers, spec, platform)


def test_ios_generation(image_file, out_dir):
    sources = LayerSources(foreground=image_file(size=(1024, 1024)), background="#FF5722")
    messages = []
    result = IOSGenerator(on_progress=messages.append).generate(sources, out_dir)

    root = os.path.join(out_dir, "AppIcon.appiconset")
    assert result.output_root == root
    assert len(result.icons) == 19
    assert result.warnings == ()
    for icon in result.icons:
        with Image.open(icon.path) as img:
            assert img.size == (icon.spec.width, icon.spec.height)
            assert img.mode == "RGB"

    with open(os.path.join(root, "Contents.json"), encoding="utf-8") as fh:
        manifest = json.load(fh)
    assert len(manifest["images"]) == 19
    assert manifest["info"] == {"author": "iconforge", "version": 1}
    filenames = {e["filename"] for e in manifest["images"]}
    assert filenames == set(os.listdir(root)) - {"Contents.json"}
    assert sum("✓" in m for m in messages) == 20


def test_ios_scaled_output(image_file, out_dir):
    sources = LayerSources(foreground=image_file())
    result = IOSGenerator().generate(sources, out_dir, customization=parse_customization({"scale": 1.2}))
    with Image.open(os.path.join(result.output_root, "Icon-App-60x60@3x.png")) as img:
        assert img.size == (216, 216)
    assert result.warnings  # 512px source is below the recommended 1024px


def test_manifest_entry_format(image_file, out_dir):
    result = IOSGenerator().generate(LayerSources(source=image_file()), out_dir)
    entry = build_manifest([result.icons[0].spec])["images"][0]
    assert entry == {"filename": "Icon-App-20x20@2x.png", "idiom": "iphone", "scale": "2x", "size": "20x20"}


def test_android_adaptive_generation(image_file, out_dir):
    sources = LayerSources(
        foreground=image_file(),
        background="#FFFFFF",
        monochrome=image_file("mono.png", color=(255, 255, 255, 255)),
    )
    result = AndroidGenerator().generate(sources, out_dir)
    root = result.output_root
    assert result.adaptive
    assert len(result.icons) == 31

    with Image.open(os.path.join(root, "mipmap-xxxhdpi", "ic_launcher_foreground.png")) as img:
        assert img.size == (432, 432)
        assert content_bbox(img) == (84, 84, 348, 348)
    with Image.open(os.path.join(root, "mipmap-mdpi", "ic_launcher_monochrome.png")) as img:
        assert img.mode == "LA"

    with open(os.path.join(root, "mipmap-anydpi-v26", "ic_launcher.xml"), encoding="utf-8") as fh:
        xml = fh.read()
    assert '<foreground android:drawable="@mipmap/ic_launcher_foreground"/>' in xml
    assert "<monochrome" in xml
    assert os.path.isfile(os.path.join(root, "mipmap-anydpi-v26", "ic_launcher_round.xml"))
    assert len(result.metadata_files) == 2


def test_android_exclusions(image_file, out_dir):
    sources = LayerSources(
        foreground=image_file(),
        monochrome=image_file("mono.png"),
    )
    customization = parse_customization({"android": {"excludeSizes": ["monochrome", "ldpi"]}})
    result = AndroidGenerator().generate(sources, out_dir, customization=customization)
    root = result.output_root

    assert len(result.icons) == 21
    assert not os.path.exists(os.path.join(root, "mipmap-ldpi"))
    for _, _, files in os.walk(root):
        assert not any("monochrome" in f for f in files)
    with open(os.path.join(root, "mipmap-anydpi-v26", "ic_launcher.xml"), encoding="utf-8") as fh:
        assert "<monochrome" not in fh.read()


def test_android_without_monochrome_layer(image_file, out_dir):
    result = AndroidGenerator().generate(LayerSources(foreground=image_file()), out_dir)
    assert len(result.icons) == 25
    assert all(icon.spec.role is not Role.MONOCHROME for icon in result.icons)


def test_android_single_source_is_legacy_only(image_file, out_dir):
    result = AndroidGenerator().generate(LayerSources(source=image_file()), out_dir)
    assert not result.adaptive
    assert len(result.icons) == 13
    assert result.metadata_files == ()
    assert not os.path.exists(os.path.join(result.output_root, "mipmap-anydpi-v26"))


def test_descriptor_skipped_without_background_layer(image_file, out_dir):
    customization = parse_customization({"android": {"excludeSizes": ["background"]}})
    result = AndroidGenerator().generate(LayerSources(foreground=image_file()), out_dir, customization=customization)
    assert result.metadata_files == ()


def test_existing_output_needs_force(image_file, out_dir):
    sources = LayerSources(source=image_file())
    gen = IOSGenerator()
    gen.generate(sources, out_dir)
    stale = os.path.join(out_dir, "AppIcon.appiconset", "stale.png")
    open(stale, "wb").close()

    with pytest.raises(PlatformGenerationError) as exc:
        gen.generate(sources, out_dir)
    assert exc.value.stage == "validating"
    assert isinstance(exc.value.cause, WriteError)
    assert gen.stage is Stage.FAILED

    gen.generate(sources, out_dir, force=True)
    assert not os.path.exists(stale)
    assert gen.stage is Stage.DONE


def test_bad_input_fails_before_writing(corrupt_file, out_dir):
    with pytest.raises(PlatformGenerationError) as exc:
        IOSGenerator().generate(LayerSources(foreground=corrupt_file), out_dir)
    assert exc.value.stage == "validating"
    assert isinstance(exc.value.cause, InputError)
    assert not os.path.exists(out_dir)


def test_render_failure_discards_partial_output(image_file, out_dir):
    gen = IOSGenerator(compositor=FailingCompositor(), max_workers=2)
    with pytest.raises(PlatformGenerationError) as exc:
        gen.generate(LayerSources(source=image_file()), out_dir)
    assert exc.value.stage == "rendering"
    assert isinstance(exc.value.cause, RenderError)
    assert os.listdir(out_dir) == []


def test_generation_is_idempotent(image_file, tmp_path):
    sources = LayerSources(foreground=image_file(), background="#336699")
    first = AndroidGenerator().generate(sources, str(tmp_path / "a"))
    second = AndroidGenerator().generate(sources, str(tmp_path / "b"))
    for a, b in zip(first.icons, second.icons):
        with open(a.path, "rb") as fa, open(b.path, "rb") as fb:
            assert fa.read() == fb.read()


def test_transparent_single_source_warns_on_ios(image_file, out_dir):
    result = IOSGenerator().generate(LayerSources(source=image_file(size=(1024, 512))), out_dir)
    assert any("transparent" in w for w in result.warnings)
    with Image.open(os.path.join(result.output_root, "Icon-App-1024x1024@1x.png")) as img:
        assert img.mode == "RGB"
        assert img.getpixel((0, 0)) == (17, 17, 17)
