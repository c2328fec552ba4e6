import os
import zipfile

import pytest
from PIL import Image

from iconforge.catalog import Platform
from iconforge.errors import InputError, PlatformGenerationError, ValidationError
from iconforge.orchestrator import GenerationOrchestrator, GenerationRequest, generate_icons


def test_all_platforms(image_file, out_dir):
    report = generate_icons(out_dir, foreground=image_file(), background="#FF5722")
    assert report.ok
    assert report.platforms == [Platform.IOS, Platform.ANDROID]
    assert sorted(os.listdir(out_dir)) == ["AppIcon.appiconset", "android-icons"]
    assert len(report.outcome(Platform.IOS).icons) == 19


def test_one_platform_failing_does_not_stop_the_other(image_file, corrupt_file, out_dir):
    report = generate_icons(out_dir, foreground=image_file(), monochrome=corrupt_file)
    assert not report.ok
    assert len(report.outcome(Platform.IOS).icons) == 19
    error = report.outcome(Platform.ANDROID)
    assert isinstance(error, PlatformGenerationError)
    assert error.platform == "android"
    assert "monochrome" in str(error)
    assert not os.path.exists(os.path.join(out_dir, "android-icons"))


def test_invalid_customization_stops_everything(image_file, out_dir):
    with pytest.raises(ValidationError) as exc:
        generate_icons(
            out_dir,
            foreground=image_file(),
            customization={"scale": 5, "android": {"excludeSizes": "ldpi"}},
        )
    assert len(exc.value.problems) == 2
    assert not os.path.exists(out_dir)


def test_unknown_platform(image_file, out_dir):
    with pytest.raises(ValidationError, match="Unsupported platform"):
        generate_icons(out_dir, platform="windows", source=image_file())


def test_zip_archives(image_file, out_dir):
    report = generate_icons(out_dir, platform="ios", source=image_file(), zip=True)
    archive = report.archives[Platform.IOS]
    assert archive == os.path.join(out_dir, "AppIcon.zip")
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
    assert "AppIcon.appiconset/Contents.json" in names
    assert "AppIcon.appiconset/Icon-App-1024x1024@1x.png" in names


def test_progress_messages(image_file, out_dir):
    messages = []
    orchestrator = GenerationOrchestrator(on_progress=messages.append, max_workers=1)
    report = orchestrator.run(GenerationRequest(output_dir=out_dir, platform="android", source=image_file()))
    assert report.ok
    assert sum("✓" in m for m in messages) == 13
    assert any("generated 13 icons" in m for m in messages)


def test_oversized_layer_only_fails_its_platform(image_file, out_dir, monkeypatch):
    fg = image_file()
    mono = image_file("mono.png", size=(1300, 1300))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 500_000)
    report = generate_icons(out_dir, foreground=fg, monochrome=mono)
    assert len(report.outcome(Platform.IOS).icons) == 19
    error = report.outcome(Platform.ANDROID)
    assert isinstance(error, PlatformGenerationError)
    assert error.stage == "validating"
    assert isinstance(error.cause, InputError)
