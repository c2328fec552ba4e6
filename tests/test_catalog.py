import pytest

from iconforge.catalog import (
    ANDROID_CATALOG,
    IOS_CATALOG,
    IconSpec,
    Platform,
    Role,
    resolve_platforms,
    role_from_filename,
)


def test_ios_catalog_has_19_unique_entries():
    specs = IOS_CATALOG.defaults
    assert len(specs) == 19
    assert len({s.subpath for s in specs}) == 19
    assert all(s.width == s.height for s in specs)


def test_ios_pixel_sizes_follow_points_times_scale():
    by_name = {s.filename: s for s in IOS_CATALOG.defaults}
    assert by_name["Icon-App-60x60@3x.png"].width == 180
    assert by_name["Icon-App-83.5x83.5@2x~ipad.png"].width == 167
    assert by_name["Icon-App-1024x1024@1x.png"].idiom == "ios-marketing"
    assert by_name["Icon-App-83.5x83.5@2x~ipad.png"].size_label == "83.5x83.5"


def test_android_catalog_layout():
    specs = ANDROID_CATALOG.defaults
    assert len(specs) == 31
    assert len({s.subpath for s in specs}) == 31
    fg = [s for s in specs if s.role is Role.FOREGROUND]
    assert [s.width for s in fg] == [81, 108, 162, 216, 324, 432]
    playstore = [s for s in specs if s.role is Role.PLAYSTORE]
    assert playstore[0].subpath == "playstore/ic_launcher_playstore.png"
    assert playstore[0].width == 512


def test_catalog_ratios():
    assert ANDROID_CATALOG.content_ratio == pytest.approx(66 / 108)
    assert ANDROID_CATALOG.supports_adaptive
    assert not IOS_CATALOG.supports_adaptive
    assert IOS_CATALOG.metadata_filename == "Contents.json"


def test_scaled_keeps_labels():
    spec = IconSpec(180, 180, "3x", "Icon-App-60x60@3x.png", points=60, idiom="iphone")
    scaled = spec.scaled(1.2)
    assert (scaled.width, scaled.height) == (216, 216)
    assert scaled.filename == spec.filename
    assert scaled.size_label == "60x60"
    assert scaled.density == "3x"


@pytest.mark.parametrize("name,role", [
    ("ic_launcher.png", Role.ICON),
    ("ic_launcher_round.png", Role.ROUND),
    ("ic_launcher_foreground.png", Role.FOREGROUND),
    ("ic_launcher_background.png", Role.BACKGROUND),
    ("ic_launcher_monochrome.png", Role.MONOCHROME),
])
def test_role_from_filename(name, role):
    assert role_from_filename(name) is role


def test_resolve_platforms():
    assert resolve_platforms("all") == [Platform.IOS, Platform.ANDROID]
    assert resolve_platforms("iOS") == [Platform.IOS]
    assert resolve_platforms(["android", "ios"]) == [Platform.IOS, Platform.ANDROID]
    with pytest.raises(ValueError):
        resolve_platforms("windows")
