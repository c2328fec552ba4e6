from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .utils import round_half_up


class Platform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


ALL_PLATFORMS = "all"


class Role(str, Enum):
    ICON = "icon"
    ROUND = "round"
    PLAYSTORE = "playstore"
    FOREGROUND = "foreground"
    BACKGROUND = "background"
    MONOCHROME = "monochrome"


ADAPTIVE_ROLES = frozenset({Role.FOREGROUND, Role.BACKGROUND, Role.MONOCHROME})

# 66dp visible out of the 108dp adaptive canvas
ANDROID_SAFE_ZONE = 66 / 108
IOS_CONTENT_RATIO = 0.9

DEFAULT_BACKGROUND = "#111111"


@dataclass(frozen=True)
class IconSpec:
    """One output image: pixel size, naming and how to render it.

    ``density`` is the scale label (``"2x"``) on iOS and the density bucket
    (``"xhdpi"``) on Android. ``points`` and ``idiom`` are iOS only.
    """

    width: int
    height: int
    density: str
    filename: str
    folder: str = ""
    role: Role = Role.ICON
    points: Optional[float] = None
    idiom: Optional[str] = None

    @property
    def subpath(self) -> str:
        return f"{self.folder}/{self.filename}" if self.folder else self.filename

    @property
    def size_label(self) -> str:
        """Logical ``WxH`` label; iOS point size, pixel size elsewhere."""
        if self.points is not None:
            p = format_points(self.points)
            return f"{p}x{p}"
        return f"{self.width}x{self.height}"

    def scaled(self, factor: float) -> "IconSpec":
        if factor == 1.0:
            return self
        return replace(
            self,
            width=max(1, round_half_up(self.width * factor)),
            height=max(1, round_half_up(self.height * factor)),
        )


@dataclass(frozen=True)
class PlatformCatalog:
    platform: Platform
    name: str
    defaults: Tuple[IconSpec, ...]
    content_ratio: float
    supports_adaptive: bool
    metadata_filename: Optional[str]
    output_dir_name: str
    archive_name: str
    min_source_size: int
    size_info: Tuple[Dict[str, str], ...] = field(default=())
    # written by the metadata step; icons may never use these paths
    reserved_paths: Tuple[str, ...] = ()


def format_points(points: float) -> str:
    return "%g" % points


def role_from_filename(filename: str) -> Role:
    name = filename.lower()
    for role in (Role.FOREGROUND, Role.BACKGROUND, Role.MONOCHROME, Role.ROUND, Role.PLAYSTORE):
        if role.value in name:
            return role
    return Role.ICON


def _ios(points: float, scale: int, idiom: str) -> IconSpec:
    label = format_points(points)
    suffix = "~ipad" if idiom == "ipad" else ""
    px = round_half_up(points * scale)
    return IconSpec(
        width=px,
        height=px,
        density=f"{scale}x",
        filename=f"Icon-App-{label}x{label}@{scale}x{suffix}.png",
        role=Role.ICON,
        points=points,
        idiom=idiom,
    )


IOS_ICON_SIZES: Tuple[IconSpec, ...] = (
    # iPhone
    _ios(20, 2, "iphone"),
    _ios(20, 3, "iphone"),
    _ios(29, 1, "iphone"),
    _ios(29, 2, "iphone"),
    _ios(29, 3, "iphone"),
    _ios(40, 2, "iphone"),
    _ios(40, 3, "iphone"),
    _ios(60, 2, "iphone"),
    _ios(60, 3, "iphone"),
    # iPad
    _ios(20, 1, "ipad"),
    _ios(20, 2, "ipad"),
    _ios(29, 1, "ipad"),
    _ios(29, 2, "ipad"),
    _ios(40, 1, "ipad"),
    _ios(40, 2, "ipad"),
    _ios(76, 1, "ipad"),
    _ios(76, 2, "ipad"),
    _ios(83.5, 2, "ipad"),
    # App Store
    _ios(1024, 1, "ios-marketing"),
)

IOS_SIZE_INFO: Tuple[Dict[str, str], ...] = (
    {"size": "20×20", "scale": "@1x/@2x/@3x", "pixels": "20/40/60", "use": "Notification"},
    {"size": "29×29", "scale": "@1x/@2x/@3x", "pixels": "29/58/87", "use": "Settings"},
    {"size": "40×40", "scale": "@1x/@2x/@3x", "pixels": "40/80/120", "use": "Spotlight"},
    {"size": "60×60", "scale": "@2x/@3x", "pixels": "120/180", "use": "iPhone App"},
    {"size": "76×76", "scale": "@1x/@2x", "pixels": "76/152", "use": "iPad App"},
    {"size": "83.5×83.5", "scale": "@2x", "pixels": "167", "use": "iPad Pro"},
    {"size": "1024×1024", "scale": "@1x", "pixels": "1024", "use": "App Store"},
)

# density -> (legacy px, adaptive layer px, dpi)
ANDROID_DENSITIES: Dict[str, Tuple[int, int, str]] = {
    "ldpi": (36, 81, "120 dpi"),
    "mdpi": (48, 108, "160 dpi"),
    "hdpi": (72, 162, "240 dpi"),
    "xhdpi": (96, 216, "320 dpi"),
    "xxhdpi": (144, 324, "480 dpi"),
    "xxxhdpi": (192, 432, "640 dpi"),
}

ANDROID_DESCRIPTOR_FOLDER = "mipmap-anydpi-v26"
ANDROID_DESCRIPTOR_FILES = ("ic_launcher.xml", "ic_launcher_round.xml")
ANDROID_PLAYSTORE_SIZE = 512


def _android_sizes() -> Tuple[IconSpec, ...]:
    out: List[IconSpec] = []
    for filename, role in (("ic_launcher.png", Role.ICON), ("ic_launcher_round.png", Role.ROUND)):
        for density, (px, _, _) in ANDROID_DENSITIES.items():
            out.append(IconSpec(px, px, density, filename, f"mipmap-{density}", role))
    out.append(IconSpec(
        ANDROID_PLAYSTORE_SIZE, ANDROID_PLAYSTORE_SIZE, "playstore",
        "ic_launcher_playstore.png", "playstore", Role.PLAYSTORE,
    ))
    for density, (_, px, _) in ANDROID_DENSITIES.items():
        for role in (Role.FOREGROUND, Role.BACKGROUND, Role.MONOCHROME):
            out.append(IconSpec(px, px, density, f"ic_launcher_{role.value}.png", f"mipmap-{density}", role))
    return tuple(out)


ANDROID_ICON_SIZES = _android_sizes()

ANDROID_SIZE_INFO: Tuple[Dict[str, str], ...] = tuple(
    {"density": d, "dpi": dpi, "size": f"{px}×{px}", "adaptive": f"{layer}×{layer}"}
    for d, (px, layer, dpi) in ANDROID_DENSITIES.items()
) + ({"density": "Play Store", "dpi": "-", "size": "512×512", "adaptive": "-"},)


IOS_CATALOG = PlatformCatalog(
    platform=Platform.IOS,
    name="iOS",
    defaults=IOS_ICON_SIZES,
    content_ratio=IOS_CONTENT_RATIO,
    supports_adaptive=False,
    metadata_filename="Contents.json",
    output_dir_name="AppIcon.appiconset",
    archive_name="AppIcon",
    min_source_size=1024,
    size_info=IOS_SIZE_INFO,
    reserved_paths=("Contents.json",),
)

ANDROID_CATALOG = PlatformCatalog(
    platform=Platform.ANDROID,
    name="Android",
    defaults=ANDROID_ICON_SIZES,
    content_ratio=ANDROID_SAFE_ZONE,
    supports_adaptive=True,
    metadata_filename=None,
    output_dir_name="android-icons",
    archive_name="AndroidIcons",
    min_source_size=512,
    size_info=ANDROID_SIZE_INFO,
    reserved_paths=tuple(f"{ANDROID_DESCRIPTOR_FOLDER}/{name}" for name in ANDROID_DESCRIPTOR_FILES),
)

CATALOGS: Dict[Platform, PlatformCatalog] = {
    Platform.IOS: IOS_CATALOG,
    Platform.ANDROID: ANDROID_CATALOG,
}


def parse_platform(value) -> Platform:
    if isinstance(value, Platform):
        return value
    try:
        return Platform(str(value).strip().lower())
    except ValueError:
        available = ", ".join(p.value for p in Platform)
        raise ValueError(f"Unsupported platform: {value}. Available platforms: {available}, {ALL_PLATFORMS}") from None


def resolve_platforms(value) -> List[Platform]:
    """Expand ``"all"`` (or a list of names) into platforms, iOS first."""
    if isinstance(value, (list, tuple)):
        wanted = {parse_platform(v) for v in value}
        return [p for p in Platform if p in wanted]
    if str(getattr(value, "value", value)).strip().lower() == ALL_PLATFORMS:
        return list(Platform)
    return [parse_platform(value)]
