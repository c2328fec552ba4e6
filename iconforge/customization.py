"""User customization of the default size catalogs.

A request is parsed once into frozen dataclasses; anything wrong with it is
reported in a single ``ValidationError``.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .catalog import IconSpec, Platform, Role, parse_platform, resolve_platforms, role_from_filename
from .errors import ValidationError
from .utils import round_half_up

MIN_SCALE = 0.5  # exclusive
MAX_SCALE = 3.0  # inclusive

_PLATFORM_KEYS = {"scale", "excludeSizes", "addSizes"}
_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)x(\d+(?:\.\d+)?)$")
_SCALE_RE = re.compile(r"^(\d+)x$")


@dataclass(frozen=True)
class PlatformCustomization:
    scale: Optional[float] = None
    exclude: Tuple[str, ...] = ()
    add: Tuple[IconSpec, ...] = ()


@dataclass(frozen=True)
class CustomizationRequest:
    global_scale: Optional[float] = None
    platforms: Mapping[Platform, PlatformCustomization] = field(default_factory=dict)

    def for_platform(self, platform: Platform) -> PlatformCustomization:
        return self.platforms.get(platform) or PlatformCustomization()

    def effective_scale(self, platform: Platform) -> float:
        own = self.for_platform(platform).scale
        if own is not None:
            return own
        if self.global_scale is not None:
            return self.global_scale
        return 1.0

    @property
    def is_empty(self) -> bool:
        return self.global_scale is None and not any(
            pc.scale is not None or pc.exclude or pc.add for pc in self.platforms.values()
        )


def check_scale(value: Any, label: str, problems: List[str]) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        problems.append(f"{label} must be a number, got {value!r}")
        return None
    value = float(value)
    if not (MIN_SCALE < value <= MAX_SCALE):
        problems.append(f"{label} {value:g} is outside the allowed range ({MIN_SCALE:g}, {MAX_SCALE:g}]")
        return None
    return value


def _parse_ios_addition(raw: Mapping[str, Any], where: str, problems: List[str]) -> Optional[IconSpec]:
    missing = [k for k in ("size", "scale", "filename") if not raw.get(k)]
    if missing:
        problems.append(f"{where}: iOS custom size must have 'size', 'scale' and 'filename' (missing {', '.join(missing)})")
        return None
    m = _SIZE_RE.match(str(raw["size"]).strip())
    if not m:
        problems.append(f"{where}: size {raw['size']!r} must look like 'WxH' (e.g. '20x20')")
        return None
    scale_raw = raw["scale"]
    if isinstance(scale_raw, int) and not isinstance(scale_raw, bool):
        scale = scale_raw
    else:
        sm = _SCALE_RE.match(str(scale_raw).strip())
        if not sm:
            problems.append(f"{where}: scale {scale_raw!r} must look like 'Nx' (e.g. '2x')")
            return None
        scale = int(sm.group(1))
    if scale < 1:
        problems.append(f"{where}: scale must be at least 1x")
        return None
    w, h = float(m.group(1)), float(m.group(2))
    return IconSpec(
        width=round_half_up(w * scale),
        height=round_half_up(h * scale),
        density=f"{scale}x",
        filename=str(raw["filename"]),
        role=Role.ICON,
        points=w,
        idiom=str(raw.get("idiom") or "universal"),
    )


def _parse_android_addition(raw: Mapping[str, Any], where: str, problems: List[str]) -> Optional[IconSpec]:
    size = raw.get("size")
    bad = [k for k in ("density", "folder", "filename") if not raw.get(k)]
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        bad.append("size")
    if bad:
        problems.append(
            f"{where}: Android custom size must have 'density', 'size' (positive integer), "
            f"'folder' and 'filename' (bad or missing {', '.join(bad)})"
        )
        return None
    filename = str(raw["filename"])
    return IconSpec(
        width=size,
        height=size,
        density=str(raw["density"]),
        filename=filename,
        folder=str(raw["folder"]).strip("/"),
        role=role_from_filename(filename),
    )


def _parse_platform(platform: Platform, raw: Any, problems: List[str]) -> PlatformCustomization:
    name = platform.value
    if not isinstance(raw, Mapping):
        problems.append(f"{name} customization must be an object")
        return PlatformCustomization()
    for key in raw:
        if key not in _PLATFORM_KEYS:
            problems.append(f"{name}: unknown key {key!r}")

    scale = check_scale(raw.get("scale"), f"{name} scale", problems)

    exclude: List[str] = []
    excl_raw = raw.get("excludeSizes")
    if excl_raw is not None:
        if not isinstance(excl_raw, list):
            problems.append(f"{name} excludeSizes must be an array")
        else:
            for i, pat in enumerate(excl_raw):
                if not isinstance(pat, str) or not pat.strip():
                    problems.append(f"{name} excludeSizes[{i}] must be a non-empty string")
                else:
                    exclude.append(pat.strip())

    add: List[IconSpec] = []
    add_raw = raw.get("addSizes")
    if add_raw is not None:
        if not isinstance(add_raw, list):
            problems.append(f"{name} addSizes must be an array")
        else:
            parse = _parse_ios_addition if platform is Platform.IOS else _parse_android_addition
            for i, item in enumerate(add_raw):
                where = f"{name} addSizes[{i}]"
                if isinstance(item, IconSpec):
                    add.append(item)
                elif not isinstance(item, Mapping):
                    problems.append(f"{where} must be an object")
                else:
                    spec = parse(item, where, problems)
                    if spec is not None:
                        add.append(spec)

    return PlatformCustomization(scale=scale, exclude=tuple(exclude), add=tuple(add))


def parse_customization(data: Any) -> CustomizationRequest:
    """Build a ``CustomizationRequest`` from its JSON form or raise ``ValidationError``."""
    if data is None:
        return CustomizationRequest()
    if isinstance(data, CustomizationRequest):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError(["Customization must be an object"])

    problems: List[str] = []
    platforms: Dict[Platform, PlatformCustomization] = {}
    global_scale = check_scale(data.get("scale"), "Global scale", problems)
    for key, value in data.items():
        if key == "scale":
            continue
        try:
            platform = parse_platform(key)
        except ValueError:
            problems.append(f"unknown key {key!r}")
            continue
        if value is None:
            continue
        platforms[platform] = _parse_platform(platform, value, problems)

    if problems:
        raise ValidationError(problems)
    return CustomizationRequest(global_scale=global_scale, platforms=platforms)


def load_customization(path: str) -> CustomizationRequest:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        raise ValidationError([f"Custom config file not found: {path}"]) from None
    except json.JSONDecodeError as e:
        raise ValidationError([f"Invalid JSON in custom config file: {e}"]) from None
    return parse_customization(data)


def customization_from_flags(exclude: Optional[str] = None,
                             platform: str = "all",
                             scale: Optional[float] = None,
                             ios_scale: Optional[float] = None,
                             android_scale: Optional[float] = None) -> Optional[CustomizationRequest]:
    """Request from flat front-end options; ``None`` when nothing is customized.

    ``exclude`` is comma separated and goes to ``platform``, or to every
    platform when it is ``"all"``.
    """
    data: Dict[str, Any] = {}
    if scale is not None:
        data["scale"] = scale
    if ios_scale is not None:
        data.setdefault("ios", {})["scale"] = ios_scale
    if android_scale is not None:
        data.setdefault("android", {})["scale"] = android_scale
    patterns = [s.strip() for s in (exclude or "").split(",") if s.strip()]
    if patterns:
        for p in resolve_platforms(platform):
            data.setdefault(p.value, {})["excludeSizes"] = list(patterns)
    if not data:
        return None
    return parse_customization(data)
