from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .catalog import CATALOGS, IconSpec, Platform, PlatformCatalog, Role
from .customization import CustomizationRequest, check_scale, parse_customization
from .errors import ValidationError


@dataclass(frozen=True)
class ResolvedSizeSet:
    """Final ordered list of specs to render for one platform."""

    platform: Platform
    specs: Tuple[IconSpec, ...]
    scale: float = 1.0
    excluded: Tuple[IconSpec, ...] = ()

    def __iter__(self) -> Iterator[IconSpec]:
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)

    def subpaths(self) -> List[str]:
        return [s.subpath for s in self.specs]

    def folders(self) -> List[str]:
        seen: Dict[str, None] = {}
        for s in self.specs:
            if s.folder:
                seen.setdefault(s.folder, None)
        return list(seen)

    def has_role(self, role: Role) -> bool:
        return any(s.role is role for s in self.specs)


def ios_pattern_matches(spec: IconSpec, pattern: str) -> bool:
    # "20x20@2x" exact, "20x20" any scale, "@2x" any size
    label = spec.size_label
    return (
        pattern == f"{label}@{spec.density}"
        or pattern == label
        or pattern == f"@{spec.density}"
    )


def android_pattern_matches(spec: IconSpec, pattern: str) -> bool:
    # density or folder name exactly, or any part of the filename
    return (
        pattern == spec.density
        or pattern == spec.folder
        or pattern in spec.filename
    )


_MATCHERS = {
    Platform.IOS: ios_pattern_matches,
    Platform.ANDROID: android_pattern_matches,
}


def pattern_matches(platform: Platform, spec: IconSpec, pattern: str) -> bool:
    return _MATCHERS[platform](spec, pattern)


def _check_addition(spec: IconSpec, catalog: PlatformCatalog, where: str, problems: List[str]) -> bool:
    ok = True
    if spec.width <= 0 or spec.height <= 0:
        problems.append(f"{where}: dimensions must be positive, got {spec.width}x{spec.height}")
        ok = False
    if not spec.filename or "/" in spec.filename:
        problems.append(f"{where}: filename {spec.filename!r} must be a plain file name")
        ok = False
    elif spec.subpath in catalog.reserved_paths:
        problems.append(f"{where}: {spec.subpath} is reserved for generated metadata")
        ok = False
    elif not spec.filename.lower().endswith(".png"):
        problems.append(f"{where}: filename {spec.filename!r} must end in .png")
        ok = False
    if not spec.density:
        problems.append(f"{where}: missing density/scale label")
        ok = False
    return ok


class SizeConfigManager:
    """Merges a customization request into a platform's default catalog.

    Catalogs are never modified; every call works on copies.
    """

    def __init__(self, catalogs: Optional[Dict[Platform, PlatformCatalog]] = None) -> None:
        self.catalogs = dict(catalogs or CATALOGS)

    def resolve(self,
                platform: Platform,
                customization: Optional[CustomizationRequest] = None,
                catalog: Optional[PlatformCatalog] = None) -> ResolvedSizeSet:
        catalog = catalog or self.catalogs[platform]
        request = parse_customization(customization)
        own = request.for_platform(platform)
        problems: List[str] = []

        scale_label = f"{platform.value} scale" if own.scale is not None else "Global scale"
        scale = request.effective_scale(platform)
        if check_scale(scale, scale_label, problems) is None and scale != 1.0:
            scale = 1.0  # keep going so every other problem is reported too

        scaled = [spec.scaled(scale) for spec in catalog.defaults]

        kept: List[IconSpec] = []
        excluded: List[IconSpec] = []
        for spec in scaled:
            if any(pattern_matches(platform, spec, pat) for pat in own.exclude):
                excluded.append(spec)
            else:
                kept.append(spec)

        taken = {s.subpath: "default" for s in kept}
        added: List[IconSpec] = []
        for i, spec in enumerate(own.add):
            where = f"{platform.value} addSizes[{i}] ({spec.subpath})"
            if not _check_addition(spec, catalog, where, problems):
                continue
            owner = taken.get(spec.subpath)
            if owner is not None:
                problems.append(f"{where}: collides with {'a default' if owner == 'default' else 'another added'} size of the same output path")
                continue
            taken[spec.subpath] = "added"
            added.append(spec)

        if problems:
            raise ValidationError(problems)
        return ResolvedSizeSet(
            platform=platform,
            specs=tuple(kept + added),
            scale=scale,
            excluded=tuple(excluded),
        )

    def resolve_many(self,
                     platforms: Iterable[Platform],
                     customization: Optional[CustomizationRequest] = None) -> Dict[Platform, ResolvedSizeSet]:
        """Resolve several platforms, reporting problems from all of them together."""
        request = parse_customization(customization)
        resolved: Dict[Platform, ResolvedSizeSet] = {}
        problems: List[str] = []
        for platform in platforms:
            try:
                resolved[platform] = self.resolve(platform, request)
            except ValidationError as e:
                problems.extend(p for p in e.problems if p not in problems)
        if problems:
            raise ValidationError(problems)
        return resolved


size_config_manager = SizeConfigManager()


def resolve(platform: Platform,
            catalog: Optional[PlatformCatalog] = None,
            customization: Optional[CustomizationRequest] = None) -> ResolvedSizeSet:
    return size_config_manager.resolve(platform, customization, catalog=catalog)
