from __future__ import annotations

from typing import List, Sequence, Tuple

from .catalog import ADAPTIVE_ROLES, ANDROID_DESCRIPTOR_FILES, ANDROID_DESCRIPTOR_FOLDER, IconSpec, Platform, Role
from .fileops import OutputTree
from .generator import IconFile, PlatformGenerator
from .layers import LayerSet, LayerSources
from .sizes import ResolvedSizeSet


def build_adaptive_icon_xml(has_monochrome: bool) -> str:
    lines = [
        '<?xml version="1.0" encoding="utf-8"?>',
        '<adaptive-icon xmlns:android="http://schemas.android.com/apk/res/android">',
        '    <background android:drawable="@mipmap/ic_launcher_background"/>',
        '    <foreground android:drawable="@mipmap/ic_launcher_foreground"/>',
    ]
    if has_monochrome:
        lines.append('    <monochrome android:drawable="@mipmap/ic_launcher_monochrome"/>')
    lines.append("</adaptive-icon>")
    return "\n".join(lines) + "\n"


class AndroidGenerator(PlatformGenerator):
    """Per-density mipmap folders; adaptive layers when the request is layered.

    The launcher composites the foreground, background and monochrome
    layers itself, so they are written as separate files.
    """

    platform = Platform.ANDROID

    def load_layers(self, sources: LayerSources) -> LayerSet:
        return sources.load(with_monochrome=True)

    def applicable_specs(self, resolved: ResolvedSizeSet, layers: LayerSet) -> Tuple[IconSpec, ...]:
        specs = resolved.specs
        if not layers.layered:
            return tuple(s for s in specs if s.role not in ADAPTIVE_ROLES)
        if layers.monochrome is None:
            return tuple(s for s in specs if s.role is not Role.MONOCHROME)
        return specs

    def write_metadata(self, tree: OutputTree, icons: Sequence[IconFile], layers: LayerSet) -> List[str]:
        if not layers.layered:
            return []
        roles = {f.spec.role for f in icons}
        if Role.FOREGROUND not in roles or Role.BACKGROUND not in roles:
            self._report("   foreground/background layers excluded, skipping adaptive icon descriptors")
            return []
        xml = build_adaptive_icon_xml(Role.MONOCHROME in roles)
        paths = []
        for name in ANDROID_DESCRIPTOR_FILES:
            subpath = f"{ANDROID_DESCRIPTOR_FOLDER}/{name}"
            paths.append(tree.write_text(subpath, xml))
            self._report(f"   ✓ {subpath}")
        return paths
