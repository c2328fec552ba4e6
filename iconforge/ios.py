from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .catalog import IconSpec, Platform
from .fileops import OutputTree
from .generator import IconFile, PlatformGenerator
from .layers import LayerSet, LayerSources
from .utils import has_transparency

MANIFEST_VERSION = 1
MANIFEST_AUTHOR = "iconforge"


def build_manifest(specs: Sequence[IconSpec]) -> Dict[str, Any]:
    """Asset-catalog ``Contents.json`` listing every icon with its logical size."""
    images = [
        {
            "filename": spec.filename,
            "idiom": spec.idiom or "universal",
            "scale": spec.density,
            "size": spec.size_label,
        }
        for spec in specs
    ]
    return {
        "images": images,
        "info": {"author": MANIFEST_AUTHOR, "version": MANIFEST_VERSION},
    }


class IOSGenerator(PlatformGenerator):
    """Flattened icons plus ``Contents.json``; never separate layer files."""

    platform = Platform.IOS

    def load_layers(self, sources: LayerSources) -> LayerSet:
        return sources.load(with_monochrome=False)

    def check_source(self, layers: LayerSet) -> List[str]:
        warnings = super().check_source(layers)
        if not layers.layered and has_transparency(layers.foreground):
            warnings.append("source has transparent areas; they are filled with the background colour")
        return warnings

    def prepare(self, layers: LayerSet) -> LayerSet:
        # one 1024px composite, every size is a plain resize of it
        seed = self.compositor.seed(layers, Platform.IOS)
        bg = layers.background if layers.background_is_color else None
        return LayerSet.single(seed, background=bg)

    def write_metadata(self, tree: OutputTree, icons: Sequence[IconFile], layers: LayerSet) -> List[str]:
        manifest = build_manifest([f.spec for f in icons])
        path = tree.write_json(self.catalog.metadata_filename, manifest)
        self._report(f"   ✓ {self.catalog.metadata_filename}")
        return [path]
