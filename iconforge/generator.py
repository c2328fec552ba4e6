from __future__ import annotations

import os
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .catalog import CATALOGS, IconSpec, Platform, PlatformCatalog
from .compositor import LayerCompositor
from .customization import CustomizationRequest
from .errors import IconForgeError, PlatformGenerationError, WriteError
from .fileops import OutputTree
from .layers import LayerSet, LayerSources
from .sizes import ResolvedSizeSet, SizeConfigManager, size_config_manager

ProgressCallback = Callable[[str], None]


class Stage(str, Enum):
    VALIDATING = "validating"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    WRITING_METADATA = "writing metadata"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class IconFile:
    spec: IconSpec
    path: str


@dataclass(frozen=True)
class GenerationResult:
    platform: Platform
    output_root: str
    icons: Tuple[IconFile, ...]
    metadata_files: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    adaptive: bool = False

    @property
    def files(self) -> List[str]:
        return [f.path for f in self.icons] + list(self.metadata_files)


def default_workers() -> int:
    return os.cpu_count() or 1


class PlatformGenerator:
    """Runs one platform through validating, resolving, rendering and metadata.

    Subclasses decide which layers they read, how the render source is
    prepared, which specs apply and what metadata gets written.
    """

    platform: Platform

    def __init__(self,
                 compositor: Optional[LayerCompositor] = None,
                 sizes: Optional[SizeConfigManager] = None,
                 max_workers: Optional[int] = None,
                 on_progress: Optional[ProgressCallback] = None) -> None:
        self.catalog: PlatformCatalog = CATALOGS[self.platform]
        self.compositor = compositor or LayerCompositor()
        self.sizes = sizes or size_config_manager
        self.max_workers = max_workers or default_workers()
        self.on_progress = on_progress
        self.stage = Stage.VALIDATING

    def _report(self, msg: str) -> None:
        if self.on_progress is not None:
            self.on_progress(msg)

    def output_dir(self, output_root: str) -> str:
        return os.path.join(output_root, self.catalog.output_dir_name)

    def generate(self,
                 sources: LayerSources,
                 output_root: str,
                 customization: Optional[CustomizationRequest] = None,
                 resolved: Optional[ResolvedSizeSet] = None,
                 force: bool = False,
                 use_trash: bool = False) -> GenerationResult:
        tree = OutputTree(self.output_dir(output_root), force=force, use_trash=use_trash)
        try:
            self.stage = Stage.VALIDATING
            self._report(f"{self.catalog.name}: loading layers")
            layers = self.load_layers(sources)
            warnings = self.check_source(layers)
            for w in warnings:
                self._report(f"{self.catalog.name}: warning: {w}")
            tree.open()

            self.stage = Stage.RESOLVING
            if resolved is None:
                resolved = self.sizes.resolve(self.platform, customization)
            specs = self.applicable_specs(resolved, layers)

            self.stage = Stage.RENDERING
            self._report(f"{self.catalog.name}: rendering {len(specs)} icons")
            source = self.prepare(layers)
            icons = self.render_all(source, specs, tree)

            self.stage = Stage.WRITING_METADATA
            metadata = self.write_metadata(tree, icons, layers)
            root = tree.commit()
        except (IconForgeError, OSError) as e:
            tree.discard()
            failed_at = self.stage
            self.stage = Stage.FAILED
            cause = e if isinstance(e, IconForgeError) else WriteError(str(e))
            raise PlatformGenerationError(self.platform.value, failed_at.value, cause) from e

        self.stage = Stage.DONE
        self._report(f"{self.catalog.name}: generated {len(icons)} icons in {root}")
        return GenerationResult(
            platform=self.platform,
            output_root=root,
            icons=tuple(icons),
            metadata_files=tuple(metadata),
            warnings=tuple(warnings),
            adaptive=self.is_adaptive(layers),
        )

    def check_source(self, layers: LayerSet) -> List[str]:
        size = layers.source_size
        if size < self.catalog.min_source_size:
            return [
                f"source is {size}px, smaller than the recommended "
                f"{self.catalog.min_source_size}px; large icons will be upscaled"
            ]
        return []

    def render_all(self, source: LayerSet, specs: Sequence[IconSpec], tree: OutputTree) -> List[IconFile]:
        """Render and write every spec in parallel; the first failure cancels the rest."""
        if not specs:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(specs))) as pool:
            futures: List[Future] = [pool.submit(self._render_and_write, source, spec, tree) for spec in specs]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f.done() and not f.cancelled() and f.exception() is not None]
            if failed:
                for f in pending:
                    f.cancel()
                raise failed[0].exception()
        return [f.result() for f in futures]

    def _render_and_write(self, source: LayerSet, spec: IconSpec, tree: OutputTree) -> IconFile:
        rendered = self.compositor.render_one(source, spec, self.platform)
        path = tree.write_bytes(spec.subpath, rendered.to_png())
        self._report(f"   ✓ {spec.subpath} ({spec.width}x{spec.height}px)")
        return IconFile(spec=spec, path=path)

    # platform hooks

    def load_layers(self, sources: LayerSources) -> LayerSet:
        return sources.load()

    def is_adaptive(self, layers: LayerSet) -> bool:
        return self.catalog.supports_adaptive and layers.layered

    def applicable_specs(self, resolved: ResolvedSizeSet, layers: LayerSet) -> Tuple[IconSpec, ...]:
        return resolved.specs

    def prepare(self, layers: LayerSet) -> LayerSet:
        return layers

    def write_metadata(self, tree: OutputTree, icons: Sequence[IconFile], layers: LayerSet) -> List[str]:
        raise NotImplementedError
