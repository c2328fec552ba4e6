from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from .android import AndroidGenerator
from .archive import zip_output
from .catalog import Platform, resolve_platforms
from .compositor import CompositorConfig, LayerCompositor
from .customization import CustomizationRequest, parse_customization
from .errors import PlatformGenerationError, ValidationError, WriteError
from .generator import GenerationResult, PlatformGenerator, ProgressCallback
from .ios import IOSGenerator
from .layers import LayerSources, Source
from .sizes import ResolvedSizeSet, SizeConfigManager, size_config_manager

GENERATORS: Dict[Platform, Type[PlatformGenerator]] = {
    Platform.IOS: IOSGenerator,
    Platform.ANDROID: AndroidGenerator,
}


def generator_for(platform: Platform, **kwargs) -> PlatformGenerator:
    return GENERATORS[platform](**kwargs)


@dataclass(frozen=True)
class GenerationRequest:
    """Everything one invocation needs.

    Give either ``source`` (single image) or ``foreground`` with optional
    ``background`` (image or ``#hex``) and ``monochrome``.
    """

    output_dir: str
    platform: Any = "all"
    source: Optional[Source] = None
    foreground: Optional[Source] = None
    background: Optional[Source] = None
    monochrome: Optional[Source] = None
    customization: Any = None
    force: bool = False
    use_trash: bool = False
    zip: bool = False

    @property
    def sources(self) -> LayerSources:
        return LayerSources(
            source=self.source,
            foreground=self.foreground,
            background=self.background,
            monochrome=self.monochrome,
        )


@dataclass
class GenerationReport:
    platforms: List[Platform]
    results: Dict[Platform, GenerationResult] = field(default_factory=dict)
    errors: Dict[Platform, PlatformGenerationError] = field(default_factory=dict)
    archives: Dict[Platform, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def outcome(self, platform: Platform):
        """The platform's ``GenerationResult`` or its error."""
        if platform in self.errors and platform not in self.results:
            return self.errors[platform]
        return self.results.get(platform)


class GenerationOrchestrator:
    """Validates the customization once, then runs each platform independently."""

    def __init__(self,
                 compositor_config: Optional[CompositorConfig] = None,
                 max_workers: Optional[int] = None,
                 on_progress: Optional[ProgressCallback] = None,
                 sizes: Optional[SizeConfigManager] = None) -> None:
        self.compositor = LayerCompositor(compositor_config)
        self.max_workers = max_workers
        self.on_progress = on_progress
        self.sizes = sizes or size_config_manager

    def resolve(self, request: GenerationRequest) -> Dict[Platform, ResolvedSizeSet]:
        try:
            platforms = resolve_platforms(request.platform)
        except ValueError as e:
            raise ValidationError([str(e)]) from None
        customization: CustomizationRequest = parse_customization(request.customization)
        return self.sizes.resolve_many(platforms, customization)

    def run(self, request: GenerationRequest) -> GenerationReport:
        # customization problems stop everything before any rendering
        resolved = self.resolve(request)
        report = GenerationReport(platforms=list(resolved))
        sources = request.sources

        for platform, sizes in resolved.items():
            generator = generator_for(
                platform,
                compositor=self.compositor,
                sizes=self.sizes,
                max_workers=self.max_workers,
                on_progress=self.on_progress,
            )
            try:
                result = generator.generate(
                    sources,
                    request.output_dir,
                    resolved=sizes,
                    force=request.force,
                    use_trash=request.use_trash,
                )
            except PlatformGenerationError as e:
                report.errors[platform] = e
                if self.on_progress is not None:
                    self.on_progress(f"✗ {e}")
                continue
            report.results[platform] = result

            if request.zip:
                try:
                    report.archives[platform] = zip_output(result)
                except WriteError as e:
                    report.errors[platform] = PlatformGenerationError(platform.value, "archiving", e)
        return report


def generate_icons(output_dir: str,
                   platform: Any = "all",
                   on_progress: Optional[ProgressCallback] = None,
                   compositor_config: Optional[CompositorConfig] = None,
                   max_workers: Optional[int] = None,
                   **kwargs) -> GenerationReport:
    """Shortcut: ``generate_icons("out", foreground="icon.png", background="#FF5722")``."""
    request = GenerationRequest(output_dir=output_dir, platform=platform, **kwargs)
    orchestrator = GenerationOrchestrator(
        compositor_config=compositor_config,
        max_workers=max_workers,
        on_progress=on_progress,
    )
    return orchestrator.run(request)
