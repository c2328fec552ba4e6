"""Generate iOS and Android (adaptive) app icon sets from one image or a set of layers."""

from .catalog import (
    ANDROID_CATALOG,
    CATALOGS,
    IOS_CATALOG,
    IconSpec,
    Platform,
    PlatformCatalog,
    Role,
    resolve_platforms,
)
from .compositor import CompositorConfig, LayerCompositor, PaddingConfig, RenderedIcon, safe_zone_geometry
from .customization import (
    CustomizationRequest,
    PlatformCustomization,
    customization_from_flags,
    load_customization,
    parse_customization,
)
from .errors import (
    IconForgeError,
    InputError,
    PlatformGenerationError,
    RenderError,
    ValidationError,
    WriteError,
)
from .generator import GenerationResult, IconFile, PlatformGenerator, Stage
from .layers import LayerSet, LayerSources, decode
from .orchestrator import (
    GenerationOrchestrator,
    GenerationReport,
    GenerationRequest,
    generate_icons,
    generator_for,
)
from .sizes import ResolvedSizeSet, SizeConfigManager, resolve

__version__ = "1.0.0"
