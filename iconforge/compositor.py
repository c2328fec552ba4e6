"""Layer compositing and safe-zone padding.

The foreground is always fitted into the inner content box first and only
then extended with transparent padding to the full canvas. Resizing straight
to the canvas would ignore the content ratio.
"""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from PIL import Image, ImageChops, ImageDraw, ImageOps

from .catalog import ANDROID_SAFE_ZONE, IOS_CONTENT_RATIO, IconSpec, Platform, Role
from .errors import RenderError
from .layers import Color, LayerSet
from .utils import round_half_up

MIN_CONTENT_RATIO = 0.1
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class PaddingConfig:
    """Fraction of the canvas the foreground content may occupy, per platform."""

    ios: float = IOS_CONTENT_RATIO
    android: float = ANDROID_SAFE_ZONE

    def __post_init__(self) -> None:
        for name in ("ios", "android"):
            r = getattr(self, name)
            if not (0 < r <= 1):
                raise ValueError(f"{name} content ratio must be in (0, 1], got {r}")

    def ratio(self, platform: Platform) -> float:
        return self.ios if platform is Platform.IOS else self.android


@dataclass(frozen=True)
class CompositorConfig:
    padding: PaddingConfig = field(default_factory=PaddingConfig)
    # multiplies the content ratio; >1 zooms in and crops
    fg_scale_ios: float = 1.0
    fg_scale_android: float = 1.0
    seed_size: int = 1024
    resample: int = Image.LANCZOS

    def __post_init__(self) -> None:
        for name in ("fg_scale_ios", "fg_scale_android"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def content_ratio(self, platform: Platform) -> float:
        fg_scale = self.fg_scale_ios if platform is Platform.IOS else self.fg_scale_android
        return max(MIN_CONTENT_RATIO, self.padding.ratio(platform) * fg_scale)


def safe_zone_geometry(size: int, ratio: float) -> Tuple[int, int, int]:
    """Return ``(inner, pad_before, pad_after)`` for one canvas edge.

    ``inner + pad_before + pad_after == size`` whenever ``ratio <= 1``; an odd
    remainder goes to the trailing side.
    """
    inner = max(1, round_half_up(size * ratio))
    rest = size - inner
    before = rest // 2
    return inner, before, rest - before


@dataclass(frozen=True, eq=False)
class RenderedIcon:
    spec: IconSpec
    image: Image.Image

    def to_png(self) -> bytes:
        return encode_png(self.image)


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def flatten(img: Image.Image, color: Color) -> Image.Image:
    """Drop the alpha channel by compositing onto an opaque colour."""
    base = Image.new("RGBA", img.size, tuple(color) + (255,))
    return Image.alpha_composite(base, img.convert("RGBA")).convert("RGB")


def circle_mask(img: Image.Image, supersample: int = 4) -> Image.Image:
    w, h = img.size
    big = Image.new("L", (w * supersample, h * supersample), 0)
    ImageDraw.Draw(big).ellipse((0, 0, w * supersample - 1, h * supersample - 1), fill=255)
    mask = big.resize((w, h), Image.LANCZOS)
    out = img.convert("RGBA")
    out.putalpha(ImageChops.multiply(out.getchannel("A"), mask))
    return out


class LayerCompositor:
    """Renders one output image per ``IconSpec`` from a read-only ``LayerSet``.

    Every call works on its own copies of the layers, so a single LayerSet
    can be shared by concurrent render tasks.
    """

    def __init__(self, config: Optional[CompositorConfig] = None) -> None:
        self.config = config or CompositorConfig()

    # building blocks

    def _fit(self, img: Image.Image, box_w: int, box_h: int) -> Image.Image:
        # contain: keep aspect, never crop, transparent letterbox
        w, h = img.size
        s = min(box_w / w, box_h / h)
        nw, nh = max(1, round_half_up(w * s)), max(1, round_half_up(h * s))
        resized = img.resize((nw, nh), self.config.resample)
        canvas = Image.new("RGBA", (box_w, box_h), TRANSPARENT)
        canvas.paste(resized, ((box_w - nw) // 2, (box_h - nh) // 2))
        return canvas

    def pad_layer(self, img: Image.Image, width: int, height: int, platform: Platform) -> Image.Image:
        """Fit ``img`` into the platform's content box, then pad to the canvas."""
        ratio = self.config.content_ratio(platform)
        iw, left, right = safe_zone_geometry(width, ratio)
        ih, top, bottom = safe_zone_geometry(height, ratio)
        inner = self._fit(img.convert("RGBA"), iw, ih)
        if ratio <= 1.0:
            canvas = Image.new("RGBA", (width, height), TRANSPARENT)
            canvas.paste(inner, (left, top))
            return canvas
        # zoomed in past the canvas: keep the centre
        x = round_half_up((iw - width) / 2)
        y = round_half_up((ih - height) / 2)
        return inner.crop((x, y, x + width, y + height))

    def fill_background(self, background: Union[Image.Image, Color], width: int, height: int) -> Image.Image:
        if isinstance(background, Image.Image):
            return ImageOps.fit(
                background.convert("RGBA"), (width, height),
                method=self.config.resample, centering=(0.5, 0.5),
            )
        return Image.new("RGBA", (width, height), tuple(background) + (255,))

    def compose(self, layers: LayerSet, width: int, height: int, platform: Platform) -> Image.Image:
        """Padded foreground alpha-blended over the filled background."""
        bg = self.fill_background(layers.background, width, height)
        fg = self.pad_layer(layers.foreground, width, height, platform)
        return Image.alpha_composite(bg, fg)

    def seed(self, layers: LayerSet, platform: Platform = Platform.IOS) -> Image.Image:
        """Single flattened source that later sizes are plainly resized from."""
        layers = self._working_copy(layers)
        size = self.config.seed_size
        if layers.layered:
            return self.compose(layers, size, size, platform)
        return layers.foreground.resize((size, size), self.config.resample)

    def _working_copy(self, layers: LayerSet) -> LayerSet:
        bg = layers.background.copy() if isinstance(layers.background, Image.Image) else layers.background
        return LayerSet(
            foreground=layers.foreground.copy(),
            background=bg,
            monochrome=layers.monochrome.copy() if layers.monochrome is not None else None,
            layered=layers.layered,
        )

    # per spec

    def render_one(self, layers: LayerSet, spec: IconSpec, platform: Platform) -> RenderedIcon:
        try:
            image = self._render(self._working_copy(layers), spec, platform)
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"Failed to render {spec.subpath} ({spec.width}x{spec.height}): {e}", spec) from e
        if image.size != (spec.width, spec.height):
            raise RenderError(f"Rendered {spec.subpath} at {image.size}, expected {spec.width}x{spec.height}", spec)
        return RenderedIcon(spec=spec, image=image)

    def _render(self, layers: LayerSet, spec: IconSpec, platform: Platform) -> Image.Image:
        w, h = spec.width, spec.height
        if platform is Platform.IOS:
            if layers.layered:
                img = self.compose(layers, w, h, platform)
            else:
                img = layers.foreground.resize((w, h), self.config.resample)
            bg_color = layers.background if layers.background_is_color else (0, 0, 0)
            # App Store icons may not carry alpha
            return flatten(img, bg_color)

        role = spec.role
        if role in (Role.ICON, Role.ROUND, Role.PLAYSTORE):
            if layers.layered:
                img = self.compose(layers, w, h, platform)
            else:
                img = layers.foreground.resize((w, h), self.config.resample)
            return circle_mask(img) if role is Role.ROUND else img
        if not layers.layered:
            raise RenderError(f"{spec.subpath} needs layered input (foreground/background)", spec)
        if role is Role.FOREGROUND:
            return self.pad_layer(layers.foreground, w, h, platform)
        if role is Role.BACKGROUND:
            return self.fill_background(layers.background, w, h)
        if role is Role.MONOCHROME:
            if layers.monochrome is None:
                raise RenderError(f"{spec.subpath} needs a monochrome layer", spec)
            return self.pad_layer(layers.monochrome, w, h, platform).convert("LA")
        raise RenderError(f"Unknown role {role!r} for {spec.subpath}", spec)
