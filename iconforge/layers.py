from __future__ import annotations

import io
import os
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .catalog import DEFAULT_BACKGROUND
from .errors import InputError
from .utils import SUPPORTED_FORMATS, SUPPORTED_MODES, square_image

Color = Tuple[int, int, int]
Source = Union[str, "os.PathLike[str]", bytes, Image.Image]

_HEX_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def is_hex_color(value) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value.strip()))


def parse_color(value: str) -> Color:
    if not is_hex_color(value):
        raise InputError(f"Invalid colour {value!r}: expected '#RGB' or '#RRGGBB'")
    hex_ = value.strip()[1:]
    if len(hex_) == 3:
        hex_ = "".join(c * 2 for c in hex_)
    return int(hex_[0:2], 16), int(hex_[2:4], 16), int(hex_[4:6], 16)


def _describe(source: Source) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    if isinstance(source, Image.Image):
        return "<image>"
    return os.fspath(source)


def decode(source: Source, role: str = "source") -> Image.Image:
    """Decode ``source`` into a fully loaded RGBA image.

    Raises ``InputError`` for missing files, undecodable data, formats other
    than PNG/JPEG/WebP/TIFF, and colour modes that cannot become RGBA.
    """
    if isinstance(source, Image.Image):
        img = source
        fmt = source.format
    else:
        if isinstance(source, (bytes, bytearray)):
            fp = io.BytesIO(source)
        else:
            path = os.fspath(source)
            if not os.path.isfile(path):
                raise InputError(f"{role} file not found: {path}")
            fp = path
        try:
            img = Image.open(fp)
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise InputError(f"Failed to load {role} image {_describe(source)}: {e}") from e
        fmt = img.format
        if fmt not in SUPPORTED_FORMATS:
            raise InputError(
                f"{role} image {_describe(source)} is {fmt or 'an unknown format'}; "
                f"supported formats: {', '.join(sorted(SUPPORTED_FORMATS))}"
            )
    if img.mode not in SUPPORTED_MODES:
        raise InputError(
            f"{role} image {_describe(source)} uses colour mode {img.mode!r}; "
            "an 8-bit RGB/RGBA, greyscale or palette image is required"
        )
    if img.width < 1 or img.height < 1:
        raise InputError(f"Invalid {role} image {_describe(source)}: unable to read dimensions")
    if img.mode == "CMYK":
        img = img.convert("RGB")
    return img.convert("RGBA")


@dataclass(frozen=True, eq=False)
class LayerSet:
    """Decoded, read-only inputs for the compositor.

    ``background`` is either an image or an RGB colour. ``layered`` is False
    for single-image requests, which skip Android's adaptive outputs.
    """

    foreground: Image.Image
    background: Union[Image.Image, Color] = field(default_factory=lambda: parse_color(DEFAULT_BACKGROUND))
    monochrome: Optional[Image.Image] = None
    layered: bool = True

    @classmethod
    def single(cls, image: Image.Image, background: Union[Image.Image, Color, None] = None) -> "LayerSet":
        bg = background if background is not None else parse_color(DEFAULT_BACKGROUND)
        return cls(foreground=image, background=bg, monochrome=None, layered=False)

    @property
    def background_is_color(self) -> bool:
        return not isinstance(self.background, Image.Image)

    @property
    def source_size(self) -> int:
        return max(self.foreground.size)


@dataclass(frozen=True)
class LayerSources:
    """Undecoded inputs of a request: one ``source`` image, or layers."""

    source: Optional[Source] = None
    foreground: Optional[Source] = None
    background: Union[Source, str, None] = None
    monochrome: Optional[Source] = None

    @property
    def layered(self) -> bool:
        return self.source is None

    def validate(self) -> None:
        if self.source is None and self.foreground is None:
            raise InputError("A source image or a foreground layer is required")
        if self.source is not None and self.foreground is not None:
            raise InputError("Give either a single source image or a foreground layer, not both")
        if self.source is not None and (self.background is not None or self.monochrome is not None):
            raise InputError("background/monochrome layers need a foreground layer instead of a single source")

    def load(self, with_monochrome: bool = True) -> LayerSet:
        """Decode the layers; monochrome is only read when asked for."""
        self.validate()
        if self.source is not None:
            return LayerSet.single(square_image(decode(self.source, "source")))
        fg = decode(self.foreground, "foreground")
        if self.background is None:
            bg: Union[Image.Image, Color] = parse_color(DEFAULT_BACKGROUND)
        elif is_hex_color(self.background):
            bg = parse_color(self.background)
        else:
            bg = decode(self.background, "background")
        mono = None
        if with_monochrome and self.monochrome is not None:
            mono = decode(self.monochrome, "monochrome")
        return LayerSet(foreground=fg, background=bg, monochrome=mono, layered=True)
