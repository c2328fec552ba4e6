import math
import os

from PIL import Image
import numpy as np


IMAGE_EXTS = {
    ".png", ".jpg", ".jpeg", ".webp", ".tiff", ".tif"
}
# Pillow format names accepted as icon sources
SUPPORTED_FORMATS = {"PNG", "JPEG", "WEBP", "TIFF"}
SUPPORTED_MODES = {"1", "L", "LA", "P", "PA", "RGB", "RGBA", "RGBX", "CMYK"}


def human_size(num: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num)
    for unit in units:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; pixel math wants .5 -> up
    return int(math.floor(value + 0.5))


def normalize_path(p: str) -> str:
    ap = os.path.abspath(os.path.expanduser(p))
    return os.path.normpath(ap)


def has_transparency(img: Image.Image) -> bool:
    """True if any pixel is not fully opaque."""
    if img.mode not in ("RGBA", "LA", "PA") and "transparency" not in img.info:
        return False
    alpha = np.asarray(img.convert("RGBA").getchannel("A"), dtype=np.uint8)
    return bool(alpha.size) and int(alpha.min()) < 255


def square_image(img: Image.Image) -> Image.Image:
    """Centre a non-square image on a transparent square canvas."""
    w, h = img.size
    if w == h:
        return img
    side = max(w, h)
    canvas = Image.new("RGBA", (side, side), (0, 0, 0, 0))
    canvas.paste(img.convert("RGBA"), ((side - w) // 2, (side - h) // 2))
    return canvas
