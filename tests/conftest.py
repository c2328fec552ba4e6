from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def content_bbox(img, threshold=0):
    """Bounding box of pixels whose alpha exceeds ``threshold``, or None."""
    alpha = np.asarray(img.convert("RGBA").getchannel("A"), dtype=np.uint8)
    ys, xs = np.nonzero(alpha > threshold)
    if xs.size == 0:
        return None
    return int(xs.min()), int(ys.min()), int(xs.max()) + 1, int(ys.max()) + 1


@pytest.fixture
def image_file(tmp_path):
    """Factory writing a solid-colour image and returning its path."""

    def make(name="fg.png", size=(512, 512), color=RED, mode="RGBA", fmt=None):
        path = tmp_path / "inputs" / name
        path.parent.mkdir(exist_ok=True)
        Image.new(mode, size, color).save(path, fmt)
        return str(path)

    return make


@pytest.fixture
def corrupt_file(tmp_path):
    path = tmp_path / "inputs" / "broken.png"
    path.parent.mkdir(exist_ok=True)
    path.write_bytes(b"\x89PNG\r\n\x1a\n definitely not an image")
    return str(path)


@pytest.fixture
def out_dir(tmp_path):
    return str(tmp_path / "out")
