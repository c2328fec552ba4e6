from __future__ import annotations

import os
import shutil
from typing import Optional

from .catalog import CATALOGS
from .errors import WriteError
from .generator import GenerationResult


def zip_output(result: GenerationResult, dest_dir: Optional[str] = None) -> str:
    """Zip a platform's output directory, keeping its folder name inside the archive."""
    root = result.output_root
    parent = os.path.dirname(root)
    name = CATALOGS[result.platform].archive_name
    out = os.path.join(dest_dir or parent, name)
    try:
        if os.path.exists(out + ".zip"):
            os.remove(out + ".zip")
        return shutil.make_archive(out, "zip", root_dir=parent, base_dir=os.path.basename(root))
    except OSError as e:
        raise WriteError(f"Cannot create {out}.zip: {e}") from e
