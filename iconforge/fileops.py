from __future__ import annotations

import json
import os
import shutil
import tempfile
from typing import Any, Optional

from send2trash import send2trash

from .errors import WriteError
from .utils import normalize_path


def remove_tree(path: str, use_trash: bool = False) -> None:
    if use_trash:
        send2trash(path)
    else:
        shutil.rmtree(path)


class OutputTree:
    """Writes a platform's output into a staging directory next to ``target``.

    ``commit()`` swaps the staging directory into place; until then the target
    is untouched, so a failed generation leaves no partial tree behind.
    """

    def __init__(self, target: str, force: bool = False, use_trash: bool = False) -> None:
        self.target = normalize_path(target)
        self.force = force
        self.use_trash = use_trash
        self.staging: Optional[str] = None

    def open(self) -> str:
        if os.path.exists(self.target) and not self.force:
            raise WriteError(f"Output directory already exists: {self.target}\nUse force=True to overwrite")
        parent = os.path.dirname(self.target)
        try:
            os.makedirs(parent, exist_ok=True)
            self.staging = tempfile.mkdtemp(prefix=f".{os.path.basename(self.target)}.", dir=parent)
        except OSError as e:
            raise WriteError(f"Cannot create output directory in {parent}: {e}") from e
        return self.staging

    def _staged(self, subpath: str) -> str:
        if self.staging is None:
            raise WriteError("Output tree is not open")
        path = os.path.join(self.staging, *subpath.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        return path

    def final_path(self, subpath: str) -> str:
        return os.path.join(self.target, *subpath.split("/"))

    def write_bytes(self, subpath: str, data: bytes) -> str:
        try:
            with open(self._staged(subpath), "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise WriteError(f"Cannot write {subpath}: {e}") from e
        return self.final_path(subpath)

    def write_text(self, subpath: str, text: str) -> str:
        return self.write_bytes(subpath, text.encode("utf-8"))

    def write_json(self, subpath: str, data: Any, indent: int = 2) -> str:
        return self.write_text(subpath, json.dumps(data, indent=indent) + "\n")

    def commit(self) -> str:
        if self.staging is None:
            raise WriteError("Output tree is not open")
        try:
            if os.path.exists(self.target):
                remove_tree(self.target, use_trash=self.use_trash)
            os.replace(self.staging, self.target)
        except OSError as e:
            raise WriteError(f"Cannot move output into {self.target}: {e}") from e
        self.staging = None
        return self.target

    def discard(self) -> None:
        if self.staging is not None:
            shutil.rmtree(self.staging, ignore_errors=True)
            self.staging = None
