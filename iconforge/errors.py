from __future__ import annotations

from typing import Iterable, List, Optional


class IconForgeError(Exception):
    """Base class for every error raised by the icon generator."""


class ValidationError(IconForgeError):
    """A customization request is malformed.

    Collects every problem found so the caller can fix them in one pass.
    """

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: List[str] = list(problems)
        if len(self.problems) == 1:
            msg = f"Invalid size customization: {self.problems[0]}"
        else:
            lines = "\n".join(f"  - {p}" for p in self.problems)
            msg = f"Invalid size customization ({len(self.problems)} problems):\n{lines}"
        super().__init__(msg)


class InputError(IconForgeError):
    """A source layer is missing, undecodable or in an unsupported mode."""


class RenderError(IconForgeError):
    """Rendering a single output size failed."""

    def __init__(self, message: str, spec=None) -> None:
        super().__init__(message)
        self.spec = spec


class WriteError(IconForgeError):
    """Writing the output tree failed."""


class PlatformGenerationError(IconForgeError):
    """Generation for one platform stopped at ``stage``."""

    def __init__(self, platform: str, stage: str, cause: Exception) -> None:
        self.platform = platform
        self.stage = stage
        self.cause: Optional[Exception] = cause
        super().__init__(f"{platform} generation failed while {stage}: {cause}")
