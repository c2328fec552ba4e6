from __future__ import annotations

from PySide6.QtCore import QThread, Signal

from iconforge.compositor import CompositorConfig
from iconforge.orchestrator import GenerationOrchestrator, GenerationRequest


class GenerateWorker(QThread):
    progress = Signal(int)   # percentage (0-100; 0 for indeterminate)
    message = Signal(str)    # one line per written file / stage
    done = Signal(object)    # GenerationReport
    error = Signal(str)

    def __init__(self, request: GenerationRequest, fg_scale: float = 1.0):
        super().__init__()
        self.request = request
        self.fg_scale = fg_scale
        self._total = 0
        self._written = 0

    def _on_progress(self, msg: str):
        # called from render threads; signal emission is thread-safe
        self.message.emit(msg)
        if msg.lstrip().startswith("✓") and self._total:
            self._written += 1
            self.progress.emit(min(99, int(self._written * 100 / self._total)))

    def run(self):
        try:
            self.progress.emit(0)
            config = CompositorConfig(fg_scale_ios=self.fg_scale, fg_scale_android=self.fg_scale)
            orch = GenerationOrchestrator(compositor_config=config, on_progress=self._on_progress)
            resolved = orch.resolve(self.request)
            self._total = sum(len(r) for r in resolved.values())
            report = orch.run(self.request)
            self.progress.emit(100)
            self.done.emit(report)
        except Exception as e:
            self.error.emit(str(e))
