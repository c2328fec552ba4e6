from __future__ import annotations

import os
import platform
import sys

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QIcon, QLinearGradient, QPainter, QPixmap
from PySide6.QtWidgets import QApplication


def _generate_app_icon(size: int = 256) -> QIcon:
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)
    p = QPainter(pm)
    p.setRenderHint(QPainter.Antialiasing)
    g = QLinearGradient(0, 0, size, size)
    g.setColorAt(0.0, QColor(32, 178, 170))
    g.setColorAt(1.0, QColor(30, 144, 255))
    p.setBrush(g)
    p.setPen(Qt.NoPen)
    p.drawRoundedRect(0, 0, size, size, size * 0.2, size * 0.2)
    # Three stacked layers: background, foreground, monochrome
    for i, alpha in enumerate((90, 160, 230)):
        inset = int(size * (0.22 + i * 0.08))
        p.setBrush(QColor(255, 255, 255, alpha))
        p.drawRoundedRect(inset, inset, size - 2 * inset, size - 2 * inset, size * 0.08, size * 0.08)
    p.end()
    return QIcon(pm)


def main():
    try:
        from forge_ui.main_window import MainWindow
        app = QApplication(sys.argv)

        # Windows taskbar grouping + icon
        if platform.system() == "Windows":
            try:
                import ctypes
                ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID("iconforge.app")
            except Exception:
                pass

        icon = None
        base = os.path.dirname(os.path.abspath(__file__))
        png_path = os.path.join(base, "assets", "icon.png")
        if os.path.exists(png_path):
            icon = QIcon(png_path)
        if icon is None or icon.isNull():
            icon = _generate_app_icon(256)
        app.setWindowIcon(icon)

        w = MainWindow()
        w.setWindowIcon(icon)
        w.show()
        sys.exit(app.exec())
    except Exception as e:
        import traceback
        print("Startup error:", e)
        traceback.print_exc()


if __name__ == "__main__":
    main()
