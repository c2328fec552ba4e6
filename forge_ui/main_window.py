from __future__ import annotations

import os
from typing import Optional

from PySide6.QtGui import QAction, QColor
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QPushButton, QLabel,
    QFileDialog, QTableWidget, QTableWidgetItem, QHeaderView, QCheckBox, QLineEdit,
    QMessageBox, QProgressBar, QComboBox, QApplication, QDoubleSpinBox, QPlainTextEdit,
    QColorDialog,
)

from qt_material import apply_stylesheet

from iconforge.catalog import CATALOGS, DEFAULT_BACKGROUND, Platform
from iconforge.customization import MAX_SCALE, customization_from_flags
from iconforge.errors import ValidationError
from iconforge.orchestrator import GenerationReport, GenerationRequest
from iconforge.utils import IMAGE_EXTS, human_size
from .workers import GenerateWorker

IMAGE_FILTER = "Images ({})".format(" ".join(f"*{e}" for e in sorted(IMAGE_EXTS)))
PLATFORM_CHOICES = {"All": "all", "iOS": Platform.IOS.value, "Android": Platform.ANDROID.value}


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("IconForge")
        self.resize(980, 680)

        app = QApplication.instance()
        if app is not None:
            for theme in ('dark_cyan.xml', 'dark_teal.xml', 'dark_blue.xml'):
                try:
                    apply_stylesheet(app, theme=theme)
                    break
                except Exception:
                    continue

        # Inputs
        form = QWidget()
        grid = QGridLayout(form)
        self.ed_fg = QLineEdit()
        self.ed_fg.setPlaceholderText("Foreground / icon image (required)")
        self.ed_bg = QLineEdit()
        self.ed_bg.setPlaceholderText(f"Background image or colour (default {DEFAULT_BACKGROUND})")
        self.ed_mono = QLineEdit()
        self.ed_mono.setPlaceholderText("Monochrome layer (optional, Android 13 themed icons)")
        self.ed_out = QLineEdit(os.path.join(os.getcwd(), "icons"))
        self.btn_fg = QPushButton("Browse")
        self.btn_bg = QPushButton("Browse")
        self.btn_color = QPushButton("Colour")
        self.btn_mono = QPushButton("Browse")
        self.btn_out = QPushButton("Browse")

        grid.addWidget(QLabel("Foreground:"), 0, 0)
        grid.addWidget(self.ed_fg, 0, 1)
        grid.addWidget(self.btn_fg, 0, 2)
        grid.addWidget(QLabel("Background:"), 1, 0)
        grid.addWidget(self.ed_bg, 1, 1)
        bg_btns = QWidget()
        bg_l = QHBoxLayout(bg_btns)
        bg_l.setContentsMargins(0, 0, 0, 0)
        bg_l.addWidget(self.btn_bg)
        bg_l.addWidget(self.btn_color)
        grid.addWidget(bg_btns, 1, 2)
        grid.addWidget(QLabel("Monochrome:"), 2, 0)
        grid.addWidget(self.ed_mono, 2, 1)
        grid.addWidget(self.btn_mono, 2, 2)
        grid.addWidget(QLabel("Output:"), 3, 0)
        grid.addWidget(self.ed_out, 3, 1)
        grid.addWidget(self.btn_out, 3, 2)

        # Options
        opts = QWidget()
        opts_l = QHBoxLayout(opts)
        self.platform_combo = QComboBox()
        self.platform_combo.addItems(list(PLATFORM_CHOICES))
        self.ed_exclude = QLineEdit()
        self.ed_exclude.setPlaceholderText("Exclude, e.g. ldpi,monochrome or 20x20,@1x")
        self.spin_scale = QDoubleSpinBox()
        self.spin_scale.setRange(0.55, MAX_SCALE)
        self.spin_scale.setSingleStep(0.1)
        self.spin_scale.setValue(1.0)
        self.spin_fg = QDoubleSpinBox()
        self.spin_fg.setRange(0.2, 2.0)
        self.spin_fg.setSingleStep(0.05)
        self.spin_fg.setValue(1.0)
        self.chk_force = QCheckBox("Overwrite")
        self.chk_trash = QCheckBox("Old output to Trash")
        self.chk_trash.setChecked(True)
        self.chk_zip = QCheckBox("Create ZIP")
        self.btn_generate = QPushButton("Generate")
        self.progress = QProgressBar()
        self.progress.setMaximum(100)
        self.progress.setValue(0)

        opts_l.addWidget(QLabel("Platform:"))
        opts_l.addWidget(self.platform_combo)
        opts_l.addWidget(self.ed_exclude, 1)
        opts_l.addWidget(QLabel("Scale:"))
        opts_l.addWidget(self.spin_scale)
        opts_l.addWidget(QLabel("Content:"))
        opts_l.addWidget(self.spin_fg)
        opts_l.addWidget(self.chk_force)
        opts_l.addWidget(self.chk_trash)
        opts_l.addWidget(self.chk_zip)
        opts_l.addWidget(self.btn_generate)
        opts_l.addWidget(self.progress)

        # Results
        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Platform", "Status", "Files", "Output"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(self.table.EditTrigger.NoEditTriggers)
        self.table.setShowGrid(False)
        self.log = QPlainTextEdit()
        self.log.setReadOnly(True)
        self.log.setMaximumBlockCount(2000)

        root = QWidget()
        root_l = QVBoxLayout(root)
        root_l.addWidget(form)
        root_l.addWidget(opts)
        root_l.addWidget(self.table)
        root_l.addWidget(self.log, 1)
        self.setCentralWidget(root)

        # Signals
        self.btn_fg.clicked.connect(lambda: self._pick_image(self.ed_fg, "Foreground Layer"))
        self.btn_bg.clicked.connect(lambda: self._pick_image(self.ed_bg, "Background Layer"))
        self.btn_mono.clicked.connect(lambda: self._pick_image(self.ed_mono, "Monochrome Layer"))
        self.btn_color.clicked.connect(self.on_pick_color)
        self.btn_out.clicked.connect(self.on_pick_output)
        self.btn_generate.clicked.connect(self.on_generate)

        self._worker: Optional[GenerateWorker] = None

        theme_action = QAction("Toggle Theme", self)
        theme_action.triggered.connect(self.toggle_theme)
        self.menuBar().addAction(theme_action)
        sizes_action = QAction("Icon Sizes", self)
        sizes_action.triggered.connect(self.show_size_info)
        self.menuBar().addAction(sizes_action)
        self._is_dark = True

    # UI Actions
    def toggle_theme(self):
        self._is_dark = not self._is_dark
        theme = 'dark_cyan.xml' if self._is_dark else 'light_cyan.xml'
        app = QApplication.instance()
        if app is not None:
            try:
                apply_stylesheet(app, theme=theme)
            except Exception:
                pass

    def show_size_info(self):
        lines = []
        for catalog in CATALOGS.values():
            lines.append(f"{catalog.name} ({catalog.output_dir_name})")
            for row in catalog.size_info:
                lines.append("   " + "  |  ".join(row.values()))
            lines.append("")
        QMessageBox.information(self, "Icon Sizes", "\n".join(lines).strip())

    def _pick_image(self, target: QLineEdit, title: str):
        path, _ = QFileDialog.getOpenFileName(self, title, "", IMAGE_FILTER)
        if path:
            target.setText(path)

    def on_pick_color(self):
        color = QColorDialog.getColor(QColor(DEFAULT_BACKGROUND), self, "Background Colour")
        if color.isValid():
            self.ed_bg.setText(color.name())

    def on_pick_output(self):
        path = QFileDialog.getExistingDirectory(self, "Output Folder")
        if path:
            self.ed_out.setText(path)

    def _build_request(self) -> GenerationRequest:
        platform = PLATFORM_CHOICES[self.platform_combo.currentText()]
        scale = self.spin_scale.value()
        customization = customization_from_flags(
            exclude=self.ed_exclude.text(),
            platform=platform,
            scale=None if abs(scale - 1.0) < 1e-9 else scale,
        )
        return GenerationRequest(
            output_dir=self.ed_out.text().strip(),
            platform=platform,
            foreground=self.ed_fg.text().strip(),
            background=self.ed_bg.text().strip() or None,
            monochrome=self.ed_mono.text().strip() or None,
            customization=customization,
            force=self.chk_force.isChecked(),
            use_trash=self.chk_trash.isChecked(),
            zip=self.chk_zip.isChecked(),
        )

    def on_generate(self):
        if self._worker and self._worker.isRunning():
            return
        if not self.ed_fg.text().strip():
            QMessageBox.warning(self, "Foreground", "Please choose a foreground image.")
            return
        if not self.ed_out.text().strip():
            QMessageBox.warning(self, "Output", "Please choose an output folder.")
            return
        try:
            request = self._build_request()
        except ValidationError as e:
            QMessageBox.warning(self, "Invalid options", "\n".join(e.problems))
            return

        self._set_busy(True)
        self.table.setRowCount(0)
        self.log.clear()
        self.progress.setRange(0, 100)
        self.progress.setValue(0)
        self._worker = GenerateWorker(request, fg_scale=self.spin_fg.value())
        self._worker.progress.connect(self.progress.setValue)
        self._worker.message.connect(self.log.appendPlainText)
        self._worker.done.connect(self.on_generate_done)
        self._worker.error.connect(self._on_worker_error)
        self._worker.start()

    def on_generate_done(self, report: GenerationReport):
        self._set_busy(False)
        for platform in report.platforms:
            row = self.table.rowCount()
            self.table.insertRow(row)
            self.table.setItem(row, 0, QTableWidgetItem(platform.value))
            result = report.results.get(platform)
            error = report.errors.get(platform)
            if result is not None:
                total = sum(os.path.getsize(p) for p in result.files if os.path.exists(p))
                status = "OK" if error is None else f"OK, {error}"
                self.table.setItem(row, 1, QTableWidgetItem(status))
                self.table.setItem(row, 2, QTableWidgetItem(f"{len(result.files)} ({human_size(total)})"))
                self.table.setItem(row, 3, QTableWidgetItem(report.archives.get(platform, result.output_root)))
                for w in result.warnings:
                    self.log.appendPlainText(f"{platform.value}: warning: {w}")
            else:
                item = QTableWidgetItem(f"Failed while {error.stage}")
                item.setForeground(QColor(255, 99, 99))
                self.table.setItem(row, 1, item)
                self.table.setItem(row, 2, QTableWidgetItem("0"))
                self.table.setItem(row, 3, QTableWidgetItem(str(error.cause)))
        if report.ok:
            self.statusBar().showMessage("Icons generated", 7000)
        else:
            self.statusBar().showMessage("Some platforms failed, see table", 7000)

    def _set_busy(self, busy: bool):
        for w in [self.btn_generate, self.btn_fg, self.btn_bg, self.btn_color, self.btn_mono, self.btn_out,
                  self.platform_combo, self.ed_exclude, self.spin_scale, self.spin_fg,
                  self.chk_force, self.chk_trash, self.chk_zip]:
            w.setEnabled(not busy)

    def _on_worker_error(self, msg: str):
        self._set_busy(False)
        self.progress.setValue(0)
        self.log.appendPlainText(msg)
        self.statusBar().showMessage(msg.splitlines()[0], 7000)

    def closeEvent(self, event):
        if self._worker and self._worker.isRunning():
            self._worker.wait(3000)
        super().closeEvent(event)
