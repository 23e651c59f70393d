"""
Main application window.

Orchestrates image loading, frame settings, the live preview, and the
save / copy / export-all actions.  All image work is delegated to the
Qt-free modules; this window only wires widgets to them.
"""

from dataclasses import replace
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QPushButton, QLabel, QFileDialog, QSplitter, QGroupBox, QMessageBox,
    QProgressDialog, QStatusBar, QToolBar, QComboBox, QSlider, QApplication,
    QScrollArea, QColorDialog,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QColor, QKeySequence, QShortcut, QDragEnterEvent, QDropEvent

from photo_frame.config import (
    APP_TITLE, IMAGE_EXTENSIONS, EXPORT_ARCHIVE_NAME,
    BORDER_MIN, BORDER_MAX, BORDER_STEP, BORDER_PRESETS,
    BACKGROUND_TYPES, BLUR_MIN, BLUR_MAX, BLUR_STEP,
)
from photo_frame.compositor import compose, describe
from photo_frame.errors import ClipboardUnsupportedError, ExportCancelled, FrameError
from photo_frame.exporter import export_all, export_current, write_output
from photo_frame.loader import load_paths
from photo_frame.models import BackgroundMode, FrameParameters, ImageCollection
from photo_frame.preferences import JsonFileStore, load_preferences, save_preferences
from photo_frame.preview_widget import PreviewWidget, PreviewRenderThread, pil_to_qimage, pil_to_qpixmap
from photo_frame.ratios import grouped_ratios

_IMAGE_FILTER = "Images ({})".format(" ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS)))


class MainWindow(QMainWindow):
    def __init__(self, store: JsonFileStore | None = None):
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.setMinimumSize(900, 560)

        # Screen-aware startup size, clamped to 80% of screen
        preferred_w, preferred_h = 1440, 900
        screen = QApplication.primaryScreen()
        if screen is not None:
            avail = screen.availableGeometry()
            preferred_w = min(preferred_w, int(avail.width() * 0.8))
            preferred_h = min(preferred_h, int(avail.height() * 0.8))
        self.resize(preferred_w, preferred_h)

        self._store = store or JsonFileStore()
        self._params = load_preferences(self._store) or FrameParameters()
        self._collection = ImageCollection()
        self._last_dir: Path = Path.home()

        # Preview rendering: only the newest generation is displayed
        self._render_generation = 0
        self._render_threads: set[PreviewRenderThread] = set()

        self.setAcceptDrops(True)
        self._build_ui()
        self._apply_params_to_controls()
        self._update_ui()

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        self._build_toolbar()

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(4, 4, 4, 4)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        main_layout.addWidget(splitter)

        splitter.addWidget(self._build_left_panel())
        splitter.addWidget(self._build_center_panel())
        splitter.setSizes([260, 1000])

        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Open or drop images to begin.")

        # --- Keyboard Shortcuts ---
        QShortcut(QKeySequence(Qt.Key.Key_Left), self, lambda: self._on_arrow(-1))
        QShortcut(QKeySequence(Qt.Key.Key_Right), self, lambda: self._on_arrow(1))
        QShortcut(QKeySequence(Qt.Key.Key_Space), self, self._on_save_shortcut)
        QShortcut(QKeySequence(Qt.Key.Key_Return), self, self._on_save_shortcut)
        QShortcut(QKeySequence(Qt.Key.Key_Escape), self, self._clear_all)

    def _build_toolbar(self):
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        act_open = QAction("📂 Open Images", self)
        act_open.triggered.connect(self._select_files)
        toolbar.addAction(act_open)

        act_clear = QAction("✖ Clear", self)
        act_clear.triggered.connect(self._clear_all)
        toolbar.addAction(act_clear)
        self._act_clear = act_clear

        toolbar.addSeparator()

        act_save = QAction("💾 Save Image", self)
        act_save.triggered.connect(self._save_current)
        toolbar.addAction(act_save)
        self._act_save = act_save

        act_copy = QAction("📋 Copy", self)
        act_copy.triggered.connect(self._copy_to_clipboard)
        toolbar.addAction(act_copy)
        self._act_copy = act_copy

        act_export_all = QAction("🗜 Export All (ZIP)", self)
        act_export_all.setToolTip("Frame every loaded image and save them together as a ZIP")
        act_export_all.triggered.connect(self._export_all)
        toolbar.addAction(act_export_all)
        self._act_export_all = act_export_all

    def _build_left_panel(self) -> QWidget:
        inner = QWidget()
        inner_layout = QVBoxLayout(inner)
        inner_layout.setContentsMargins(0, 0, 0, 0)

        inner_layout.addWidget(self._build_ratio_group())
        inner_layout.addWidget(self._build_border_group())
        inner_layout.addWidget(self._build_background_group())
        inner_layout.addWidget(self._build_shortcuts_group())
        inner_layout.addStretch()

        # Scroll area wraps the inner widget so the panel can shrink
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(inner)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        scroll.setFrameShape(scroll.Shape.NoFrame)

        left_panel = QWidget()
        left_panel.setFixedWidth(260)
        left_layout = QVBoxLayout(left_panel)
        left_layout.setContentsMargins(0, 0, 4, 0)
        left_layout.addWidget(scroll)
        self._options_panel = left_panel
        return left_panel

    def _build_center_panel(self) -> QWidget:
        center = QWidget()
        layout = QVBoxLayout(center)
        layout.setContentsMargins(0, 0, 0, 0)

        self._preview = PreviewWidget()
        self._preview.clicked.connect(self._select_files)
        layout.addWidget(self._preview, stretch=1)

        nav_row = QHBoxLayout()
        self._btn_prev = QPushButton("← Previous")
        self._btn_prev.clicked.connect(lambda: self._navigate_by(-1))
        nav_row.addWidget(self._btn_prev)
        self._counter_label = QLabel("")
        self._counter_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        nav_row.addWidget(self._counter_label, stretch=1)
        self._btn_next = QPushButton("Next →")
        self._btn_next.clicked.connect(lambda: self._navigate_by(1))
        nav_row.addWidget(self._btn_next)
        layout.addLayout(nav_row)

        self._caption_label = QLabel("")
        self._caption_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._caption_label.setStyleSheet("color: #aaa; font-size: 9pt; padding: 2px;")
        layout.addWidget(self._caption_label)
        return center

    def _build_ratio_group(self) -> QGroupBox:
        group = QGroupBox("Aspect Ratio")
        layout = QVBoxLayout(group)

        self._ratio_combo = QComboBox()
        model = self._ratio_combo.model()
        for category, specs in grouped_ratios():
            if category is not None:
                # Non-selectable group header
                self._ratio_combo.addItem(f"— {category} —")
                model.item(self._ratio_combo.count() - 1).setEnabled(False)
            for spec in specs:
                self._ratio_combo.addItem(spec.label, spec.key)
        self._ratio_combo.currentIndexChanged.connect(self._on_controls_changed)
        layout.addWidget(self._ratio_combo)
        return group

    def _build_border_group(self) -> QGroupBox:
        group = QGroupBox("Border")
        layout = QVBoxLayout(group)

        row = QHBoxLayout()
        # Slider positions are multiples of BORDER_STEP
        self._border_slider = QSlider(Qt.Orientation.Horizontal)
        self._border_slider.setRange(BORDER_MIN // BORDER_STEP, BORDER_MAX // BORDER_STEP)
        self._border_slider.valueChanged.connect(self._on_controls_changed)
        row.addWidget(self._border_slider, stretch=1)
        self._border_label = QLabel("0")
        self._border_label.setFixedWidth(36)
        row.addWidget(self._border_label)
        layout.addLayout(row)

        presets = QGridLayout()
        self._preset_buttons: dict[int, QPushButton] = {}
        for i, value in enumerate(BORDER_PRESETS):
            btn = QPushButton(f"{value}px")
            btn.clicked.connect(lambda checked, v=value: self._border_slider.setValue(v // BORDER_STEP))
            presets.addWidget(btn, i // 3, i % 3)
            self._preset_buttons[value] = btn
        layout.addLayout(presets)
        return group

    def _build_background_group(self) -> QGroupBox:
        group = QGroupBox("Background")
        layout = QVBoxLayout(group)

        self._bg_mode_combo = QComboBox()
        for value, label in BACKGROUND_TYPES.items():
            self._bg_mode_combo.addItem(label, value)
        self._bg_mode_combo.currentIndexChanged.connect(self._on_controls_changed)
        layout.addWidget(self._bg_mode_combo)

        # Colour picker (colour mode)
        self._color_row = QWidget()
        color_layout = QHBoxLayout(self._color_row)
        color_layout.setContentsMargins(0, 0, 0, 0)
        color_layout.addWidget(QLabel("Color:"))
        self._color_button = QPushButton()
        self._color_button.setFixedHeight(24)
        self._color_button.clicked.connect(self._pick_color)
        color_layout.addWidget(self._color_button, stretch=1)
        layout.addWidget(self._color_row)

        # Blur radius (blur mode); positions are multiples of BLUR_STEP
        self._blur_row = QWidget()
        blur_layout = QHBoxLayout(self._blur_row)
        blur_layout.setContentsMargins(0, 0, 0, 0)
        blur_layout.addWidget(QLabel("Blur:"))
        self._blur_slider = QSlider(Qt.Orientation.Horizontal)
        self._blur_slider.setRange(BLUR_MIN // BLUR_STEP, BLUR_MAX // BLUR_STEP)
        self._blur_slider.valueChanged.connect(self._on_controls_changed)
        blur_layout.addWidget(self._blur_slider, stretch=1)
        self._blur_label = QLabel("")
        self._blur_label.setFixedWidth(36)
        blur_layout.addWidget(self._blur_label)
        layout.addWidget(self._blur_row)
        return group

    def _build_shortcuts_group(self) -> QGroupBox:
        group = QGroupBox("Shortcuts")
        layout = QVBoxLayout(group)
        label = QLabel(
            "←  /  →    Previous / next image\n"
            "Space / Enter    Save image\n"
            "Esc    Clear all images"
        )
        label.setStyleSheet("color: #aaa; font-size: 8pt;")
        layout.addWidget(label)
        return group

    # =========================================================================
    # Frame parameters
    # =========================================================================

    def _apply_params_to_controls(self):
        """Push self._params into the widgets without triggering re-renders."""
        params = self._params
        widgets = (self._ratio_combo, self._border_slider, self._bg_mode_combo, self._blur_slider)
        for w in widgets:
            w.blockSignals(True)
        try:
            self._ratio_combo.setCurrentIndex(self._ratio_combo.findData(params.aspect_ratio_key))
            self._border_slider.setValue(round(params.border_px / BORDER_STEP))
            self._bg_mode_combo.setCurrentIndex(self._bg_mode_combo.findData(BackgroundMode(params.background_mode).value))
            self._blur_slider.setValue(round(params.blur_radius_px / BLUR_STEP))
        finally:
            for w in widgets:
                w.blockSignals(False)
        self._refresh_control_labels()

    def _read_params_from_controls(self) -> FrameParameters:
        return FrameParameters(
            aspect_ratio_key=self._ratio_combo.currentData(),
            border_px=self._border_slider.value() * BORDER_STEP,
            background_mode=BackgroundMode(self._bg_mode_combo.currentData()),
            background_color=self._params.background_color,
            blur_radius_px=self._blur_slider.value() * BLUR_STEP,
        ).normalized()

    def _refresh_control_labels(self):
        params = self._params
        self._border_label.setText(str(params.border_px))
        self._blur_label.setText(str(params.blur_radius_px))
        for value, btn in self._preset_buttons.items():
            btn.setStyleSheet("font-weight: bold;" if value == params.border_px else "font-weight: normal;")
        self._color_button.setStyleSheet(
            f"background: {params.background_color}; border: 1px solid #777; border-radius: 4px;"
        )
        self._color_button.setText(params.background_color)
        is_blur = params.background_mode == BackgroundMode.BLUR
        self._color_row.setVisible(not is_blur)
        self._blur_row.setVisible(is_blur)

    def _on_controls_changed(self, *args):
        self._params = self._read_params_from_controls()
        self._params_changed()

    def _pick_color(self):
        color = QColorDialog.getColor(QColor(self._params.background_color), self, "Background Color")
        if not color.isValid():
            return
        self._params = replace(self._params, background_color=color.name())
        self._params_changed()

    def _params_changed(self):
        self._refresh_control_labels()
        save_preferences(self._params, self._store)
        self._render_preview()

    # =========================================================================
    # Loading
    # =========================================================================

    def _select_files(self):
        files, _ = QFileDialog.getOpenFileNames(self, "Open Images", str(self._last_dir), _IMAGE_FILTER)
        if files:
            self._load_paths([Path(f) for f in files])

    def dragEnterEvent(self, event: QDragEnterEvent):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            self._preview.set_drag_over(True)

    def dragLeaveEvent(self, event):
        self._preview.set_drag_over(False)

    def dropEvent(self, event: QDropEvent):
        self._preview.set_drag_over(False)
        paths = [Path(url.toLocalFile()) for url in event.mimeData().urls() if url.isLocalFile()]
        event.acceptProposedAction()
        if paths:
            self._load_paths(paths)

    def _load_paths(self, paths: list[Path]):
        supported = [p for p in paths if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS]
        skipped = len(paths) - len(supported)
        if not supported:
            self._status.showMessage("No supported images in the selection.")
            return

        self._last_dir = supported[0].parent
        self._preview.set_loading(True)
        self._status.showMessage(f"Loading {len(supported)} image(s)…")
        QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        QApplication.processEvents()
        try:
            result = load_paths(supported, self._collection.conversion_cache)
        finally:
            QApplication.restoreOverrideCursor()
            self._preview.set_loading(False)

        if result.failures:
            err_names = "\n".join(f"• {name}: {error}" for name, error in result.failures[:10])
            suffix = f"\n…and {len(result.failures) - 10} more" if len(result.failures) > 10 else ""
            QMessageBox.warning(
                self, "Some images could not be loaded",
                f"{len(result.failures)} failed:\n\n{err_names}{suffix}",
            )

        if not result.sources:
            self._status.showMessage("No images could be loaded.")
            return

        self._collection.replace(result.sources)
        self._preview.clear()
        note = f" ({skipped} unsupported file(s) ignored)" if skipped else ""
        self._status.showMessage(f"{len(result.sources)} image(s) loaded{note}")
        self._update_ui()
        self._render_preview()

    def _clear_all(self):
        self._render_generation += 1
        self._collection.clear()
        self._preview.clear()
        self._status.showMessage("Cleared.")
        self._update_ui()

    # =========================================================================
    # Navigation & preview
    # =========================================================================

    def _on_arrow(self, step: int):
        # Arrow keys keep working on a focused slider
        focus = QApplication.focusWidget()
        if isinstance(focus, QSlider):
            action = QSlider.SliderAction.SliderSingleStepAdd if step > 0 else QSlider.SliderAction.SliderSingleStepSub
            focus.triggerAction(action)
            return
        self._navigate_by(step)

    def _navigate_by(self, step: int):
        target = self._collection.current_index + step
        if self._collection.is_empty or not 0 <= target < len(self._collection):
            return
        self._collection.navigate(target)
        self._update_ui()
        self._render_preview()

    def _render_preview(self):
        source = self._collection.current
        if source is None:
            return
        self._render_generation += 1
        self._preview.set_loading(True)

        thread = PreviewRenderThread(self._render_generation, source, replace(self._params), self)
        thread.rendered.connect(self._on_frame_rendered)
        thread.error.connect(self._on_render_error)
        thread.finished.connect(lambda t=thread: self._on_render_thread_finished(t))
        self._render_threads.add(thread)
        thread.start()

    def _on_frame_rendered(self, generation: int, image):
        if generation != self._render_generation:
            return  # Settings or image changed while rendering
        self._preview.set_frame(pil_to_qpixmap(image))
        self._update_caption()

    def _on_render_error(self, generation: int, error: str):
        if generation != self._render_generation:
            return
        self._preview.set_loading(False)
        self._status.showMessage(f"Preview failed: {error}")

    def _on_render_thread_finished(self, thread: PreviewRenderThread):
        self._render_threads.discard(thread)
        thread.deleteLater()

    def _update_caption(self):
        source = self._collection.current
        self._caption_label.setText(describe(source, self._params) if source is not None else "")

    def _update_ui(self):
        total = len(self._collection)
        has_images = total > 0

        self._act_clear.setEnabled(has_images)
        self._act_save.setEnabled(has_images)
        self._act_copy.setEnabled(has_images)
        self._act_export_all.setVisible(total > 1)
        self._btn_prev.setEnabled(self._collection.has_previous)
        self._btn_next.setEnabled(self._collection.has_next)
        self._btn_prev.setVisible(has_images)
        self._btn_next.setVisible(has_images)

        if has_images:
            self._counter_label.setText(f"{self._collection.current_index + 1} / {total}")
            self._preview.set_hint(f"{total} image{'s' if total > 1 else ''} loaded")
        else:
            self._counter_label.setText("")
        self._update_caption()

    # =========================================================================
    # Save / copy / export
    # =========================================================================

    def _on_save_shortcut(self):
        if isinstance(QApplication.focusWidget(), QComboBox):
            return
        self._save_current()

    def _save_current(self):
        if self._collection.is_empty:
            return
        try:
            filename, data = export_current(self._collection, self._params)
        except FrameError as e:
            QMessageBox.critical(self, "Error", f"Failed to render image:\n{e}")
            return

        path, _ = QFileDialog.getSaveFileName(
            self, "Save Image", str(self._last_dir / filename), "PNG Images (*.png)",
        )
        if not path:
            return
        try:
            # The dialog already confirmed any overwrite
            written = write_output(Path(path), data, overwrite=True)
        except OSError as e:
            QMessageBox.critical(self, "Error", f"Failed to save {filename}:\n{e}")
            return
        self._last_dir = written.parent
        self._status.showMessage(f"Saved {written}")

    def _copy_to_clipboard(self):
        source = self._collection.current
        if source is None:
            return
        try:
            clipboard = QApplication.clipboard()
            if clipboard is None:
                raise ClipboardUnsupportedError("no system clipboard")
            clipboard.setImage(pil_to_qimage(compose(source, self._params)))
        except ClipboardUnsupportedError:
            QMessageBox.information(self, "Copy", "Copy to clipboard not supported")
            return
        except FrameError as e:
            QMessageBox.critical(self, "Error", f"Failed to render image:\n{e}")
            return
        self._status.showMessage("Copied!", 1500)

    def _export_all(self):
        if self._collection.is_empty:
            return

        path, _ = QFileDialog.getSaveFileName(
            self, "Export All", str(self._last_dir / EXPORT_ARCHIVE_NAME), "ZIP Archives (*.zip)",
        )
        if not path:
            return

        total = len(self._collection)
        progress = QProgressDialog("Creating ZIP…", "Cancel", 0, total, self)
        progress.setWindowModality(Qt.WindowModality.WindowModal)
        progress.setMinimumDuration(0)
        progress.setValue(0)

        def on_progress(index, count, source):
            self._collection.current_index = index
            self._counter_label.setText(f"{index + 1} / {count}")
            progress.setValue(index)
            progress.setLabelText(f"Framing: {source.name}  ({index + 1}/{count})")
            QApplication.processEvents()

        try:
            archive = export_all(
                self._collection, self._params,
                progress=on_progress,
                should_cancel=progress.wasCanceled,
            )
            progress.setLabelText("Writing ZIP…")
            QApplication.processEvents()
            written = write_output(Path(path), archive, overwrite=True)
        except ExportCancelled:
            self._status.showMessage("Export cancelled.")
            return
        except (FrameError, OSError) as e:
            QMessageBox.critical(self, "Export failed", f"No archive was written:\n{e}")
            return
        finally:
            progress.setValue(total)
            self._update_ui()

        self._last_dir = written.parent
        self._status.showMessage(f"Exported {total} image(s) to {written}")

    # =========================================================================
    # Shutdown
    # =========================================================================

    def closeEvent(self, event):
        """Flush preferences and let render threads finish before closing."""
        save_preferences(self._params, self._store)
        for thread in list(self._render_threads):
            thread.wait(2000)
        super().closeEvent(event)
