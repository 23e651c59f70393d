"""
Framed-output preview widget and Qt image helpers.

This module contains everything that touches both Qt **and** image display:
``pil_to_qimage``/``pil_to_qpixmap``, the background
``PreviewRenderThread``, and the ``PreviewWidget`` that doubles as the
drop zone when no image is loaded.
"""

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QRectF, pyqtSignal, QThread
from PyQt6.QtGui import (
    QPainter, QPixmap, QColor, QPen, QImage,
    QMouseEvent, QPaintEvent,
)

from photo_frame.compositor import compose
from photo_frame.config import DROP_HINT
from photo_frame.models import FrameParameters, SourceImage


# =============================================================================
# Qt ↔ PIL helpers
# =============================================================================

def pil_to_qimage(pil_img: Image.Image) -> QImage:
    """Convert a PIL Image to a QImage that owns its pixel data."""
    img_rgba = pil_img.convert("RGBA")
    data = img_rgba.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgba.width, img_rgba.height, 4 * img_rgba.width, QImage.Format.Format_RGBA8888)
    # QImage only borrows *data*; detach before the bytes go away
    return qimg.copy()


def pil_to_qpixmap(pil_img: Image.Image) -> QPixmap:
    """Convert a PIL Image to QPixmap."""
    return QPixmap.fromImage(pil_to_qimage(pil_img))


# =============================================================================
# Background renderer
# =============================================================================

class PreviewRenderThread(QThread):
    """Composes one frame off the UI thread.  ``generation`` identifies the request."""
    rendered = pyqtSignal(int, object)  # generation, PIL image
    error = pyqtSignal(int, str)

    def __init__(self, generation: int, source: SourceImage, params: FrameParameters, parent=None):
        super().__init__(parent)
        self._generation = generation
        self._source = source
        self._params = params

    def run(self):
        try:
            result = compose(self._source, self._params)
            self.rendered.emit(self._generation, result)
        except Exception as e:
            self.error.emit(self._generation, str(e))


# =============================================================================
# Preview Widget — shows the framed result, or a drop hint when empty
# =============================================================================

class PreviewWidget(QWidget):
    """Letterboxed display of the composed frame; clicking it while empty requests a file dialog."""

    clicked = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(400, 300)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        self._pixmap: QPixmap | None = None
        self._loading = False
        self._drag_over = False
        self._hint = DROP_HINT

    def set_loading(self, loading: bool):
        """Show/hide loading indicator."""
        self._loading = loading
        self.update()

    def set_drag_over(self, active: bool):
        self._drag_over = active
        self.update()

    def set_hint(self, text: str):
        self._hint = text
        self.update()

    def set_frame(self, pixmap: QPixmap):
        self._loading = False
        self._pixmap = pixmap
        self.setCursor(Qt.CursorShape.ArrowCursor)
        self.update()

    def has_frame(self) -> bool:
        return self._pixmap is not None

    def clear(self):
        self._pixmap = None
        self._loading = False
        self._hint = DROP_HINT
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.update()

    # --- Display mapping ---

    def _display_rect(self) -> QRectF:
        """Fit the frame in the widget with letterboxing."""
        pw, ph = self._pixmap.width(), self._pixmap.height()
        ww, wh = self.width(), self.height()
        scale = min(ww / pw, wh / ph)
        disp_w, disp_h = pw * scale, ph * scale
        return QRectF((ww - disp_w) / 2, (wh - disp_h) / 2, disp_w, disp_h)

    # --- Events ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton and self._pixmap is None:
            self.clicked.emit()
        super().mousePressEvent(event)

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor("#1e1e1e"))

        if self._pixmap is not None:
            painter.drawPixmap(self._display_rect(), self._pixmap, QRectF(self._pixmap.rect()))
            if self._loading:
                painter.fillRect(self.rect(), QColor(0, 0, 0, 80))
        else:
            border = QColor("#5a8ec5") if self._drag_over else QColor("#555")
            painter.setPen(QPen(border, 2, Qt.PenStyle.DashLine))
            painter.drawRoundedRect(QRectF(self.rect()).adjusted(12, 12, -12, -12), 8, 8)
            painter.setPen(QColor("#aaa"))
            text = "Loading…" if self._loading else self._hint
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, text)

        painter.end()
