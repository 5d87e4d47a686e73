# src/pixel6502/ui/screen_view.py
"""
フレームバッファを描画するウィジェット。
Framebuffer から色を読み出し、1ピクセルを scale×scale の矩形として塗りつぶします。
"""
from typing import Optional

from PySide6.QtWidgets import QWidget
from PySide6.QtCore import QSize
from PySide6.QtGui import QPainter, QColor, QPaintEvent

from pixel6502.display.framebuffer import Framebuffer

# @intent:responsibility Framebuffer の内容を拡大表示する描画専用ウィジェットを提供します。
class FramebufferView(QWidget):
    """
    描画は paintEvent の中でのみ行い、メモリは Bus.peek 経由で読むため
    CPU のバスアクセスログには影響しません。
    """
    def __init__(self, framebuffer: Framebuffer, scale: int = 10, parent=None):
        super().__init__(parent)
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self._framebuffer = framebuffer
        self._scale = scale
        self.setFixedSize(self.sizeHint())

    @property
    def framebuffer(self) -> Framebuffer:
        return self._framebuffer

    @property
    def scale(self) -> int:
        return self._scale

    def sizeHint(self) -> QSize:
        return QSize(self._framebuffer.width * self._scale, self._framebuffer.height * self._scale)

    # @intent:responsibility 表示対象を差し替えます（設定ファイルの再読み込み時など）。
    def set_framebuffer(self, framebuffer: Framebuffer, scale: Optional[int] = None) -> None:
        self._framebuffer = framebuffer
        if scale is not None:
            self._scale = scale
        self.setFixedSize(self.sizeHint())
        self.update()

    # @intent:responsibility ウィジェット上の座標をフレームバッファのピクセル座標へ変換します。
    def pixel_at(self, x: int, y: int) -> Optional[tuple]:
        px, py = x // self._scale, y // self._scale
        if 0 <= px < self._framebuffer.width and 0 <= py < self._framebuffer.height:
            return px, py
        return None

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        try:
            fb = self._framebuffer
            s = self._scale
            colors = fb.get_pixels()
            for y in range(fb.height):
                row = y * fb.width
                for x in range(fb.width):
                    painter.fillRect(x * s, y * s, s, s, QColor(colors[row + x]))
        finally:
            painter.end()
