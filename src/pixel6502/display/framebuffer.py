# pixel6502/display/framebuffer.py
"""
メモリマップドフレームバッファ

既定では $0200-$05FF の 32x32 バイトを1ピクセル1バイトとして解釈し、
下位4bitを16色パレットの番号として 0xRRGGBB の色に変換します。
コアはこの領域について何も知らず、ここでの解釈は表示側の約束事に過ぎません。
"""
from typing import Sequence, Tuple

from pixel6502.transport.bus import Bus

DEFAULT_BASE = 0x0200
DEFAULT_WIDTH = 32
DEFAULT_HEIGHT = 32

# 16色パレット (0xRRGGBB)
DEFAULT_PALETTE: Tuple[int, ...] = (
    0x000000,  # 0 black
    0xFFFFFF,  # 1 white
    0x880000,  # 2 red
    0xAAFFEE,  # 3 cyan
    0xCC44CC,  # 4 purple
    0x00CC55,  # 5 green
    0x0000AA,  # 6 blue
    0xEEEE77,  # 7 yellow
    0xDD8855,  # 8 orange
    0x664400,  # 9 brown
    0xFF7777,  # A light red
    0x333333,  # B dark grey
    0x777777,  # C grey
    0xAAFF66,  # D light green
    0x0088FF,  # E light blue
    0xBBBBBB,  # F light grey
)


# @intent:responsibility バス上のピクセル領域を読み、座標から色を求めます。
class Framebuffer:
    """
    ピクセル (x, y) は base + x + y * width の1バイトに対応します。
    読み出しには Bus.peek を使い、CPUのバスアクセスログを汚しません。
    """
    def __init__(self, bus: Bus, base: int = DEFAULT_BASE, width: int = DEFAULT_WIDTH,
                 height: int = DEFAULT_HEIGHT, palette: Sequence[int] = DEFAULT_PALETTE):
        if width <= 0 or height <= 0:
            raise ValueError(f"Framebuffer size must be positive, got {width}x{height}")
        if len(palette) != 16:
            raise ValueError(f"Palette must have exactly 16 entries, got {len(palette)}")
        self._bus = bus
        self.base = base & 0xFFFF
        self.width = width
        self.height = height
        self.palette: Tuple[int, ...] = tuple(c & 0xFFFFFF for c in palette)

    @property
    def size(self) -> int:
        return self.width * self.height

    def address_of(self, x: int, y: int) -> int:
        return (self.base + x + y * self.width) & 0xFFFF

    # @intent:responsibility ピクセルのパレット番号 (0-15) を返します。
    # @intent:note 16以上の値は下位4bitのみを使います。
    def get_index(self, x: int, y: int) -> int:
        self._check_bounds(x, y)
        return self._bus.peek(self.address_of(x, y)) & 0x0F

    def get_pixel(self, x: int, y: int) -> int:
        return self.palette[self.get_index(x, y)]

    # @intent:responsibility 全ピクセルの色を行優先で返します（描画側の一括取得用）。
    def get_pixels(self) -> Tuple[int, ...]:
        return tuple(
            self.palette[self._bus.peek(self.address_of(x, y)) & 0x0F]
            for y in range(self.height)
            for x in range(self.width)
        )

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) is outside {self.width}x{self.height} framebuffer")
