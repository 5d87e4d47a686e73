from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from pixel6502.display.framebuffer import DEFAULT_BASE, DEFAULT_WIDTH, DEFAULT_HEIGHT, DEFAULT_PALETTE
from pixel6502.loader.loader import PROGRAM_ORIGIN

@dataclass
class DisplayConfig:
    base: int = DEFAULT_BASE
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    scale: int = 10  # 1ピクセルあたりの表示サイズ (画面上の px)
    palette: Tuple[int, ...] = DEFAULT_PALETTE

@dataclass
class RunConfig:
    steps_per_frame: int = 50
    max_steps: int = 0  # 0 = 上限なし
    stop_on_break: bool = True
    trace: bool = False
    log_level: str = "INFO"

@dataclass
class CpuInitialState:
    use_reset_vector: bool = False  # True の場合、PC は $FFFC のベクタから読み込む
    pc: int = PROGRAM_ORIGIN
    sp: int = 0xFD
    registers: Dict[str, int] = field(default_factory=dict)  # a, x, y

@dataclass
class MachineConfig:
    program: Optional[str] = None  # 設定ファイルからの相対パスは解決済み
    origin: int = PROGRAM_ORIGIN
    display: DisplayConfig = field(default_factory=DisplayConfig)
    run: RunConfig = field(default_factory=RunConfig)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
