# pixel6502/system/machine.py
"""
実行ドライバ (Execution Driver)

Machine は Bus・CPU・割り込み線・フレームバッファを1つずつ所有し、
ホスト（描画ループ、テストハーネス、スクリプト）へ1命令単位の step() を公開します。
step() は内部でループせず、実行の刻みは常に呼び出し側が決定します。
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pixel6502.errors import IllegalOpcodeError
from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Snapshot
from pixel6502.arch.mos6502.cpu import Mos6502Cpu
from pixel6502.arch.mos6502.interrupts import InterruptLines, INTERRUPT_CYCLES
from pixel6502.display.framebuffer import Framebuffer

logger = logging.getLogger(__name__)

BRK_OPCODE = 0x00


# @intent:responsibility run() が停止した理由を表します。
class StopReason(Enum):
    STEP_LIMIT = "STEP_LIMIT"           # 指定ステップ数を実行し終えた
    BREAK = "BREAK"                     # BRK命令を実行した
    ILLEGAL_OPCODE = "ILLEGAL_OPCODE"   # 未定義オペコードに遭遇した


@dataclass(frozen=True)
class RunResult:
    steps: int
    cycles: int
    reason: StopReason
    error: Optional[IllegalOpcodeError] = None


# @intent:responsibility CPU・バス・割り込み線を束ね、ホストに単一ステップ実行を提供します。
class Machine:
    """
    1台分の 6502 システム。グローバルな CPU インスタンスは存在せず、
    ローダー・表示・UI には Machine を明示的に渡します。
    """
    def __init__(self, bus: Optional[Bus] = None, cpu: Optional[Mos6502Cpu] = None,
                 framebuffer: Optional[Framebuffer] = None):
        self.bus = bus if bus is not None else Bus()
        self.cpu = cpu if cpu is not None else Mos6502Cpu(self.bus)
        if self.cpu.bus is not self.bus:
            raise ValueError("CPU must be attached to the machine's bus")
        self.framebuffer = framebuffer if framebuffer is not None else Framebuffer(self.bus)
        self.lines = InterruptLines()
        self._last_snapshot: Optional[Snapshot] = None
        self._steps = 0

    @property
    def cycle_count(self) -> int:
        return self.cpu.cycle_count

    @property
    def step_count(self) -> int:
        return self._steps

    @property
    def last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    # --- Pins ---
    # @intent:responsibility 割り込み線をラッチします。実際の処理は次の step() の先頭で行われます。

    def reset(self) -> None:
        self.lines.reset = True

    def irq(self) -> None:
        self.lines.irq = True

    def nmi(self) -> None:
        self.lines.nmi = True

    # @intent:responsibility 保留中の割り込みを最大1つ処理した後、ちょうど1命令を実行します。
    # @intent:return 消費したサイクル数 (割り込み受付 7 サイクル + 命令サイクル)。
    # @intent:post-condition 未定義オペコードの場合は IllegalOpcodeError を送出し、PCは進みません。
    #   直前に受け付けた割り込みの処理 (スタック、PC、7 サイクル) は取り消さず、例外の interrupt / interrupt_cycles に記録します。
    def step(self) -> int:
        cycles = 0
        serviced = self.cpu.service_interrupts(self.lines)
        if serviced is not None:
            logger.debug("Serviced %s, PC=$%04X", serviced.value, self.cpu.get_register_map()["PC"])
            cycles += INTERRUPT_CYCLES

        try:
            snapshot = self.cpu.step()
        except IllegalOpcodeError as e:
            if serviced is not None:
                e.interrupt = serviced.value
                e.interrupt_cycles = cycles
            raise
        self._last_snapshot = snapshot
        self._steps += 1
        return cycles + snapshot.cycles

    # @intent:responsibility 上限付きで step() を繰り返す簡易ループ。
    # @intent:pre-condition max_steps は 0 以上。0 の場合は何も実行しません。
    def run(self, max_steps: int, stop_on_break: bool = True) -> RunResult:
        if max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")

        steps = 0
        cycles = 0
        while steps < max_steps:
            try:
                cycles += self.step()
            except IllegalOpcodeError as e:
                cycles += e.interrupt_cycles
                logger.warning("%s; stopping after %d steps", e, steps)
                return RunResult(steps, cycles, StopReason.ILLEGAL_OPCODE, error=e)
            steps += 1
            if stop_on_break and self._executed_break():
                logger.info("BRK reached after %d steps (PC=$%04X)", steps, self.cpu.get_register_map()["PC"])
                return RunResult(steps, cycles, StopReason.BREAK)

        return RunResult(steps, cycles, StopReason.STEP_LIMIT)

    # @intent:note Bフラグは RESET まで立ったままなので、直前に実行した命令が BRK かどうかで判定します。
    def _executed_break(self) -> bool:
        return (self._last_snapshot is not None
                and self._last_snapshot.operation.opcode == BRK_OPCODE
                and self.cpu.break_flag)

    def get_pixel(self, x: int, y: int) -> int:
        return self.framebuffer.get_pixel(x, y)

    # @intent:responsibility ホスト向けに現在のレジスタを1行で整形します。
    def describe_registers(self) -> str:
        regs = self.cpu.get_register_map()
        flags = "".join(name if value else "-" for name, value in self.cpu.get_flag_state().items())
        return (
            f"PC=${regs['PC']:04X} A=${regs['A']:02X} X=${regs['X']:02X} Y=${regs['Y']:02X} "
            f"SP=${regs['S']:04X} P={flags} cycles={self.cycle_count}"
        )
