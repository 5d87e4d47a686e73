# src/pixel6502/arch/mos6502/interrupts.py
"""
MOS 6502 割り込みコントローラ (RESET / NMI / IRQ / BRK)。

各エントリポイントはCPUの State と Bus を借用して動作し、自身は状態を持たない。
ホストから要求された割り込み線の保持と優先度解決は InterruptLines が担う。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502 import stack

# 固定ベクタアドレス
NMI_VECTOR = 0xFFFA
RESET_VECTOR = 0xFFFC
IRQ_VECTOR = 0xFFFE  # IRQ / BRK 共用

RESET_SP = 0xFD
# 割り込み受付シーケンスのサイクル数
INTERRUPT_CYCLES = 7


class Interrupt(Enum):
    RESET = "RESET"
    NMI = "NMI"
    IRQ = "IRQ"


# @intent:responsibility PCとステータスを積み、Iフラグを立ててベクタへ分岐する共通シーケンス。
def _enter(state: Mos6502CpuState, bus: Bus, vector: int, return_address: int, break_flag: bool) -> None:
    stack.push_word(state, bus, return_address)
    stack.push_processor_flags(state, bus, break_flag=break_flag)
    state.flag_i = True
    state.pc = bus.read_word(vector)


# @intent:responsibility RESET ピン。いつ呼んでも成功する。
# @intent:note A/X/Y は保持する。SP は $FD に再初期化し、I=1, D=0, B=0 とする。
def reset(state: Mos6502CpuState, bus: Bus) -> None:
    state.sp = RESET_SP
    state.flag_i = True
    state.flag_d = False
    state.flag_b = False
    state.pc = bus.read_word(RESET_VECTOR)


# @intent:responsibility IRQ ピン。Iフラグがセットされていれば何もしない。
# @intent:return 割り込みを受け付けた場合 True。
def irq(state: Mos6502CpuState, bus: Bus) -> bool:
    if state.flag_i:
        return False
    _enter(state, bus, IRQ_VECTOR, state.pc, break_flag=False)
    return True


# @intent:responsibility NMI ピン。マスク不可。
def nmi(state: Mos6502CpuState, bus: Bus) -> None:
    _enter(state, bus, NMI_VECTOR, state.pc, break_flag=False)


# @intent:responsibility BRK 命令のソフトウェア割り込み。積むステータスのBビットは1。
# @intent:note スタックへ積んだ後にレジスタ上のBフラグも立てる。ホストはこれを停止要求として扱える。
def brk(state: Mos6502CpuState, bus: Bus, return_address: int) -> None:
    _enter(state, bus, IRQ_VECTOR, return_address, break_flag=True)
    state.flag_b = True


# @intent:responsibility ホストから要求された割り込み線を保持し、優先度 RESET > NMI > IRQ で解決する。
@dataclass
class InterruptLines:
    """
    ステップ間にホストが立てた割り込み要求のラッチ。

    どの要求も service() で1度調べられた時点で消える。Iフラグでマスクされた IRQ は
    受け付けられずに破棄されるため、CLI 後に受け付けるにはホストが再度要求する必要がある。
    """
    reset: bool = False
    nmi: bool = False
    irq: bool = False

    def pending(self) -> Optional[Interrupt]:
        if self.reset:
            return Interrupt.RESET
        if self.nmi:
            return Interrupt.NMI
        if self.irq:
            return Interrupt.IRQ
        return None

    def release_irq(self) -> None:
        self.irq = False

    def clear(self) -> None:
        self.reset = self.nmi = self.irq = False

    # @intent:responsibility 最も優先度の高い保留中の割り込みを1つだけ処理する。
    # @intent:return 実際に受け付けた割り込み。受け付けなかった場合は None。
    def service(self, state: Mos6502CpuState, bus: Bus) -> Optional[Interrupt]:
        kind = self.pending()
        if kind is Interrupt.RESET:
            # RESET は同時に保留されていた他の要求も破棄する
            self.clear()
            reset(state, bus)
            return kind
        if kind is Interrupt.NMI:
            self.nmi = False
            nmi(state, bus)
            return kind
        if kind is Interrupt.IRQ:
            self.irq = False
            if irq(state, bus):
                return kind
        return None
