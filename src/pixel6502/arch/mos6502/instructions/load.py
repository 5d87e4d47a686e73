# src/pixel6502/arch/mos6502/instructions/load.py
"""
MOS 6502 転送系命令 (Load/Store/Transfer)。
"""
from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Operation
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502.instructions.base import read_operand

# --- LDA / LDX / LDY ---
# @intent:responsibility オペランドをレジスタへロードし、N, Zフラグを更新。

def lda(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a = read_operand(bus, op)
    state.set_zero_and_negative_from(state.a)

def ldx(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.x = read_operand(bus, op)
    state.set_zero_and_negative_from(state.x)

def ldy(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.y = read_operand(bus, op)
    state.set_zero_and_negative_from(state.y)

# --- STA / STX / STY ---
# @intent:responsibility レジスタの内容を実効アドレスへストア。フラグ変化なし。

def sta(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    bus.write(op.effective_address, state.a)

def stx(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    bus.write(op.effective_address, state.x)

def sty(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    bus.write(op.effective_address, state.y)

# --- Register Transfers (TAX, TAY, TXA, TYA, TSX, TXS) ---

def tax(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.x = state.a
    state.set_zero_and_negative_from(state.x)

def tay(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.y = state.a
    state.set_zero_and_negative_from(state.y)

def txa(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a = state.x
    state.set_zero_and_negative_from(state.a)

def tya(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a = state.y
    state.set_zero_and_negative_from(state.a)

# @intent:note TSXはSP(8bit値)からXへ転送。N, Z更新あり。
def tsx(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.x = state.sp
    state.set_zero_and_negative_from(state.x)

# @intent:note TXSはXからSPへ転送。N, Zフラグは更新 *されない*。
def txs(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.sp = state.x
