# src/pixel6502/arch/mos6502/instructions/alu.py
"""
MOS 6502 算術論理演算命令 (ALU)。
BCDサポートを含む。
"""
from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Operation
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502.instructions.base import read_operand, is_accumulator

# --- Logical Operations (AND, ORA, EOR, BIT) ---

def and_(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a &= read_operand(bus, op)
    state.set_zero_and_negative_from(state.a)

def ora(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a |= read_operand(bus, op)
    state.set_zero_and_negative_from(state.a)

def eor(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a ^= read_operand(bus, op)
    state.set_zero_and_negative_from(state.a)

# @intent:note BIT命令はメモリの値のビット6, 7をそれぞれV, Nフラグにコピーし、A & Mの結果でZフラグを設定する。
def bit(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    val = read_operand(bus, op)
    state.flag_z = (state.a & val) == 0
    state.flag_v = (val & 0x40) != 0
    state.flag_n = (val & 0x80) != 0

# --- Arithmetic Operations (ADC, SBC) ---

def _bcd_to_int(b: int) -> int:
    return (b >> 4) * 10 + (b & 0x0F)

def _int_to_bcd(i: int) -> int:
    return ((i // 10) << 4) | (i % 10)

# @intent:responsibility BCD加算ロジック
# @intent:note NMOS 6502 では十進モードの N, V, Z は不定。ここでは結果バイトから設定する。
def _adc_bcd(state: Mos6502CpuState, val: int) -> None:
    c = 1 if state.flag_c else 0

    lo = (state.a & 0x0F) + (val & 0x0F) + c
    hi = (state.a >> 4) + (val >> 4)

    if lo > 9:
        lo -= 10
        hi += 1

    if hi > 9:
        hi -= 10
        state.flag_c = True
    else:
        state.flag_c = False

    state.a = ((hi << 4) | lo) & 0xFF
    state.set_zero_and_negative_from(state.a)

# @intent:responsibility 標準バイナリ加算ロジック
def _adc_binary(state: Mos6502CpuState, val: int) -> None:
    a = state.a
    res_wide = a + val + (1 if state.flag_c else 0)
    res = res_wide & 0xFF

    state.flag_c = res_wide > 0xFF
    # V is set if the sign of the result differs from the sign of both operands.
    state.flag_v = (~(a ^ val) & (a ^ res) & 0x80) != 0
    state.a = res
    state.set_zero_and_negative_from(res)

def adc(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    val = read_operand(bus, op)
    if state.flag_d:
        _adc_bcd(state, val)
    else:
        _adc_binary(state, val)

def sbc(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    val = read_operand(bus, op)

    if not state.flag_d:
        # Binary SBC: ADC (val ^ 0xFF)
        _adc_binary(state, val ^ 0xFF)
        return

    # SBC logic: A - M - (1-C). Borrow is !C
    diff = _bcd_to_int(state.a) - _bcd_to_int(val) - (0 if state.flag_c else 1)
    if diff < 0:
        diff += 100
        state.flag_c = False
    else:
        state.flag_c = True

    state.a = _int_to_bcd(diff) & 0xFF
    state.set_zero_and_negative_from(state.a)

# --- Compare Operations (CMP, CPX, CPY) ---
# @intent:note 結果を格納しない減算。C = Reg >= Val (符号なし比較), Z = 等しい, N = (Reg - Val) のビット7。

def _compare(state: Mos6502CpuState, reg_val: int, mem_val: int) -> None:
    diff = reg_val - mem_val
    state.flag_c = diff >= 0
    state.set_zero_and_negative_from(diff & 0xFF)

def cmp(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _compare(state, state.a, read_operand(bus, op))

def cpx(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _compare(state, state.x, read_operand(bus, op))

def cpy(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _compare(state, state.y, read_operand(bus, op))

# --- Shift / Rotate Operations (ASL, LSR, ROL, ROR) ---
# @intent:note Accumulator mode or Memory mode.

def _read_modify_write(state: Mos6502CpuState, bus: Bus, op: Operation, func) -> None:
    acc = is_accumulator(op)
    val = state.a if acc else bus.read(op.effective_address)
    carry, res = func(val, 1 if state.flag_c else 0)
    state.flag_c = carry
    state.set_zero_and_negative_from(res)
    if acc:
        state.a = res
    else:
        bus.write(op.effective_address, res)

def asl(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _read_modify_write(state, bus, op, lambda v, c: ((v & 0x80) != 0, (v << 1) & 0xFF))

def lsr(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _read_modify_write(state, bus, op, lambda v, c: ((v & 0x01) != 0, v >> 1))

def rol(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _read_modify_write(state, bus, op, lambda v, c: ((v & 0x80) != 0, ((v << 1) | c) & 0xFF))

def ror(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _read_modify_write(state, bus, op, lambda v, c: ((v & 0x01) != 0, (v >> 1) | (c << 7)))

# --- Increment / Decrement (INC, DEC, INX, DEX, INY, DEY) ---

def inc(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    res = (bus.read(op.effective_address) + 1) & 0xFF
    bus.write(op.effective_address, res)
    state.set_zero_and_negative_from(res)

def dec(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    res = (bus.read(op.effective_address) - 1) & 0xFF
    bus.write(op.effective_address, res)
    state.set_zero_and_negative_from(res)

def inx(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.x = (state.x + 1) & 0xFF
    state.set_zero_and_negative_from(state.x)

def dex(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.x = (state.x - 1) & 0xFF
    state.set_zero_and_negative_from(state.x)

def iny(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.y = (state.y + 1) & 0xFF
    state.set_zero_and_negative_from(state.y)

def dey(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.y = (state.y - 1) & 0xFF
    state.set_zero_and_negative_from(state.y)
