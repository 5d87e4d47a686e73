# src/pixel6502/arch/mos6502/stack.py
"""
MOS 6502 スタック操作 (Stack Unit)。

スタックはページ1 ($0100-$01FF) に固定され、下位アドレス方向へ成長する。
Push: $0100+SP へ書き込んでから SP を減算。
Pop : SP を加算してから $0100+SP を読み出す。
SP のオーバーフロー/アンダーフローはエラーではなく、8bit 内でラップする。
"""
from typing import Optional

from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.state import Mos6502CpuState

STACK_PAGE = 0x0100


def push_byte(state: Mos6502CpuState, bus: Bus, value: int) -> None:
    bus.write(STACK_PAGE | state.sp, value & 0xFF)
    state.sp = (state.sp - 1) & 0xFF


def pop_byte(state: Mos6502CpuState, bus: Bus) -> int:
    state.sp = (state.sp + 1) & 0xFF
    return bus.read(STACK_PAGE | state.sp)


# @intent:responsibility 16bit値を上位バイト→下位バイトの順に積む。
def push_word(state: Mos6502CpuState, bus: Bus, value: int) -> None:
    push_byte(state, bus, (value >> 8) & 0xFF)
    push_byte(state, bus, value & 0xFF)


# @intent:responsibility push_word の逆順 (下位→上位) で16bit値を取り出す。
def pop_word(state: Mos6502CpuState, bus: Bus) -> int:
    lo = pop_byte(state, bus)
    hi = pop_byte(state, bus)
    return (hi << 8) | lo


# @intent:responsibility 7つのフラグを1バイトとして積む。
# @intent:note break_flag を指定した場合、積まれるバイトのBビットのみを上書きする (レジスタは変更しない)。
def push_processor_flags(state: Mos6502CpuState, bus: Bus, break_flag: Optional[bool] = None) -> None:
    value = state.status_byte()
    if break_flag is not None:
        value = (value | state.B_FLAG) if break_flag else (value & ~state.B_FLAG)
    push_byte(state, bus, value)


def pop_processor_flags(state: Mos6502CpuState, bus: Bus) -> None:
    state.load_status_byte(pop_byte(state, bus))
