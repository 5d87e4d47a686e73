# src/pixel6502/arch/mos6502/instructions/base.py
"""
MOS 6502 アドレッシングモード解決ロジック (Addressing-Mode Resolver)。

各関数は命令先頭 (オペコード) を指す pc を受け取り、実効アドレスまたは即値を返す。
レジスタやメモリは一切変更しない。
"""
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Operation
from pixel6502.arch.mos6502.state import Mos6502CpuState, to_signed

# @intent:responsibility アドレッシングモードの解決結果。
# address: 解決された実効アドレス (Implied/Immediateの場合はNone)
# value: Immediateの場合の値、それ以外はNone
# extra_cycles: ページ境界交差による追加サイクル数
# operand_str: 逆アセンブリ用のオペランド文字列表現
# operand_bytes: オペランドとしてフェッチされたバイト列
class AddressingResult(NamedTuple):
    address: Optional[int]
    value: Optional[int]
    extra_cycles: int
    operand_str: str
    operand_bytes: List[int]


class AddressingMode(Enum):
    IMPLIED = "IMPLIED"  # Accumulator を含む
    IMMEDIATE = "IMMEDIATE"
    ZEROPAGE = "ZEROPAGE"
    ZEROPAGE_X = "ZEROPAGE_X"
    ZEROPAGE_Y = "ZEROPAGE_Y"
    ABSOLUTE = "ABSOLUTE"
    ABSOLUTE_X = "ABSOLUTE_X"
    ABSOLUTE_Y = "ABSOLUTE_Y"
    INDIRECT = "INDIRECT"
    INDEXED_INDIRECT = "INDEXED_INDIRECT"
    INDIRECT_INDEXED = "INDIRECT_INDEXED"
    RELATIVE = "RELATIVE"

    # @intent:responsibility オペコードに続くオペランドのバイト数。
    @property
    def operand_length(self) -> int:
        return _OPERAND_LENGTH[self]


_OPERAND_LENGTH: Dict[AddressingMode, int] = {
    AddressingMode.IMPLIED: 0,
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.ZEROPAGE: 1,
    AddressingMode.ZEROPAGE_X: 1,
    AddressingMode.ZEROPAGE_Y: 1,
    AddressingMode.ABSOLUTE: 2,
    AddressingMode.ABSOLUTE_X: 2,
    AddressingMode.ABSOLUTE_Y: 2,
    AddressingMode.INDIRECT: 2,
    AddressingMode.INDEXED_INDIRECT: 1,
    AddressingMode.INDIRECT_INDEXED: 1,
    AddressingMode.RELATIVE: 1,
}

# @intent:responsibility ページ境界交差判定。
def is_page_crossed(addr1: int, addr2: int) -> bool:
    return (addr1 & 0xFF00) != (addr2 & 0xFF00)


def _operand(pc: int, bus: Bus, offset: int = 1) -> int:
    return bus.read((pc + offset) & 0xFFFF)


def _operand_word(pc: int, bus: Bus) -> Tuple[int, int, int]:
    lo = _operand(pc, bus, 1)
    hi = _operand(pc, bus, 2)
    return lo, hi, (hi << 8) | lo


# @intent:responsibility ゼロページ内でラップするポインタ読み出し ($FF の次は $00)。
def _zeropage_pointer(bus: Bus, ptr: int) -> int:
    lo = bus.read(ptr & 0xFF)
    hi = bus.read((ptr + 1) & 0xFF)
    return (hi << 8) | lo

# --- Addressing Modes ---

# @intent:responsibility Implied / Accumulator Mode
def addr_implied(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    return AddressingResult(None, None, 0, "", [])

# @intent:responsibility Immediate Mode (#$xx)
def addr_immediate(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    val = _operand(pc, bus)
    return AddressingResult(None, val, 0, f"#${val:02X}", [val])

# @intent:responsibility Zero Page Mode ($xx)
def addr_zeropage(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    addr = _operand(pc, bus)
    return AddressingResult(addr, None, 0, f"${addr:02X}", [addr])

# @intent:responsibility Zero Page, X Mode ($xx,X)
# @intent:note ラップアラウンドあり (0xFF + 1 -> 0x00)
def addr_zeropage_x(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    base = _operand(pc, bus)
    addr = (base + state.x) & 0xFF
    return AddressingResult(addr, None, 0, f"${base:02X},X", [base])

# @intent:responsibility Zero Page, Y Mode ($xx,Y) - LDX, STX only
def addr_zeropage_y(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    base = _operand(pc, bus)
    addr = (base + state.y) & 0xFF
    return AddressingResult(addr, None, 0, f"${base:02X},Y", [base])

# @intent:responsibility Absolute Mode ($xxxx)
def addr_absolute(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    lo, hi, addr = _operand_word(pc, bus)
    return AddressingResult(addr, None, 0, f"${addr:04X}", [lo, hi])

# @intent:responsibility Absolute, X Mode ($xxxx,X)
# @intent:note ページ境界を跨いだかどうかのみを返し、サイクル加算の要否は命令側 (page_penalty) が決定する。
def addr_absolute_x(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    lo, hi, base_addr = _operand_word(pc, bus)
    addr = (base_addr + state.x) & 0xFFFF
    extra = 1 if is_page_crossed(base_addr, addr) else 0
    return AddressingResult(addr, None, extra, f"${base_addr:04X},X", [lo, hi])

# @intent:responsibility Absolute, Y Mode ($xxxx,Y)
def addr_absolute_y(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    lo, hi, base_addr = _operand_word(pc, bus)
    addr = (base_addr + state.y) & 0xFFFF
    extra = 1 if is_page_crossed(base_addr, addr) else 0
    return AddressingResult(addr, None, extra, f"${base_addr:04X},Y", [lo, hi])

# @intent:responsibility Indirect Mode ($xxxx) - JMP only
# @intent:note NMOS 6502 のページ境界バグを再現する: ptr が $xxFF の場合、上位バイトは $xx00 から読む。
def addr_indirect(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    ptr_lo, ptr_hi, ptr = _operand_word(pc, bus)
    eff_lo = bus.read(ptr)
    eff_hi = bus.read((ptr & 0xFF00) | ((ptr + 1) & 0x00FF))
    addr = (eff_hi << 8) | eff_lo
    return AddressingResult(addr, None, 0, f"(${ptr:04X})", [ptr_lo, ptr_hi])

# @intent:responsibility Indexed Indirect Mode ($xx,X) - "Pre-indexed"
# @intent:note ゼロページ内でXを加算(ラップアラウンド)し、そこにあるポインタを読む。
def addr_indexed_indirect(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    base = _operand(pc, bus)
    addr = _zeropage_pointer(bus, base + state.x)
    return AddressingResult(addr, None, 0, f"(${base:02X},X)", [base])

# @intent:responsibility Indirect Indexed Mode ($xx),Y - "Post-indexed"
# @intent:note ゼロページのポインタを読み、ベースアドレスを得てからYを加算 (16bitでラップ)。
def addr_indirect_indexed(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    ptr = _operand(pc, bus)
    base_addr = _zeropage_pointer(bus, ptr)
    addr = (base_addr + state.y) & 0xFFFF
    extra = 1 if is_page_crossed(base_addr, addr) else 0
    return AddressingResult(addr, None, extra, f"(${ptr:02X}),Y", [ptr])

# @intent:responsibility Relative Mode (Branch)
# @intent:note 戻り値のアドレスは「分岐先の絶対アドレス」。変位は符号拡張する ($80 は -128)。
def addr_relative(pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    offset = _operand(pc, bus)
    dest_addr = (pc + 2 + to_signed(offset)) & 0xFFFF
    return AddressingResult(dest_addr, None, 0, f"${dest_addr:04X}", [offset])


AddrFunc = Callable[[int, Bus, Mos6502CpuState], AddressingResult]

RESOLVERS: Dict[AddressingMode, AddrFunc] = {
    AddressingMode.IMPLIED: addr_implied,
    AddressingMode.IMMEDIATE: addr_immediate,
    AddressingMode.ZEROPAGE: addr_zeropage,
    AddressingMode.ZEROPAGE_X: addr_zeropage_x,
    AddressingMode.ZEROPAGE_Y: addr_zeropage_y,
    AddressingMode.ABSOLUTE: addr_absolute,
    AddressingMode.ABSOLUTE_X: addr_absolute_x,
    AddressingMode.ABSOLUTE_Y: addr_absolute_y,
    AddressingMode.INDIRECT: addr_indirect,
    AddressingMode.INDEXED_INDIRECT: addr_indexed_indirect,
    AddressingMode.INDIRECT_INDEXED: addr_indirect_indexed,
    AddressingMode.RELATIVE: addr_relative,
}


# @intent:responsibility アドレッシングモードのタグから対応する解決関数を呼び出す。
def resolve(mode: AddressingMode, pc: int, bus: Bus, state: Mos6502CpuState) -> AddressingResult:
    return RESOLVERS[mode](pc, bus, state)


# @intent:responsibility 命令のオペランド値を取得する (Immediate なら即値、それ以外は実効アドレスから読む)。
def read_operand(bus: Bus, operation: Operation) -> int:
    if operation.immediate_value is not None:
        return operation.immediate_value
    return bus.read(operation.effective_address)


# @intent:responsibility Accumulator モード (実効アドレスも即値も持たない) かどうかを判定する。
def is_accumulator(operation: Operation) -> bool:
    return operation.effective_address is None and operation.immediate_value is None
