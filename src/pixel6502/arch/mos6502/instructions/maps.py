# src/pixel6502/arch/mos6502/instructions/maps.py
"""
MOS 6502 命令マップとデコード/実行ロジック。

OPCODE_TABLE はオペコード1バイトをそのまま添字とする256要素のタプルで、
インポート時に一度だけ構築される。未定義のオペコードも Instruction として
表に存在し、illegal プロパティが True になる。
"""
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from pixel6502.errors import IllegalOpcodeError
from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Operation
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502.instructions import load, alu, control
from pixel6502.arch.mos6502.instructions.base import AddressingMode, resolve

# Execution Function Type
ExecFunc = Callable[[Mos6502CpuState, Bus, Operation], None]


# @intent:responsibility オペコード表の1エントリ。
@dataclass(frozen=True)
class Instruction:
    opcode: int
    mnemonic: str
    mode: AddressingMode
    operand_bytes: int
    cycles: int
    execute: Optional[ExecFunc] = None
    # ページ境界を跨いだ場合に1サイクル加算する読み出し命令か
    page_penalty: bool = False

    @property
    def illegal(self) -> bool:
        return self.execute is None

    @property
    def length(self) -> int:
        return 1 + self.operand_bytes


_IMP = AddressingMode.IMPLIED
_IMM = AddressingMode.IMMEDIATE
_ZP = AddressingMode.ZEROPAGE
_ZPX = AddressingMode.ZEROPAGE_X
_ZPY = AddressingMode.ZEROPAGE_Y
_ABS = AddressingMode.ABSOLUTE
_ABX = AddressingMode.ABSOLUTE_X
_ABY = AddressingMode.ABSOLUTE_Y
_IND = AddressingMode.INDIRECT
_IZX = AddressingMode.INDEXED_INDIRECT
_IZY = AddressingMode.INDIRECT_INDEXED
_REL = AddressingMode.RELATIVE

# Opcode Entry: (Opcode, Mnemonic, Addressing Mode, Execution Function, Base Cycles, Page Penalty)
_DEFINITIONS = (
    # --- Load/Store/Transfer ---
    (0xA9, "LDA", _IMM, load.lda, 2, False),
    (0xA5, "LDA", _ZP, load.lda, 3, False),
    (0xB5, "LDA", _ZPX, load.lda, 4, False),
    (0xAD, "LDA", _ABS, load.lda, 4, False),
    (0xBD, "LDA", _ABX, load.lda, 4, True),
    (0xB9, "LDA", _ABY, load.lda, 4, True),
    (0xA1, "LDA", _IZX, load.lda, 6, False),
    (0xB1, "LDA", _IZY, load.lda, 5, True),

    (0xA2, "LDX", _IMM, load.ldx, 2, False),
    (0xA6, "LDX", _ZP, load.ldx, 3, False),
    (0xB6, "LDX", _ZPY, load.ldx, 4, False),
    (0xAE, "LDX", _ABS, load.ldx, 4, False),
    (0xBE, "LDX", _ABY, load.ldx, 4, True),

    (0xA0, "LDY", _IMM, load.ldy, 2, False),
    (0xA4, "LDY", _ZP, load.ldy, 3, False),
    (0xB4, "LDY", _ZPX, load.ldy, 4, False),
    (0xAC, "LDY", _ABS, load.ldy, 4, False),
    (0xBC, "LDY", _ABX, load.ldy, 4, True),

    (0x85, "STA", _ZP, load.sta, 3, False),
    (0x95, "STA", _ZPX, load.sta, 4, False),
    (0x8D, "STA", _ABS, load.sta, 4, False),
    (0x9D, "STA", _ABX, load.sta, 5, False),
    (0x99, "STA", _ABY, load.sta, 5, False),
    (0x81, "STA", _IZX, load.sta, 6, False),
    (0x91, "STA", _IZY, load.sta, 6, False),

    (0x86, "STX", _ZP, load.stx, 3, False),
    (0x96, "STX", _ZPY, load.stx, 4, False),
    (0x8E, "STX", _ABS, load.stx, 4, False),

    (0x84, "STY", _ZP, load.sty, 3, False),
    (0x94, "STY", _ZPX, load.sty, 4, False),
    (0x8C, "STY", _ABS, load.sty, 4, False),

    (0xAA, "TAX", _IMP, load.tax, 2, False),
    (0xA8, "TAY", _IMP, load.tay, 2, False),
    (0x8A, "TXA", _IMP, load.txa, 2, False),
    (0x98, "TYA", _IMP, load.tya, 2, False),
    (0x9A, "TXS", _IMP, load.txs, 2, False),
    (0xBA, "TSX", _IMP, load.tsx, 2, False),

    # --- ALU Operations ---
    (0x69, "ADC", _IMM, alu.adc, 2, False),
    (0x65, "ADC", _ZP, alu.adc, 3, False),
    (0x75, "ADC", _ZPX, alu.adc, 4, False),
    (0x6D, "ADC", _ABS, alu.adc, 4, False),
    (0x7D, "ADC", _ABX, alu.adc, 4, True),
    (0x79, "ADC", _ABY, alu.adc, 4, True),
    (0x61, "ADC", _IZX, alu.adc, 6, False),
    (0x71, "ADC", _IZY, alu.adc, 5, True),

    (0xE9, "SBC", _IMM, alu.sbc, 2, False),
    (0xE5, "SBC", _ZP, alu.sbc, 3, False),
    (0xF5, "SBC", _ZPX, alu.sbc, 4, False),
    (0xED, "SBC", _ABS, alu.sbc, 4, False),
    (0xFD, "SBC", _ABX, alu.sbc, 4, True),
    (0xF9, "SBC", _ABY, alu.sbc, 4, True),
    (0xE1, "SBC", _IZX, alu.sbc, 6, False),
    (0xF1, "SBC", _IZY, alu.sbc, 5, True),

    (0xC9, "CMP", _IMM, alu.cmp, 2, False),
    (0xC5, "CMP", _ZP, alu.cmp, 3, False),
    (0xD5, "CMP", _ZPX, alu.cmp, 4, False),
    (0xCD, "CMP", _ABS, alu.cmp, 4, False),
    (0xDD, "CMP", _ABX, alu.cmp, 4, True),
    (0xD9, "CMP", _ABY, alu.cmp, 4, True),
    (0xC1, "CMP", _IZX, alu.cmp, 6, False),
    (0xD1, "CMP", _IZY, alu.cmp, 5, True),

    (0xE0, "CPX", _IMM, alu.cpx, 2, False),
    (0xE4, "CPX", _ZP, alu.cpx, 3, False),
    (0xEC, "CPX", _ABS, alu.cpx, 4, False),

    (0xC0, "CPY", _IMM, alu.cpy, 2, False),
    (0xC4, "CPY", _ZP, alu.cpy, 3, False),
    (0xCC, "CPY", _ABS, alu.cpy, 4, False),

    (0x29, "AND", _IMM, alu.and_, 2, False),
    (0x25, "AND", _ZP, alu.and_, 3, False),
    (0x35, "AND", _ZPX, alu.and_, 4, False),
    (0x2D, "AND", _ABS, alu.and_, 4, False),
    (0x3D, "AND", _ABX, alu.and_, 4, True),
    (0x39, "AND", _ABY, alu.and_, 4, True),
    (0x21, "AND", _IZX, alu.and_, 6, False),
    (0x31, "AND", _IZY, alu.and_, 5, True),

    (0x09, "ORA", _IMM, alu.ora, 2, False),
    (0x05, "ORA", _ZP, alu.ora, 3, False),
    (0x15, "ORA", _ZPX, alu.ora, 4, False),
    (0x0D, "ORA", _ABS, alu.ora, 4, False),
    (0x1D, "ORA", _ABX, alu.ora, 4, True),
    (0x19, "ORA", _ABY, alu.ora, 4, True),
    (0x01, "ORA", _IZX, alu.ora, 6, False),
    (0x11, "ORA", _IZY, alu.ora, 5, True),

    (0x49, "EOR", _IMM, alu.eor, 2, False),
    (0x45, "EOR", _ZP, alu.eor, 3, False),
    (0x55, "EOR", _ZPX, alu.eor, 4, False),
    (0x4D, "EOR", _ABS, alu.eor, 4, False),
    (0x5D, "EOR", _ABX, alu.eor, 4, True),
    (0x59, "EOR", _ABY, alu.eor, 4, True),
    (0x41, "EOR", _IZX, alu.eor, 6, False),
    (0x51, "EOR", _IZY, alu.eor, 5, True),

    (0x24, "BIT", _ZP, alu.bit, 3, False),
    (0x2C, "BIT", _ABS, alu.bit, 4, False),

    # Shift / Rotate (IMPLIED = Accumulator)
    (0x0A, "ASL", _IMP, alu.asl, 2, False),
    (0x06, "ASL", _ZP, alu.asl, 5, False),
    (0x16, "ASL", _ZPX, alu.asl, 6, False),
    (0x0E, "ASL", _ABS, alu.asl, 6, False),
    (0x1E, "ASL", _ABX, alu.asl, 7, False),

    (0x4A, "LSR", _IMP, alu.lsr, 2, False),
    (0x46, "LSR", _ZP, alu.lsr, 5, False),
    (0x56, "LSR", _ZPX, alu.lsr, 6, False),
    (0x4E, "LSR", _ABS, alu.lsr, 6, False),
    (0x5E, "LSR", _ABX, alu.lsr, 7, False),

    (0x2A, "ROL", _IMP, alu.rol, 2, False),
    (0x26, "ROL", _ZP, alu.rol, 5, False),
    (0x36, "ROL", _ZPX, alu.rol, 6, False),
    (0x2E, "ROL", _ABS, alu.rol, 6, False),
    (0x3E, "ROL", _ABX, alu.rol, 7, False),

    (0x6A, "ROR", _IMP, alu.ror, 2, False),
    (0x66, "ROR", _ZP, alu.ror, 5, False),
    (0x76, "ROR", _ZPX, alu.ror, 6, False),
    (0x6E, "ROR", _ABS, alu.ror, 6, False),
    (0x7E, "ROR", _ABX, alu.ror, 7, False),

    (0xE6, "INC", _ZP, alu.inc, 5, False),
    (0xF6, "INC", _ZPX, alu.inc, 6, False),
    (0xEE, "INC", _ABS, alu.inc, 6, False),
    (0xFE, "INC", _ABX, alu.inc, 7, False),

    (0xC6, "DEC", _ZP, alu.dec, 5, False),
    (0xD6, "DEC", _ZPX, alu.dec, 6, False),
    (0xCE, "DEC", _ABS, alu.dec, 6, False),
    (0xDE, "DEC", _ABX, alu.dec, 7, False),

    (0xE8, "INX", _IMP, alu.inx, 2, False),
    (0xCA, "DEX", _IMP, alu.dex, 2, False),
    (0xC8, "INY", _IMP, alu.iny, 2, False),
    (0x88, "DEY", _IMP, alu.dey, 2, False),

    # --- Control Instructions ---
    (0x90, "BCC", _REL, control.bcc, 2, False),
    (0xB0, "BCS", _REL, control.bcs, 2, False),
    (0xF0, "BEQ", _REL, control.beq, 2, False),
    (0xD0, "BNE", _REL, control.bne, 2, False),
    (0x30, "BMI", _REL, control.bmi, 2, False),
    (0x10, "BPL", _REL, control.bpl, 2, False),
    (0x50, "BVC", _REL, control.bvc, 2, False),
    (0x70, "BVS", _REL, control.bvs, 2, False),

    (0x4C, "JMP", _ABS, control.jmp, 3, False),
    (0x6C, "JMP", _IND, control.jmp, 5, False),
    (0x20, "JSR", _ABS, control.jsr, 6, False),
    (0x60, "RTS", _IMP, control.rts, 6, False),

    (0x48, "PHA", _IMP, control.pha, 3, False),
    (0x08, "PHP", _IMP, control.php, 3, False),
    (0x68, "PLA", _IMP, control.pla, 4, False),
    (0x28, "PLP", _IMP, control.plp, 4, False),

    (0x18, "CLC", _IMP, control.clc, 2, False),
    (0x38, "SEC", _IMP, control.sec, 2, False),
    (0x58, "CLI", _IMP, control.cli, 2, False),
    (0x78, "SEI", _IMP, control.sei, 2, False),
    (0xB8, "CLV", _IMP, control.clv, 2, False),
    (0xD8, "CLD", _IMP, control.cld, 2, False),
    (0xF8, "SED", _IMP, control.sed, 2, False),

    (0xEA, "NOP", _IMP, control.nop, 2, False),
    (0x00, "BRK", _IMP, control.brk, 7, False),
    (0x40, "RTI", _IMP, control.rti, 6, False),
)


# @intent:responsibility 256要素のオペコード表を構築する。未定義の番号は illegal な Instruction で埋める。
def _build_table() -> Tuple[Instruction, ...]:
    table = [Instruction(opcode, "???", _IMP, 0, 0) for opcode in range(0x100)]
    for opcode, mnemonic, mode, execute, cycles, page_penalty in _DEFINITIONS:
        if not table[opcode].illegal:
            raise ValueError(f"Duplicate opcode definition: ${opcode:02X}")
        table[opcode] = Instruction(
            opcode=opcode,
            mnemonic=mnemonic,
            mode=mode,
            operand_bytes=mode.operand_length,
            cycles=cycles,
            execute=execute,
            page_penalty=page_penalty,
        )
    return tuple(table)


OPCODE_TABLE: Tuple[Instruction, ...] = _build_table()

# 累算器を対象とするシフト/ローテート命令 (逆アセンブル時に "A" を表示する)
_ACCUMULATOR_OPCODES = frozenset((0x0A, 0x4A, 0x2A, 0x6A))


# @intent:responsibility オペコードとその後続バイトから Operation を生成する。
# @intent:pre-condition pc はオペコードのアドレスを指していること。
# @intent:post-condition 未定義オペコードの場合は IllegalOpcodeError を送出し、何も変更しない。
def decode_opcode(opcode: int, bus: Bus, pc: int, state: Mos6502CpuState) -> Operation:
    instruction = OPCODE_TABLE[opcode & 0xFF]
    if instruction.illegal:
        raise IllegalOpcodeError(opcode, pc)

    addr_res = resolve(instruction.mode, pc, bus, state)
    extra = addr_res.extra_cycles if instruction.page_penalty else 0

    if opcode in _ACCUMULATOR_OPCODES:
        operands = ["A"]
    else:
        operands = [addr_res.operand_str] if addr_res.operand_str else []

    return Operation(
        opcode=instruction.opcode,
        mnemonic=instruction.mnemonic,
        operands=operands,
        operand_bytes=addr_res.operand_bytes,
        cycle_count=instruction.cycles + extra,
        length=instruction.length,
        effective_address=addr_res.address,
        immediate_value=addr_res.value,
    )


def execute_instruction(operation: Operation, state: Mos6502CpuState, bus: Bus) -> None:
    instruction = OPCODE_TABLE[operation.opcode]
    if instruction.illegal:
        raise IllegalOpcodeError(operation.opcode, state.pc)
    instruction.execute(state, bus, operation)
