# src/pixel6502/arch/mos6502/disassembler.py
"""
MOS 6502 逆アセンブラ。
"""
from typing import List, Sequence, Tuple

from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.state import to_signed
from pixel6502.arch.mos6502.instructions.base import AddressingMode
from pixel6502.arch.mos6502.instructions.maps import OPCODE_TABLE


# @intent:responsibility オペランドバイト列から表記文字列を組み立てる。
# @intent:note 逆アセンブル時にはレジスタ状態が不明なため、インデックスは加算せず表記のみとする。
def format_operand(mode: AddressingMode, addr: int, operand: Sequence[int]) -> str:
    if mode is AddressingMode.IMPLIED:
        return ""
    if mode is AddressingMode.RELATIVE:
        return f"${(addr + 2 + to_signed(operand[0])) & 0xFFFF:04X}"

    if len(operand) == 1:
        value = f"${operand[0]:02X}"
    else:
        value = f"${(operand[1] << 8) | operand[0]:04X}"

    return {
        AddressingMode.IMMEDIATE: "#{}",
        AddressingMode.ZEROPAGE: "{}",
        AddressingMode.ZEROPAGE_X: "{},X",
        AddressingMode.ZEROPAGE_Y: "{},Y",
        AddressingMode.ABSOLUTE: "{}",
        AddressingMode.ABSOLUTE_X: "{},X",
        AddressingMode.ABSOLUTE_Y: "{},Y",
        AddressingMode.INDIRECT: "({})",
        AddressingMode.INDEXED_INDIRECT: "({},X)",
        AddressingMode.INDIRECT_INDEXED: "({}),Y",
    }[mode].format(value)


# @intent:responsibility 指定されたメモリ範囲を逆アセンブルする。
# @intent:note Bus.peek を使うため、アクセスログには何も残らない。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    メモリを解析し、(アドレス, HEX, ニーモニック) のリストを返す。
    未定義オペコードは ".DB $xx" として1バイトずつ出力する。
    """
    results = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        addr = current_addr & 0xFFFF
        opcode = bus.peek(addr)
        instruction = OPCODE_TABLE[opcode]

        if instruction.illegal:
            results.append((addr, f"{opcode:02X}", f".DB ${opcode:02X}"))
            current_addr += 1
            continue

        operand = [bus.peek((addr + i) & 0xFFFF) for i in range(1, instruction.length)]
        hex_str = " ".join(f"{b:02X}" for b in [opcode] + operand)
        if opcode in (0x0A, 0x4A, 0x2A, 0x6A):
            op_str = "A"
        else:
            op_str = format_operand(instruction.mode, addr, operand)
        text = f"{instruction.mnemonic} {op_str}".strip()

        results.append((addr, hex_str, text))
        current_addr += instruction.length

    return results
