# tests/arch/mos6502/test_opcode_table.py
import pytest
from pixel6502.errors import IllegalOpcodeError
from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502.instructions.base import AddressingMode
from pixel6502.arch.mos6502.instructions.maps import OPCODE_TABLE, decode_opcode
from pixel6502.arch.mos6502.disassembler import disassemble

def test_table_covers_every_opcode():
    assert len(OPCODE_TABLE) == 256
    assert [ins.opcode for ins in OPCODE_TABLE] == list(range(256))

def test_documented_opcode_count():
    legal = [ins for ins in OPCODE_TABLE if not ins.illegal]
    assert len(legal) == 151
    assert len({ins.mnemonic for ins in legal}) == 56

def test_legal_entries_are_executable():
    for ins in OPCODE_TABLE:
        if not ins.illegal:
            assert callable(ins.execute), f"{ins.opcode:02X}"
            assert ins.length == 1 + ins.mode.operand_length

@pytest.mark.parametrize("opcode", [0x02, 0x03, 0x1A, 0x80, 0xFF])
def test_undocumented_opcodes_are_illegal(opcode):
    ins = OPCODE_TABLE[opcode]
    assert ins.illegal
    assert ins.mnemonic == "???"
    with pytest.raises(IllegalOpcodeError):
        decode_opcode(opcode, Bus(), 0x0600, Mos6502CpuState())

@pytest.mark.parametrize("opcode, mnemonic, mode, cycles", [
    (0xA9, "LDA", AddressingMode.IMMEDIATE, 2),
    (0x8D, "STA", AddressingMode.ABSOLUTE, 4),
    (0x6C, "JMP", AddressingMode.INDIRECT, 5),
    (0x20, "JSR", AddressingMode.ABSOLUTE, 6),
    (0x00, "BRK", AddressingMode.IMPLIED, 7),
    (0xB1, "LDA", AddressingMode.INDIRECT_INDEXED, 5),
])
def test_known_entries(opcode, mnemonic, mode, cycles):
    ins = OPCODE_TABLE[opcode]
    assert (ins.mnemonic, ins.mode, ins.cycles) == (mnemonic, mode, cycles)

def test_page_penalty_only_on_indexed_reads():
    assert OPCODE_TABLE[0xBD].page_penalty  # LDA abs,X
    assert not OPCODE_TABLE[0x9D].page_penalty  # STA abs,X
    assert not OPCODE_TABLE[0xFE].page_penalty  # INC abs,X
    for ins in OPCODE_TABLE:
        if ins.page_penalty:
            assert ins.mode in (AddressingMode.ABSOLUTE_X, AddressingMode.ABSOLUTE_Y,
                                AddressingMode.INDIRECT_INDEXED)

class TestDisassembler:
    def test_program_listing(self):
        bus = Bus()
        bus.load(0x0600, bytes([0xA9, 0x05, 0x8D, 0x00, 0x02, 0xD0, 0xFE, 0x0A, 0x00]))

        lines = disassemble(bus, 0x0600, 9)

        assert lines == [
            (0x0600, "A9 05", "LDA #$05"),
            (0x0602, "8D 00 02", "STA $0200"),
            (0x0605, "D0 FE", "BNE $0605"),
            (0x0607, "0A", "ASL A"),
            (0x0608, "00", "BRK"),
        ]

    def test_illegal_bytes_become_data(self):
        bus = Bus()
        bus.load(0x0600, bytes([0x02, 0xEA]))
        assert disassemble(bus, 0x0600, 2) == [
            (0x0600, "02", ".DB $02"),
            (0x0601, "EA", "NOP"),
        ]

    def test_indexed_forms(self):
        bus = Bus()
        bus.load(0x0600, bytes([0xB5, 0x10, 0x91, 0x20, 0xA1, 0x30, 0x6C, 0x00, 0x03]))
        texts = [text for _, _, text in disassemble(bus, 0x0600, 9)]
        assert texts == ["LDA $10,X", "STA ($20),Y", "LDA ($30,X)", "JMP ($0300)"]

    def test_does_not_record_bus_activity(self):
        bus = Bus()
        disassemble(bus, 0x0600, 4)
        assert bus.get_and_clear_activity_log() == []

    def test_cpu_disassemble_delegates(self):
        from pixel6502.arch.mos6502.cpu import Mos6502Cpu
        cpu = Mos6502Cpu(Bus())
        cpu.bus.load(0x0600, bytes([0xEA]))
        assert cpu.disassemble(0x0600, 1) == [(0x0600, "EA", "NOP")]
