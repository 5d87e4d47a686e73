# tests/core/test_snapshot.py
"""
pixel6502.core.snapshotモジュールの単体テスト。
"""
import dataclasses

import pytest
from pixel6502.core.state import CpuState
from pixel6502.core.snapshot import Operation, Metadata, Snapshot
from pixel6502.transport.bus import BusAccess, BusAccessType

# @intent:test_suite 1ステップ分の実行記録を表す不変データ構造の検証。

class TestOperation:
    # @intent:test_case_text 逆アセンブル表記の組み立てを検証します。
    def test_text_with_operand(self):
        op = Operation(opcode=0xA9, mnemonic="LDA", operands=["#$05"], length=2, cycle_count=2)
        assert op.opcode_hex == "A9"
        assert op.text == "LDA #$05"

    def test_text_without_operand(self):
        op = Operation(opcode=0xEA, mnemonic="NOP")
        assert op.text == "NOP"
        assert op.length == 1
        assert op.effective_address is None

    # @intent:test_case_immutability Operationが不変であることを検証します。
    def test_immutability(self):
        op = Operation(opcode=0xEA, mnemonic="NOP")
        with pytest.raises(dataclasses.FrozenInstanceError):
            op.mnemonic = "BRK"

class TestSnapshot:
    def test_fields(self):
        access = BusAccess(address=0x0200, data=0x05, access_type=BusAccessType.WRITE, previous_data=0x00)
        snapshot = Snapshot(
            state=CpuState(pc=0x0603, sp=0xFD),
            operation=Operation(opcode=0x8D, mnemonic="STA", operands=["$0200"], length=3, cycle_count=4),
            metadata=Metadata(cycles=4, cycle_count=6),
            bus_activity=[access],
        )
        assert snapshot.cycles == 4
        assert snapshot.metadata.cycle_count == 6
        assert snapshot.bus_activity[0].previous_data == 0x00

    def test_default_bus_activity_is_empty(self):
        snapshot = Snapshot(
            state=CpuState(),
            operation=Operation(opcode=0xEA, mnemonic="NOP"),
            metadata=Metadata(cycles=2, cycle_count=2),
        )
        assert snapshot.bus_activity == []

    def test_immutability(self):
        snapshot = Snapshot(CpuState(), Operation(opcode=0xEA, mnemonic="NOP"), Metadata(2, 2))
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.metadata = Metadata(0, 0)
