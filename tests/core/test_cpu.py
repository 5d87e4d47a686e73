# tests/core/test_cpu.py
"""
pixel6502.core.cpuモジュールの単体テスト。
"""
import pytest
from typing import Dict, List, Tuple

from pixel6502.core.state import CpuState
from pixel6502.core.cpu import AbstractCpu
from pixel6502.core.snapshot import Operation
from pixel6502.transport.bus import Bus, BusAccessType
from pixel6502.common.types import RegisterLayoutInfo, RegisterInfo

# @intent:test_suite 抽象CPUのテンプレートメソッド (step) と状態管理の基本動作を検証します。

class FakeCpu(AbstractCpu):
    """
    オペコード $01 を「$0020 に $FF を書く 2バイト命令」、それ以外を 1バイト NOP として扱うテスト用CPU。
    $FF は未定義としてデコード時に例外を送出します。
    """
    def _create_initial_state(self) -> CpuState:
        return CpuState(pc=0x0100, sp=0xFF)

    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    def _decode(self, opcode: int) -> Operation:
        if opcode == 0xFF:
            raise ValueError("undefined")
        if opcode == 0x01:
            return Operation(opcode=opcode, mnemonic="POKE", length=2, cycle_count=3)
        return Operation(opcode=opcode, mnemonic="NOP", length=1, cycle_count=2)

    def _execute(self, operation: Operation) -> None:
        if operation.mnemonic == "POKE":
            self._bus.write(0x0020, 0xFF)

    def get_register_map(self) -> Dict[str, int]:
        return {"PC": self._state.pc, "SP": self._state.sp}

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [RegisterLayoutInfo("Test Group", [RegisterInfo("PC", 16), RegisterInfo("SP", 8)])]

    def get_flag_state(self) -> Dict[str, bool]:
        return {}

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return []

@pytest.fixture
def cpu():
    return FakeCpu(Bus())

class TestCpuState:
    # @intent:test_case_init 既定値での初期化を検証します。
    def test_defaults(self):
        state = CpuState()
        assert state.pc == 0x0000
        assert state.sp == 0x0000

class TestAbstractCpu:
    # @intent:test_case_abstract 抽象クラスは直接インスタンス化できないことを検証します。
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            AbstractCpu(Bus())

    def test_initial_state(self, cpu):
        state = cpu.get_state()
        assert state.pc == 0x0100
        assert state.sp == 0xFF
        assert cpu.cycle_count == 0

    # @intent:test_case_step step() がPCを命令長だけ進め、実行結果を Snapshot に記録することを検証します。
    def test_step_advances_pc_and_builds_snapshot(self, cpu):
        cpu.bus.load(0x0100, bytes([0x01, 0x00]))

        snapshot = cpu.step()

        assert cpu.get_state().pc == 0x0102
        assert snapshot.state.pc == 0x0102
        assert snapshot.operation.mnemonic == "POKE"
        assert snapshot.metadata.cycles == 3
        assert snapshot.metadata.cycle_count == 3
        assert cpu.bus.read(0x0020) == 0xFF

        access_types = [a.access_type for a in snapshot.bus_activity]
        assert access_types == [BusAccessType.READ, BusAccessType.WRITE]

    # @intent:test_case_log_isolation 前ステップより前のバスアクセスが Snapshot に混入しないことを検証します。
    def test_step_discards_stale_activity(self, cpu):
        cpu.bus.write(0x5000, 0x12)
        snapshot = cpu.step()
        assert all(a.address != 0x5000 for a in snapshot.bus_activity)

    def test_cycle_count_accumulates(self, cpu):
        cpu.bus.load(0x0100, bytes([0xEA, 0x01, 0x00]))
        cpu.step()
        cpu.step()
        assert cpu.cycle_count == 5

    # @intent:test_case_decode_failure デコード失敗時にPC・サイクル数が変化しないことを検証します。
    def test_decode_failure_leaves_state_untouched(self, cpu):
        cpu.bus.write(0x0100, 0xFF)
        with pytest.raises(ValueError):
            cpu.step()
        assert cpu.get_state().pc == 0x0100
        assert cpu.cycle_count == 0

    def test_pc_wraps_at_top_of_memory(self, cpu):
        state = cpu.get_state()
        state.pc = 0xFFFF
        cpu.restore_state(state)
        cpu.step()
        assert cpu.get_state().pc == 0x0000

    def test_reset_restores_initial_state(self, cpu):
        cpu.step()
        cpu.reset()
        assert cpu.get_state().pc == 0x0100

    def test_get_state_returns_copy(self, cpu):
        state = cpu.get_state()
        state.pc = 0x1234
        assert cpu.get_state().pc == 0x0100
