# tests/system/test_machine.py
"""
pixel6502.system.machineモジュールの単体テスト。
"""
import logging

import pytest
from pixel6502.errors import IllegalOpcodeError
from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.cpu import Mos6502Cpu
from pixel6502.arch.mos6502.interrupts import INTERRUPT_CYCLES
from pixel6502.display.framebuffer import DEFAULT_PALETTE
from pixel6502.system.machine import Machine, StopReason

# @intent:test_suite Machine の単一ステップ実行、停止条件、割り込みピンのラッチを検証します。

IRQ_HANDLER = 0x0700

def make_machine(*program):
    machine = Machine()
    machine.bus.load(0x0600, bytes(program))
    machine.bus.write_word(0xFFFE, IRQ_HANDLER)
    state = machine.cpu.get_state()
    state.pc = 0x0600
    machine.cpu.restore_state(state)
    return machine

# @intent:test_case_end_to_end LDA #$05; STA $0200; BRK を3ステップで実行します。
def test_end_to_end_pixel_program():
    machine = make_machine(0xA9, 0x05, 0x8D, 0x00, 0x02, 0x00)

    for _ in range(3):
        machine.step()

    regs = machine.cpu.get_register_map()
    assert machine.bus.read(0x0200) == 0x05
    assert regs["A"] == 0x05
    assert regs["PC"] == IRQ_HANDLER
    assert machine.cpu.get_flag_state()["B"]
    assert machine.get_pixel(0, 0) == DEFAULT_PALETTE[5]
    assert machine.cycle_count == 2 + 4 + 7
    assert machine.step_count == 3

def test_default_construction_shares_bus():
    machine = Machine()
    assert machine.cpu.bus is machine.bus
    assert machine.framebuffer.get_pixel(31, 31) == DEFAULT_PALETTE[0]

def test_cpu_on_foreign_bus_is_rejected():
    with pytest.raises(ValueError):
        Machine(Bus(), Mos6502Cpu(Bus()))

def test_step_returns_instruction_cycles():
    machine = make_machine(0xA9, 0x01)
    assert machine.step() == 2
    assert machine.last_snapshot.operation.mnemonic == "LDA"

def test_step_propagates_illegal_opcode():
    machine = make_machine(0x02)
    with pytest.raises(IllegalOpcodeError):
        machine.step()
    assert machine.step_count == 0
    assert machine.cpu.get_state().pc == 0x0600

class TestRun:
    def test_stops_on_break(self, caplog):
        machine = make_machine(0xA9, 0x05, 0x8D, 0x00, 0x02, 0x00)
        with caplog.at_level(logging.INFO, logger="pixel6502.system.machine"):
            result = machine.run(100)
        assert result.reason is StopReason.BREAK
        assert result.steps == 3
        assert result.cycles == 13
        assert result.error is None
        assert any("BRK" in r.getMessage() for r in caplog.records)

    def test_runs_through_break_when_disabled(self):
        # BRK -> $0700 の NOP 列を実行し続ける
        machine = make_machine(0x00)
        machine.bus.load(IRQ_HANDLER, bytes([0xEA] * 8))
        result = machine.run(5, stop_on_break=False)
        assert result.reason is StopReason.STEP_LIMIT
        assert result.steps == 5
        assert machine.cpu.get_state().pc == IRQ_HANDLER + 4

    def test_break_flag_does_not_stop_later_runs(self):
        # B は RESET まで立ったままだが、BRK を実行していなければ停止しない
        machine = make_machine(0x00)
        machine.bus.load(IRQ_HANDLER, bytes([0xEA] * 4))
        assert machine.run(10).reason is StopReason.BREAK
        result = machine.run(3)
        assert result.reason is StopReason.STEP_LIMIT
        assert result.steps == 3

    def test_step_limit(self):
        machine = make_machine(0xD0, 0xFE)  # BNE * (Z=0)
        result = machine.run(4)
        assert result.reason is StopReason.STEP_LIMIT
        assert result.steps == 4
        assert result.cycles == 8

    def test_zero_steps(self):
        machine = make_machine(0xEA)
        result = machine.run(0)
        assert result.steps == 0
        assert result.reason is StopReason.STEP_LIMIT

    def test_negative_steps_rejected(self):
        with pytest.raises(ValueError):
            make_machine().run(-1)

    def test_illegal_opcode_stops_run(self, caplog):
        machine = make_machine(0xEA, 0xEA, 0x02)
        with caplog.at_level(logging.WARNING, logger="pixel6502.system.machine"):
            result = machine.run(10)
        assert result.reason is StopReason.ILLEGAL_OPCODE
        assert result.steps == 2
        assert isinstance(result.error, IllegalOpcodeError)
        assert result.error.pc == 0x0602
        assert caplog.records

class TestInterruptPins:
    def test_irq_is_serviced_before_next_instruction(self):
        machine = make_machine(0x58, 0xEA)  # CLI; NOP
        machine.bus.write(IRQ_HANDLER, 0xEA)
        machine.step()

        machine.irq()
        cycles = machine.step()

        # 割り込み受付 (7) + ハンドラ先頭の NOP (2)
        assert cycles == INTERRUPT_CYCLES + 2
        assert machine.cpu.get_state().pc == IRQ_HANDLER + 1
        assert not machine.lines.irq

    # @intent:test_case_masked I=1 の間の IRQ は破棄され、CLI 後も再度要求されるまで発生しない
    def test_masked_irq_is_not_replayed_after_cli(self):
        machine = make_machine(0xEA, 0x58, 0xEA, 0xEA)  # NOP; CLI; NOP; NOP
        machine.bus.write(IRQ_HANDLER, 0xEA)
        machine.irq()
        assert machine.step() == 2
        assert not machine.lines.irq
        assert machine.cpu.get_state().sp == 0xFD

        machine.step()  # CLI
        machine.step()
        assert machine.cpu.get_state().pc == 0x0603

        machine.irq()
        assert machine.step() == INTERRUPT_CYCLES + 2
        assert machine.cpu.get_state().pc == IRQ_HANDLER + 1

    # @intent:test_case_interrupt_then_illegal 割り込み受付直後の未定義オペコードでもサイクル数が失われない
    def test_interrupt_cycles_survive_illegal_handler(self):
        machine = make_machine(0xEA)
        machine.bus.write_word(0xFFFA, 0x0800)
        machine.bus.write(0x0800, 0x02)
        machine.nmi()

        with pytest.raises(IllegalOpcodeError) as excinfo:
            machine.step()
        assert excinfo.value.interrupt == "NMI"
        assert excinfo.value.interrupt_cycles == INTERRUPT_CYCLES
        assert excinfo.value.pc == 0x0800

        machine.nmi()
        result = machine.run(10)
        assert result.reason is StopReason.ILLEGAL_OPCODE
        assert result.steps == 0
        assert result.cycles == INTERRUPT_CYCLES
        assert machine.cycle_count == 2 * INTERRUPT_CYCLES

    def test_illegal_opcode_without_interrupt_has_no_interrupt_cycles(self):
        machine = make_machine(0x02)
        with pytest.raises(IllegalOpcodeError) as excinfo:
            machine.step()
        assert excinfo.value.interrupt is None
        assert excinfo.value.interrupt_cycles == 0

    def test_nmi(self):
        machine = make_machine(0xEA)
        machine.bus.write_word(0xFFFA, 0x0800)
        machine.bus.write(0x0800, 0xEA)
        machine.nmi()
        machine.step()
        assert machine.cpu.get_state().pc == 0x0801
        assert not machine.lines.nmi

    def test_reset_pin(self):
        machine = make_machine(0xEA)
        machine.bus.write_word(0xFFFC, 0x0600)
        machine.cpu._state.a = 0x42
        machine.reset()
        machine.step()
        state = machine.cpu.get_state()
        assert state.pc == 0x0601
        assert state.a == 0x42
        assert state.sp == 0xFD
        assert not machine.lines.reset

def test_describe_registers():
    machine = make_machine(0xA9, 0x05)
    machine.step()
    text = machine.describe_registers()
    assert "PC=$0602" in text
    assert "A=$05" in text
    assert "SP=$01FD" in text
    assert "P=----I--" in text
    assert "cycles=2" in text
