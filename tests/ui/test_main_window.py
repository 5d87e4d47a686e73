# tests/ui/test_main_window.py
"""
EmulatorWindow の実行制御ロジックを検証するテスト。
タイマーは起動せず、_on_frame / step_once を直接呼び出します。
"""
import pytest

from pixel6502.config.models import RunConfig, DisplayConfig
from pixel6502.system.machine import Machine, StopReason
from pixel6502.ui.main_window import EmulatorWindow

def make_machine(*program):
    machine = Machine()
    machine.bus.load(0x0600, bytes(program))
    machine.bus.write_word(0xFFFE, 0x0700)
    state = machine.cpu.get_state()
    state.pc = 0x0600
    machine.cpu.restore_state(state)
    return machine

class TestEmulatorWindow:
    @pytest.fixture
    def window_factory(self, qapp):
        windows = []

        def factory(machine, **run_options):
            win = EmulatorWindow(machine, RunConfig(**run_options), DisplayConfig(scale=2))
            windows.append(win)
            return win

        yield factory
        for win in windows:
            win.close()

    def test_step_once(self, window_factory):
        machine = make_machine(0xA9, 0x05, 0x8D, 0x00, 0x02)
        win = window_factory(machine)

        win.step_once()
        win.step_once()

        assert machine.step_count == 2
        assert machine.bus.read(0x0200) == 0x05
        assert win.register_view.register_text("A") == "$05"
        assert "PC=$0605" in win.status_label.text()

    def test_frame_stops_on_break(self, window_factory):
        machine = make_machine(0xEA, 0xEA, 0x00)
        win = window_factory(machine, steps_per_frame=10)
        win.start()
        assert win.is_running

        win._on_frame()

        assert win.stop_reason is StopReason.BREAK
        assert not win.is_running
        assert machine.step_count == 3
        assert win.status_label.text().startswith("[BREAK]")

    def test_frame_stops_on_illegal_opcode(self, window_factory):
        machine = make_machine(0xEA, 0x02)
        win = window_factory(machine, steps_per_frame=10)
        win.start()

        win._on_frame()

        assert win.stop_reason is StopReason.ILLEGAL_OPCODE
        assert not win.is_running
        assert machine.cpu.get_state().pc == 0x0601

    def test_frame_respects_step_limit(self, window_factory):
        machine = make_machine(0xD0, 0xFE)  # BNE *
        win = window_factory(machine, steps_per_frame=10, max_steps=4)
        win.start()

        win._on_frame()

        assert win.stop_reason is StopReason.STEP_LIMIT
        assert machine.step_count == 4

    def test_frame_without_stop_keeps_running(self, window_factory):
        machine = make_machine(0xD0, 0xFE)
        win = window_factory(machine, steps_per_frame=5)
        win.start()

        win._on_frame()

        assert win.stop_reason is None
        assert win.is_running
        assert machine.step_count == 5
        win.stop()
        assert not win.is_running

    def test_reset_button_applies_immediately_when_stopped(self, window_factory):
        machine = make_machine(0xEA)
        machine.bus.write_word(0xFFFC, 0x0600)
        win = window_factory(machine)

        win.machine_reset()

        assert machine.cpu.get_state().pc == 0x0601
        assert machine.step_count == 1

    def test_set_machine(self, window_factory):
        win = window_factory(make_machine(0xEA))
        other = make_machine(0xEA)

        win.set_machine(other, RunConfig(), DisplayConfig(scale=3))

        assert win.machine is other
        assert win.screen_view.framebuffer is other.framebuffer
        assert win.screen_view.scale == 3
