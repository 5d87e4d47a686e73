import logging

from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.cpu import Mos6502Cpu
from pixel6502.display.framebuffer import Framebuffer
from pixel6502.loader.loader import BinaryLoader
from pixel6502.system.machine import Machine
from .models import MachineConfig, CpuInitialState

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus・CPU・フレームバッファ・Machine を生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_machine(self, config: MachineConfig) -> Machine:
        bus = Bus()
        cpu = Mos6502Cpu(bus, trace=config.run.trace)
        framebuffer = Framebuffer(
            bus,
            base=config.display.base,
            width=config.display.width,
            height=config.display.height,
            palette=config.display.palette,
        )
        machine = Machine(bus, cpu, framebuffer)

        # ベクタ領域はプログラムと重ならないため、ロード順は初期状態の適用に影響しない
        if config.program:
            BinaryLoader().load_file(config.program, bus, config.origin)
        else:
            logger.warning("No program configured; memory is all zero")

        self.apply_initial_state(cpu, config.initial_state)
        logger.debug("Machine built: %s", machine.describe_registers())
        return machine

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Mos6502Cpu, config_state: CpuInitialState) -> None:
        """
        use_reset_vector の場合は RESET シーケンスで PC を $FFFC から読み込み、
        そうでなければ PC / SP を直接設定します。A/X/Y はどちらの場合も設定します。
        """
        if config_state.use_reset_vector:
            cpu.reset()
            state = cpu.get_state()
        else:
            state = cpu.get_state()
            state.pc = config_state.pc
            state.sp = config_state.sp & 0xFF

        for reg_name, value in config_state.registers.items():
            setattr(state, reg_name, value & 0xFF)
        cpu.restore_state(state)
