# src/pixel6502/arch/mos6502/cpu.py
"""
MOS 6502 CPUエミュレーションの中心モジュール。
"""
import logging
from typing import Dict, List, Optional, Tuple

from pixel6502.core.snapshot import Operation, Snapshot
from pixel6502.common.types import RegisterLayoutInfo, RegisterInfo
from pixel6502.core.cpu import AbstractCpu
from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502 import interrupts
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502.instructions.maps import decode_opcode, execute_instruction

logger = logging.getLogger(__name__)


# @intent:responsibility MOS 6502 CPUの具体的なエミュレーションロジックを提供する。
class Mos6502Cpu(AbstractCpu):
    """
    MOS 6502 CPUをエミュレートするクラス。

    レジスタファイル (Mos6502CpuState) を所有し、スタック・アドレッシング・割り込みの
    各関数へは (state, bus) を借用参照として渡す。
    trace を有効にすると、1命令ごとの実行内容を DEBUG レベルでログ出力する。
    """
    def __init__(self, bus: Bus, trace: bool = False):
        super().__init__(bus)
        self.trace = trace

    # @intent:responsibility MOS 6502の初期状態を生成する。
    def _create_initial_state(self) -> Mos6502CpuState:
        # P: I=1 (割り込み禁止), SP: 0xFD (RESETシーケンス後と同じ値)
        # PC はここでは 0。RESET ベクタからの読み込みは reset() が行う。
        return Mos6502CpuState(sp=interrupts.RESET_SP)

    # @intent:responsibility RESETピン。ベクタ $FFFC からPCを読み込む。
    # @intent:note A/X/Y と累計サイクル数は保持する。
    def reset(self) -> None:
        interrupts.reset(self._state, self._bus)
        self._add_cycles(interrupts.INTERRUPT_CYCLES)

    # @intent:responsibility IRQピン。Iフラグがセットされていれば無視される。
    # @intent:return 割り込みを受け付けた場合 True。
    def irq(self) -> bool:
        serviced = interrupts.irq(self._state, self._bus)
        if serviced:
            self._add_cycles(interrupts.INTERRUPT_CYCLES)
        return serviced

    # @intent:responsibility NMIピン。マスク不可。
    def nmi(self) -> None:
        interrupts.nmi(self._state, self._bus)
        self._add_cycles(interrupts.INTERRUPT_CYCLES)

    # @intent:responsibility ホストがラッチした割り込み線のうち、最も優先度の高いものを1つ処理する。
    # @intent:return 受け付けた割り込みの種類。受け付けなかった場合は None。
    def service_interrupts(self, lines: interrupts.InterruptLines) -> Optional[interrupts.Interrupt]:
        kind = lines.service(self._state, self._bus)
        if kind is not None:
            self._add_cycles(interrupts.INTERRUPT_CYCLES)
        return kind

    # @intent:responsibility BRK 実行によりレジスタ上のBフラグが立っているか。ホストの停止判定に使う。
    @property
    def break_flag(self) -> bool:
        return self._state.flag_b

    # @intent:responsibility 命令フェッチ。
    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    # @intent:responsibility 命令デコード。未定義オペコードは IllegalOpcodeError となる。
    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._bus, self._state.pc, self._state)

    # @intent:responsibility 命令実行。オペランドはデコード時に解決済みなので、PCの巻き戻しは不要。
    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus)

    def step(self) -> Snapshot:
        pc = self._state.pc
        snapshot = super().step()
        if self.trace and logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s", format_trace(pc, snapshot))
        return snapshot

    # @intent:responsibility レジスタマップ（UI表示用）を返す。
    # @intent:note S はスタックの物理アドレス ($0100 + SP) として見せる。内部の SP は8bitのまま。
    def get_register_map(self) -> Dict[str, int]:
        state = self._state
        return {
            "A": state.a,
            "X": state.x,
            "Y": state.y,
            "PC": state.pc,
            "S": 0x0100 | (state.sp & 0xFF),
            "P": state.status_byte()
        }

    # @intent:responsibility フラグ状態（UI表示用）を返す。
    def get_flag_state(self) -> Dict[str, bool]:
        state = self._state
        return {
            "N": state.flag_n,
            "V": state.flag_v,
            "B": state.flag_b,
            "D": state.flag_d,
            "I": state.flag_i,
            "Z": state.flag_z,
            "C": state.flag_c
        }

    # @intent:responsibility レジスタレイアウト定義を返す。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("Registers", [
                RegisterInfo("A", 8),
                RegisterInfo("X", 8),
                RegisterInfo("Y", 8),
                RegisterInfo("P", 8)
            ]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("PC", 16),
                RegisterInfo("S", 16) # Display as 16-bit address
            ])
        ]

    # @intent:responsibility 指定範囲の逆アセンブル結果を返す。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        from pixel6502.arch.mos6502 import disassembler
        return disassembler.disassemble(self._bus, start_addr, length)


# @intent:responsibility 1ステップ分のトレース行を組み立てる。
def format_trace(pc: int, snapshot: Snapshot) -> str:
    """
    例: "$0600  A9 05     LDA #$05      A=05 X=00 Y=00 P=24 SP=FD  cyc=2"
    """
    op = snapshot.operation
    state = snapshot.state
    hex_bytes = " ".join(f"{b:02X}" for b in [op.opcode] + list(op.operand_bytes))
    return (
        f"${pc:04X}  {hex_bytes:<9} {op.text:<13} "
        f"A={state.a:02X} X={state.x:02X} Y={state.y:02X} "
        f"P={state.status_byte():02X} SP={state.sp:02X}  cyc={snapshot.cycles}"
    )
