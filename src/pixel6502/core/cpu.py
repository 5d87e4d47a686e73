# pixel6502/core/cpu.py
"""
Core Layer (命令ステップの骨格)

1命令分の実行手順（フェッチ、デコード、PC前進、実行、Snapshot生成）だけを定め、
レジスタ構成や命令の意味はサブクラス（arch/ 以下）が与えます。
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Tuple

from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Snapshot, Operation, Metadata
from pixel6502.core.state import CpuState
from pixel6502.common.types import RegisterLayoutInfo

# @intent:responsibility 1命令単位で進むCPUの共通手順と、ホスト向けの観測APIを定めます。
class AbstractCpu(ABC):
    """
    Bus を1つ借りて動くCPUの基底クラス。
    レジスタは `_state` に保持し、外部へは常にコピーを渡します。
    """
    def __init__(self, bus: Bus):
        self._bus = bus
        self._cycle_count = 0
        # サブクラスは _state を直接書き換える。ホストは get_state()/restore_state() を使う。
        self._state: CpuState = self._create_initial_state()

    @property
    def bus(self) -> Bus:
        return self._bus

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # @intent:responsibility 電源投入直後のレジスタ値を返します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        ...

    def reset(self) -> None:
        self._state = self._create_initial_state()

    # @intent:responsibility 現在のレジスタのコピーを返します。呼び出し側が保持しても後続ステップの影響を受けません。
    def get_state(self) -> CpuState:
        return replace(self._state)

    # @intent:responsibility 与えられたレジスタ値で現在の状態を置き換えます（テスト、設定適用用）。
    def restore_state(self, state: CpuState) -> None:
        self._state = replace(state)

    # @intent:responsibility PC の位置にあるオペコードを読みます。PC はまだ動かしません。
    @abstractmethod
    def _fetch(self) -> int:
        ...

    # @intent:responsibility オペコードとオペランドから Operation を組み立てます。
    # @intent:post-condition 解釈できないオペコードでは例外を送出し、レジスタには触れません。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        ...

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        ...

    # @intent:responsibility ちょうど1命令を実行し、その結果を Snapshot として返します。
    # @intent:rationale 手順をここに固定し、アーキテクチャ差分は _fetch/_decode/_execute のフックに閉じ込めます。
    def step(self) -> Snapshot:
        """
        内部でループはしません。何命令進めるかは常に呼び出し側が決めます。
        デコードで例外が出た場合、PC・サイクル数・レジスタは呼び出し前のままです。
        """
        # このステップに属さないアクセス（ローダーや前ステップ後のホスト操作）は捨てる
        self._bus.get_and_clear_activity_log()

        operation = self._decode(self._fetch())

        # オペランドは解決済みなので、実行前に次命令のアドレスへ進めておく
        self._update_pc(operation)
        self._execute(operation)

        return self._create_snapshot(operation)

    # @intent:note 分岐・ジャンプは _execute 内で PC を上書きするため、ここでの前進とは重なりません。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility 命令以外（割り込み受付など）で消費したサイクルを計上します。
    def _add_cycles(self, cycles: int) -> None:
        self._cycle_count += cycles

    def _create_snapshot(self, operation: Operation) -> Snapshot:
        self._add_cycles(operation.cycle_count)
        return Snapshot(
            state=self.get_state(),
            operation=operation,
            metadata=Metadata(cycles=operation.cycle_count, cycle_count=self._cycle_count),
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # --- ホスト (UI・トレース) 向けの観測API ---

    # @intent:responsibility レジスタ名から値への辞書。UIはCPUの種類を知らずに表示できます。
    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        ...

    # @intent:responsibility レジスタ表示のグループ分けとビット幅。
    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        ...

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        ...

    # @intent:return (アドレス, HEXバイト列, ニーモニック) のリスト。
    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        ...
