# pixel6502/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
ホスト（UI、テストハーネス）への情報提供と、トレース出力に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from pixel6502.core.state import CpuState
from pixel6502.transport.bus import BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド、実効アドレス）を記録するデータクラス。
    """
    opcode: int # 例: 0xA9
    mnemonic: str # 例: "LDA"
    operands: List[str] = field(default_factory=list) # 例: ["#$05"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト
    cycle_count: int = 0 # 命令実行に必要なクロックサイクル数
    length: int = 1 # 命令のバイト長
    effective_address: Optional[int] = None # アドレッシングモード解決後のアドレス
    immediate_value: Optional[int] = None # Immediateモードの値

    @property
    def opcode_hex(self) -> str:
        return f"{self.opcode:02X}"

    # @intent:responsibility 逆アセンブル表記 ("LDA #$05") を返します。
    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（このステップのサイクル数、累計サイクル数）。
    """
    cycles: int # このステップで消費したサイクル数
    cycle_count: int # 累計

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1ステップ実行直後の CPU 状態（コピー）と、そのステップで発生したバスアクセスの記録。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

    @property
    def cycles(self) -> int:
        return self.metadata.cycles
