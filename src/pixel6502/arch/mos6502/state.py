# src/pixel6502/arch/mos6502/state.py
"""
MOS 6502 CPUの状態定義 (Register File)。
"""
from dataclasses import dataclass
from pixel6502.core.state import CpuState

# Flag bit masks (NV-BDIZC)
C_FLAG = 0x01  # Carry
Z_FLAG = 0x02  # Zero
I_FLAG = 0x04  # Interrupt Disable
D_FLAG = 0x08  # Decimal Mode
B_FLAG = 0x10  # Break Command
R_FLAG = 0x20  # Reserved (ステータスバイトとして積む際は常に1)
V_FLAG = 0x40  # Overflow
N_FLAG = 0x80  # Negative

FLAG_MASK = C_FLAG | Z_FLAG | I_FLAG | D_FLAG | B_FLAG | V_FLAG | N_FLAG


# @intent:utility_function 8bit値を符号付き(-128..127)として解釈します。
def to_signed(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def _flag_property(mask: int) -> property:
    def getter(self) -> bool:
        return (self.p & mask) != 0

    def setter(self, value: bool) -> None:
        if value:
            self.p |= mask
        else:
            self.p &= ~mask

    return property(getter, setter)


# @intent:responsibility MOS 6502 CPUの状態（A, X, Y, PC, SP, 7つのフラグ）を保持する。
# @intent:rationale A/X/Y は符号なし(0..255)で保持し、符号の解釈は負数フラグ・分岐・オーバーフロー判定に限定する。
#                  SP は8bit値のみを保持し、物理アドレスは 0x0100 + sp で求める。
@dataclass
class Mos6502CpuState(CpuState):
    """
    MOS 6502 CPUのレジスタ状態。

    `p` は7つのフラグを6502のビット配置 (NV-BDIZC) で保持する。
    ビット5 (Reserved) はレジスタ上では保持せず、スタックへ積む時のみ1になる。
    """
    a: int = 0
    x: int = 0
    y: int = 0
    p: int = I_FLAG

    # クラス属性としてもマスクを参照できるようにする (state.B_FLAG など)
    C_FLAG = C_FLAG
    Z_FLAG = Z_FLAG
    I_FLAG = I_FLAG
    D_FLAG = D_FLAG
    B_FLAG = B_FLAG
    R_FLAG = R_FLAG
    V_FLAG = V_FLAG
    N_FLAG = N_FLAG

    # @intent:accessor 各フラグビットへのアクセスをプロパティで提供する。
    flag_c = _flag_property(C_FLAG)
    flag_z = _flag_property(Z_FLAG)
    flag_i = _flag_property(I_FLAG)
    flag_d = _flag_property(D_FLAG)
    flag_b = _flag_property(B_FLAG)
    flag_v = _flag_property(V_FLAG)
    flag_n = _flag_property(N_FLAG)

    # @intent:responsibility 結果バイトから Z, N フラグを設定する唯一の経路。
    def set_zero_and_negative_from(self, value: int) -> None:
        value &= 0xFF
        self.flag_z = value == 0
        self.flag_n = (value & 0x80) != 0

    # @intent:responsibility 7つのフラグをスタック用の1バイトへ直列化する。
    def status_byte(self) -> int:
        return (self.p & FLAG_MASK) | R_FLAG

    # @intent:responsibility スタックから復元した1バイトで7つのフラグ全てを置き換える。
    def load_status_byte(self, value: int) -> None:
        self.p = value & FLAG_MASK

    # @intent:responsibility dataclasses.replaceのラッパー。
    def replace(self, **changes) -> 'Mos6502CpuState':
        from dataclasses import replace
        return replace(self, **changes)
