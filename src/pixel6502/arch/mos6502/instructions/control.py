# src/pixel6502/arch/mos6502/instructions/control.py
"""
MOS 6502 制御系命令 (Branch, Jump, Stack, Flags, NOP)。
"""
from pixel6502.transport.bus import Bus
from pixel6502.core.snapshot import Operation
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502 import stack, interrupts

# @intent:note 分岐命令の実装について
# AbstractCpu.step() のフロー:
# 1. Fetch
# 2. Decode -> Operation (length=2)
# 3. Update PC (PC += 2)
# 4. Execute -> ここで PC を書き換えると、それが次の Fetch アドレスになる。
# つまり、不成立時は何もしなくて良い（PC+=2 済み）。
# 成立時は PC = 分岐先 (デコード時に解決済みの絶対アドレス) とする。

# --- Branch Instructions ---

def _branch(state: Mos6502CpuState, op: Operation, condition: bool) -> None:
    if condition:
        state.pc = op.effective_address

def bcc(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, not state.flag_c)

def bcs(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, state.flag_c)

def beq(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, state.flag_z)

def bne(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, not state.flag_z)

def bmi(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, state.flag_n)

def bpl(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, not state.flag_n)

def bvc(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, not state.flag_v)

def bvs(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _branch(state, op, state.flag_v)

# --- Jump Instructions ---

def jmp(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.pc = op.effective_address

# @intent:note JSR実行時点での state.pc は「次の命令のアドレス」。
#              6502はJSR命令の最後のバイトのアドレス (PC - 1) を積む。
def jsr(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    stack.push_word(state, bus, (state.pc - 1) & 0xFFFF)
    state.pc = op.effective_address

# @intent:note 取り出したアドレスは「JSRの最後のバイト」なので +1 して次の命令へ戻る。
def rts(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.pc = (stack.pop_word(state, bus) + 1) & 0xFFFF

# --- Stack Operations (PHA, PHP, PLA, PLP) ---

def pha(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    stack.push_byte(state, bus, state.a)

# PHP pushes status with Break(B) and Reserved(R) flags set to 1.
def php(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    stack.push_processor_flags(state, bus, break_flag=True)

def pla(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.a = stack.pop_byte(state, bus)
    state.set_zero_and_negative_from(state.a)

# @intent:note スタック上のBビットは捨て、レジスタ上のBフラグは変更しない。
def _restore_flags_keeping_break(state: Mos6502CpuState, bus: Bus) -> None:
    break_flag = state.flag_b
    stack.pop_processor_flags(state, bus)
    state.flag_b = break_flag

def plp(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _restore_flags_keeping_break(state, bus)

# --- Flag Operations (CLC, SEC, etc) ---

def clc(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_c = False

def sec(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_c = True

def cli(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_i = False

def sei(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_i = True

def clv(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_v = False

def cld(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_d = False

def sed(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    state.flag_d = True

# --- System / Other ---

def nop(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    pass

# @intent:note BRKは1バイト命令だが戻りアドレスは PC+2 (パディングバイトを飛ばす)。
#              AbstractCpu が既に PC を1進めているので、ここでは +1 する。
def brk(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    interrupts.brk(state, bus, (state.pc + 1) & 0xFFFF)

def rti(state: Mos6502CpuState, bus: Bus, op: Operation) -> None:
    _restore_flags_keeping_break(state, bus)
    state.pc = stack.pop_word(state, bus)
