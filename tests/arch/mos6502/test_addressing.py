# tests/arch/mos6502/test_addressing.py
"""
アドレッシングモード解決ロジックの単体テスト。
"""
import pytest
from pixel6502.transport.bus import Bus
from pixel6502.arch.mos6502.state import Mos6502CpuState
from pixel6502.arch.mos6502.instructions.base import AddressingMode, resolve, is_page_crossed

PC = 0x0600

@pytest.fixture
def bus():
    return Bus()

@pytest.fixture
def state():
    return Mos6502CpuState(pc=PC, sp=0xFD)

def put(bus, *operand):
    bus.load(PC + 1, bytes(operand))

def test_implied(bus, state):
    res = resolve(AddressingMode.IMPLIED, PC, bus, state)
    assert res.address is None
    assert res.value is None
    assert res.operand_bytes == []

def test_immediate(bus, state):
    put(bus, 0x42)
    res = resolve(AddressingMode.IMMEDIATE, PC, bus, state)
    assert res.address is None
    assert res.value == 0x42
    assert res.operand_str == "#$42"

def test_zeropage_x_wraps_in_page_zero(bus, state):
    put(bus, 0xFF)
    state.x = 0x02
    res = resolve(AddressingMode.ZEROPAGE_X, PC, bus, state)
    assert res.address == 0x0001

def test_zeropage_y(bus, state):
    put(bus, 0x10)
    state.y = 0x05
    res = resolve(AddressingMode.ZEROPAGE_Y, PC, bus, state)
    assert res.address == 0x0015
    assert res.operand_str == "$10,Y"

def test_absolute(bus, state):
    put(bus, 0x34, 0x12)
    res = resolve(AddressingMode.ABSOLUTE, PC, bus, state)
    assert res.address == 0x1234
    assert res.operand_bytes == [0x34, 0x12]
    assert res.operand_str == "$1234"

@pytest.mark.parametrize("mode, register", [
    (AddressingMode.ABSOLUTE_X, "x"),
    (AddressingMode.ABSOLUTE_Y, "y"),
])
def test_absolute_indexed_page_cross(bus, state, mode, register):
    put(bus, 0xF0, 0x12)
    setattr(state, register, 0x20)
    res = resolve(mode, PC, bus, state)
    assert res.address == 0x1310
    assert res.extra_cycles == 1

    setattr(state, register, 0x01)
    res = resolve(mode, PC, bus, state)
    assert res.address == 0x12F1
    assert res.extra_cycles == 0

def test_absolute_x_wraps_address_space(bus, state):
    put(bus, 0xFF, 0xFF)
    state.x = 0x02
    res = resolve(AddressingMode.ABSOLUTE_X, PC, bus, state)
    assert res.address == 0x0001

def test_indirect_page_boundary_bug(bus, state):
    # JMP ($02FF): 上位バイトは $0300 ではなく $0200 から読まれる
    put(bus, 0xFF, 0x02)
    bus.write(0x02FF, 0x34)
    bus.write(0x0200, 0x12)
    bus.write(0x0300, 0x56)
    res = resolve(AddressingMode.INDIRECT, PC, bus, state)
    assert res.address == 0x1234
    assert res.operand_str == "($02FF)"

def test_indexed_indirect(bus, state):
    put(bus, 0x20)
    state.x = 0x04
    bus.write(0x0024, 0x00)
    bus.write(0x0025, 0x03)
    res = resolve(AddressingMode.INDEXED_INDIRECT, PC, bus, state)
    assert res.address == 0x0300

def test_indexed_indirect_pointer_wraps(bus, state):
    put(bus, 0xFE)
    state.x = 0x01 # ポインタは $FF / $00
    bus.write(0x00FF, 0x78)
    bus.write(0x0000, 0x56)
    res = resolve(AddressingMode.INDEXED_INDIRECT, PC, bus, state)
    assert res.address == 0x5678

def test_indirect_indexed_with_page_cross(bus, state):
    put(bus, 0x40)
    state.y = 0x10
    bus.write(0x0040, 0xF8)
    bus.write(0x0041, 0x12)
    res = resolve(AddressingMode.INDIRECT_INDEXED, PC, bus, state)
    assert res.address == 0x1308
    assert res.extra_cycles == 1
    assert res.operand_str == "($40),Y"

@pytest.mark.parametrize("offset, target", [
    (0x00, 0x0602),
    (0x05, 0x0607),
    (0x7F, 0x0681),
    (0xFE, 0x0600),
    (0x80, 0x0582),
])
def test_relative_sign_extension(bus, state, offset, target):
    put(bus, offset)
    res = resolve(AddressingMode.RELATIVE, PC, bus, state)
    assert res.address == target

def test_resolver_does_not_mutate_state(bus, state):
    put(bus, 0x10, 0x20)
    state.x = 3
    before = state.replace()
    for mode in AddressingMode:
        resolve(mode, PC, bus, state)
    assert state == before

def test_operand_length():
    assert AddressingMode.IMPLIED.operand_length == 0
    assert AddressingMode.RELATIVE.operand_length == 1
    assert AddressingMode.INDIRECT.operand_length == 2

def test_is_page_crossed():
    assert is_page_crossed(0x12FF, 0x1300)
    assert not is_page_crossed(0x1200, 0x12FF)
