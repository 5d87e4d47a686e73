# pixel6502/transport/bus.py
"""
Transport Layer (メモリバス)

このモジュールは、6502の64KBアドレス空間を抽象化し、
全ての読み書きアクセスを単一のRAMデバイスへ委譲する責務を負います。
アドレス演算は常に16bitでラップアラウンドします。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

ADDRESS_SPACE_SIZE = 0x10000
ADDRESS_MASK = 0xFFFF

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    書き込みの場合は、書き込み前の値を previous_data に保持します。
    """
    address: int
    data: int # 8bit value
    access_type: BusAccessType
    previous_data: Optional[int] = None

# @intent:responsibility バスの背後に置く記憶装置のインターフェース。アドレスは装置内オフセットです。
class Device(ABC):
    @abstractmethod
    def read(self, address: int) -> int:
        ...

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        ...

    @abstractmethod
    def get_size(self) -> int:
        ...

# @intent:rationale セルは符号なし(0..255)で保持し、符号付きの解釈は命令側で必要な箇所に限定します。
class RAM(Device):
    """
    bytearray による読み書き可能なメモリ。
    範囲外のオフセットや8bitに収まらない値は呼び出し側の誤りとして例外にします。
    """
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._size = size
        self._memory = bytearray(size)

    def _check_address(self, address: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")

    def read(self, address: int) -> int:
        self._check_address(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check_address(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

    # @intent:responsibility メモリ内容のコピーを返します（インスペクタ用）。
    def dump(self) -> bytes:
        return bytes(self._memory)

# @intent:responsibility 64KBのアドレス空間を所有し、全アクセスをラップアラウンド付きで仲介する共通バス。
# @intent:rationale バスの全てのアクセスを記録し、Snapshotに含めることでシステムの観測可能性を高めます。
class Bus:
    """
    6502のメモリバス。
    生のストレージ（RAM）へインデックスアクセスする唯一のコンポーネントです。
    アドレスは全て 65536 を法として扱われるため、範囲外アクセスは発生しません。
    """
    def __init__(self, device: Optional[Device] = None):
        if device is None:
            device = RAM(ADDRESS_SPACE_SIZE)
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")
        if device.get_size() != ADDRESS_SPACE_SIZE:
            raise ValueError(
                f"{type(device).__name__} device size ({device.get_size()} bytes) does not match "
                f"the 6502 address space ({ADDRESS_SPACE_SIZE} bytes)."
            )
        self._device = device
        self._bus_activity_log: List[BusAccess] = []

    def _log_access(self, address: int, data: int, access_type: BusAccessType,
                    previous_data: Optional[int] = None) -> None:
        self._bus_activity_log.append(BusAccess(address, data, access_type, previous_data))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します。
    def read(self, address: int) -> int:
        address &= ADDRESS_MASK
        data = self._device.read(address)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility 指定されたアドレスに8bitのデータを書き込みます。
    def write(self, address: int, data: int) -> None:
        address &= ADDRESS_MASK
        previous = self._device.read(address)
        self._device.write(address, data)
        self._log_access(address, data, BusAccessType.WRITE, previous)

    # @intent:responsibility リトルエンディアンの16bitワードを読み出します。
    # @intent:note 上位バイトのアドレスも16bitでラップします ($FFFF -> $0000)。
    def read_word(self, address: int) -> int:
        lo = self.read(address)
        hi = self.read(address + 1)
        return (hi << 8) | lo

    # @intent:responsibility リトルエンディアンの16bitワードを書き込みます。
    def write_word(self, address: int, value: int) -> None:
        value &= 0xFFFF
        self.write(address, value & 0xFF)
        self.write(address + 1, value >> 8)

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        """
        UI、逆アセンブラ、表示コラボレータなどのインスペクタ用。
        """
        return self._device.read(address & ADDRESS_MASK)

    # @intent:responsibility ログを記録せずにバイト列を連続して書き込みます（ローダー用）。
    def load(self, address: int, data: bytes) -> None:
        for offset, byte in enumerate(data):
            self._device.write((address + offset) & ADDRESS_MASK, byte)

    # @intent:responsibility 64KB全体のスナップショットを返します。
    def dump(self) -> bytes:
        if isinstance(self._device, RAM):
            return self._device.dump()
        return bytes(self._device.read(addr) for addr in range(ADDRESS_SPACE_SIZE))
