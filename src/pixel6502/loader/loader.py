# pixel6502/loader/loader.py
"""
プログラムローダーモジュール。
生のバイナリイメージを、指定アドレス (既定 $0600) からバスへそのままコピーします。
"""
import logging
import os
from typing import Union

from pixel6502.errors import ProgramLoadError
from pixel6502.transport.bus import Bus

logger = logging.getLogger(__name__)

# プログラムの既定ロードアドレス
PROGRAM_ORIGIN = 0x0600
# これ以降は割り込みベクタ領域 ($FFFA-$FFFF)
VECTOR_AREA_START = 0xFFFA


class BinaryLoader:
    """
    バイナリファイル（またはバイト列）を解析せずにバスへロードするローダー。
    """
    # @intent:responsibility ファイルを読み込み、バスへロードします。
    # @intent:return ロードしたバイト数。
    def load_file(self, file_path: Union[str, "os.PathLike[str]"], bus: Bus, origin: int = PROGRAM_ORIGIN) -> int:
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ProgramLoadError(f"Cannot read program file '{file_path}': {e}") from e

        count = self.load_bytes(data, bus, origin)
        logger.info("Loaded %d bytes from %s at $%04X", count, file_path, origin)
        return count

    # @intent:responsibility バイト列をバスへロードします。
    # @intent:pre-condition プログラム全体がベクタ領域より手前に収まること。
    def load_bytes(self, data: bytes, bus: Bus, origin: int = PROGRAM_ORIGIN) -> int:
        if not 0 <= origin <= 0xFFFF:
            raise ProgramLoadError(f"Load address ${origin:X} is outside the 64KB address space")
        if origin + len(data) > VECTOR_AREA_START:
            raise ProgramLoadError(
                f"Program of {len(data)} bytes at ${origin:04X} overlaps the vector area "
                f"(must end before ${VECTOR_AREA_START:04X})"
            )

        bus.load(origin, bytes(data))
        logger.debug("Copied %d bytes to $%04X-$%04X", len(data), origin, origin + max(len(data) - 1, 0))
        return len(data)
