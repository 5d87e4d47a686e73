# src/pixel6502/errors.py
"""
エミュレータ全体で共通の例外定義。
"""
from typing import Optional


# @intent:responsibility エミュレータが送出する例外の基底クラス。
class EmulatorError(Exception):
    """
    pixel6502 が送出する全ての例外の基底クラス。
    ホスト側はこのクラスを捕捉すれば、エミュレータ起因のエラーをまとめて扱えます。
    """


# @intent:responsibility プログラムのロード失敗（サイズ超過、読み込み不可）を表します。
class ProgramLoadError(EmulatorError):
    pass


# @intent:responsibility 設定ファイルの内容が不正であることを表します。
class ConfigError(EmulatorError):
    pass


# @intent:responsibility 未定義オペコードに遭遇したことをホストへ通知します。
# @intent:post-condition 送出時点でPCおよびレジスタは命令フェッチ前の値のままです。
# @intent:note 同じステップで割り込みを受け付けていた場合、Machine がその種類とサイクル数を付与します。
class IllegalOpcodeError(EmulatorError):
    """
    オペコード表に定義のない命令をデコードしようとした際に送出されます。
    """
    def __init__(self, opcode: int, pc: int):
        super().__init__(f"Illegal opcode ${opcode:02X} at ${pc:04X}")
        self.opcode = opcode
        self.pc = pc
        self.interrupt: Optional[str] = None
        self.interrupt_cycles = 0
