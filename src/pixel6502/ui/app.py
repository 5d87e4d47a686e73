# src/pixel6502/ui/app.py
"""
アプリケーションのエントリポイント。
コマンドライン引数から Machine を組み立て、ウィンドウ表示またはヘッドレス実行を行います。
"""
import argparse
import logging
import sys
from typing import List, Optional

from pixel6502.errors import EmulatorError
from pixel6502.config.models import MachineConfig
from pixel6502.config.loader import ConfigLoader
from pixel6502.config.builder import SystemBuilder

logger = logging.getLogger(__name__)

# @intent:utility_function argparse の type= 用。0 以上の整数だけを受け付けます。
def non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {value}")
    return value

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pixel6502", description="MOS 6502 emulator with a 32x32 pixel display")
    parser.add_argument("program", nargs="?", help="raw binary to load at $0600")
    parser.add_argument("-c", "--config", help="YAML machine configuration")
    parser.add_argument("--headless", action="store_true", help="run without a window and print the final registers")
    parser.add_argument("--max-steps", type=non_negative_int, default=None, help="stop after this many instructions (0 = unbounded)")
    parser.add_argument("--trace", action="store_true", help="log every executed instruction (implies -vv)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")
    return parser

# @intent:responsibility 引数と設定ファイルから MachineConfig を組み立てます。コマンドライン指定が優先されます。
def resolve_config(args: argparse.Namespace) -> MachineConfig:
    config = ConfigLoader().load_from_file(args.config) if args.config else MachineConfig()
    if args.program:
        config.program = args.program
    if args.max_steps is not None:
        config.run.max_steps = args.max_steps
    if args.trace:
        config.run.trace = True
    return config

def _configure_logging(verbosity: int, config: MachineConfig) -> None:
    if config.run.trace or verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, config.run.log_level)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# @intent:responsibility ウィンドウを開かずに実行し、終了時のレジスタを表示します。
def run_headless(config: MachineConfig) -> int:
    machine = SystemBuilder().build_machine(config)
    max_steps = config.run.max_steps or 1_000_000
    result = machine.run(max_steps, stop_on_break=config.run.stop_on_break)
    print(f"{result.reason.value}: {result.steps} steps, {result.cycles} cycles")
    print(machine.describe_registers())
    return 1 if result.error is not None else 0

def run_gui(config: MachineConfig) -> int:
    from PySide6.QtWidgets import QApplication
    from .main_window import EmulatorWindow

    machine = SystemBuilder().build_machine(config)
    app = QApplication.instance() or QApplication(sys.argv)
    main_win = EmulatorWindow(machine, config.run, config.display)
    main_win.show()
    main_win.start()
    return app.exec()

# @intent:responsibility アプリケーションを起動します。エミュレータ起因のエラーはここでのみ捕捉します。
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = resolve_config(args)
        _configure_logging(args.verbose, config)
        if args.headless:
            return run_headless(config)
        return run_gui(config)
    except EmulatorError as e:
        logging.basicConfig()
        logger.error("%s", e)
        return 2

if __name__ == '__main__':
    sys.exit(main())
