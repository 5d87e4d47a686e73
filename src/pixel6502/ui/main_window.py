# src/pixel6502/ui/main_window.py
"""
メインウィンドウの実装。
フレームバッファとレジスタ表示を配置し、QTimer で Machine を一定ステップずつ進めます。
"""
import logging
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QApplication, QWidget, QHBoxLayout, QToolBar, QLabel, QFileDialog, QMessageBox
from PySide6.QtGui import QPalette, QColor, QAction, QCloseEvent
from PySide6.QtCore import QTimer, Slot

from pixel6502.errors import EmulatorError, IllegalOpcodeError
from pixel6502.config.models import RunConfig, DisplayConfig
from pixel6502.config.loader import ConfigLoader
from pixel6502.config.builder import SystemBuilder
from pixel6502.loader.loader import BinaryLoader
from pixel6502.system.machine import Machine, StopReason
from .screen_view import FramebufferView
from .register_view import RegisterView

logger = logging.getLogger(__name__)

# 約60fps
FRAME_INTERVAL_MS = 16

# @intent:responsibility エミュレータのメインウィンドウ。描画ループ (QTimer) と実行制御を担います。
class EmulatorWindow(QMainWindow):
    """
    タイマーの1ティックごとに Machine.step() を steps_per_frame 回呼び、画面を更新します。
    BRK・未定義オペコード・ステップ上限のいずれかで自動停止します。
    エミュレーションは GUI スレッドでのみ駆動され、他のスレッドからは触りません。
    """
    def __init__(self, machine: Machine, run_config: Optional[RunConfig] = None,
                 display_config: Optional[DisplayConfig] = None, parent=None):
        super(EmulatorWindow, self).__init__(parent)
        self.setWindowTitle("pixel6502")

        self.machine = machine
        self.run_config = run_config if run_config is not None else RunConfig()
        scale = display_config.scale if display_config is not None else DisplayConfig().scale
        self.stop_reason: Optional[StopReason] = None

        self.timer = QTimer(self)
        self.timer.setInterval(FRAME_INTERVAL_MS)
        self.timer.timeout.connect(self._on_frame)

        self.screen_view = FramebufferView(machine.framebuffer, scale)
        self.register_view = RegisterView()
        self.register_view.set_cpu(machine.cpu)

        central_widget = QWidget()
        layout = QHBoxLayout(central_widget)
        layout.addWidget(self.screen_view)
        layout.addWidget(self.register_view)
        self.setCentralWidget(central_widget)

        self.status_label = QLabel()
        self.statusBar().addWidget(self.status_label, 1)

        self._set_dark_theme()
        self._create_toolbar()
        self._create_menus()
        self._refresh()
        self._update_ui_state(False)

    @property
    def is_running(self) -> bool:
        return self.timer.isActive()

    # @intent:responsibility ファイルメニューを作成します。
    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")

        self.load_config_action = QAction("Load Config...", self)
        self.load_config_action.triggered.connect(self._load_config_file)
        file_menu.addAction(self.load_config_action)

        self.load_program_action = QAction("Load Program...", self)
        self.load_program_action.setShortcut("Ctrl+O")
        self.load_program_action.triggered.connect(self._load_program_file)
        file_menu.addAction(self.load_program_action)

    # @intent:responsibility 実行制御と割り込みピン用のツールバーを作成します。
    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self.start)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self.stop)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self.step_once)
        toolbar.addAction(self.step_action)

        toolbar.addSeparator()

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self.machine_reset)
        toolbar.addAction(self.reset_action)

        self.irq_action = QAction("IRQ", self)
        self.irq_action.triggered.connect(lambda: self.machine.irq())
        toolbar.addAction(self.irq_action)

        self.nmi_action = QAction("NMI", self)
        self.nmi_action.triggered.connect(lambda: self.machine.nmi())
        toolbar.addAction(self.nmi_action)

    def _update_ui_state(self, is_running: bool):
        self.load_config_action.setEnabled(not is_running)
        self.load_program_action.setEnabled(not is_running)
        self.run_action.setEnabled(not is_running)
        self.step_action.setEnabled(not is_running)
        self.stop_action.setEnabled(is_running)

    @Slot()
    def start(self):
        self.stop_reason = None
        self._update_ui_state(True)
        self.timer.start()

    @Slot()
    def stop(self):
        self.timer.stop()
        self._update_ui_state(False)
        self._refresh()

    @Slot()
    def step_once(self):
        self._advance(1)
        self._refresh()

    # @intent:responsibility RESET 線をラッチします。停止中なら直ちに1ステップ進めて反映します。
    @Slot()
    def machine_reset(self):
        self.machine.reset()
        if not self.is_running:
            self.step_once()

    # @intent:responsibility タイマー1ティック分の実行。
    @Slot()
    def _on_frame(self):
        self._advance(self.run_config.steps_per_frame)
        if self.stop_reason is not None:
            self.stop()
        else:
            self._refresh()

    # @intent:responsibility 最大 count ステップ進め、停止条件に達したら stop_reason を設定します。
    def _advance(self, count: int) -> None:
        limit = self.run_config.max_steps
        for _ in range(count):
            if limit and self.machine.step_count >= limit:
                self.stop_reason = StopReason.STEP_LIMIT
                return
            try:
                self.machine.step()
            except IllegalOpcodeError as e:
                logger.warning("%s", e)
                self.stop_reason = StopReason.ILLEGAL_OPCODE
                self.status_label.setText(str(e))
                return
            snapshot = self.machine.last_snapshot
            if self.run_config.stop_on_break and snapshot.operation.mnemonic == "BRK":
                self.stop_reason = StopReason.BREAK
                return

    def _refresh(self):
        self.screen_view.update()
        self.register_view.update_registers()
        text = self.machine.describe_registers()
        if self.stop_reason is not None:
            text = f"[{self.stop_reason.value}] {text}"
        self.status_label.setText(text)

    # @intent:responsibility 別の Machine に差し替え、表示を作り直します。
    def set_machine(self, machine: Machine, run_config: RunConfig, display_config: DisplayConfig) -> None:
        self.stop()
        self.machine = machine
        self.run_config = run_config
        self.stop_reason = None
        self.screen_view.set_framebuffer(machine.framebuffer, display_config.scale)
        self.register_view.set_cpu(machine.cpu)
        self._refresh()

    @Slot()
    def _load_config_file(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open Config", "", "YAML Files (*.yaml *.yml);;All Files (*)")
        if file_name:
            try:
                config = ConfigLoader().load_from_file(file_name)
                machine = SystemBuilder().build_machine(config)
            except EmulatorError as e:
                logger.error("Failed to load config %s: %s", file_name, e)
                QMessageBox.critical(self, "Error", f"Failed to load config: {e}")
                return
            self.set_machine(machine, config.run, config.display)

    @Slot()
    def _load_program_file(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open Program", "", "Binary Files (*.bin);;All Files (*)")
        if file_name:
            try:
                BinaryLoader().load_file(file_name, self.machine.bus)
            except EmulatorError as e:
                logger.error("Failed to load program %s: %s", file_name, e)
                QMessageBox.critical(self, "Error", f"Failed to load program: {e}")
                return
            self.stop_reason = None
            self._refresh()

    # @intent:responsibility アプリケーションにダークテーマを適用します。
    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        QApplication.setPalette(dark_palette)
        self.setStyleSheet("""
            QMainWindow, QToolBar { background-color: #1D1D1D; border: none; }
            QGroupBox { font-weight: bold; border: 1px solid #222; border-radius: 4px; margin-top: 20px; color: #EEE; }
            QGroupBox::title { subcontrol-origin: margin; left: 10px; padding: 0 5px; color: #00AAAA; }
        """)

    def closeEvent(self, event: QCloseEvent):
        self.timer.stop()
        event.accept()
