# src/pixel6502/ui/register_view.py
"""
CPUのレジスタとフラグを表示するパネル。
表示項目は AbstractCpu のレイアウト情報から組み立てるため、6502 固有の知識は持ちません。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QGroupBox
from PySide6.QtCore import Qt
from PySide6.QtGui import QFontDatabase

from pixel6502.core.cpu import AbstractCpu
from pixel6502.common.types import RegisterLayoutInfo

_VALUE_STYLE = "font-family: '{family}', monospace; color: #FFD700;"

# @intent:responsibility 現在のシステムで利用可能な等幅フォントファミリー名を返します。
def monospace_family() -> str:
    installed = set(QFontDatabase.families())
    for family in ("Consolas", "Menlo", "Monaco", "Courier New"):
        if family in installed:
            return family
    return QFontDatabase.systemFont(QFontDatabase.FixedFont).family()

class RegisterView(QWidget):
    """
    get_register_layout() の1グループを1つの QGroupBox に、
    get_flag_state() の全フラグを末尾の1行に並べます。
    値は "$" 付きの16進で、桁数はレジスタのビット幅から決めます。
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")
        self._root = QVBoxLayout(self)
        self._root.setContentsMargins(5, 5, 5, 5)

        self._value_style = _VALUE_STYLE.format(family=monospace_family())
        self._values: Dict[str, QLabel] = {}
        self._digits: Dict[str, int] = {}
        self._flags: Dict[str, QLabel] = {}
        self._cpu: Optional[AbstractCpu] = None

    # @intent:responsibility 表示対象のCPUを差し替え、パネルを作り直します。
    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._rebuild()
        self.update_registers()

    def _rebuild(self) -> None:
        while self._root.count():
            widget = self._root.takeAt(0).widget()
            if widget is not None:
                widget.deleteLater()
        self._values.clear()
        self._digits.clear()
        self._flags.clear()

        for group in self._cpu.get_register_layout():
            self._root.addWidget(self._build_group(group))
        self._root.addWidget(self._build_flags())
        self._root.addStretch()

    def _value_label(self, text: str) -> QLabel:
        label = QLabel(text)
        label.setStyleSheet(self._value_style)
        return label

    def _build_group(self, group: RegisterLayoutInfo) -> QGroupBox:
        box = QGroupBox(group.group_name)
        form = QFormLayout(box)
        form.setLabelAlignment(Qt.AlignLeft)
        form.setSpacing(5)
        for reg in group.registers:
            digits = (reg.width + 3) // 4
            value = self._value_label("$" + "0" * digits)
            value.setAlignment(Qt.AlignRight)
            form.addRow(QLabel(f"{reg.name}:"), value)
            self._values[reg.name] = value
            self._digits[reg.name] = digits
        return box

    def _build_flags(self) -> QGroupBox:
        box = QGroupBox("Flags")
        row = QHBoxLayout(box)
        for name in self._cpu.get_flag_state():
            value = self._value_label("0")
            row.addWidget(QLabel(f"{name}:"))
            row.addWidget(value)
            self._flags[name] = value
        return box

    # @intent:responsibility CPUの現在値を読み直して表示へ反映します。
    def update_registers(self):
        if self._cpu is None:
            return
        for name, value in self._cpu.get_register_map().items():
            label = self._values.get(name)
            if label is not None:
                label.setText(f"${value:0{self._digits[name]}X}")
        for name, is_set in self._cpu.get_flag_state().items():
            label = self._flags.get(name)
            if label is not None:
                label.setText("1" if is_set else "0")

    def register_text(self, name: str) -> str:
        return self._values[name].text()

    def flag_text(self, name: str) -> str:
        return self._flags[name].text()
