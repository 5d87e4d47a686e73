import logging
import os
from typing import Dict, Any, Optional

import yaml

from pixel6502.errors import ConfigError
from .models import MachineConfig, DisplayConfig, RunConfig, CpuInitialState

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = {"program", "origin", "display", "run", "initial_state"}
_SECTION_KEYS = {
    "display": {"base", "width", "height", "scale", "palette"},
    "run": {"steps_per_frame", "max_steps", "stop_on_break", "trace", "log_level"},
    "initial_state": {"use_reset_vector", "pc", "sp", "registers"},
}
_REGISTER_NAMES = {"a", "x", "y"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

class ConfigLoader:
    def load_from_file(self, path: str) -> MachineConfig:
        try:
            with open(path, 'r', encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file '{path}': {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in '{path}': {e}") from e
        return self.parse(data, base_dir=os.path.dirname(os.path.abspath(path)))

    # @intent:responsibility YAMLから読み込んだ辞書を検証し、MachineConfig に変換します。
    def parse(self, data: Optional[Dict[str, Any]], base_dir: Optional[str] = None) -> MachineConfig:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

        for key in sorted(str(k) for k in set(data) - _TOP_LEVEL_KEYS):
            logger.warning("Ignoring unknown config key '%s'", key)

        program = data.get("program")
        if program is not None:
            if not isinstance(program, str):
                raise ConfigError(f"'program' must be a path string, got {program!r}")
            if base_dir is not None and not os.path.isabs(program):
                program = os.path.join(base_dir, program)

        origin = self._parse_int(data.get("origin", 0x0600), "origin")
        if origin != 0x0600:
            raise ConfigError(f"'origin' must be 0x0600, got ${origin:04X}")

        return MachineConfig(
            program=program,
            origin=origin,
            display=self._parse_display(self._section(data, "display")),
            run=self._parse_run(self._section(data, "run")),
            initial_state=self._parse_initial_state(self._section(data, "initial_state")),
        )

    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{name}' must be a mapping, got {section!r}")
        for key in sorted(str(k) for k in set(section) - _SECTION_KEYS[name]):
            logger.warning("Ignoring unknown config key '%s.%s'", name, key)
        return section

    def _parse_display(self, data: Dict[str, Any]) -> DisplayConfig:
        defaults = DisplayConfig()
        display = DisplayConfig(
            base=self._parse_int(data.get("base", defaults.base), "display.base", 0xFFFF),
            width=self._parse_int(data.get("width", defaults.width), "display.width"),
            height=self._parse_int(data.get("height", defaults.height), "display.height"),
            scale=self._parse_int(data.get("scale", defaults.scale), "display.scale"),
        )
        for name in ("width", "height", "scale"):
            if getattr(display, name) <= 0:
                raise ConfigError(f"display.{name} must be positive")

        palette = data.get("palette")
        if palette is not None:
            if not isinstance(palette, list) or len(palette) != 16:
                raise ConfigError("display.palette must be a list of exactly 16 colours")
            display.palette = tuple(
                self._parse_int(c, f"display.palette[{i}]", 0xFFFFFF) for i, c in enumerate(palette)
            )
        return display

    def _parse_run(self, data: Dict[str, Any]) -> RunConfig:
        defaults = RunConfig()
        run = RunConfig(
            steps_per_frame=self._parse_int(data.get("steps_per_frame", defaults.steps_per_frame), "run.steps_per_frame"),
            max_steps=self._parse_int(data.get("max_steps", defaults.max_steps), "run.max_steps"),
            stop_on_break=self._parse_bool(data.get("stop_on_break", defaults.stop_on_break), "run.stop_on_break"),
            trace=self._parse_bool(data.get("trace", defaults.trace), "run.trace"),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )
        if run.steps_per_frame <= 0:
            raise ConfigError("run.steps_per_frame must be positive")
        if run.log_level not in _LOG_LEVELS:
            raise ConfigError(f"run.log_level must be one of {sorted(_LOG_LEVELS)}, got {run.log_level!r}")
        return run

    def _parse_initial_state(self, data: Dict[str, Any]) -> CpuInitialState:
        defaults = CpuInitialState()
        registers = data.get("registers") or {}
        if not isinstance(registers, dict):
            raise ConfigError(f"initial_state.registers must be a mapping, got {registers!r}")

        parsed_registers = {}
        for name, value in registers.items():
            reg = str(name).lower()
            if reg not in _REGISTER_NAMES:
                raise ConfigError(f"Unknown register '{name}' in initial_state.registers")
            parsed_registers[reg] = self._parse_int(value, f"initial_state.registers.{name}", 0xFF)

        return CpuInitialState(
            use_reset_vector=self._parse_bool(data.get("use_reset_vector", defaults.use_reset_vector),
                                              "initial_state.use_reset_vector"),
            pc=self._parse_int(data.get("pc", defaults.pc), "initial_state.pc", 0xFFFF),
            sp=self._parse_int(data.get("sp", defaults.sp), "initial_state.sp", 0xFF),
            registers=parsed_registers,
        )

    # @intent:utility_function int, "0x..", "$..", 10進文字列を整数に変換します。
    def _parse_int(self, value: Any, name: str, maximum: Optional[int] = None) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"'{name}' must be an integer, got {value!r}")
        if isinstance(value, int):
            result = value
        elif isinstance(value, str):
            text = value.strip()
            try:
                if text.lower().startswith("0x"):
                    result = int(text, 16)
                elif text.startswith("$"):
                    result = int(text[1:], 16)
                else:
                    result = int(text)
            except ValueError:
                raise ConfigError(f"Invalid integer format for '{name}': {value!r}") from None
        else:
            raise ConfigError(f"Invalid integer format for '{name}': {value!r}")

        if result < 0 or (maximum is not None and result > maximum):
            raise ConfigError(f"'{name}' out of range: {value!r}")
        return result

    def _parse_bool(self, value: Any, name: str) -> bool:
        if isinstance(value, bool):
            return value
        raise ConfigError(f"'{name}' must be true or false, got {value!r}")
