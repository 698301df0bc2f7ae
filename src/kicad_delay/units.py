"""
Length and time unit handling for kicad-delay.

Board geometry is measured in internal units (IU) of one nanometer, as in
KiCad's pcbnew. Delays are integer time-IU of one femtosecond. Delay
profile constants are expressed in time-IU per millimeter.

Display units for delay follow a layered configuration:
CLI flag > Environment variable > Config file > Default (ps).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Config

__all__ = [
    "PCB_IU_PER_MM",
    "TIME_IU_PER_PS",
    "TimeUnit",
    "DelayFormatter",
    "mm_to_iu",
    "iu_to_mm",
    "ps_to_time_iu",
    "get_delay_formatter",
    "format_delay",
]

# Length IU per millimeter (1 IU = 1 nm)
PCB_IU_PER_MM = 1_000_000

# Time IU per picosecond (1 IU = 1 fs)
TIME_IU_PER_PS = 1000

# Environment variable for delay display unit
TIME_UNIT_ENV_VAR = "KICAD_DELAY_TIME_UNIT"


class TimeUnit(Enum):
    """Unit system for delay display."""

    FS = "fs"
    PS = "ps"
    NS = "ns"

    @classmethod
    def from_string(cls, value: str | None) -> TimeUnit | None:
        """Parse a time unit from a string value.

        Args:
            value: String like "ps", "picoseconds", "ns", or None

        Returns:
            TimeUnit or None if value is None or invalid
        """
        if value is None:
            return None
        value = value.lower().strip()
        if value in ("fs", "femtoseconds", "femtosecond"):
            return cls.FS
        if value in ("ps", "picoseconds", "picosecond"):
            return cls.PS
        if value in ("ns", "nanoseconds", "nanosecond"):
            return cls.NS
        return None

    @property
    def time_iu_per_unit(self) -> int:
        """Number of time-IU in one of this unit."""
        return {
            TimeUnit.FS: 1,
            TimeUnit.PS: TIME_IU_PER_PS,
            TimeUnit.NS: TIME_IU_PER_PS * 1000,
        }[self]


def mm_to_iu(value_mm: float) -> int:
    """Convert millimeters to length IU, rounding to the nearest nanometer."""
    return int(round(value_mm * PCB_IU_PER_MM))


def iu_to_mm(value_iu: float) -> float:
    """Convert length IU to millimeters."""
    return value_iu / PCB_IU_PER_MM


def ps_to_time_iu(value_ps: float) -> int:
    """Convert picoseconds to time IU, rounding to the nearest femtosecond."""
    return int(round(value_ps * TIME_IU_PER_PS))


@dataclass
class DelayFormatter:
    """Formatter for delay values with a configurable time unit.

    Examples:
        >>> DelayFormatter(TimeUnit.PS).format(12500)
        '12.500 ps'

        >>> DelayFormatter(TimeUnit.NS, precision=2).format(1_500_000)
        '1.50 ns'
    """

    unit: TimeUnit
    precision: int = 3

    def format(self, time_iu: int, include_unit: bool = True) -> str:
        """Format a delay given in time IU.

        Args:
            time_iu: Delay in time IU (femtoseconds)
            include_unit: Whether to include the unit suffix (default: True)

        Returns:
            Formatted string with value and optional unit
        """
        value = self.convert_to_display(time_iu)
        if self.unit == TimeUnit.FS:
            text = f"{int(value)}"
        else:
            text = f"{value:.{self.precision}f}"
        if include_unit:
            return f"{text} {self.unit.value}"
        return text

    def convert_to_display(self, time_iu: int) -> float:
        """Convert time IU to the display unit."""
        return time_iu / self.unit.time_iu_per_unit

    def convert_from_display(self, value: float) -> int:
        """Convert a display-unit value back to time IU."""
        return int(round(value * self.unit.time_iu_per_unit))

    @property
    def unit_name(self) -> str:
        """Get the unit name for this formatter."""
        return self.unit.value


def get_delay_formatter(
    cli_unit: str | None = None,
    config: Config | None = None,
) -> DelayFormatter:
    """Get a delay formatter based on precedence: CLI > env > config > default.

    Args:
        cli_unit: Time unit from CLI flag (highest priority)
        config: Config object to read timing.time_unit from

    Returns:
        Configured DelayFormatter instance
    """
    unit = TimeUnit.from_string(cli_unit)

    if unit is None:
        unit = TimeUnit.from_string(os.environ.get(TIME_UNIT_ENV_VAR))

    if unit is None and config is not None:
        unit = TimeUnit.from_string(config.timing.time_unit)

    if unit is None:
        unit = TimeUnit.PS

    return DelayFormatter(unit=unit)


def format_delay(time_iu: int, unit: TimeUnit = TimeUnit.PS) -> str:
    """Format a delay value in the given unit.

    Args:
        time_iu: Delay in time IU
        unit: Display unit (default: picoseconds)

    Returns:
        Formatted string
    """
    return DelayFormatter(unit).format(time_iu)
