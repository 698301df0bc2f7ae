"""
Exception hierarchy for kicad-delay.

Only the edges of the package raise: project file loading, configuration
and command-line input. The delay calculator itself never raises for
missing profiles, layers or overrides; those degrade to zero.

All exceptions include:
- Context information (file paths, profile names, etc.)
- Suggestions for how to fix the issue

Example::

    from kicad_delay.exceptions import ProjectFileError

    raise ProjectFileError(
        "Delay profile entry is missing 'profile_name'",
        context={"file": "board.kicad_pro", "entry": 2},
        suggestions=["Re-save the project from KiCad 9 or newer"],
    )
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class KiCadDelayError(Exception):
    """
    Base exception for all kicad-delay errors.

    Attributes:
        context: Dictionary of contextual information (file, profile, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ProjectFileError(KiCadDelayError):
    """
    Project file missing, unreadable or malformed.

    Example::

        raise ProjectFileError(
            "Invalid JSON in project file",
            file_path="board.kicad_pro",
            suggestions=["Open and re-save the project in KiCad"],
        )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        file_path: Optional[Union[str, Path]] = None,
    ):
        ctx = context or {}
        if file_path and "file" not in ctx:
            ctx["file"] = str(file_path)
        super().__init__(message, ctx, suggestions)


class ConfigError(KiCadDelayError):
    """
    Configuration file is invalid or cannot be read.

    Example::

        raise ConfigError(
            "Invalid TOML in config file",
            context={"file": ".kicad-delay.toml"},
        )
    """

    pass


class ProfileNotFoundError(KiCadDelayError):
    """
    A delay profile or net class explicitly requested by the user is unknown.

    The calculator treats an unknown profile as "no timing policy" and
    returns zero. This error is for command-line lookups, where a typo
    should be reported instead of silently printing zero.

    Example::

        raise ProfileNotFoundError(
            "Net class not found: DDR",
            context={"available": ["Default", "USB"]},
        )
    """

    pass


__all__ = [
    "KiCadDelayError",
    "ProjectFileError",
    "ConfigError",
    "ProfileNotFoundError",
]
