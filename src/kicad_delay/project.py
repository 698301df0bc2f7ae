"""
Delay settings from KiCad project files (.kicad_pro).

KiCad 6+ project files are JSON. Delay profiles live under
``time_domain_parameters`` and net classes under ``net_settings``::

    {
      "time_domain_parameters": {
        "delay_profiles_user_defined": [
          {
            "profile_name": "DDR4",
            "via_prop_delay": 7000.0,
            "track_propagation_delays": {"F.Cu": 5900.0, "In1.Cu": 6800.0},
            "via_overrides": [
              {
                "signal_layer_from": "F.Cu", "signal_layer_to": "In1.Cu",
                "via_layer_from": "F.Cu", "via_layer_to": "B.Cu",
                "delay": 9500
              }
            ]
          }
        ]
      },
      "net_settings": {
        "classes": [{"name": "DDR", "delay_profile": "DDR4"}],
        "netclass_assignments": {"DQ0": "DDR"},
        "netclass_patterns": [{"netclass": "DDR", "pattern": "DQ*"}]
      }
    }

Delays are time IU per mm (via overrides: final time IU). Files are only
read; nothing here writes a project.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from .exceptions import ProjectFileError
from .timing.netclass import NetClass, NetClassPattern, NetSettings
from .timing.profiles import DelayProfile, DelayProfileStore, ViaOverrideEntry

logger = logging.getLogger(__name__)

_OVERRIDE_FIELDS = ("signal_layer_from", "signal_layer_to", "via_layer_from", "via_layer_to")


def load_project(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a KiCad project file.

    Args:
        path: Path to .kicad_pro file

    Returns:
        Parsed JSON as dictionary

    Raises:
        ProjectFileError: If the file doesn't exist or is not valid JSON
    """
    path = Path(path)
    if not path.exists():
        raise ProjectFileError(
            f"Project file not found: {path}",
            file_path=path,
            suggestions=["Pass the .kicad_pro file next to your board"],
        )

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProjectFileError(f"Cannot read project file: {e}", file_path=path) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"Invalid JSON in project file: {e}", file_path=path) from e

    if not isinstance(data, dict):
        raise ProjectFileError("Project file must contain a JSON object", file_path=path)

    return data


def _section(data: Dict[str, Any], key: str, expected: type) -> Any:
    """Value of ``data[key]``, or an empty one if absent or null.

    Raises:
        ProjectFileError: If the value has the wrong JSON type
    """
    value = data.get(key)
    if value is None:
        return expected()
    if not isinstance(value, expected):
        kind = "an object" if expected is dict else "a list"
        raise ProjectFileError(
            f"'{key}' must be {kind}, got {type(value).__name__}",
            context={"section": key},
        )
    return value


def parse_delay_profiles(data: Dict[str, Any]) -> List[DelayProfile]:
    """
    Read user-defined delay profiles from project data.

    Args:
        data: Project data dictionary

    Returns:
        Profiles in file order (empty if the project defines none)

    Raises:
        ProjectFileError: If a profile or override entry is malformed
    """
    params = _section(data, "time_domain_parameters", dict)
    entries = _section(params, "delay_profiles_user_defined", list)

    profiles = []
    for index, entry in enumerate(entries):
        profiles.append(_parse_profile(entry, index))

    logger.debug(f"Parsed {len(profiles)} delay profile(s)")
    return profiles


def _parse_profile(entry: Any, index: int) -> DelayProfile:
    if not isinstance(entry, dict) or not entry.get("profile_name"):
        raise ProjectFileError(
            "Delay profile entry is missing 'profile_name'",
            context={"entry": index},
        )

    name = str(entry["profile_name"])
    try:
        layer_delays = {
            str(layer): float(delay)
            for layer, delay in (entry.get("track_propagation_delays") or {}).items()
        }
        via_delay = float(entry.get("via_prop_delay", 0.0))
    except (TypeError, ValueError, AttributeError) as e:
        raise ProjectFileError(
            f"Invalid delay value in profile '{name}': {e}",
            context={"profile": name, "entry": index},
        ) from e

    overrides = []
    for override_index, override in enumerate(_section(entry, "via_overrides", list)):
        overrides.append(_parse_via_override(override, name, override_index))

    return DelayProfile(
        name=name,
        layer_delays=layer_delays,
        via_delay=via_delay,
        via_overrides=tuple(overrides),
    )


def _parse_via_override(entry: Any, profile_name: str, index: int) -> ViaOverrideEntry:
    if not isinstance(entry, dict):
        raise ProjectFileError(
            "Via override must be an object",
            context={"profile": profile_name, "override": index},
        )

    missing = [key for key in (*_OVERRIDE_FIELDS, "delay") if key not in entry]
    if missing:
        raise ProjectFileError(
            f"Via override is missing {', '.join(missing)}",
            context={"profile": profile_name, "override": index},
        )

    try:
        delay = int(entry["delay"])
    except (TypeError, ValueError) as e:
        raise ProjectFileError(
            f"Invalid via override delay: {entry['delay']!r}",
            context={"profile": profile_name, "override": index},
        ) from e

    return ViaOverrideEntry(*(str(entry[key]) for key in _OVERRIDE_FIELDS), delay=delay)


def parse_net_settings(data: Dict[str, Any]) -> NetSettings:
    """
    Read net classes and net-to-class rules from project data.

    Args:
        data: Project data dictionary

    Returns:
        NetSettings (always has a "Default" class)

    Raises:
        ProjectFileError: If a section has the wrong JSON type
    """
    net_settings = _section(data, "net_settings", dict)

    classes = {}
    for entry in _section(net_settings, "classes", list):
        if not isinstance(entry, dict) or "name" not in entry:
            logger.warning(f"Skipping net class entry without a name: {entry!r}")
            continue
        name = str(entry["name"])
        classes[name] = NetClass(name=name, delay_profile=str(entry.get("delay_profile") or ""))

    assignments = {
        str(net): str(netclass)
        for net, netclass in _section(net_settings, "netclass_assignments", dict).items()
    }

    patterns = []
    for entry in _section(net_settings, "netclass_patterns", list):
        if not isinstance(entry, dict) or "pattern" not in entry or "netclass" not in entry:
            logger.warning(f"Skipping incomplete net class pattern: {entry!r}")
            continue
        patterns.append(NetClassPattern(pattern=str(entry["pattern"]), netclass=str(entry["netclass"])))

    return NetSettings(classes=classes, assignments=assignments, patterns=patterns)


def load_delay_settings(path: Union[str, Path]) -> Tuple[DelayProfileStore, NetSettings]:
    """
    Load delay profiles and net settings from a project file.

    Args:
        path: Path to .kicad_pro file

    Returns:
        (profile store, net settings)

    Raises:
        ProjectFileError: If the file or its delay settings are malformed
    """
    data = load_project(path)
    try:
        profiles = parse_delay_profiles(data)
        net_settings = parse_net_settings(data)
    except ProjectFileError as e:
        if "file" in e.context:
            raise
        raise ProjectFileError(
            e.message, context=e.context, suggestions=e.suggestions, file_path=path
        ) from e
    logger.info(
        f"Loaded {len(profiles)} delay profile(s) and "
        f"{len(net_settings.classes)} net class(es) from {path}"
    )
    return DelayProfileStore(profiles), net_settings
