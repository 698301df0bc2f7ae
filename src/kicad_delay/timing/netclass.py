"""
Net classes and net-to-class resolution.

A net class names the delay profile that applies to its nets. Nets are
mapped to classes the way KiCad project files do it:
1. Explicit assignment (net name -> class name)
2. First matching wildcard pattern, in file order
3. The "Default" class
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_NETCLASS", "NetClass", "NetClassPattern", "NetSettings"]

DEFAULT_NETCLASS = "Default"


@dataclass(frozen=True)
class NetClass:
    """Net class with its delay profile reference.

    Attributes:
        name: Net class name
        delay_profile: Name of the delay profile, empty for untimed nets
    """

    name: str
    delay_profile: str = ""


@dataclass(frozen=True)
class NetClassPattern:
    """Wildcard rule assigning nets to a class (``*`` and ``?`` supported)."""

    pattern: str
    netclass: str

    def matches(self, net_name: str) -> bool:
        return fnmatch.fnmatchcase(net_name, self.pattern)


@dataclass
class NetSettings:
    """Net classes plus the rules that map nets onto them.

    Attributes:
        classes: Net classes by name
        assignments: Explicit net name -> class name
        patterns: Wildcard rules, checked in order
    """

    classes: dict[str, NetClass] = field(default_factory=dict)
    assignments: dict[str, str] = field(default_factory=dict)
    patterns: list[NetClassPattern] = field(default_factory=list)

    def __post_init__(self) -> None:
        if DEFAULT_NETCLASS not in self.classes:
            self.classes[DEFAULT_NETCLASS] = NetClass(DEFAULT_NETCLASS)

    @property
    def default_class(self) -> NetClass:
        return self.classes[DEFAULT_NETCLASS]

    def get_net_class(self, name: str) -> NetClass | None:
        """Look up a class by name."""
        return self.classes.get(name)

    def effective_net_class(self, net_name: str) -> NetClass:
        """Resolve the class that governs a net.

        A rule pointing at a class that does not exist falls through to the
        next rule.
        """
        class_name = self.assignments.get(net_name)
        if class_name is not None:
            netclass = self.classes.get(class_name)
            if netclass is not None:
                return netclass
            logger.debug(f"Net {net_name} assigned to unknown net class {class_name}")

        for rule in self.patterns:
            if rule.matches(net_name):
                netclass = self.classes.get(rule.netclass)
                if netclass is not None:
                    return netclass
                logger.debug(f"Pattern {rule.pattern} names unknown net class {rule.netclass}")

        return self.default_class
