"""Command handlers for delay profile queries.

Provides CLI commands for:
- Listing delay profiles and net classes in a project
- Track delay for a length on a layer
- Via delay between two layers
- Track length for a target delay
- Effective configuration
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from rich.console import Console
from rich.table import Table

from kicad_delay.config import Config, generate_template, get_config_paths
from kicad_delay.exceptions import (
    ConfigError,
    KiCadDelayError,
    ProfileNotFoundError,
    ProjectFileError,
)
from kicad_delay.logging import enable_verbose
from kicad_delay.physics import Stackup
from kicad_delay.project import load_delay_settings
from kicad_delay.timing import (
    DelayProfileStore,
    GeometryContext,
    LineItem,
    NetClass,
    NetSettings,
    Polyline,
    PropagationDelayCalculator,
    StackupGeometry,
    ViaItem,
    ViaOverrideKey,
)
from kicad_delay.units import DelayFormatter, get_delay_formatter, iu_to_mm

if TYPE_CHECKING:
    from argparse import Namespace

__all__ = ["COMMANDS"]


def _load_config(args: Namespace) -> Config:
    project = getattr(args, "project", None)
    start_dir = Path(project).resolve().parent if project else None
    config = Config.load(start_dir)
    if getattr(args, "verbose", False) or config.defaults.verbose:
        enable_verbose("DEBUG")
    return config


def _output_format(args: Namespace, config: Config) -> str:
    return getattr(args, "format", None) or config.defaults.format


def _resolve_net_class(net_settings: NetSettings, args: Namespace) -> NetClass:
    if args.netclass:
        netclass = net_settings.get_net_class(args.netclass)
        if netclass is None:
            raise ProfileNotFoundError(
                f"Net class not found: {args.netclass}",
                context={"available": ", ".join(sorted(net_settings.classes))},
            )
        return netclass
    return net_settings.effective_net_class(args.net)


def _get_stackup(args: Namespace, config: Config) -> Stackup:
    stackup_path = getattr(args, "stackup", None)
    if stackup_path:
        path = Path(stackup_path)
        try:
            items = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ProjectFileError(f"Cannot read stackup file: {e}", file_path=path) from e
        except json.JSONDecodeError as e:
            raise ProjectFileError(f"Invalid JSON in stackup file: {e}", file_path=path) from e
        try:
            return Stackup.from_layers_data(items)
        except (TypeError, ValueError) as e:
            raise ProjectFileError(f"Invalid stackup file: {e}", file_path=path) from e

    preset = getattr(args, "preset", None) or config.timing.stackup_preset
    try:
        return Stackup.from_preset(preset)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _setup(
    args: Namespace, config: Config, stackup: Stackup | None = None
) -> tuple[DelayFormatter, PropagationDelayCalculator, NetSettings]:
    formatter = get_delay_formatter(getattr(args, "unit", None), config)
    store, net_settings = load_delay_settings(args.project)
    if stackup is None:
        stackup = Stackup.from_preset(config.timing.stackup_preset)
    geometry = StackupGeometry(stackup, use_stackup_height=config.timing.use_stackup_height)
    calculator = PropagationDelayCalculator.attach(store, geometry)
    return formatter, calculator, net_settings


def _warn_untimed(
    console: Console, calculator: PropagationDelayCalculator, netclass: NetClass, config: Config
) -> None:
    if config.defaults.quiet:
        return
    if calculator.get_delay_profile(netclass.delay_profile) is None:
        if netclass.delay_profile:
            console.print(
                f"[yellow]Warning: delay profile '{netclass.delay_profile}' of net class "
                f"'{netclass.name}' is not defined[/yellow]"
            )
        else:
            console.print(
                f"[yellow]Warning: net class '{netclass.name}' has no delay profile[/yellow]"
            )


def run_profiles_command(args: Namespace) -> int:
    """Handle profiles command - list delay profiles and net classes."""
    config = _load_config(args)
    store, net_settings = load_delay_settings(args.project)
    fmt = _output_format(args, config)

    if fmt == "json":
        print(json.dumps(_profiles_summary(store, net_settings), indent=2))
        return 0

    console = Console()

    if not len(store):
        console.print("No delay profiles defined")
    else:
        table = Table(title="Delay Profiles", show_header=True, header_style="bold")
        table.add_column("Profile", style="cyan")
        table.add_column("Layer delays (time IU/mm)")
        table.add_column("Via (time IU/mm)", justify="right")
        table.add_column("Overrides", justify="right")

        for profile in store:
            layers = ", ".join(f"{layer}={delay:g}" for layer, delay in profile.layer_delays.items())
            table.add_row(
                profile.name,
                layers or "-",
                f"{profile.via_delay:g}",
                str(len(profile.via_overrides)),
            )
        console.print(table)

    classes = Table(title="Net Classes", show_header=True, header_style="bold")
    classes.add_column("Net class", style="cyan")
    classes.add_column("Delay profile")
    for netclass in net_settings.classes.values():
        classes.add_row(netclass.name, netclass.delay_profile or "-")
    console.print(classes)

    return 0


def _profiles_summary(store: DelayProfileStore, net_settings: NetSettings) -> dict:
    return {
        "profiles": [
            {
                "name": profile.name,
                "via_delay": profile.via_delay,
                "layer_delays": dict(profile.layer_delays),
                "via_overrides": [
                    {
                        "signal_layer_from": entry.signal_layer_from,
                        "signal_layer_to": entry.signal_layer_to,
                        "via_layer_from": entry.via_layer_from,
                        "via_layer_to": entry.via_layer_to,
                        "delay": entry.delay,
                    }
                    for entry in profile.via_overrides
                ],
            }
            for profile in store
        ],
        "net_classes": {
            netclass.name: netclass.delay_profile for netclass in net_settings.classes.values()
        },
    }


def run_trace_command(args: Namespace) -> int:
    """Handle trace command - delay of a straight track."""
    if args.length < 0:
        raise KiCadDelayError(
            f"Track length must not be negative, got {args.length}",
            suggestions=["Pass the track length in mm as a positive number"],
        )

    config = _load_config(args)
    formatter, calculator, net_settings = _setup(args, config)
    netclass = _resolve_net_class(net_settings, args)

    item = LineItem(args.layer, Polyline.from_mm([(0.0, 0.0), (args.length, 0.0)]), net_class=netclass)
    delay = calculator.delay_for_item(item, GeometryContext(netclass, args.layer))

    if _output_format(args, config) == "json":
        data = {
            "net_class": netclass.name,
            "delay_profile": netclass.delay_profile,
            "layer": args.layer,
            "length_mm": args.length,
            "delay_time_iu": delay,
            "delay": round(formatter.convert_to_display(delay), 6),
            "unit": formatter.unit_name,
        }
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    _warn_untimed(console, calculator, netclass, config)
    console.print(f"\n[bold]Track delay on {args.layer} ({netclass.name}):[/bold]\n")
    console.print(f"  Length:  {args.length:.3f} mm")
    console.print(f"  [bold green]Delay:   {formatter.format(delay)}[/bold green]")
    return 0


def run_via_command(args: Namespace) -> int:
    """Handle via command - delay of a via between two layers."""
    config = _load_config(args)
    stackup = _get_stackup(args, config)
    formatter, calculator, net_settings = _setup(args, config, stackup)
    netclass = _resolve_net_class(net_settings, args)

    copper = stackup.copper_layers
    via_from = args.via_from or (copper[0].name if copper else args.layer_from)
    via_to = args.via_to or (copper[-1].name if copper else args.layer_to)

    via = ViaItem(args.layer_from, args.layer_to, via_from, via_to, net_class=netclass)
    delay = calculator.delay_for_item(via, GeometryContext(netclass, args.layer_from))

    key = ViaOverrideKey(args.layer_from, args.layer_to, via_from, via_to)
    overridden = key in calculator.cache.via_overrides(netclass.delay_profile)
    height_mm = iu_to_mm(calculator.geometry.stackup_height(args.layer_from, args.layer_to))

    if _output_format(args, config) == "json":
        data = {
            "net_class": netclass.name,
            "delay_profile": netclass.delay_profile,
            "signal_layers": [args.layer_from, args.layer_to],
            "via_layers": [via_from, via_to],
            "height_mm": round(height_mm, 6),
            "override": overridden,
            "delay_time_iu": delay,
            "delay": round(formatter.convert_to_display(delay), 6),
            "unit": formatter.unit_name,
        }
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    _warn_untimed(console, calculator, netclass, config)
    console.print(f"\n[bold]Via delay {args.layer_from} -> {args.layer_to} ({netclass.name}):[/bold]\n")
    console.print(f"  Padstack: {via_from} - {via_to}")
    if overridden:
        console.print("  Source:   via override")
    else:
        console.print(f"  Source:   stackup height {height_mm:.4f} mm")
    console.print(f"  [bold green]Delay:    {formatter.format(delay)}[/bold green]")
    return 0


def run_length_command(args: Namespace) -> int:
    """Handle length command - track length for a target delay."""
    config = _load_config(args)
    formatter, calculator, net_settings = _setup(args, config)
    netclass = _resolve_net_class(net_settings, args)

    delay = formatter.convert_from_display(args.delay)
    length_iu = calculator.length_for_delay(delay, GeometryContext(netclass, args.layer))
    length_mm = iu_to_mm(length_iu)

    if _output_format(args, config) == "json":
        data = {
            "net_class": netclass.name,
            "delay_profile": netclass.delay_profile,
            "layer": args.layer,
            "delay_time_iu": delay,
            "length_iu": length_iu,
            "length_mm": round(length_mm, 6),
        }
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    _warn_untimed(console, calculator, netclass, config)
    console.print(f"\n[bold]Track length on {args.layer} ({netclass.name}):[/bold]\n")
    console.print(f"  Target:  {formatter.format(delay)}")
    console.print(f"  [bold green]Length:  {length_mm:.4f} mm[/bold green]")
    return 0


def run_config_command(args: Namespace) -> int:
    """Handle config command - show effective configuration."""
    if args.template:
        print(generate_template())
        return 0

    config = _load_config(args)
    console = Console()

    paths = get_config_paths()
    console.print("\n[bold]Config files:[/bold]")
    console.print(f"  User:    {paths['user'] or '(none)'}")
    console.print(f"  Project: {paths['project'] or '(none)'}\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source")

    values = {
        "defaults.format": config.defaults.format,
        "defaults.verbose": config.defaults.verbose,
        "defaults.quiet": config.defaults.quiet,
        "timing.use_stackup_height": config.timing.use_stackup_height,
        "timing.time_unit": config.timing.time_unit,
        "timing.stackup_preset": config.timing.stackup_preset,
    }
    for key, value in values.items():
        table.add_row(key, str(value), config.get_source(key))
    console.print(table)
    return 0


COMMANDS: dict[str, Callable[[Namespace], int]] = {
    "profiles": run_profiles_command,
    "trace": run_trace_command,
    "via": run_via_command,
    "length": run_length_command,
    "config": run_config_command,
}
