"""
Hazard Map CLI
Prints the SIGMET / AIR SIGMET advisories that apply to an altitude band
and reference time.
"""

import asyncio
import json
import logging
import sys

import click
from rich.console import Console
from rich.table import Table
from rich import box

from hazardmap.core import get_settings, format_range_for_display, format_offset_label
from hazardmap.services.hazards import LAYERS, SIGMET, HazardMapState

console = Console()

LAYER_STYLES = {
    "sigmet": "bright_red",
    "airsigmet": "bright_cyan",
}


def create_advisory_table(state: HazardMapState) -> Table:
    """Table of visible advisories, one row per polygon."""
    table = Table(box=box.SIMPLE_HEAVY, expand=True, show_header=True,
                  header_style="bold")
    table.add_column("LAYER", width=10)
    table.add_column("HAZARD", width=12)
    table.add_column("SEV", width=6)
    table.add_column("ALTITUDE", justify="right")
    table.add_column("VALID FROM")
    table.add_column("VALID TO")

    for adv in state.advisories():
        style = LAYER_STYLES.get(adv["layer"], "white")
        table.add_row(
            f"[{style}]{'SIGMET' if adv['layer'] == SIGMET else 'AIR SIGMET'}[/]",
            str(adv["hazard"]),
            str(adv["severity"] or "-"),
            adv["altitude_text"],
            str(adv["valid_from"] or "Unknown"),
            str(adv["valid_to"] or "Unknown"),
        )
    return table


async def load_state(alt_min, alt_max, offset, layers) -> HazardMapState:
    state = HazardMapState()
    try:
        state.set_altitude_range(alt_min, alt_max)
        state.set_time_offset(offset)
        state.set_layer_visibility(
            show_sigmet="sigmet" in layers,
            show_airsigmet="airsigmet" in layers,
        )
        await state.refresh()
    finally:
        await state.close()
    return state


@click.command()
@click.option("--alt-min", default=None, type=float, help="Lower altitude bound (ft)")
@click.option("--alt-max", default=None, type=float, help="Upper altitude bound (ft)")
@click.option("--offset", default=0.0, type=float, help="Hours from now (-24 to +6)")
@click.option("--layer", "layers", multiple=True, type=click.Choice(LAYERS),
              help="Layer to show (repeatable, default both)")
@click.option("--json", "as_json", is_flag=True, help="Print filtered GeoJSON")
def main(alt_min, alt_max, offset, layers, as_json):
    """
    Hazard Map - SIGMET / AIR SIGMET advisories

    Fetches advisories from aviationweather.gov and shows the ones that
    overlap the altitude band and are valid at the reference time.

    Examples:
      hazardmap --alt-min 18000 --alt-max 34000
      hazardmap --offset -6 --layer sigmet
      hazardmap --json > hazards.geojson
    """
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    state = asyncio.run(load_state(alt_min, alt_max, offset, layers or LAYERS))

    if state.error:
        console.print(f"[bold red]  Failed to load advisories: {state.error}[/]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(state.visible_collections(), indent=2))
        return

    window = state.time_window()
    filters = state.filters
    console.print()
    console.print(f"[bold]  Aviation Hazards[/]  [dim]{format_offset_label(filters.time_offset_hours)}[/]")
    console.print(f"[dim]  Altitude: {filters.altitude_min:,.0f} - {filters.altitude_max:,.0f} ft[/]")
    console.print(f"[dim]  Time window: {format_range_for_display(window.start, window.end)}[/]")
    console.print(create_advisory_table(state))
    console.print(f"  Total visible: {state.total_visible()}\n")


if __name__ == "__main__":
    main()
