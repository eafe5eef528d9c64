"""CLI interface."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from svgmotion.animation.svg_parser import parse_svg
from svgmotion.errors import ParseError, ValidationError
from svgmotion.ids import CounterIdSource, RandomIdSource
from svgmotion.layer_tree import from_layers
from svgmotion.script_schema import apply_script, load_script
from svgmotion.utils.config import settings
from svgmotion.utils.logging import configure_logging
from svgmotion.workspace import Workspace

app = typer.Typer(add_completion=False)


@app.callback()
def main(log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level.")):
    """Extract layers from SVG files and export keyframe animations."""
    configure_logging(log_level)


def _id_source(stable_ids: bool):
    # Counter ids make generated ids predictable so scripts can reference them.
    return CounterIdSource() if stable_ids else RandomIdSource()


def _load_workspace(file: Path, script: Optional[Path], duration: Optional[float], stable_ids: bool) -> Workspace:
    workspace = Workspace(id_source=_id_source(stable_ids))
    try:
        workspace.load(file.read_text(encoding="utf-8"))
        if script is not None:
            parsed = load_script(script.read_text(encoding="utf-8"))
            workspace.tree = apply_script(workspace.tree, parsed, id_source=workspace.id_source)
            if parsed.duration is not None:
                workspace.set_duration(parsed.duration)
    except (ParseError, ValidationError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    if duration is not None:
        workspace.set_duration(duration)
    return workspace


@app.command()
def inspect(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="SVG file."),
    stable_ids: bool = typer.Option(True, "--stable-ids/--random-ids"),
):
    """Print the layers extracted from an SVG as JSON."""
    try:
        parsed = parse_svg(file.read_text(encoding="utf-8"), id_source=_id_source(stable_ids))
    except ParseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    tree = from_layers(parsed.layers)
    typer.echo(json.dumps([layer.to_dict() for layer in tree.layers], indent=2))


@app.command("compile")
def compile_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="SVG file."),
    script: Path = typer.Option(..., "--script", "-s", exists=True, dir_okay=False, help="Animation script (JSON)."),
    duration: Optional[float] = typer.Option(None, "--duration", "-d", min=1, help="Timeline duration in ms."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the animated SVG here."),
    stable_ids: bool = typer.Option(True, "--stable-ids/--random-ids"),
):
    """Export an animated SVG from a source SVG and an animation script."""
    workspace = _load_workspace(file, script, duration, stable_ids)
    svg_text = workspace.export()
    if output is None:
        typer.echo(svg_text)
    else:
        output.write_text(svg_text, encoding="utf-8")
        typer.echo(f"Wrote {output}")


@app.command()
def preview(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="SVG file."),
    time: float = typer.Option(..., "--time", "-t", min=0, help="Time in ms."),
    script: Optional[Path] = typer.Option(None, "--script", "-s", exists=True, dir_okay=False),
    stable_ids: bool = typer.Option(True, "--stable-ids/--random-ids"),
):
    """Print the resolved properties of every layer at a given time."""
    workspace = _load_workspace(file, script, None, stable_ids)
    typer.echo(json.dumps(workspace.resolved_state(time), indent=2))


if __name__ == "__main__":
    app()
