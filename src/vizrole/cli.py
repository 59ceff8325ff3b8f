"""CLI for the visual role mapping engine."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from .errors import is_envelope
from .levels import MeasurementLevel, is_quantitative
from .orchestrator import run_validation_pipeline

app = typer.Typer(help="Visual role mapping CLI.")


@app.command()
def version() -> None:
    """Show version output."""
    typer.echo("vizrole 0.1.0")


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _dumps(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def levels() -> None:
    """List the measurement levels, from lowest to highest."""
    for level in MeasurementLevel:
        kind = "quantitative" if is_quantitative(level) else "qualitative"
        typer.echo(f"{level.key}\t{kind}")


@app.command()
def validate(
    bundle: Path = typer.Option(..., exists=True, file_okay=True, dir_okay=False, help="Path to configuration bundle JSON"),
    output: Optional[Path] = typer.Option(None, file_okay=True, dir_okay=False, help="Write the report to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Validate the visual role mappings of a configuration bundle."""
    _configure_logging(verbose)
    try:
        payload = _load_json(bundle)
    except (OSError, ValueError) as exc:
        typer.echo(_dumps({"error": "Validation", "reason": f"input-parse-error: {exc}", "details": {}}))
        raise typer.Exit(code=2) from exc

    result = run_validation_pipeline(payload)
    if is_envelope(result):
        typer.echo(_dumps(result))
        raise typer.Exit(code=2)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(_dumps(result), encoding="utf-8")
        typer.echo(f"Wrote report to {output}")
    else:
        typer.echo(_dumps(result))

    if not result["isValid"]:
        raise typer.Exit(code=1)


def main() -> None:
    """Entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
