# src/bramble/cli.py
"""Bramble Command Line Interface.

Entry point for the bramble CLI tool. Targets are named ``module:attribute``
(dots allowed in the attribute), where the attribute is a Property, a Gen,
or a zero-argument factory returning one.
"""

from __future__ import annotations

import importlib
import json
import sys
from enum import StrEnum
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError

from bramble import __version__
from bramble.contracts import PropertyConfig, RecheckData, RecheckTokenError, Report
from bramble.core.config import load_config
from bramble.core.seed import Seed
from bramble.core.size import MAX_SIZE, MIN_SIZE
from bramble.engine import gen as gens
from bramble.engine import runner
from bramble.engine.gen import Gen
from bramble.engine.property import Property

__all__ = ["app"]

# Exit code for bad invocations (unknown target, malformed token, bad config).
USAGE_EXIT_CODE = 2


class OutputFormat(StrEnum):
    """How command results are printed."""

    CONSOLE = "console"
    JSON = "json"


app = typer.Typer(
    name="bramble",
    help="Bramble: property-based testing with integrated shrinking.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"bramble version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging (includes every shrink step).",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
    app_dir: str = typer.Option(
        ".",
        "--app-dir",
        help="Directory prepended to the import path when loading targets.",
    ),
) -> None:
    """Bramble: property-based testing with integrated shrinking."""
    from bramble.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    resolved = str(Path(app_dir).expanduser().resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


# =============================================================================
# Helpers
# =============================================================================


def _usage_error(message: str) -> typer.Exit:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(USAGE_EXIT_CODE)


def _load_target(target: str) -> Any:
    """Import ``module:attribute`` and return the attribute."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise _usage_error(f"Target must look like 'module:attribute', got {target!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise _usage_error(f"Cannot import module {module_name!r}: {e}") from None
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise _usage_error(f"Module {module_name!r} has no attribute {attr_path!r}") from None
    return obj


def _resolve[T](target: str, expected: type[T]) -> T:
    """Load a target of ``expected`` type, calling it first if it is a factory."""
    obj = _load_target(target)
    if isinstance(obj, expected):
        return obj
    if callable(obj) and not isinstance(obj, Gen | Property):
        try:
            obj = obj()
        except TypeError as e:
            raise _usage_error(f"Factory {target!r} must take no arguments: {e}") from None
        if isinstance(obj, expected):
            return obj
    raise _usage_error(f"Target {target!r} is a {type(obj).__name__}, expected a {expected.__name__}")


def _load_property_config(config_file: str | None, **overrides: Any) -> PropertyConfig:
    path = Path(config_file).expanduser() if config_file is not None else None
    try:
        return load_config(path, overrides=overrides)
    except FileNotFoundError as e:
        raise _usage_error(str(e)) from None
    except yaml.YAMLError as e:
        raise _usage_error(f"YAML syntax error in {config_file}: {e}") from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(USAGE_EXIT_CODE) from None
    except ValueError as e:
        raise _usage_error(str(e)) from None


def _report_payload(report: Report) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "status": report.status.value,
        "tests": report.tests,
        "discards": report.discards,
        "shrinks": report.shrinks,
    }
    if report.failure is not None:
        payload["counterexample"] = repr(report.failure.shrunk)
        payload["original"] = repr(report.failure.original)
        payload["journal"] = list(report.failure.journal)
        payload["recheck"] = report.failure.token
        payload["shrink_truncated"] = report.failure.shrink_truncated
        if report.failure.error is not None:
            payload["error"] = {"type": report.failure.error["type"], "exception": report.failure.error["exception"]}
    if report.fault is not None:
        payload["error"] = {"type": report.fault.error["type"], "exception": report.fault.error["exception"]}
        payload["recheck"] = report.fault.recheck.serialize()
    return payload


def _emit(report: Report, output_format: OutputFormat) -> None:
    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(_report_payload(report)))
    else:
        typer.echo(report.render())
    if not report.passed:
        raise typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def check(
    target: str = typer.Argument(..., help="Property to run, as 'module:attribute'."),
    tests: int | None = typer.Option(None, "--tests", "-t", help="Number of passing trials required."),
    shrinks: int | None = typer.Option(None, "--shrinks", help="Maximum shrink steps after a failure."),
    size: int | None = typer.Option(None, "--size", help=f"Size of the first trial ({MIN_SIZE}-{MAX_SIZE})."),
    seed: int | None = typer.Option(None, "--seed", help="Root seed as an unsigned 64-bit integer."),
    config_file: str | None = typer.Option(None, "--config", "-c", help="Path to a YAML config file."),
    output_format: OutputFormat = typer.Option(
        OutputFormat.CONSOLE,
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Run a property and print its report.

    Exits 0 when the property passes and 1 when it fails, gives up or hits a
    generator error.
    """
    prop = _resolve(target, Property)
    config = _load_property_config(config_file, tests=tests, shrinks=shrinks, size=size, seed=seed)
    _emit(runner.check(prop, config, name=target), output_format)


@app.command()
def recheck(
    target: str = typer.Argument(..., help="Property to replay, as 'module:attribute'."),
    token: str = typer.Argument(..., help="Recheck token printed by a failing run."),
    shrinks: int | None = typer.Option(None, "--shrinks", help="Maximum shrink steps if the path must be searched again."),
    config_file: str | None = typer.Option(None, "--config", "-c", help="Path to a YAML config file."),
    output_format: OutputFormat = typer.Option(
        OutputFormat.CONSOLE,
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Replay a single trial from a recheck token."""
    try:
        data = RecheckData.parse(token)
    except RecheckTokenError as e:
        raise _usage_error(str(e)) from None
    prop = _resolve(target, Property)
    config = _load_property_config(config_file, shrinks=shrinks)
    _emit(runner.recheck(prop, data, config), output_format)


@app.command()
def sample(
    target: str = typer.Argument(..., help="Generator to sample, as 'module:attribute'."),
    count: int = typer.Option(5, "--count", "-n", min=1, help="Number of samples."),
    size: int = typer.Option(10, "--size", min=MIN_SIZE, max=MAX_SIZE, help="Size to sample at."),
    seed: int | None = typer.Option(None, "--seed", help="Root seed as an unsigned 64-bit integer."),
) -> None:
    """Print sampled values with their immediate shrinks."""
    g = _resolve(target, Gen)
    root = None if seed is None else Seed.from_u64(seed)
    gens.print_sample(g, root, sys.stdout, size=size, count=count)


@app.command()
def token(
    value: str = typer.Argument(..., help="Recheck token to decode."),
) -> None:
    """Decode a recheck token."""
    try:
        data = RecheckData.parse(value)
    except RecheckTokenError as e:
        raise _usage_error(str(e)) from None
    typer.echo(f"Size: {data.size}")
    typer.echo(f"Seed: {data.seed}")
    typer.echo(f"Shrink path: {':'.join(str(i) for i in data.path) if data.path else '(none)'}")
    typer.echo(f"Shrinks: {len(data.path)}")


if __name__ == "__main__":
    app()
