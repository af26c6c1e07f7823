"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from bluezevents.core.capture_loader import resolve_capture
from bluezevents.core.classifier import PROPERTY_RULES, classify
from bluezevents.core.errors import BluezEventsError
from bluezevents.core.model import BluetoothEvent, NoneEvent

app = typer.Typer(help="Classify BlueZ property notifications into Bluetooth LE events")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _format_value(value: object) -> str:
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def _format_event(event: BluetoothEvent) -> str:
    if isinstance(event, NoneEvent):
        return "NoneEvent"
    fields = " ".join(f"{name}={_format_value(value)}" for name, value in event.payload().items())
    return f"{type(event).__name__} {event.object_path} {fields}"


@app.command("properties")
def list_properties() -> None:
    """List recognized properties in match priority order."""
    for rule in PROPERTY_RULES:
        typer.echo(f"{rule.name}: {rule.signature} -> {rule.event.__name__}")


@app.command("classify")
def classify_capture(
    capture: str = typer.Argument(..., help="Capture file path or packaged capture name"),
    show_all: bool = typer.Option(False, "--all", help="Also print notifications with no recognized property"),
) -> None:
    """Replay a capture through the classifier and print the resulting events."""
    try:
        loaded = resolve_capture(capture)
        for index, message in enumerate(loaded.messages):
            event = classify(message)
            if event is None:
                typer.echo(f"[{index}] <undecodable> {message.path}", err=True)
                continue
            if isinstance(event, NoneEvent) and not show_all:
                continue
            typer.echo(f"[{index}] {_format_event(event)}")
    except BluezEventsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
