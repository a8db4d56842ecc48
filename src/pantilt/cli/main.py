"""pantilt CLI - command-line front end for the pan/tilt controller."""

from __future__ import annotations

import json
import queue
import time

import click

from pantilt.utils.logging import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool) -> None:
    """pantilt - drive a Bluetooth servo pan/tilt head."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "WARNING", json_output=json_output)


def _controller():
    """Create a controller configured from the environment."""
    from pantilt.config import SessionConfig
    from pantilt.core.controller import PanTiltController

    return PanTiltController(config=SessionConfig.from_env())


def _connect(ctx: click.Context, device: str, controller=None):
    """Connect *controller* (a new one by default) to *device*."""
    from pantilt.exceptions import PanTiltError

    if controller is None:
        controller = _controller()
    try:
        controller.connect(device)
    except PanTiltError as exc:
        click.echo(f"ERROR: {exc}")
        ctx.exit(1)
    return controller


def _send(ctx: click.Context, action) -> None:
    """Run *action*, exiting 1 on a send error."""
    from pantilt.exceptions import PanTiltError

    try:
        action()
    except PanTiltError as exc:
        click.echo(f"ERROR: {exc}")
        ctx.exit(1)


def _collect(subscription, duration: float, until=None) -> list:
    """Gather events for up to *duration* seconds, or until *until* matches."""
    events = []
    deadline = time.monotonic() + duration
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return events
        try:
            event = subscription.get(timeout=remaining)
        except queue.Empty:
            return events
        events.append(event)
        if until is not None and until(event):
            return events


def _echo_lines(ctx: click.Context, lines) -> None:
    for line in lines:
        if ctx.obj.get("json_output"):
            click.echo(json.dumps(line.model_dump(mode="json")))
        else:
            click.echo(line.text)


@cli.command()
@click.pass_context
def devices(ctx: click.Context) -> None:
    """List configured aliases and serial ports."""
    from pantilt.config import SessionConfig
    from pantilt.transport.discovery import list_devices

    found = list_devices(SessionConfig.from_env().aliases)
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(
            [{"name": d.name, "port": d.port, "description": d.description} for d in found],
            indent=2,
        ))
        return
    if not found:
        click.echo("No devices found.")
        return
    click.echo(f"Found {len(found)} device(s):")
    for d in found:
        click.echo(f"  {d.name}  {d.port}  ({d.description})")


@cli.command()
@click.argument("device")
@click.argument("command")
@click.option("--listen", type=float, default=0.0, help="Seconds to print replies")
@click.pass_context
def send(ctx: click.Context, device: str, command: str, listen: float) -> None:
    """Send one raw COMMAND line to DEVICE."""
    controller = _connect(ctx, device)
    with controller:
        replies = controller.session.telemetry.subscribe()
        _send(ctx, lambda: controller.session.send_command(command))
        _echo_lines(ctx, _collect(replies, listen))


@cli.command()
@click.argument("device")
@click.argument("angle", type=click.IntRange(0, 180))
@click.pass_context
def pan(ctx: click.Context, device: str, angle: int) -> None:
    """Move DEVICE to an absolute ANGLE (0-180)."""
    controller = _connect(ctx, device)
    with controller:
        _send(ctx, lambda: controller.set_angle(angle))
        click.echo(f"Current Angle: {controller.angle}°")


@cli.command()
@click.argument("device")
@click.option("--duration", type=float, default=0.0, help="Seconds to run (0=until Ctrl-C)")
@click.pass_context
def monitor(ctx: click.Context, device: str, duration: float) -> None:
    """Print every line DEVICE sends."""
    controller = _controller()
    lines = controller.session.telemetry.subscribe()
    states = controller.session.state_changes.subscribe()
    _connect(ctx, device, controller)
    with controller:
        deadline = time.monotonic() + duration if duration > 0 else None
        try:
            while deadline is None or time.monotonic() < deadline:
                _echo_lines(ctx, _collect(lines, 0.2))
                for status in states.drain():
                    if status.is_error:
                        click.echo(f"ERROR: {status.reason}")
                        ctx.exit(1)
        except KeyboardInterrupt:
            pass


@cli.command()
@click.argument("device")
@click.option("--timeout", type=float, default=3.0, help="Seconds to wait for the dump")
@click.pass_context
def settings(ctx: click.Context, device: str, timeout: float) -> None:
    """Request and print the settings stored on DEVICE."""
    controller = _connect(ctx, device)
    with controller:
        lines = controller.session.telemetry.subscribe()
        _send(ctx, controller.request_settings)
        received = _collect(lines, timeout, until=lambda line: line.is_settings)
        if not any(line.is_settings for line in received):
            click.echo("ERROR: No settings received.")
            ctx.exit(1)
        current = controller.settings.current()
        if ctx.obj.get("json_output"):
            click.echo(json.dumps(current.model_dump(by_alias=True), indent=2))
        else:
            for key, value in current.as_pairs():
                click.echo(f"  {key.value:<7} {value}")


@cli.command(name="set")
@click.argument("device")
@click.argument("param", type=click.Choice(["CAL_X", "CAL_DZ", "CAL_N", "PAN_MP", "PAN_AP"]))
@click.argument("value", type=click.IntRange(min=0))
@click.pass_context
def set_param(ctx: click.Context, device: str, param: str, value: int) -> None:
    """Write one PARAM on DEVICE (clamped to its range)."""
    controller = _connect(ctx, device)
    with controller:
        stored = []
        _send(ctx, lambda: stored.append(controller.set_parameter(param, value)))
        click.echo(f"{param}:{stored[0]}")


@cli.command(name="reset-settings")
@click.argument("device")
@click.pass_context
def reset_settings(ctx: click.Context, device: str) -> None:
    """Restore the five default settings on DEVICE."""
    controller = _connect(ctx, device)
    with controller:
        pairs = []
        _send(ctx, lambda: pairs.extend(controller.reset_settings()))
        for key, value in pairs:
            click.echo(f"{key.value}:{value}")


if __name__ == "__main__":
    cli()
