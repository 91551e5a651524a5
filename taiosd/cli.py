"""taios CLI for running the notification daemon and talking to it.

Provides commands to serve, start, stop and inspect the daemon, to follow an
admin notification stream from the terminal, and to publish domain events.
"""

import asyncio
import json
import os
import subprocess
import sys
import time
from pathlib import Path

import click
import httpx
import psutil

from taios_library.config.settings import ClientSettings
from taios_library.models.events import EventKind
from taios_library.notifications.client import RealTimeNotifications
from taios_library.storage.paths import get_log_dir

from .__main__ import run
from .config.loader import load_config

STREAM_PATH = "/api/admin/notifications/stream"
EVENTS_PATH = "/api/admin/notifications/events"
DAEMON_MODULE = "taiosd"


def _is_daemon_cmdline(cmdline: list[str]) -> bool:
    # python[3.x] ... -m taiosd ...
    if not cmdline or "python" not in Path(cmdline[0]).name.lower():
        return False
    return any(arg == "-m" and module == DAEMON_MODULE for arg, module in zip(cmdline, cmdline[1:]))


def find_daemon_processes() -> list[psutil.Process]:
    """Live ``python -m taiosd`` processes, excluding this one."""
    own_pid = os.getpid()
    found = []

    for proc in psutil.process_iter(["pid", "cmdline", "status"]):
        try:
            info = proc.info
            if info["pid"] == own_pid or info["status"] in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD):
                continue
            if _is_daemon_cmdline(info["cmdline"] or []):
                found.append(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    return found


def get_daemon_status() -> tuple[bool, int | None]:
    """Whether a daemon is running, and the pid of the first one found."""
    processes = find_daemon_processes()
    return (True, processes[0].pid) if processes else (False, None)


def stop_process(proc: psutil.Process, timeout: float = 5.0) -> bool:
    """Send SIGTERM, escalating to SIGKILL after ``timeout`` seconds.

    Returns:
        False if the process could not be signalled
    """
    click.echo(f"Stopping daemon (PID {proc.pid})...")
    try:
        proc.terminate()
        _, alive = psutil.wait_procs([proc], timeout=timeout)
        for straggler in alive:
            click.echo(f"PID {straggler.pid} ignored SIGTERM, killing")
            straggler.kill()
    except psutil.NoSuchProcess:
        pass
    except psutil.AccessDenied as e:
        click.echo(f"Not allowed to stop PID {proc.pid}: {e}", err=True)
        return False

    click.echo("Daemon stopped")
    return True


def default_base_url() -> str:
    config = load_config()
    host = "127.0.0.1" if config.daemon.host == "0.0.0.0" else config.daemon.host
    return f"http://{host}:{config.daemon.port}"


def format_notification(notification) -> str:
    line = f"[{notification.created_at}] {notification.type.value.upper():7} {notification.title}: {notification.message}"
    if notification.action_url:
        line += f" ({notification.action_url})"
    return line


@click.group()
def cli():
    """taios - Trust TAI OS admin notification daemon tools."""
    pass


@cli.command()
@click.option("--host", default=None, help="Override configured host")
@click.option("--port", type=int, default=None, help="Override configured port")
def serve(host: str | None, port: int | None):
    """Run the daemon in the foreground."""
    config = load_config()
    overrides = {key: value for key, value in (("host", host), ("port", port)) if value is not None}
    if overrides:
        config = config.model_copy(update={"daemon": config.daemon.model_copy(update=overrides)})

    run(config)


@cli.command()
def start():
    """Start the daemon in the background."""
    running, pid = get_daemon_status()
    if running:
        click.echo(f"Daemon already running (PID {pid})")
        return

    daemon_log = get_log_dir() / "daemon.log"
    click.echo("Starting daemon...")
    with daemon_log.open("a") as log_file:
        subprocess.Popen(
            [sys.executable, "-m", DAEMON_MODULE],
            stdout=log_file,
            stderr=log_file,
            start_new_session=True,
        )

    for _ in range(10):
        time.sleep(0.5)
        running, pid = get_daemon_status()
        if running:
            click.echo(f"Daemon started (PID {pid}, logs: {daemon_log})")
            return

    click.echo("Warning: Daemon may not have started successfully", err=True)
    sys.exit(1)


@cli.command()
def stop():
    """Stop the background daemon."""
    processes = find_daemon_processes()
    if not processes:
        click.echo("Daemon not running")
        return

    ok = all(stop_process(proc) for proc in processes)
    if not ok:
        sys.exit(1)


@cli.command()
def status():
    """Show whether the daemon is running."""
    running, pid = get_daemon_status()
    if running:
        click.echo(f"Daemon: running (PID {pid})")
    else:
        click.echo("Daemon: stopped")


@cli.command()
@click.option("--admin-id", envvar="TAIOS_ADMIN_ID", required=True, help="Admin the stream is scoped to")
@click.option("--url", "base_url", default=None, help="Daemon base URL (default: from daemon config)")
def listen(admin_id: str, base_url: str | None):
    """Follow the notification stream for an admin and print notifications."""
    settings = ClientSettings(
        admin_id=admin_id,
        stream_url=f"{(base_url or default_base_url()).rstrip('/')}{STREAM_PATH}",
    )

    try:
        asyncio.run(_listen(settings))
    except KeyboardInterrupt:
        click.echo("\nStopped listening")
        return

    click.echo("Notification stream gave up reconnecting", err=True)
    sys.exit(1)


async def _listen(settings: ClientSettings) -> None:
    feed = RealTimeNotifications(settings)
    seen: set[str] = set()
    last_status = feed.connection_status

    def on_change(current: RealTimeNotifications) -> None:
        nonlocal last_status
        if current.connection_status != last_status:
            last_status = current.connection_status
            click.echo(f"-- connection {last_status.value}", err=True)

        for notification in reversed(current.notifications):
            if notification.id not in seen:
                seen.add(notification.id)
                click.echo(format_notification(notification))

    feed.add_listener(on_change)
    async with feed:
        click.echo(f"Listening on {settings.stream_url} as {settings.admin_id} (Ctrl+C to stop)", err=True)
        connection = feed.connection
        if connection is not None:
            await connection.wait()


@cli.command()
@click.argument("kind", type=click.Choice([kind.value for kind in EventKind]))
@click.option("--payload", "payload_json", required=True, help="Event payload as a JSON object")
@click.option("--audience", multiple=True, help="Admin id to deliver to (repeatable, default: all)")
@click.option("--url", "base_url", default=None, help="Daemon base URL (default: from daemon config)")
def publish(kind: str, payload_json: str, audience: tuple[str, ...], base_url: str | None):
    """Publish a domain event to connected admins."""
    try:
        payload = json.loads(payload_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="--payload") from e

    if not isinstance(payload, dict):
        raise click.BadParameter("Payload must be a JSON object", param_hint="--payload")

    body = {"type": kind, "payload": payload, "audience": list(audience) or None}
    url = f"{(base_url or default_base_url()).rstrip('/')}{EVENTS_PATH}"

    try:
        response = httpx.post(url, json=body, timeout=10.0)
    except httpx.HTTPError as e:
        click.echo(f"Error: could not reach daemon at {url}: {e}", err=True)
        sys.exit(1)

    if response.status_code != 202:
        click.echo(f"Error: publish failed ({response.status_code}): {response.text}", err=True)
        sys.exit(1)

    result = response.json()
    click.echo(f"Published {result['type']} at {result['timestamp']} to {result['delivered']} stream(s)")


if __name__ == "__main__":
    cli()
