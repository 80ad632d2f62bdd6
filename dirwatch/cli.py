import logging
import signal
import threading

import click
import toml
from rich.console import Console
from rich.table import Table

from dirwatch import config
from dirwatch import logger as dirwatch_logger
from dirwatch import monitor
from dirwatch.errors import DirwatchError
from dirwatch.thread_manager import ThreadManager
from dirwatch.utils import spawn_consumer_worker

logger = logging.getLogger(__name__)


def print_event(event, time_format="%H:%M:%S"):
    """Live consumer handler: one line per event."""
    click.echo(event.format(time_format))


def print_summary(events, time_format="%H:%M:%S"):
    """
    Print the recorded events as a rich table.
    """
    if not events:
        click.echo("No events recorded.")
        return
    table = Table(title="dirwatch Events")
    table.add_column("Time", style="cyan")
    table.add_column("Operation", style="magenta")
    table.add_column("Path")
    for event in events:
        table.add_row(event.timestamp.strftime(time_format), str(event.operation), event.path)
    Console().print(table)


def wait_for_interrupt(m, check_interval=0.5):
    """
    Block until SIGINT/SIGTERM arrives or the monitor's loop exits on its own.
    """
    interrupted = threading.Event()

    def _handle_signal(signum, frame):
        interrupted.set()

    previous = signal.signal(signal.SIGTERM, _handle_signal)
    try:
        while not interrupted.wait(check_interval):
            if m.loop_exited:
                click.echo("Watcher closed unexpectedly.")
                break
    except KeyboardInterrupt:
        pass
    finally:
        signal.signal(signal.SIGTERM, previous)


@click.command()
@click.argument("directory", required=False, default=".")
@click.option("--config", "-c", "config_path", default=None, help="Path to configuration TOML or YAML file.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--buffer", "stream_buffer", type=click.IntRange(min=0), default=None,
              help="Outbound stream capacity (0 = unbuffered).")
@click.option("--summary/--no-summary", default=None, help="Print the event log when stopping.")
@click.option("--show-config", is_flag=True, help="Show the effective configuration and exit.")
@click.pass_context
def main(ctx, directory, config_path, debug, stream_buffer, summary, show_config):
    """
    dirwatch: print every change made inside DIRECTORY (default: current directory).
    """
    try:
        cfg = config.load_config(config_path)
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    if debug:
        cfg["logging"]["level"] = "DEBUG"
    if stream_buffer is not None:
        cfg["monitor"]["stream_buffer"] = stream_buffer
    if summary is not None:
        cfg["output"]["summary"] = summary

    if show_config:
        click.echo(toml.dumps(cfg))
        return

    log_cfg = cfg["logging"]
    dirwatch_logger.setup_logger(
        "dirwatch",
        log_cfg.get("log_dir"),
        log_cfg.get("log_filename", "dirwatch.log"),
        level=log_cfg.get("level", "INFO"),
        console=log_cfg.get("console", True),
    )
    mon_cfg = cfg["monitor"]
    time_format = cfg["output"].get("time_format", "%H:%M:%S")

    try:
        m = monitor.Monitor.create(
            stream_buffer=int(mon_cfg.get("stream_buffer", 0)),
            poll_interval=float(mon_cfg.get("poll_interval", 0.1)),
        )
    except DirwatchError as e:
        click.echo(f"Failed to create monitor: {e}", err=True)
        ctx.exit(1)

    try:
        m.start(directory)
    except DirwatchError as e:
        m.notifier.release()
        click.echo(f"Failed to start monitoring: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Started monitoring directory: {m.watched_path}")
    manager = ThreadManager()
    manager.register_thread(spawn_consumer_worker(m.events, print_event, time_format=time_format))

    click.echo("Press Ctrl+C to stop monitoring")
    wait_for_interrupt(m)

    stop_timeout = float(mon_cfg.get("stop_timeout", 5.0))
    m.stop(timeout=stop_timeout)
    # The loop closes the stream on exit; consumers print what is still buffered.
    manager.shutdown(timeout=stop_timeout)
    logger.debug(f"Consumer threads: {manager.get_all_statuses()}")

    if cfg["output"].get("summary"):
        print_summary(m.log(), time_format)


if __name__ == "__main__":
    main()
