import signal
from pathlib import Path

import click

from turby.types import Gain, IntegrationTime
from turby.util import shutdown_log, start_log
from turby.util.defaults import DEFAULT_LOGLEVEL, DEFAULT_SYSTEM_NAME
from turby.util.logging import format_error_response


def print_tree(cmd, prefix="", parent_ctx=None):
    """Print command tree starting from given command."""
    ctx = click.Context(cmd, info_name=cmd.name, parent=parent_ctx)

    # Only print root name if no parent
    if not parent_ctx:
        click.echo(cmd.name)

    for sub in sorted(cmd.list_commands(ctx)):
        sub_cmd = cmd.get_command(ctx, sub)
        click.echo(f"{prefix}└── {sub}")
        if isinstance(sub_cmd, click.Group):
            print_tree(sub_cmd, prefix + "    ", ctx)


def tree_option(f):
    """Add --tree option to command."""

    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        print_tree(ctx.command)
        ctx.exit()

    return click.option(
        "--tree",
        is_flag=True,
        help="Show command tree from this point",
        expose_value=False,
        is_eager=True,
        callback=callback,
    )(f)


def config_option(f):
    return click.option(
        "--config",
        "-c",
        default=DEFAULT_SYSTEM_NAME,
        show_default=True,
        help="System name or path to an INI configuration file",
    )(f)


def log_options(f):
    """Add the logging options, passed on to `start_log`."""
    options = [
        click.option(
            "--log-to-file/--no-log-to-file",
            "-ltf/",
            default=True,
            help="Enable/disable logging to file (default: enabled)",
        ),
        click.option(
            "--log-to-stdout/--no-log-to-stdout",
            "-lts/",
            default=True,
            help="Enable/disable console logging (default: enabled)",
        ),
        click.option(
            "--log-path",
            "-lp",
            default="",
            help="Custom path for log file (default: ~/.turby/turby.log)",
        ),
        click.option(
            "--log-level",
            "-ll",
            default=DEFAULT_LOGLEVEL,
            help="Logging level (TRACE, DEBUG, INFO, WARNING, ERROR) (default: INFO)",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _start_log(log_kwargs: dict):
    start_log(
        log_to_file=log_kwargs["log_to_file"],
        log_to_stdout=log_kwargs["log_to_stdout"],
        log_path=log_kwargs["log_path"],
        clear_prev=False,
        log_level=log_kwargs["log_level"],
    )


def _fail():
    click.echo(f"Error: {format_error_response()}", err=True)
    raise SystemExit(1)


def _prompt(text: str) -> str:
    return click.prompt(text, default="", show_default=False)


def _cancel_on_interrupt(token):
    def handler(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        click.echo(
            "\nStopping before the next tumble (Ctrl-C again to abort now).",
            err=True,
        )
        token.cancel()

    return handler


@click.group()
@tree_option
def cli():
    """Turby - tumbling turbidity bioreactor control.

    Runs timed dissociation cycles (tumble, settle, measure) and the setup
    routines of the instrument:

    - Dissociation runs with per-sample CSV persistence

    - Manual labelled reads and single-shot measurements

    - Self test and chamber positioning
    """
    pass


@cli.command()
@config_option
@log_options
def dissociate(config: str, **log_kwargs):
    """Run the dissociation cycle until interrupted.

    The first Ctrl-C stops the run before its next tumble (the data file is
    complete at that point). A second Ctrl-C aborts immediately.
    """
    from turby.meas import CancellationToken
    from turby.scripting import run_dissociation_cycle

    _start_log(log_kwargs)
    token = CancellationToken()
    previous = signal.signal(signal.SIGINT, _cancel_on_interrupt(token))
    try:
        series = run_dissociation_cycle(config, cancel_token=token)
    except Exception:
        _fail()
    finally:
        signal.signal(signal.SIGINT, previous)
        shutdown_log()
    click.echo(f"Recorded {len(series)} samples")


@cli.command()
@config_option
@click.option(
    "--rotations",
    "-r",
    type=int,
    default=None,
    help="Number of flips (default: run until interrupted)",
)
@log_options
def selftest(config: str, rotations: int | None, **log_kwargs):
    """Flip back and forth, toggling the lamp and printing sensor readings."""
    from turby.scripting import run_self_test

    _start_log(log_kwargs)
    try:
        readings = run_self_test(rotations, config)
    except KeyboardInterrupt:
        click.echo("Self test stopped.")
        return
    except Exception:
        _fail()
    finally:
        shutdown_log()
    for i, reading in enumerate(readings, start=1):
        click.echo(f"{i}: {reading}")


@cli.command()
@config_option
@log_options
def load(config: str, **log_kwargs):
    """Move the chamber to the load position."""
    from turby.scripting import move_to_load_position

    _start_log(log_kwargs)
    try:
        move_to_load_position(config)
    except Exception:
        _fail()
    finally:
        shutdown_log()
    click.echo("Chamber in load position")


@cli.command()
@config_option
@log_options
def eject(config: str, **log_kwargs):
    """Move the chamber to the eject (measurement) position."""
    from turby.scripting import move_to_eject_position

    _start_log(log_kwargs)
    try:
        move_to_eject_position(config)
    except Exception:
        _fail()
    finally:
        shutdown_log()
    click.echo("Chamber in eject position")


@cli.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@config_option
@log_options
def manual(output: Path, config: str, **log_kwargs):
    """Read hand loaded samples, one label per sample.

    OUTPUT: CSV file the labelled readings are written to
    """
    from turby.scripting import run_manual_session

    _start_log(log_kwargs)
    try:
        series = run_manual_session(output, config, prompt=_prompt)
    except Exception:
        _fail()
    finally:
        shutdown_log()
    click.echo(f"Saved {len(series)} readings to {output}")


@cli.command()
@click.argument("filename", type=click.Path(dir_okay=False, path_type=Path))
@config_option
@click.option(
    "--gain",
    "-g",
    type=click.Choice([g.value for g in Gain]),
    default=None,
    help="Sensor gain (default: configured value)",
)
@click.option(
    "--integration-time",
    "-it",
    type=click.Choice([str(int(it)) for it in IntegrationTime]),
    default=None,
    help="Sensor integration time in ms (default: configured value)",
)
@click.option(
    "--nmeasurements", "-n", type=int, default=5, help="Number of readings"
)
@log_options
def measure(
    filename: Path,
    config: str,
    gain: str | None,
    integration_time: str | None,
    nmeasurements: int,
    **log_kwargs,
):
    """Take readings one second apart and save them, one per line.

    FILENAME: Output file, must not exist
    """
    from turby.scripting import measure_to_file

    _start_log(log_kwargs)
    try:
        values = measure_to_file(
            filename,
            config,
            gain=Gain(gain) if gain is not None else None,
            integration_time=(
                IntegrationTime(int(integration_time))
                if integration_time is not None
                else None
            ),
            nmeasurements=nmeasurements,
        )
    except Exception:
        _fail()
    finally:
        shutdown_log()
    click.echo(f"Saved {len(values)} readings to {filename}")


# =============================================================================
# Configuration management
# =============================================================================


@cli.group(name="config")
@tree_option
def config_group():
    """Manage system configurations."""
    pass


@config_group.command(name="create")
@click.argument(
    "path", type=click.Path(dir_okay=False, path_type=Path), required=False
)
def create_config(path: Path | None):
    """Create a systems file with an example mock system.

    PATH: File to create (default: ~/.turby/systems.ini). Existing systems in
    the file are kept.
    """
    from turby.system.sysconfig import create_default_config, user_systems_file

    try:
        path = create_default_config(path if path is not None else user_systems_file())
    except Exception:
        _fail()
    click.echo(f"Wrote default configuration to {path}")


@config_group.command(name="list")
def list_systems():
    """List available system configurations."""
    from rich.console import Console
    from rich.table import Table

    from turby.system.sysconfig import list_available_systems

    systems = list_available_systems()
    if not systems:
        click.echo("No system configurations found")
        return

    table = Table(title="Available system configurations")
    table.add_column("System", style="cyan")
    table.add_column("Source")
    for name, source in sorted(systems.items()):
        table.add_row(name, source)
    Console().print(table)


@config_group.command(name="show")
@click.argument("source", default=DEFAULT_SYSTEM_NAME)
def show_config(source: str):
    """Show a validated configuration.

    SOURCE: System name or path to an INI file
    """
    from rich.console import Console
    from rich.table import Table

    from turby.system.sysconfig import config_to_section, load_config

    try:
        config = load_config(source)
    except Exception:
        _fail()

    table = Table(title=f"System '{config.system_name}'")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in config_to_section(config).items():
        table.add_row(key, value)
    Console().print(table)


@config_group.command(name="install")
@click.argument("name")
def install(name: str):
    """Install a package system config to the user directory.

    NAME: Name of system configuration to install
    """
    from turby.system.sysconfig import install_system_config

    try:
        path = install_system_config(name)
    except (FileNotFoundError, ValueError):
        _fail()
    click.echo(f"Installed system configuration '{name}' to {path}")
