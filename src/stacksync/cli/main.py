import typer
from pathlib import Path
from typing import Callable, Dict, Optional

from stacksync import __version__
from stacksync.cli.formatter import OutputFormatter
from stacksync.core.actions import ACTION_CHOICES, SyncAction, parse_action
from stacksync.core.session import SyncSession
from stacksync.runtime.coordinator import LifecycleCoordinator
from stacksync.utils.diagnostics import ConfigError, StackStartError

app = typer.Typer(
    name="stacksync",
    add_completion=False,
    rich_markup_mode=None,
    context_settings={"help_option_names": ["-h", "--help"]},
)

SHORT_USAGE = (
    f"Usage: stacksync [OPTIONS] {{{ACTION_CHOICES}}}\n"
    "Try 'stacksync -h' for help."
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"stacksync {__version__}")
        raise typer.Exit(code=0)


def _prompt_for_confirmation(question: str) -> Optional[str]:
    try:
        return typer.prompt(question, default="", show_default=False)
    except typer.Abort:
        return None


def _stream_logs(coordinator: LifecycleCoordinator, quiet: bool) -> bool:
    try:
        for line in coordinator.logs(follow=True):
            OutputFormatter.print_data(line)
    except KeyboardInterrupt:
        pass
    return True


def _print_status(coordinator: LifecycleCoordinator, quiet: bool) -> bool:
    status = coordinator.status()
    port = str(status.port) if status.port is not None else "unreachable"
    OutputFormatter.print_data(f"root:        {status.root}")
    OutputFormatter.print_data(f"initialized: {'yes' if status.initialized else 'no'}")
    OutputFormatter.print_data(f"watcher:     {status.watcher.state.value} ({status.watcher.reason})")
    OutputFormatter.print_data(f"sync port:   {port}")
    return True


ACTION_HANDLERS: Dict[SyncAction, Callable[[LifecycleCoordinator, bool], bool]] = {
    SyncAction.START: lambda coordinator, quiet: coordinator.start(),
    SyncAction.RESTART: lambda coordinator, quiet: coordinator.restart(),
    SyncAction.STOP: lambda coordinator, quiet: coordinator.stop(),
    SyncAction.RESET: lambda coordinator, quiet: coordinator.reset(quiet=quiet),
    SyncAction.DESTROY: lambda coordinator, quiet: coordinator.destroy(quiet=quiet),
    SyncAction.LOGS: _stream_logs,
    SyncAction.STATUS: _print_status,
}


@app.command()
def main(
    action: Optional[str] = typer.Argument(
        None,
        metavar="ACTION",
        help=f"One of: {ACTION_CHOICES}.",
        show_default=False,
    ),
    no_interaction: bool = typer.Option(
        False, "--no-interaction", "-q", help="Do not ask for confirmation (reset, destroy)."
    ),
    root: Path = typer.Option(Path("."), "--root", "-r", help="Sync root directory."),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Keep a local directory in sync with a Docker Compose stack through Unison.

    \b
    Actions:
      start     Initial sync on first run, then (re)create the stack and start the watcher.
      restart   Restart the stack and the watcher.
      stop      Stop the watcher and the stack.
      reset     Redo the initial sync from scratch, then start.
      destroy   Remove the stack with its volumes and forget the initial sync.
      logs      Follow the sync log (Ctrl-C to quit).
      status    Show initial-sync, watcher and port state.

    Only one stacksync command may act on a sync root at a time.
    """
    if action is None:
        typer.echo(SHORT_USAGE, err=True)
        raise typer.Exit(code=1)

    parsed = parse_action(action)
    if parsed is None:
        typer.echo(f"Invalid action: {action}", err=True)
        typer.echo(SHORT_USAGE, err=True)
        raise typer.Exit(code=1)

    try:
        session = SyncSession.from_root(root)
    except ConfigError as exc:
        OutputFormatter.log(str(exc), severity="error")
        raise typer.Exit(code=1)

    OutputFormatter.configure(session.settings.log_level)
    coordinator = LifecycleCoordinator.for_session(session, prompt=_prompt_for_confirmation)

    try:
        ACTION_HANDLERS[parsed](coordinator, no_interaction)
    except StackStartError:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
