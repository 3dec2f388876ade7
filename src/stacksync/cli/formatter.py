import typer
from rich.console import Console
from rich.markup import escape

# Create a stderr console for logging
error_console = Console(stderr=True)

SUCCESS_MARKER = "✔"
FAILURE_MARKER = "✘"


def format_elapsed(seconds: float) -> str:
    """Render a duration as '42s' or '3m 07s'."""
    total = max(0, int(round(seconds)))
    minutes, secs = divmod(total, 60)
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


class OutputFormatter:
    """
    Handles terminal output for the CLI.
    Status lines go to stderr; data (log lines, status, version) goes to stdout.
    """

    level = "INFO"

    @classmethod
    def configure(cls, level: str) -> None:
        cls.level = level.strip().upper() or "INFO"

    @classmethod
    def debug_enabled(cls) -> bool:
        return cls.level == "DEBUG"

    @staticmethod
    def log(message: str, severity: str = "info") -> None:
        """
        Print a status line to stderr with color coding.
        'success' and 'failure' lines carry a check/cross marker.
        """
        style = "white"
        prefix = "[STACKSYNC]"

        if severity == "debug":
            if not OutputFormatter.debug_enabled():
                return
            style = "dim"
        elif severity == "warning":
            style = "yellow"
        elif severity == "error":
            style = "red"
        elif severity == "success":
            style = "green"
            prefix = SUCCESS_MARKER
        elif severity == "failure":
            style = "bold red"
            prefix = FAILURE_MARKER

        error_console.print(f"[{style}]{prefix} {escape(message)}[/{style}]", soft_wrap=True)

    @staticmethod
    def print_data(text: str) -> None:
        """Print plain data to stdout, untouched by markup."""
        typer.echo(text)
