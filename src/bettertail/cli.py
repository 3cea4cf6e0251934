from __future__ import annotations
from typing import Any, Dict, List, Optional
import typer
from rich.console import Console
from .config import read_config
from .errors import AccessError, TailError
from .tail import Tail

app = typer.Typer(help="better-tail - output the last part of a file, optionally following it")
console = Console(stderr=True, soft_wrap=True)


def _collect_options(
    config: Optional[str],
    lines: Optional[str],
    bytes_: Optional[str],
    follow: bool,
    retry: bool,
    retry_interval: Optional[float],
    retry_timeout: Optional[float],
    retry_max: Optional[int],
    sleep_interval: Optional[float],
    encoding: Optional[str],
    debug: bool,
) -> Dict[str, Any]:
    """Merge the optional YAML config with flags given on the command line."""
    options: Dict[str, Any] = dict(read_config(config)) if config else {}

    if lines is not None:
        options["lines"] = lines
    if bytes_ is not None:
        options["bytes"] = bytes_
    if follow:
        options["follow"] = True
    if sleep_interval is not None:
        options.pop("sleepInterval", None)
        options.pop("sleepIntervalMs", None)
        options["sleep_interval"] = sleep_interval
    if encoding is not None:
        options["encoding"] = encoding
    if debug:
        options["debug"] = True

    # the flags take seconds like --sleep-interval, the retry mapping takes milliseconds
    budget: Dict[str, Any] = {}
    if retry_interval is not None:
        budget["interval"] = retry_interval * 1000
    if retry_timeout is not None:
        budget["timeout"] = retry_timeout * 1000
    if retry_max is not None:
        budget["max"] = retry_max
    if budget:
        options["retry"] = budget
    elif retry:
        options["retry"] = True
    return options


@app.command()
def main(
    file: Optional[str] = typer.Argument(None, help="File to tail (standard input when omitted)"),
    lines: Optional[str] = typer.Option(None, "--lines", "-n", help="Output the last N lines, or +N to start at line N"),
    bytes_: Optional[str] = typer.Option(None, "--bytes", "-c", help="Output the last N bytes, or +N to start at byte N"),
    follow: bool = typer.Option(False, "--follow", "-f", help="Output appended data as the file grows"),
    retry: bool = typer.Option(False, "--retry", help="Keep trying to open the file if it is inaccessible"),
    retry_interval: Optional[float] = typer.Option(None, "--retry-interval", help="Seconds between retries"),
    retry_timeout: Optional[float] = typer.Option(None, "--retry-timeout", help="Give up retrying after N seconds"),
    retry_max: Optional[int] = typer.Option(None, "--retry-max", help="Give up after N retries"),
    sleep_interval: Optional[float] = typer.Option(None, "--sleep-interval", "-s", help="Seconds between polls when following"),
    encoding: Optional[str] = typer.Option(None, "--encoding", "-e", help="File encoding (utf8, latin1, hex ...)"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to a YAML file with tail options"),
    debug: bool = typer.Option(False, "--debug", help="Log debugging information to stderr"),
):
    try:
        options = _collect_options(
            config, lines, bytes_, follow, retry, retry_interval,
            retry_timeout, retry_max, sleep_interval, encoding, debug,
        )
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)

    errors: List[TailError] = []
    tail = Tail(file, options)
    tail.on("line", lambda line: print(line, flush=tail.follow))
    tail.on("error", errors.append)

    try:
        tail.run()
    except KeyboardInterrupt:
        tail.close()
        console.print("[yellow]Stopped.[/yellow]")
        return

    for err in errors:
        if isinstance(err, AccessError) and err.code:
            console.print(f"[bold red]Error:[/bold red] {err} ({err.code})", style="red")
        else:
            console.print(f"[bold red]Error:[/bold red] {err}", style="red")
    if errors:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
