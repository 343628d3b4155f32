"""hookfire CLI for inspecting hooks and dry-running requests - Tyro implementation."""

import logging
import sys
from pathlib import Path
from typing import Annotated

import attrs
import tyro
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hookfire.config import get_config
from hookfire.errors import HookError
from hookfire.hook import Hooks, ResponseHeaders
from hookfire.request import Request
from hookfire.signature import SIGNATURE_PREFIX, compute_payload_signature


# Subcommand definitions using attrs
@attrs.define
class ListHooks:
    """List the hooks defined in the hooks file."""


@attrs.define
class Check:
    """Validate a hooks file."""

    file: Annotated[Path, tyro.conf.Positional]
    """Hooks file (JSON or YAML) to validate."""


@attrs.define
class Evaluate:
    """Evaluate a request against every hook with the given ID without running anything."""

    hook_id: Annotated[str, tyro.conf.Positional]
    """ID of the hook(s) to evaluate."""

    payload: Annotated[Path | None, tyro.conf.arg(aliases=["-p"])] = None
    """File holding the raw request body."""

    header: Annotated[tuple[str, ...], tyro.conf.arg(aliases=["-H"])] = ()
    """Request header in name=value format (repeatable)."""

    query: Annotated[str, tyro.conf.arg(aliases=["-q"])] = ""
    """Raw query string, e.g. 'ref=main&force=1'."""

    content_type: str = "application/json"
    """Content type of the payload."""


@attrs.define
class Sign:
    """Print the sha1 payload signature of a file."""

    file: Annotated[Path, tyro.conf.Positional]
    """File holding the raw request body."""

    secret: str
    """Shared secret."""


Command = (
    Annotated[ListHooks, tyro.conf.subcommand(name="list")]
    | Annotated[Check, tyro.conf.subcommand(name="check")]
    | Annotated[Evaluate, tyro.conf.subcommand(name="evaluate")]
    | Annotated[Sign, tyro.conf.subcommand(name="sign")]
)


def setup_logging() -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_hooks(hooks_file: Path | None) -> Hooks:
    """Load hooks from an explicit file or from the configured hooks_file."""
    if hooks_file is not None:
        return Hooks.from_file(hooks_file)
    return get_config().load_hooks()


def list_hooks(hooks: Hooks) -> None:
    """Print a table of hooks."""
    console = Console()

    if not len(hooks):
        console.print("[yellow]No hooks defined[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Command", style="green")
    table.add_column("Trigger", style="magenta")
    table.add_column("Args", justify="right")
    table.add_column("Env", justify="right")

    for hook in hooks:
        trigger = hook.trigger_rule.kind if hook.trigger_rule is not None else None
        table.add_row(
            hook.id,
            hook.execute_command or "-",
            trigger or "always",
            str(len(hook.pass_arguments_to_command)),
            str(len(hook.pass_environment_to_command)),
        )

    console.print(table)


def check_hooks_file(path: Path) -> bool:
    """Validate a hooks file and report the result.

    Returns:
        True if the file loaded cleanly
    """
    console = Console(soft_wrap=True)
    try:
        hooks = Hooks.from_file(path)
    except HookError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return False

    console.print(f"[green]✓[/green] {escape(str(path))}: {len(hooks)} hook(s) OK")
    return True


def evaluate_request(
    hooks: Hooks,
    cmd: Evaluate,
    namespace: str,
    response_headers: ResponseHeaders | None = None,
) -> bool:
    """Dry-run a request against every hook matching ``cmd.hook_id``.

    ``response_headers`` are the globally configured headers; each firing
    hook reports them followed by its own ``response-headers``.

    Returns:
        True if every matching hook was evaluated without error
    """
    console = Console(soft_wrap=True)

    matched = hooks.match_all(cmd.hook_id)
    if not matched:
        console.print(f"[red]Hook not found:[/red] {escape(cmd.hook_id)}")
        return False

    headers = ResponseHeaders()
    try:
        for flag in cmd.header:
            headers = headers.set(flag)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return False

    body = cmd.payload.read_bytes() if cmd.payload is not None else b""
    success = True

    for hook in matched:
        try:
            # A fresh request per hook; JSON parameter parsing rewrites it
            request = Request.from_raw(
                headers=[(header.name, header.value) for header in headers],
                query_string=cmd.query,
                body=body,
                content_type=cmd.content_type,
            )
            invocation = hook.prepare(request, namespace=namespace)
        except HookError as e:
            console.print(f"[red]✗ {escape(hook.id)}:[/red] {escape(str(e))}")
            success = False
            continue

        if invocation is None:
            console.print(f"[yellow]○ {escape(hook.id)}: does not fire[/yellow]")
            continue

        console.print(f"[green]● {escape(hook.id)}: fires[/green]")
        console.print(f"  argv: {escape(str(invocation.argv))}")
        if invocation.env:
            console.print(f"  env:  {escape(str(invocation.env))}")
        if invocation.working_directory:
            console.print(f"  cwd:  {escape(invocation.working_directory)}")
        hook_headers = (response_headers or ResponseHeaders()) + hook.response_headers
        if len(hook_headers):
            console.print(f"  headers: {escape(str(hook_headers))}")

    return success


def sign_payload(path: Path, secret: str) -> None:
    """Print the ``sha1=`` signature for a payload file."""
    print(SIGNATURE_PREFIX + compute_payload_signature(path.read_bytes(), secret))


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    hooks: Annotated[Path | None, tyro.conf.arg(help="Hooks file (defaults to hooks_file from hookfire.yaml)")] = None,
) -> None:
    """hookfire - Webhook trigger rule evaluation.

    Inspect hook definitions and check which hooks a request would fire,
    along with the command line and environment they would run with.
    """
    setup_logging()

    config = get_config()
    config.apply_logging()

    if isinstance(cmd, Check):
        sys.exit(0 if check_hooks_file(cmd.file) else 1)

    if isinstance(cmd, Sign):
        sign_payload(cmd.file, cmd.secret)
        return

    try:
        loaded = load_hooks(hooks)
    except HookError as e:
        Console(soft_wrap=True).print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if isinstance(cmd, ListHooks):
        list_hooks(loaded)

    elif isinstance(cmd, Evaluate):
        success = evaluate_request(loaded, cmd, config.env_namespace, config.response_headers)
        sys.exit(0 if success else 1)


def entry_point() -> None:
    """Entry point for the hookfire command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()
