"""projnav - project registry and tags-table file lookup."""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

load_dotenv()

_HELP = """\
Usage: projnav list
       projnav add <name> <root> [--cursor <subpath>] [--tags <path>] [--file] [--replace]
       projnav remove <name>
       projnav which [<dir>]
       projnav classify [--project <name>] [--dir <path>]
       projnav find <pattern> [--project <name>] [--dir <path>]
       projnav tags [--project <name>] [--dir <path>]

Commands:
  list       Show registered projects, sorted by name
  add        Register a project (--replace overwrites an existing one)
  remove     Unregister a project
  which      Show the project containing a directory (default: cwd)
  classify   Show which index format a project uses
  find       List project files whose name matches a regular expression
  tags       Regenerate a project's tags file
"""

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def main() -> None:
    """Entry point for the projnav CLI."""
    args = sys.argv[1:]

    if not args or args[0] in ("--help", "-h"):
        print(_HELP)
        sys.exit(0)

    command, rest = args[0], args[1:]
    handler = _COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command: {command}")
        print("Run 'projnav --help' for usage.")
        sys.exit(1)

    _setup_logging()

    from projnav.core.errors import ProjnavError

    try:
        handler(rest)
    except ProjnavError as e:
        err_console.print(f"[red]error:[/red] {escape(str(e))}")
        sys.exit(1)


def _setup_logging() -> None:
    from pydantic import ValidationError

    from projnav.core.config import EnvSettings

    try:
        env = EnvSettings()
    except ValidationError as e:
        for err in e.errors():
            name = "PROJNAV_" + "_".join(str(part) for part in err["loc"]).upper()
            err_console.print(f"[red]error:[/red] {name}: {escape(err['msg'])}")
        sys.exit(1)
    logging.basicConfig(
        level=env.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _workspace():
    from projnav.core.workspace import Workspace

    return Workspace()


def _usage_error(message: str) -> None:
    print(message)
    print("Run 'projnav --help' for usage.")
    sys.exit(1)


def _parse_selector(args: list[str], command: str) -> tuple[list[str], str | None, Path | None]:
    """Split ``--project``/``--dir`` flags from positional arguments."""
    positional: list[str] = []
    name: str | None = None
    directory: Path | None = None
    i = 0
    while i < len(args):
        if args[i] == "--project" and i + 1 < len(args):
            name = args[i + 1]
            i += 2
        elif args[i] == "--dir" and i + 1 < len(args):
            directory = Path(args[i + 1])
            i += 2
        elif args[i].startswith("--"):
            _usage_error(f"Unknown argument for {command}: {args[i]}")
        else:
            positional.append(args[i])
            i += 1
    return positional, name, directory


def _select_project(workspace, name: str | None, directory: Path | None):
    from projnav.core.errors import ProjectNotFoundError

    project = workspace.project_for(name=name, directory=directory)
    if project is None:
        if name is not None:
            raise ProjectNotFoundError(name)
        err_console.print(f"No project contains {directory or Path.cwd()}")
        sys.exit(1)
    return project


# ── Commands ──────────────────────────────────────────────────────────────────


def _run_list(args: list[str]) -> None:
    if args:
        _usage_error(f"Unknown argument for list: {args[0]}")
    workspace = _workspace()
    projects = workspace.registry.sorted_for_display()
    if not projects:
        console.print("No projects registered.")
        return

    table = Table(title="Projects")
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Root")
    table.add_column("Cursor")
    table.add_column("Tags")
    table.add_column("Index")
    for project in projects:
        table.add_row(
            project.name,
            project.root_dir,
            project.cursor_subpath + (" (file)" if project.load_as_file else ""),
            project.tags_path or "",
            workspace.classify(project).value,
        )
    console.print(table)


def _run_add(args: list[str]) -> None:
    from projnav.core import paths
    from projnav.core.errors import DuplicateProjectError
    from projnav.core.project import ProjectRecord

    positional: list[str] = []
    cursor = ""
    tags: str | None = None
    load_as_file: bool | None = None
    replace = False
    i = 0
    while i < len(args):
        if args[i] == "--cursor" and i + 1 < len(args):
            cursor = args[i + 1]
            i += 2
        elif args[i] == "--tags" and i + 1 < len(args):
            tags = paths.normalize(args[i + 1])
            i += 2
        elif args[i] == "--file":
            load_as_file = True
            i += 1
        elif args[i] == "--replace":
            replace = True
            i += 1
        elif args[i].startswith("--"):
            _usage_error(f"Unknown argument for add: {args[i]}")
        else:
            positional.append(args[i])
            i += 1

    if len(positional) != 2:
        _usage_error("Usage: projnav add <name> <root> [options]")

    name, root = positional
    record = ProjectRecord(
        name=name,
        root_dir=paths.normalize(root),
        cursor_subpath=cursor,
        tags_path=tags,
        load_as_file=load_as_file,
    )
    workspace = _workspace()
    if not workspace.registry.insert(record, replace=replace):
        raise DuplicateProjectError(name)
    console.print(f"Registered [bold]{record.name}[/bold] at {record.root_dir}")


def _run_remove(args: list[str]) -> None:
    from projnav.core.errors import ProjectNotFoundError

    if len(args) != 1:
        _usage_error("Usage: projnav remove <name>")
    workspace = _workspace()
    if not workspace.registry.delete(args[0]):
        raise ProjectNotFoundError(args[0])
    console.print(f"Removed [bold]{args[0]}[/bold]")


def _run_which(args: list[str]) -> None:
    if len(args) > 1:
        _usage_error("Usage: projnav which [<dir>]")
    directory = Path(args[0]) if args else Path.cwd()
    workspace = _workspace()
    project = workspace.resolver.find_by_directory(directory)
    if project is None:
        err_console.print(f"No project contains {directory}")
        sys.exit(1)
    console.print(f"{project.name}  {project.root_dir}", highlight=False)


def _run_classify(args: list[str]) -> None:
    positional, name, directory = _parse_selector(args, "classify")
    if positional:
        _usage_error(f"Unknown argument for classify: {positional[0]}")
    workspace = _workspace()
    project = _select_project(workspace, name, directory)
    console.print(f"{project.name}: {workspace.classify(project).value}")


def _run_find(args: list[str]) -> None:
    positional, name, directory = _parse_selector(args, "find")
    if len(positional) != 1:
        _usage_error("Usage: projnav find <pattern> [--project <name>] [--dir <path>]")
    workspace = _workspace()
    project = _select_project(workspace, name, directory)
    for match in workspace.find_files(project, positional[0]):
        console.print(match.rstrip("\n"), highlight=False, markup=False)


def _run_tags(args: list[str]) -> None:
    positional, name, directory = _parse_selector(args, "tags")
    if positional:
        _usage_error(f"Unknown argument for tags: {positional[0]}")
    workspace = _workspace()
    project = _select_project(workspace, name, directory)

    with console.status(f"Rebuilding tags for {project.name}..."):
        result = workspace.rebuild_sync(project)

    if result.synthesized:
        console.print(
            f"Indexer produced no output; wrote {result.entries} entries to {result.tags_path}"
        )
    else:
        console.print(f"Tags written to {result.tags_path}")
    if result.exit_code:
        console.print(f"[yellow]Indexer exited with status {result.exit_code}; log: {result.log_path}[/yellow]")


_COMMANDS = {
    "list": _run_list,
    "add": _run_add,
    "remove": _run_remove,
    "which": _run_which,
    "classify": _run_classify,
    "find": _run_find,
    "tags": _run_tags,
}


if __name__ == "__main__":
    main()
