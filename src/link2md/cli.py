"""Command-line interface for link2md."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .core.converter import ArticleConverter
from .exceptions import Link2mdError
from .logging_config import setup_logging
from .models.config import Link2mdConfig
from .models.events import EventType, StageEvent
from .models.results import ConversionResult


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="link2md",
        description="Convert an article URL into clean Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print an article as Markdown
  link2md https://mp.weixin.qq.com/s/abc123

  # Save to a file
  link2md https://blog.csdn.net/user/article/details/1 -o article.md

  # Convert a saved page, matching profiles against its original URL
  link2md https://juejin.cn/post/42 --html-file page.html

  # Run the HTTP service
  link2md --serve --port 8080
        """,
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="Article URL to convert",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file",
    )

    # Input/output
    io_group = parser.add_argument_group("input/output")
    io_group.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the Markdown to this file instead of stdout",
    )
    io_group.add_argument(
        "--html-file",
        type=Path,
        default=None,
        help="Convert a saved page instead of fetching the URL",
    )
    io_group.add_argument(
        "--json",
        action="store_true",
        help='Print {"title": ..., "content": ...} instead of Markdown',
    )

    # Network settings
    network_group = parser.add_argument_group("network")
    network_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Fetch timeout in seconds (default: 15)",
    )
    network_group.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="Custom User-Agent string",
    )

    # Rendering
    render_group = parser.add_argument_group("rendering")
    render_group.add_argument(
        "--no-gfm",
        action="store_true",
        help="Render tables as plain text and drop task-list checkboxes",
    )

    # Server
    server_group = parser.add_argument_group("server")
    server_group.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP service instead of converting a URL",
    )
    server_group.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind (default: 127.0.0.1)",
    )
    server_group.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)",
    )

    # Logging
    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    log_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress progress and log output",
    )

    return parser


def build_config(args: argparse.Namespace) -> Link2mdConfig:
    """
    Merge the config file and command-line overrides.

    Raises:
        ValidationError: If the merged settings are invalid
        OSError: If the config file cannot be read
    """
    base = Link2mdConfig.from_yaml_file(args.config) if args.config else Link2mdConfig()
    data: dict[str, Any] = base.model_dump()

    if args.timeout is not None:
        data["network"]["timeout"] = args.timeout
    if args.user_agent:
        data["network"]["user_agent"] = args.user_agent
    if args.no_gfm:
        data["render"]["gfm"] = False
    if args.host:
        data["server"]["host"] = args.host
    if args.port is not None:
        data["server"]["port"] = args.port

    if args.verbose:
        data["log_level"] = "DEBUG"
    elif args.quiet:
        data["log_level"] = "ERROR"
    elif not args.config:
        # Progress goes through the spinner; keep INFO chatter out of the way
        data["log_level"] = "WARNING"

    return Link2mdConfig.model_validate(data)


def _describe(event: StageEvent) -> str:
    stage = event.stage.value.replace("_", " ") if event.stage else ""
    return f"[cyan]{stage.capitalize()}[/cyan] {event.url}"


def write_result(result: ConversionResult, args: argparse.Namespace, console: Console) -> None:
    """Emit a finished conversion to the requested destination."""
    if args.json:
        text = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    else:
        text = result.markdown

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        if not args.quiet:
            console.print(f"[green]Saved[/green] {result.title or result.url} -> {args.output}")
    else:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()


def run_converter(args: argparse.Namespace, config: Link2mdConfig) -> int:
    """Convert one URL (or saved page) with given arguments."""
    console = Console(stderr=True)

    if not args.url:
        console.print("[red]Error:[/red] Please provide a URL to convert")
        return 1

    html: Optional[bytes] = None
    if args.html_file:
        try:
            html = args.html_file.read_bytes()
        except OSError as e:
            console.print(f"[red]Error:[/red] Cannot read {args.html_file}: {e}")
            return 1

    async def run() -> int:
        try:
            async with ArticleConverter(config) as converter:
                if args.quiet:
                    result = await _convert(converter, args.url, html, None)
                else:
                    with Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        console=console,
                        transient=True,
                    ) as progress:
                        task = progress.add_task("Starting...", total=None)

                        def on_event(event: StageEvent) -> None:
                            if event.type == EventType.STAGE_STARTED:
                                progress.update(task, description=_describe(event))
                            elif event.type == EventType.FALLBACK_USED:
                                console.print(f"[yellow]Fallback:[/yellow] {event.message}")

                        result = await _convert(converter, args.url, html, on_event)

        except Link2mdError as e:
            console.print(f"[red]Error ({e.status_code}):[/red] {e.message}")
            return 1

        write_result(result, args, console)
        return 0

    return asyncio.run(run())


async def _convert(
    converter: ArticleConverter,
    url: str,
    html: Optional[bytes],
    on_event: Any,
) -> ConversionResult:
    if html is not None:
        return await converter.convert_html(html, url, emit=on_event)
    return await converter.convert(url, emit=on_event)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    try:
        config = build_config(args)
    except (ValidationError, yaml.YAMLError, OSError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(config.log_level, config.log_file, force=True, access_log=args.serve)

    if args.serve:
        from .server import run_server

        run_server(config)
        return 0

    return run_converter(args, config)


if __name__ == "__main__":
    sys.exit(main())
