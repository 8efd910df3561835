"""Levelforge CLI entry point.

Provides subcommands for running the Socket.IO server and for generating a
single level in the terminal. Accepts configuration via flags and environment
variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()

# Disable colors if output is not a real terminal (e.g., during pytest capture)
try:
    _COLOR_ENABLED = sys.stdout.isatty()
except (AttributeError, ValueError):  # pragma: no cover - environment dependent
    _COLOR_ENABLED = False


def _load_version() -> str:
    try:
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Levelforge Server

    Run the real-time Flask-SocketIO level server, or generate a single level
    and print it as an ASCII map. Configuration can be provided via CLI flags
    or environment variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                          Bind address for the web server (default: 0.0.0.0)
          PORT                          Port for the web server (default: 5000)
          LEVELFORGE_GRID_WIDTH         Level width in cells (default: 40)
          LEVELFORGE_GRID_HEIGHT        Level height in cells (default: 40)
          LEVELFORGE_CACHE_SIZE         Levels kept in memory (default: 5)
          LEVELFORGE_PROVIDER_API_KEY   Enables the external candidate provider

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Run the server on a custom port
          python run.py server --port 8080

          # Load variables from .env then run the server
          python run.py --env-file .env server

          # Print a Catacombs level at depth 3 for a fixed seed
          python run.py generate catacombs 3 --seed 42
        """
    )

    parser = argparse.ArgumentParser(
        prog="Levelforge",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Levelforge Server {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the Socket.IO web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the real-time Flask/Socket.IO server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one level and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description=dedent(
            """
            Generate a level for <type> <depth> and print the ASCII map followed
            by its statistics.

            Legend:  . floor  # wall  + door  < entrance  > exit  * special
            """
        ),
    )
    gen_parser.add_argument("level_type", help="Cathedral, Catacombs, Caves, Hell (or 1-4)")
    gen_parser.add_argument("depth", type=int, help="Dungeon depth (>= 0)")
    gen_parser.add_argument("--seed", default=None, help="Integer or string seed")
    gen_parser.add_argument("--json", action="store_true", help="Print the full level as JSON instead")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def _color(text, color) -> str:
    return f"{color}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else str(text)


def run_generate(args) -> int:
    from levelforge import get_synthesizer
    from levelforge.level import InvalidGenerationKey, level_stats

    try:
        result = get_synthesizer().generate(args.level_type, args.depth, args.seed)
    except InvalidGenerationKey as e:
        print(f"{_color('[ERROR]', Fore.RED)} {e}")
        return 2
    if args.json:
        print(json.dumps(result.to_dict()))
        return 0
    print(result.grid.render())
    stats = level_stats(result.grid)
    print()
    print(f"  {_color('Key:', Fore.YELLOW):12} {_color(result.key, Fore.GREEN)}")
    print(f"  {_color('Source:', Fore.YELLOW):12} {_color(result.source, Fore.GREEN)}")
    print(f"  {_color('Rooms:', Fore.YELLOW):12} {_color(len(result.rooms), Fore.GREEN)}")
    print(f"  {_color('Walkable:', Fore.YELLOW):12} {_color(stats['walkable'], Fore.GREEN)}")
    print(f"  {_color('Reachable:', Fore.YELLOW):12} {_color(stats['reachable'], Fore.GREEN)}")
    print(f"  {_color('Carved:', Fore.YELLOW):12} {_color(result.heal.get('carved', 0), Fore.GREEN)}")
    if not result.complete:
        print(f"{_color('[WARN]', Fore.YELLOW)} healing incomplete: {result.heal.get('reason')}")
        return 1
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return run_generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoints only after environment is ready
    from levelforge import app
    from levelforge.logging_utils import log
    from levelforge.server import start_server

    gen_cfg = app.config["LEVELFORGE_GENERATION"]
    provider = app.config["LEVELFORGE_PROVIDER"]

    title = _color("Levelforge Server Bootup", Fore.CYAN + Style.BRIGHT)
    divider = _color("=" * 40, Fore.MAGENTA)
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {_color('Mode:', Fore.YELLOW):12} {_color(mode.upper(), Fore.GREEN)}",
        f"  {_color('Host:', Fore.YELLOW):12} {_color(host, Fore.GREEN)}",
        f"  {_color('Port:', Fore.YELLOW):12} {_color(port, Fore.GREEN)}",
        f"  {_color('Grid:', Fore.YELLOW):12} {_color(f'{gen_cfg.width}x{gen_cfg.height}', Fore.GREEN)}",
        f"  {_color('Cache:', Fore.YELLOW):12} {_color(gen_cfg.cache_size, Fore.GREEN)}",
        f"  {_color('Provider:', Fore.YELLOW):12} {_color(provider.model if provider.configured else 'procedural only', Fore.GREEN)}",
        f"  {_color('WebSockets:', Fore.YELLOW):12} {_color('enabled', Fore.GREEN)}",
        divider,
        "",
    ]
    print("\n".join(lines))
    log.info(event="startup", mode=mode, host=host, port=port, provider=provider.configured)

    print(f"{_color('[INFO]', Fore.CYAN)} Listening for connections... Press Ctrl+C to stop.")
    log.info(event="listen", host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
