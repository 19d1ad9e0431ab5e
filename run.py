"""Dungeon Quest CLI entry point.

Provides subcommands for running the JSON game server and for generating a
single dungeon level to the terminal (handy for eyeballing themes and seeds).
Accepts configuration via flags and environment variables, with optional
.env loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import random
import signal
import sys
from dataclasses import replace
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()


def _load_version() -> str:
    try:
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()

# Glyph colors for `generate` output
CELL_COLORS = {
    "#": Fore.WHITE + Style.DIM,
    ".": Fore.WHITE,
    "+": Fore.YELLOW,
    "<": Fore.GREEN + Style.BRIGHT,
    ">": Fore.RED + Style.BRIGHT,
    "~": Fore.BLUE,
    "=": Fore.RED,
    ":": Fore.MAGENTA,
    "O": Fore.CYAN,
    ",": Fore.YELLOW + Style.DIM,
    "_": Fore.MAGENTA + Style.BRIGHT,
}


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Dungeon Quest

    Run the JSON game API server or render a generated dungeon level in the
    terminal. Configuration can be provided via CLI flags or environment
    variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                 Bind address for the web server (default: 0.0.0.0)
          PORT                 Port for the web server (default: 5000)
          DQ_DUNGEON_WIDTH     Level width in cells (default: 50)
          DQ_DUNGEON_HEIGHT    Level height in cells (default: 50)
          DQ_VISIBILITY_RADIUS Sight radius in cells (default: 8)
          DQ_MAX_INVENTORY     Backpack slots (default: 10)
          DQ_SEED              Fixed rng seed for new games
          DQ_LOG_LEVEL         debug | info | warn | error (default: info)
          DQ_LOG_JSON          Emit JSON log lines when set to 1

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Run the server on a custom port
          python run.py server --port 8080

          # Load variables from .env then run the server
          python run.py --env-file .env server

          # Print a level-7 (sewer) map for seed 42
          python run.py generate --level 7 --seed 42
        """
    )

    parser = argparse.ArgumentParser(
        prog="DungeonQuest",
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
        version=f"Dungeon Quest {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the JSON game API server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask game API server",
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
        help="Generate one level and print it as ASCII",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a dungeon level and print the map plus generation metrics.",
    )
    gen_parser.add_argument("--width", type=int, default=None, help="Level width (default: env DQ_DUNGEON_WIDTH or 50)")
    gen_parser.add_argument("--height", type=int, default=None, help="Level height (default: env DQ_DUNGEON_HEIGHT or 50)")
    gen_parser.add_argument("--level", type=int, default=1, help="Dungeon depth; selects the theme (default: 1)")
    gen_parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: env DQ_SEED or random)")
    gen_parser.add_argument("--no-color", action="store_true", help="Plain ASCII output")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def render_map(rows: list[str], color: bool) -> str:
    if not color:
        return "\n".join(rows)
    out = []
    for row in rows:
        out.append("".join(f"{CELL_COLORS.get(ch, '')}{ch}{Style.RESET_ALL}" for ch in row))
    return "\n".join(out)


def run_generate(args) -> int:
    from dungeon_quest.config import GameSettings
    from dungeon_quest.dungeon import generate

    settings = GameSettings.from_env()
    seed = args.seed if args.seed is not None else settings.seed
    settings = replace(
        settings,
        dungeon_width=args.width or settings.dungeon_width,
        dungeon_height=args.height or settings.dungeon_height,
    ).normalized()
    dungeon = generate(settings.dungeon_width, settings.dungeon_height, args.level, random.Random(seed))
    print(render_map(dungeon.render_rows(), _COLOR_ENABLED and not args.no_color))
    m = dungeon.metrics
    print(
        f"theme={dungeon.theme.value} rooms={m['rooms']} corridors={m['corridors']} "
        f"doors={m['doors']} features={m['features']} runtime_ms={m['runtime_ms']}"
    )
    for warning in dungeon.warnings:
        print(f"[WARN] {warning}")
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

    # Resolve configuration from CLI flags or env vars
    env_host = os.getenv("HOST", "0.0.0.0")
    env_port = int(os.getenv("PORT", "5000"))
    host = getattr(args, "host", None) or env_host
    port = int(getattr(args, "port", None) or env_port)
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoint only after environment is ready
    from dungeon_quest.logging_utils import log
    from dungeon_quest.server import start_server

    title = (
        f"{Fore.CYAN}{Style.BRIGHT}Dungeon Quest Server{Style.RESET_ALL}" if _COLOR_ENABLED else "Dungeon Quest Server"
    )

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val: str | int) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {label('Mode:'):12} {value(mode.upper())}",
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('Version:'):12} {value(__version__)}",
        f"  {label('Debug:'):12} {value('YES' if debug else 'NO')}",
        divider,
        "",
    ]
    print("\n".join(lines))
    log.info(event="startup", mode=mode, host=host, port=port, debug=debug)

    info_prefix = f"{Fore.CYAN}[INFO]{Style.RESET_ALL}" if _COLOR_ENABLED else "[INFO]"
    print(f"{info_prefix} Listening for connections... Press Ctrl+C to stop.")
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
