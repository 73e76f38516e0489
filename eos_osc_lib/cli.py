"""
Eos OSC Library - CLI Application

Small command line client for quick checks against a console.

Usage:
    python -m eos_osc_lib --host 10.101.100.101 version
    python -m eos_osc_lib cues 1
    python -m eos_osc_lib get group 12
    python -m eos_osc_lib count patch
    python -m eos_osc_lib cmd "Chan 1 At Full#"
    python -m eos_osc_lib monitor
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional

from .config import ConsoleConfig, load_config
from .console import EosConsole
from .implicit_output import ConsoleEvent
from .record_targets import LAYOUTS, RecordTarget
from .target_number import parse_target_number

logger = logging.getLogger(__name__)


def format_target(target: Optional[RecordTarget]) -> str:
    if target is None:
        return "(not found)"
    lines = [f"{target.target_type} {target.target_number}: {target.label or '(no label)'}"]
    lines.append(f"  uid: {target.uid}")
    for name, value in target.fields.items():
        lines.append(f"  {name}: {value}")
    return "\n".join(lines)


def _print_event(event: ConsoleEvent):
    print(event)


# =============================================================================
# COMMANDS
# =============================================================================

async def run_command(args: argparse.Namespace, config: ConsoleConfig) -> int:
    """Connect, run one subcommand and disconnect. Returns the exit code."""
    console = EosConsole.from_config(config)
    await console.connect(timeout=config.connect_timeout)

    try:
        if config.user is not None:
            await console.change_user(config.user)

        if args.command == "version":
            print(console.version)

        elif args.command == "cues":
            cue_list = parse_target_number(args.cue_list)
            cues = await console.cues.get_all(
                cue_list=cue_list,
                progress=lambda done, total: logger.debug(f"Cues {done}/{total}"),
            )
            for cue in cues:
                print(f"{cue.get('cue_list')}/{cue.target_number}  {cue.label}")

        elif args.command == "get":
            scope = {}
            if args.cue_list is not None:
                scope["cue_list"] = parse_target_number(args.cue_list)
            if args.part is not None:
                scope["part"] = args.part
            target = await console.record_targets(args.target_type).get(
                parse_target_number(args.number), **scope
            )
            print(format_target(target))
            if target is None:
                return 1

        elif args.command == "count":
            scope = {}
            if args.cue_list is not None:
                scope["cue_list"] = parse_target_number(args.cue_list)
            print(await console.record_targets(args.target_type).count(**scope))

        elif args.command == "cmd":
            await console.execute_command(" ".join(args.text), new_command=not args.append)

        elif args.command == "monitor":
            console.add_listener(_print_event)
            logger.info("Monitoring console events, press Ctrl+C to stop")
            await asyncio.Event().wait()

    finally:
        await console.disconnect()

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eos-osc",
        description="Eos OSC client - query and control an Eos family lighting console",
    )
    parser.add_argument("--host", help="Console host name or IP address")
    parser.add_argument("--port", type=int, help="Console OSC TCP port (default 3037)")
    parser.add_argument("--config", type=Path, help="YAML config file")
    parser.add_argument("--user", type=int, help="Switch to this console user after connecting")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("version", help="Print the console software version")

    cues = commands.add_parser("cues", help="List the cues of a cue list")
    cues.add_argument("cue_list", help="Cue list number")

    target_types = sorted(LAYOUTS)

    get = commands.add_parser("get", help="Fetch one record target")
    get.add_argument("target_type", choices=target_types)
    get.add_argument("number", help="Target number")
    get.add_argument("--cue-list", help="Cue list (cues only)")
    get.add_argument("--part", type=int, help="Part number (patch only)")

    count = commands.add_parser("count", help="Count record targets of one type")
    count.add_argument("target_type", choices=target_types)
    count.add_argument("--cue-list", help="Cue list (cues only)")

    cmd = commands.add_parser("cmd", help="Run a command line instruction")
    cmd.add_argument("text", nargs="+")
    cmd.add_argument(
        "--append", action="store_true",
        help="Append to the current command line instead of starting a new one"
    )

    commands.add_parser("monitor", help="Print console events until interrupted")

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s"
    )

    config = load_config(args.config).with_overrides(
        host=args.host,
        port=args.port,
        user=args.user,
    )

    try:
        return asyncio.run(run_command(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0
    except (ConnectionError, ValueError, asyncio.TimeoutError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
