"""Command-line runner for the ClawGuard gate.

Reads a tool call as JSON from stdin, or from --tool/--param, runs it through
the gate and prints the verdict as JSON.

Exit codes:
    0 - allowed
    1 - blocked
    3 - invalid input or setup error
"""

import json
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .config_loader import ConfigValidationError
from .plugin import AssessorLoadError, ClawGuardPlugin

EXIT_ALLOW = 0
EXIT_BLOCK = 1
EXIT_ERROR = 3


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid --param '{pair}', expected key=value")
        params[key] = value
    return params


def _read_tool_call(args) -> Dict[str, Any]:
    if args.tool:
        return {"tool": args.tool, "parameters": _parse_params(args.param)}

    raw_input = sys.stdin.read().strip()
    if not raw_input:
        raise ValueError("No tool call provided via stdin or --tool")
    tool_call = json.loads(raw_input)
    if not isinstance(tool_call, dict) or "tool" not in tool_call:
        raise ValueError("Tool call must be a JSON object with a 'tool' key")
    return tool_call


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Check a tool call against the ClawGuard security gate"
    )
    parser.add_argument(
        "--assessor", "-a",
        required=True,
        help="Risk assessor as 'module:attr' or an installed entry point name"
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to clawguard.json (default: CLAWGUARD_CONFIG_PATH or standard locations)"
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)"
    )
    parser.add_argument(
        "--tool", "-t",
        help="Tool name; when given, parameters come from --param instead of stdin"
    )
    parser.add_argument(
        "--param", "-p",
        action="append",
        default=[],
        help="Tool parameter as key=value (repeatable)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    load_dotenv(args.env_file)

    try:
        tool_call = _read_tool_call(args)
    except (ValueError, json.JSONDecodeError) as e:
        print(f"[clawguard] ERROR: Invalid input - {e}", file=sys.stderr)
        return EXIT_ERROR

    plugin = ClawGuardPlugin()
    try:
        plugin.initialize({
            "assessor": args.assessor,
            "config_path": args.config,
            "messaging": "auto",
        })
    except (AssessorLoadError, ConfigValidationError, ValueError, FileNotFoundError) as e:
        print(f"[clawguard] ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        result = plugin.before_tool_call(tool_call)
    finally:
        plugin.shutdown()

    print(json.dumps(result))
    return EXIT_ALLOW if result.get("allow") else EXIT_BLOCK


if __name__ == "__main__":
    sys.exit(main())
