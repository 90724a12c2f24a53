"""Command-line surface for the Phemex tools.

    phemex-cli <tool> [--key value ...]
    phemex-cli <tool> '{"key": "value"}'

Flag names may be snake_case (market_type), kebab-case (market-type) or
the exchange's camelCase (orderQty, contractType). The JSON result goes
to stdout; failures print {"error": ...} to stderr and exit 1.
"""

import argparse
import asyncio
import inspect
import json
import re
import sys
import types
from typing import Any, NoReturn, get_type_hints

from pydantic import TypeAdapter, ValidationError

from phemex_trade.config import AppSettings
from phemex_trade.exceptions import ParameterError, PhemexTradeError
from phemex_trade.logging import setup_logging
from phemex_trade.main import build_context
from phemex_trade.tools import TOOLS, ToolFunc

_INTEGER = re.compile(r"^-?\d+$")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Exchange-style names that camelCase splitting would mangle.
PARAM_ALIASES = {
    "contractType": "market_type",
    "orderID": "order_id",
    "clOrdID": "cl_ord_id",
    "origClOrdID": "orig_cl_ord_id",
}


def parse_cli_args(args: list[str]) -> dict[str, Any]:
    """Turn CLI arguments into a parameter dict.

    A single argument starting with "{" is parsed as a JSON object.
    Otherwise "--key value" pairs are read: "true"/"false" become booleans,
    integer-looking values become ints, everything else (including
    decimals like "0.01") stays a string. A flag followed by another flag
    or by nothing is True. Stray positional values are ignored.
    """
    if not args:
        return {}

    if len(args) == 1 and args[0].startswith("{"):
        try:
            params = json.loads(args[0])
        except json.JSONDecodeError as exc:
            raise ParameterError(f"Invalid JSON parameters: {exc}") from None
        if not isinstance(params, dict):
            raise ParameterError("JSON parameters must be an object")
        return params

    result: dict[str, Any] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if not arg.startswith("--"):
            i += 1
            continue
        key = arg[2:]
        if i + 1 >= len(args) or args[i + 1].startswith("--"):
            result[key] = True
            i += 1
            continue
        result[key] = coerce(args[i + 1])
        i += 2
    return result


def coerce(value: str) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    if _INTEGER.match(value):
        return int(value)
    return value


def to_kwarg_name(key: str) -> str:
    """Map a CLI flag name to the tool's keyword argument name."""
    if key in PARAM_ALIASES:
        return PARAM_ALIASES[key]
    key = key.replace("-", "_")
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def bind_params(tool_name: str, func: ToolFunc, params: dict[str, Any]) -> dict[str, Any]:
    """Match parsed parameters to a tool's signature.

    Raises ParameterError for unknown, missing or mistyped parameters.
    Integers given for string parameters (order ids, quantities) are
    turned back into strings, then each value is validated against the
    tool's annotation.
    """
    signature = inspect.signature(func)
    accepted = {name: p for name, p in signature.parameters.items() if name != "ctx"}
    hints = get_type_hints(func)

    kwargs: dict[str, Any] = {}
    for key, value in params.items():
        name = to_kwarg_name(key)
        if name not in accepted:
            raise ParameterError(f"Unknown parameter --{key} for {tool_name}")
        annotation = hints.get(name, Any)
        if _expects_str(annotation) and _is_int(value):
            value = str(value)
        kwargs[name] = validate_param(key, annotation, value)

    for name, param in accepted.items():
        if param.default is inspect.Parameter.empty and name not in kwargs:
            raise ParameterError(f"Missing required parameter: --{name}")
    return kwargs


def validate_param(key: str, annotation: Any, value: Any) -> Any:
    try:
        return TypeAdapter(annotation).validate_python(value)
    except ValidationError as exc:
        detail = exc.errors()[0]["msg"]
        raise ParameterError(f"Invalid value for --{key}: {detail}") from None


def _expects_str(annotation: Any) -> bool:
    if annotation is str:
        return True
    if isinstance(annotation, types.UnionType):
        options = annotation.__args__
        return str in options and int not in options
    return False


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phemex-cli",
        description="Phemex trading tools from the command line.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Available tools:\n" + "\n".join(f"  {name}" for name in TOOLS),
    )
    parser.add_argument("tool", nargs="?", help="Tool name, e.g. get_ticker")
    parser.add_argument(
        "params",
        nargs=argparse.REMAINDER,
        help="--key value pairs or a single JSON object",
    )
    return parser


async def run_tool(tool_name: str, params: dict[str, Any]) -> Any:
    """Load settings and the scale table, run one tool, return its data."""
    func = TOOLS.get(tool_name)
    if func is None:
        raise ParameterError(
            f"Unknown tool: {tool_name}. Run phemex-cli --help for available tools."
        )
    kwargs = bind_params(tool_name, func, params)

    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    ctx = await build_context(settings)
    try:
        result = await func(ctx, **kwargs)
    finally:
        await ctx.client.close()
    return result.data


def fail(message: str) -> NoReturn:
    print(json.dumps({"error": message}), file=sys.stderr)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.tool is None:
        parser.print_help()
        sys.exit(0)

    try:
        params = parse_cli_args(args.params)
        data = asyncio.run(run_tool(args.tool, params))
    except PhemexTradeError as exc:
        fail(str(exc))

    print(json.dumps(data, indent=2, default=str))


if __name__ == "__main__":
    main()
