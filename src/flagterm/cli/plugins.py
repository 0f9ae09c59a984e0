"""
Command description loader for flagterm.

Builds leaf commands from YAML or JSON descriptions so a host can add
commands without writing Python. A described command logs a message
built from its arguments when run.

Example description::

    commands:
      - name: deploy
        description: Deploy a service
        args:
          - name: service
            choices: [api, web]
        flags:
          region:
            choices: [eu, us]
          force:
            flag: true
        double_dash: true
        message: "Deploying {args}"
"""

import json
import logging
import string
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from flagterm.cli.errors import CommandDescriptionError, UsageError
from flagterm.cli.router import CommandContext
from flagterm.cli.tree import ArgGroup, CommandLeaf

logger = logging.getLogger(__name__)

# Template field holding all positional words joined by spaces
MESSAGE_ARGS_FIELD = "args"


@dataclass
class ArgDescription:
    """A described positional argument."""

    name: str
    description: str = ""
    optional: bool = False
    variadic: bool = False
    choices: Optional[list[str]] = None


def load_command_descriptions(payload: str, fmt: str = "yaml") -> list[CommandLeaf]:
    """
    Build commands from a description payload.

    The payload may be a single command mapping, a list of them, or a
    mapping with a ``commands`` list.

    Args:
        payload: YAML or JSON text.
        fmt: "yaml" or "json".

    Returns:
        One leaf per described command.

    Raises:
        CommandDescriptionError: If the payload cannot be parsed or
            does not describe valid commands.
    """
    try:
        if fmt == "json":
            data = json.loads(payload) if payload.strip() else None
        elif fmt in ("yaml", "yml"):
            data = yaml.safe_load(payload)
        else:
            raise CommandDescriptionError(f"Unsupported command description format: {fmt}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CommandDescriptionError(f"Failed to parse command description: {e}") from e

    if data is None:
        return []

    if isinstance(data, dict) and "commands" in data:
        items = data["commands"]
    elif isinstance(data, dict):
        items = [data]
    else:
        items = data

    if not isinstance(items, list):
        raise CommandDescriptionError("Command description must be a mapping or a list of mappings")

    commands = [_decode_command(item, index) for index, item in enumerate(items)]
    logger.debug(f"Loaded {len(commands)} described command(s)")
    return commands


def load_command_file(path: Path | str) -> list[CommandLeaf]:
    """
    Build commands from a description file (.yaml, .yml or .json).

    Raises:
        CommandDescriptionError: If the file is missing, has an unsupported
            suffix, or holds an invalid description.
    """
    path = Path(path)
    if not path.exists():
        raise CommandDescriptionError(f"Command description file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        fmt = "json"
    elif suffix in (".yaml", ".yml"):
        fmt = "yaml"
    else:
        raise CommandDescriptionError(f"Unsupported command description file format: {path.suffix}")

    try:
        payload = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CommandDescriptionError(f"Failed to read {path}: {e}") from e

    return load_command_descriptions(payload, fmt)


def _decode_command(data: Any, index: int) -> CommandLeaf:
    where = f"command #{index + 1}"
    if not isinstance(data, dict):
        raise CommandDescriptionError(f"{where} must be a mapping")

    name = _get_string(data, "name", where, required=True)
    if not name.strip() or " " in name:
        raise CommandDescriptionError(f"{where} has an invalid name: {name!r}")
    where = f"command '{name}'"

    aliases = data.get("aliases") or []
    if not isinstance(aliases, list) or not all(isinstance(a, str) for a in aliases):
        raise CommandDescriptionError(f"{where}: 'aliases' must be a list of strings")

    args = [_decode_arg(item, where) for item in _get_list(data, "args", where)]

    flags = data.get("flags") or {}
    if not isinstance(flags, dict):
        raise CommandDescriptionError(f"{where}: 'flags' must be a mapping")

    message = data.get("message")
    if message is not None and not isinstance(message, str):
        raise CommandDescriptionError(f"{where}: 'message' must be a string")

    names = [a.name for a in args] + [str(flag) for flag in flags]
    if MESSAGE_ARGS_FIELD in names:
        raise CommandDescriptionError(
            f"{where}: '{MESSAGE_ARGS_FIELD}' is reserved and cannot name an argument or flag"
        )
    if message is not None:
        _check_message_fields(message, {MESSAGE_ARGS_FIELD, *names}, where)

    return CommandLeaf(
        name=name,
        description=_get_string(data, "description", where),
        action=_make_action(name, args, message),
        named_arg_groups={
            str(flag): _decode_flag(options, f"{where} flag '{flag}'")
            for flag, options in flags.items()
        },
        positional_arg_group=_positional_group(args),
        double_dash_arg_group=(
            ArgGroup(description="Passed through unchanged", placeholder="<args>...")
            if data.get("double_dash")
            else None
        ),
        aliases=aliases,
        hidden=bool(data.get("hidden", False)),
    )


def _decode_arg(data: Any, where: str) -> ArgDescription:
    if not isinstance(data, dict):
        raise CommandDescriptionError(f"{where}: every entry of 'args' must be a mapping")
    choices = _get_list(data, "choices", where)
    return ArgDescription(
        name=_get_string(data, "name", where, required=True),
        description=_get_string(data, "description", where),
        optional=bool(data.get("optional", False)),
        variadic=bool(data.get("variadic", False)),
        choices=[str(choice) for choice in choices] or None,
    )


def _decode_flag(data: Any, where: str) -> ArgGroup:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CommandDescriptionError(f"{where} must be a mapping")

    choices = _get_list(data, "choices", where) or None
    return ArgGroup(
        description=_get_string(data, "description", where),
        optional=bool(data.get("optional", True)),
        placeholder=_get_string(data, "placeholder", where) or "<value>",
        choices=[str(choice) for choice in choices] if choices else None,
        variadic=bool(data.get("variadic", False)),
        is_flag=bool(data.get("flag", False)),
    )


def _positional_group(args: list[ArgDescription]) -> Optional[ArgGroup]:
    """Fold the described positional arguments into one argument group."""
    if not args:
        return None
    placeholder = " ".join(f"<{a.name}>..." if a.variadic else f"<{a.name}>" for a in args)
    description = "; ".join(f"{a.name}: {a.description}" for a in args if a.description)

    def suggest(values: list[str], search: str) -> list[str]:
        # Completion only runs for the first positional argument
        return list(args[0].choices or [])

    return ArgGroup(
        description=description,
        optional=all(a.optional or a.variadic for a in args),
        placeholder=placeholder,
        completer=suggest,
        variadic=True,
    )


def _make_action(
    name: str,
    args: list[ArgDescription],
    message: Optional[str],
) -> Callable[[CommandContext], None]:
    required = sum(1 for a in args if not a.optional and not a.variadic)
    has_variadic = any(a.variadic for a in args)

    def action(context: CommandContext) -> None:
        values = list(context.positional or [])
        if len(values) < required:
            raise UsageError(f"missing required arguments (need {required})")
        if not has_variadic and len(values) > len(args):
            raise UsageError(f"too many arguments (got {len(values)}, max {len(args)})")

        for arg, value in zip(args, values):
            if arg.choices and value not in arg.choices:
                expected = ", ".join(arg.choices)
                raise UsageError(
                    f"Invalid value '{value}' for <{arg.name}>. Expected one of: {expected}"
                )

        if message is None:
            context.logger.log(" ".join([name, *values]))
            return

        fields = {arg.name: "" for arg in args}
        fields.update((arg.name, value) for arg, value in zip(args, values))
        fields.update(context.named)
        fields[MESSAGE_ARGS_FIELD] = " ".join(values)
        context.logger.log(message.format(**fields))

    return action


def _get_string(data: dict, key: str, where: str, required: bool = False) -> str:
    value = data.get(key)
    if value is None:
        if required:
            raise CommandDescriptionError(f"{where}: missing required field '{key}'")
        return ""
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise CommandDescriptionError(f"{where}: '{key}' must be a string")
    return str(value)


def _get_list(data: dict, key: str, where: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise CommandDescriptionError(f"{where}: '{key}' must be a list")
    return value


def _check_message_fields(message: str, known: set[str], where: str) -> None:
    """Reject templates that are malformed or name fields the command does not declare."""
    try:
        parsed = list(string.Formatter().parse(message))
    except ValueError as e:
        raise CommandDescriptionError(f"{where}: invalid 'message' template: {e}") from e

    for _, field_name, _, _ in parsed:
        if field_name is None:
            continue
        root = field_name.split(".", 1)[0].split("[", 1)[0]
        if root not in known:
            expected = ", ".join(sorted(known))
            raise CommandDescriptionError(
                f"{where}: 'message' uses unknown field '{{{field_name}}}'. "
                f"Known fields: {expected}"
            )
