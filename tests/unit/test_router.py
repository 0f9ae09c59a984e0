"""
Tests for routing tokenized lines to leaf actions.
"""

import asyncio

import pytest

from flagterm.cli.commands import create_echo_command
from flagterm.cli.errors import UnexpectedNodeError, UsageError
from flagterm.cli.router import CommandRunner
from flagterm.cli.tree import ArgGroup, CommandGroup, CommandLeaf


class RecordingLogger:
    def __init__(self):
        self.logs: list = []
        self.errors: list = []

    def log(self, value):
        self.logs.append(value)

    def error(self, value):
        self.errors.append(value)


def make_tree(calls: list) -> CommandGroup:
    def deploy(context):
        calls.append(("deploy", context.positional, context.named, context.command_path))

    async def status(context):
        await asyncio.sleep(0)
        context.logger.log(f"all good at {context.columns}")

    def explode(context):
        raise RuntimeError("kaboom")

    def strict(context):
        raise UsageError("needs more cowbell")

    cloud = CommandGroup(
        name="cloud",
        description="Cloud commands",
        aliases=["c"],
        subcommands=[
            CommandLeaf(
                name="deploy",
                action=deploy,
                description="Deploy a service",
                positional_arg_group=ArgGroup(choices=["api", "web"], optional=False),
                named_arg_groups={"force": ArgGroup(is_flag=True)},
            ),
        ],
    )
    return CommandGroup(
        name="",
        subcommands=[
            cloud,
            CommandLeaf(name="status", action=status),
            CommandLeaf(name="explode", action=explode),
            CommandLeaf(name="strict", action=strict),
        ],
    )


def run(runner: CommandRunner, tokens: list[str], columns: int = 80) -> RecordingLogger:
    output = RecordingLogger()
    asyncio.run(runner.run(tokens, output, columns))
    return output


class TestCommandRunner:
    def test_empty_line_is_noop(self):
        calls: list = []
        output = run(CommandRunner(make_tree(calls), color=False), [])
        assert output.logs == [] and output.errors == []
        assert calls == []

    def test_runs_leaf_with_parsed_args(self):
        calls: list = []
        run(CommandRunner(make_tree(calls), color=False), ["cloud", "deploy", "api", "--force"])
        assert calls == [("deploy", ["api"], {"force": True}, "cloud deploy")]

    def test_aliases_navigate(self):
        calls: list = []
        run(CommandRunner(make_tree(calls), color=False), ["c", "deploy", "web"])
        assert calls[0][1] == ["web"]

    def test_async_action_is_awaited(self):
        output = run(CommandRunner(make_tree([]), color=False), ["status"], columns=42)
        assert output.logs == ["all good at 42"]

    def test_bare_group_prints_help(self):
        output = run(CommandRunner(make_tree([]), color=False), ["cloud"])
        assert len(output.logs) == 1
        assert "Usage: cloud <subcommand> ..." in output.logs[0]
        assert "deploy" in output.logs[0]

    def test_group_help_flag(self):
        output = run(CommandRunner(make_tree([]), color=False), ["cloud", "--help"])
        assert "Cloud commands" in output.logs[0]

    def test_leaf_help_flag_skips_action(self):
        calls: list = []
        output = run(CommandRunner(make_tree(calls), color=False), ["cloud", "deploy", "--help"])
        assert calls == []
        assert "Usage: cloud deploy <value> [--force]" in output.logs[0]

    def test_help_after_double_dash_is_passed_through(self):
        output = RecordingLogger()
        runner = CommandRunner(
            CommandGroup(name="", subcommands=[create_echo_command()]), color=False
        )
        asyncio.run(runner.run(["echo", "--", "--help"], output, 80))
        assert output.logs == ["--help"]

    def test_unknown_command(self):
        output = run(CommandRunner(make_tree([]), color=False), ["cloud", "nope"])
        assert output.errors == [
            "Error: Unknown command 'nope'. Type 'help' for available commands."
        ]

    def test_usage_error_mentions_help(self):
        output = run(CommandRunner(make_tree([]), color=False), ["cloud", "deploy"])
        assert output.errors == [
            "Error: <value> is required. Run 'cloud deploy --help' for usage."
        ]

    def test_usage_error_from_action(self):
        output = run(CommandRunner(make_tree([]), color=False), ["strict"])
        assert output.errors == ["Error: needs more cowbell. Run 'strict --help' for usage."]

    def test_action_failure_is_reported(self):
        output = run(CommandRunner(make_tree([]), color=False), ["explode"])
        assert output.errors == ["Error executing 'explode': kaboom"]

    def test_root_override(self):
        calls: list = []
        runner = CommandRunner(CommandGroup(name=""), color=False)
        output = RecordingLogger()
        asyncio.run(runner.run(["cloud", "deploy", "api"], output, 80, root=make_tree(calls)))
        assert len(calls) == 1

    def test_unknown_node_kind(self):
        class Odd:
            name = "odd"
            aliases: list = []
            hidden = False

        runner = CommandRunner(CommandGroup(name="", subcommands=[Odd()]), color=False)
        with pytest.raises(UnexpectedNodeError):
            asyncio.run(runner.run(["odd"], RecordingLogger(), 80))
