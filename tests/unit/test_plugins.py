"""
Tests for building commands from YAML/JSON descriptions.
"""

import asyncio
import json

import pytest

from flagterm.cli.commands import create_echo_command, default_commands
from flagterm.cli.errors import CommandDescriptionError
from flagterm.cli.plugins import load_command_descriptions, load_command_file
from flagterm.cli.repl.completer import complete
from flagterm.cli.router import CommandRunner
from flagterm.cli.tree import CommandGroup

DEPLOY_YAML = """
commands:
  - name: deploy
    description: Deploy a service
    aliases: [ship]
    args:
      - name: service
        choices: [api, web]
      - name: tag
        optional: true
    flags:
      region:
        choices: [eu, us]
      force:
        flag: true
    double_dash: true
    message: "Deploying {service} ({args}) force={force}"
  - name: secret
    hidden: true
"""


class RecordingLogger:
    def __init__(self):
        self.logs: list = []
        self.errors: list = []

    def log(self, value):
        self.logs.append(value)

    def error(self, value):
        self.errors.append(value)


def run_line(commands, tokens):
    output = RecordingLogger()
    runner = CommandRunner(CommandGroup(name="", subcommands=commands), color=False)
    asyncio.run(runner.run(tokens, output, 80))
    return output


class TestLoadDescriptions:
    def test_builds_leaves(self):
        deploy, secret = load_command_descriptions(DEPLOY_YAML)
        assert deploy.name == "deploy"
        assert deploy.aliases == ["ship"]
        assert deploy.description == "Deploy a service"
        assert set(deploy.named_arg_groups) == {"region", "force"}
        assert deploy.named_arg_groups["force"].is_flag
        assert deploy.double_dash_arg_group is not None
        assert deploy.positional_arg_group.placeholder == "<service> <tag>"
        assert not deploy.positional_arg_group.optional
        assert secret.hidden

    def test_single_mapping_and_list(self):
        assert len(load_command_descriptions("name: one")) == 1
        assert len(load_command_descriptions("- name: one\n- name: two")) == 2

    def test_json(self):
        payload = json.dumps({"commands": [{"name": "ping", "message": "pong"}]})
        (ping,) = load_command_descriptions(payload, fmt="json")
        assert run_line([ping], ["ping"]).logs == ["pong"]

    def test_empty_payload(self):
        assert load_command_descriptions("") == []
        assert load_command_descriptions("  ", fmt="json") == []

    @pytest.mark.parametrize(
        "payload,message",
        [
            ("- 1", "must be a mapping"),
            ("name: 'two words'", "invalid name"),
            ("description: no name", "missing required field 'name'"),
            ("name: x\naliases: nope", "'aliases' must be a list"),
            ("name: x\nflags: [a]", "'flags' must be a mapping"),
            ("name: x\nmessage: [a]", "'message' must be a string"),
            ("name: x\nargs: [1]", "must be a mapping"),
            ("'just a string'", "mapping or a list"),
            ("name: [unclosed", "Failed to parse"),
            ("name: greet\nargs:\n  - name: args\nmessage: 'hi {args}'", "'args' is reserved"),
            ("name: greet\nflags:\n  args: {}", "'args' is reserved"),
            ("name: greet\nmessage: 'hi {who}'", "unknown field '{who}'"),
            ("name: greet\nmessage: 'hi {}'", "unknown field"),
            ("name: greet\nmessage: 'hi {'", "invalid 'message' template"),
        ],
    )
    def test_invalid_descriptions(self, payload, message):
        with pytest.raises(CommandDescriptionError, match=message):
            load_command_descriptions(payload)

    def test_unsupported_format(self):
        with pytest.raises(CommandDescriptionError, match="Unsupported"):
            load_command_descriptions("name: x", fmt="toml")


class TestDescribedActions:
    def test_message_uses_arguments_and_flags(self):
        commands = load_command_descriptions(DEPLOY_YAML)
        output = run_line(commands, ["ship", "api", "v2", "--force"])
        assert output.logs == ["Deploying api (api v2) force=True"]

    def test_omitted_optional_argument_formats_as_empty(self):
        commands = load_command_descriptions(DEPLOY_YAML)
        output = run_line(commands, ["deploy", "web"])
        assert output.logs == ["Deploying web (web) force=False"]

    def test_default_message_echoes_arguments(self):
        commands = load_command_descriptions("name: greet\nargs:\n  - name: who\n")
        assert run_line(commands, ["greet", "bob"]).logs == ["greet bob"]

    def test_missing_required_argument(self):
        commands = load_command_descriptions(DEPLOY_YAML)
        output = run_line(commands, ["deploy"])
        assert output.errors == [
            "Error: <service> <tag> is required. Run 'deploy --help' for usage."
        ]

    def test_invalid_choice(self):
        commands = load_command_descriptions(DEPLOY_YAML)
        output = run_line(commands, ["deploy", "db"])
        assert "Invalid value 'db' for <service>" in output.errors[0]

    def test_too_many_arguments(self):
        commands = load_command_descriptions(DEPLOY_YAML)
        output = run_line(commands, ["deploy", "api", "v1", "extra"])
        assert "too many arguments (got 3, max 2)" in output.errors[0]

    def test_variadic_argument_takes_the_rest(self):
        commands = load_command_descriptions(
            "name: tag\nargs:\n  - name: labels\n    variadic: true\n"
        )
        assert run_line(commands, ["tag", "a", "b"]).logs == ["tag a b"]
        assert run_line(commands, ["tag"]).logs == ["tag"]

    def test_completion_offers_first_argument_choices(self):
        commands = load_command_descriptions(DEPLOY_YAML)
        root = CommandGroup(name="", subcommands=commands)
        assert complete(root, ["deploy"], "w") == ["eb "]
        assert complete(root, [], "s") == []


class TestLoadFile:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "commands.yaml"
        path.write_text(DEPLOY_YAML, encoding="utf-8")
        assert [c.name for c in load_command_file(path)] == ["deploy", "secret"]

    def test_json_file(self, tmp_path):
        path = tmp_path / "commands.json"
        path.write_text('[{"name": "ping"}]', encoding="utf-8")
        assert [c.name for c in load_command_file(path)] == ["ping"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(CommandDescriptionError, match="not found"):
            load_command_file(tmp_path / "nope.yaml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "commands.txt"
        path.write_text("name: x", encoding="utf-8")
        with pytest.raises(CommandDescriptionError, match="Unsupported"):
            load_command_file(path)


class TestEchoCommand:
    def test_echo_words(self):
        output = run_line(default_commands(), ["echo", "hello", "world"])
        assert output.logs == ["hello world"]

    def test_echo_upper_and_double_dash(self):
        output = run_line([create_echo_command()], ["echo", "hi", "--upper", "--", "--there"])
        assert output.logs == ["HI --THERE"]

    def test_echo_color(self):
        output = run_line([create_echo_command()], ["echo", "hi", "--color", "red"])
        assert output.logs == ["\x1b[31mhi\x1b[0m"]

    def test_echo_rejects_unknown_color(self):
        output = run_line([create_echo_command()], ["echo", "hi", "--color", "pink"])
        assert "Invalid value 'pink' for --color" in output.errors[0]
