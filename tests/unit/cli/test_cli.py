"""Tests for the bramble CLI."""

import io
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bramble import __version__
from bramble.cli import app
from bramble.contracts import RecheckData
from bramble.core.seed import Seed
from bramble.engine import gen
from tests.fixtures.properties import digits

runner = CliRunner()

TARGETS = "tests.fixtures.properties"
FAILING_TOKEN = RecheckData(0, Seed.from_u64(42), (2, 4, 5, 5)).serialize()


class TestCLIBasics:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"bramble version {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("check", "recheck", "sample", "token"):
            assert command in result.output


class TestCheckCommand:
    def test_passing(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:passing", "--seed", "1", "--tests", "25"])
        assert result.exit_code == 0
        assert "+++ OK, passed 25 tests." in result.output

    def test_failing(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:failing", "--seed", "42"])
        assert result.exit_code == 1
        assert "*** Failed! Falsifiable (after 1 test and 4 shrinks):" in result.output
        assert f"> {FAILING_TOKEN}" in result.output

    @pytest.mark.parametrize("target", ["make_failing", "Suite.failing"])
    def test_factory_and_nested_targets(self, target: str) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:{target}", "--seed", "42"])
        assert result.exit_code == 1
        assert FAILING_TOKEN in result.output

    def test_json_format(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:failing", "--seed", "42", "--format", "json"])
        assert result.exit_code == 1
        line = next(line for line in result.output.splitlines() if line.startswith('{"status"'))
        payload = json.loads(line)
        assert payload["status"] == "failed"
        assert payload["counterexample"] == "50"
        assert payload["original"] == "73"
        assert payload["shrinks"] == 4
        assert payload["recheck"] == FAILING_TOKEN

    def test_gave_up(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:always_discards", "--seed", "1"])
        assert result.exit_code == 1
        assert "*** Gave up after" in result.output

    def test_generator_error(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:broken_generator", "--seed", "1"])
        assert result.exit_code == 1
        assert "ZeroDivisionError" in result.output

    def test_shrink_limit(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:failing", "--seed", "42", "--shrinks", "1"])
        assert result.exit_code == 1
        assert "Shrinking stopped early" in result.output

    def test_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bramble.yaml"
        config_file.write_text("bramble:\n  tests: 5\n  seed: 3\n")
        result = runner.invoke(app, ["check", f"{TARGETS}:passing", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "passed 5 tests" in result.output

    def test_flag_overrides_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bramble.yaml"
        config_file.write_text("tests: 5\n")
        result = runner.invoke(app, ["check", f"{TARGETS}:passing", "-c", str(config_file), "-t", "8"])
        assert result.exit_code == 0
        assert "passed 8 tests" in result.output

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:passing", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2
        assert "not found" in result.output

    def test_invalid_config(self) -> None:
        result = runner.invoke(app, ["check", f"{TARGETS}:passing", "--tests", "0"])
        assert result.exit_code == 2
        assert "Configuration errors" in result.output

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("tests: [1\n")
        result = runner.invoke(app, ["check", f"{TARGETS}:passing", "--config", str(config_file)])
        assert result.exit_code == 2
        assert "YAML syntax error" in result.output


class TestTargetErrors:
    @pytest.mark.parametrize(
        "target",
        [
            "no_colon",
            f"{TARGETS}:",
            f"{TARGETS}:missing",
            "no_such_module_for_bramble:prop",
            f"{TARGETS}:not_a_property",
            f"{TARGETS}:digits",
        ],
    )
    def test_bad_target(self, target: str) -> None:
        result = runner.invoke(app, ["check", target])
        assert result.exit_code == 2
        assert "Error:" in result.output


class TestRecheckCommand:
    def test_recheck(self) -> None:
        result = runner.invoke(app, ["recheck", f"{TARGETS}:failing", FAILING_TOKEN])
        assert result.exit_code == 1
        assert "4 shrinks" in result.output

    def test_recheck_passing(self) -> None:
        result = runner.invoke(app, ["recheck", f"{TARGETS}:passing", "10_1_1"])
        assert result.exit_code == 0
        assert "+++ OK, passed 1 test." in result.output

    def test_bad_token(self) -> None:
        result = runner.invoke(app, ["recheck", f"{TARGETS}:failing", "not-a-token"])
        assert result.exit_code == 2
        assert "Invalid recheck token" in result.output


class TestSampleCommand:
    def test_sample(self) -> None:
        result = runner.invoke(app, ["sample", f"{TARGETS}:digits", "--count", "3", "--seed", "1"])
        assert result.exit_code == 0
        assert result.output.count("=== Outcome ===") == 3
        assert result.output.count("=== Shrinks ===") == 3

    def test_sample_matches_print_sample(self) -> None:
        out = io.StringIO()
        gen.print_sample(digits, Seed.from_u64(3), out, size=20, count=4)
        result = runner.invoke(app, ["sample", f"{TARGETS}:digits", "-n", "4", "--size", "20", "--seed", "3"])
        assert result.exit_code == 0
        assert result.output == out.getvalue()

    def test_sample_deterministic(self) -> None:
        first = runner.invoke(app, ["sample", f"{TARGETS}:digits", "--seed", "9"])
        second = runner.invoke(app, ["sample", f"{TARGETS}:digits", "--seed", "9"])
        assert first.output == second.output

    def test_sample_requires_generator(self) -> None:
        result = runner.invoke(app, ["sample", f"{TARGETS}:failing"])
        assert result.exit_code == 2


class TestTokenCommand:
    def test_decode(self) -> None:
        result = runner.invoke(app, ["token", "5_10_3_2:4"])
        assert result.exit_code == 0
        assert "Size: 5" in result.output
        assert "Seed: 10_3" in result.output
        assert "Shrink path: 2:4" in result.output
        assert "Shrinks: 2" in result.output

    def test_decode_without_path(self) -> None:
        result = runner.invoke(app, ["token", "5_10_3"])
        assert result.exit_code == 0
        assert "Shrink path: (none)" in result.output

    def test_invalid(self) -> None:
        result = runner.invoke(app, ["token", "5_10_4"])
        assert result.exit_code == 2
