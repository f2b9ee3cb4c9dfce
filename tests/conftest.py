"""Pytest configuration for the jsrb test suite."""

import json
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from jsrb import translate

CODEGEN_DIR = Path(__file__).parent / "codegen"


class RubyError(Exception):
    """Raised when generated Ruby fails to run."""


def parse_tests_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples.

    Each case is a `=== name` header, the ESTree JSON input, a `---`
    separator, the expected Ruby, and a closing `---`.
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_codegen_tests() -> list[tuple[str, str, str]]:
    """Find all codegen cases, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(CODEGEN_DIR.glob("*.tests")):
        for name, input_json, expected in parse_tests_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_json, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize codegen tests over the .tests files."""
    if "codegen_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_json, expected, id=test_id)
            for test_id, input_json, expected in discover_codegen_tests()
        ]
        metafunc.parametrize("codegen_input,codegen_expected", params)


@pytest.fixture
def transpiled_output(codegen_input: str) -> str:
    """Translate a codegen case with the default correction table."""
    return translate(json.loads(codegen_input))


@pytest.fixture
def run_ruby(tmp_path: Path):
    """Run a Ruby program and return its stdout; skips when ruby is missing."""
    ruby = shutil.which("ruby")
    if ruby is None:
        pytest.skip("ruby not installed")

    def run(code: str) -> str:
        path = tmp_path / "main.rb"
        path.write_text(code)
        result = subprocess.run(
            [ruby, str(path)], capture_output=True, text=True, timeout=30
        )
        if result.returncode != 0:
            raise RubyError(result.stderr.strip())
        return result.stdout

    return run
