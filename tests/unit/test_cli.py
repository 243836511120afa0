"""Tests for CLI tool."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from recblock.cli.main import main


def test_cli_help() -> None:
    """Test CLI --help flag."""
    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--help"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "recblock: Declarative Binary Record Codec" in result.stdout
    assert "--analyze" in result.stdout


def test_cli_version() -> None:
    """Test CLI --version flag."""
    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--version"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "recblock 0.1.0" in result.stdout


def test_cli_analyze(tmp_path: Path) -> None:
    """Test CLI --analyze prints each record layout."""
    source = tmp_path / "records.py"
    source.write_text(
        "from recblock import Record, has_one, has_counted_array\n"
        "\n"
        "class Item(Record):\n"
        "    iid = has_one('int16', key=1)\n"
        "    name = has_one('sstring', length=8)\n"
        "\n"
        "class Order(Record):\n"
        "    items = has_counted_array('uint8', [Item])\n"
        "    total = has_one('packed', length=7)\n"
    )

    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--analyze", str(source)],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "2 record types loaded" in result.stdout
    assert "Item" in result.stdout
    assert "Fixed size: 10 bytes" in result.stdout
    assert "Variable size" in result.stdout
    assert "int16 key=1" in result.stdout


def test_cli_analyze_no_records(tmp_path: Path) -> None:
    """Test CLI --analyze on a file without records."""
    source = tmp_path / "empty.py"
    source.write_text("VALUE = 1\n")

    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--analyze", str(source)],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "No Record classes found" in result.stdout


def test_cli_analyze_missing_file() -> None:
    """Test CLI --analyze with missing file."""
    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--analyze", "nonexistent.py"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 1
    assert "not found" in result.stderr.lower()


def test_cli_analyze_schema_error(tmp_path: Path) -> None:
    """Test CLI --analyze reports invalid declarations."""
    source = tmp_path / "bad.py"
    source.write_text(
        "from recblock import Record, has_one\n"
        "\n"
        "class Bad(Record):\n"
        "    name = has_one('string')\n"
    )

    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--analyze", str(source)],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 1
    assert "invalid record definition" in result.stderr
    assert "bad.py" in result.stderr


def test_cli_analyze_import_error(tmp_path: Path) -> None:
    """Test CLI --analyze reports a file that fails to import."""
    source = tmp_path / "broken.py"
    source.write_text("raise RuntimeError('boom')\n")

    result = subprocess.run(
        [sys.executable, "-m", "recblock.cli.main", "--analyze", str(source)],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 1
    assert "Error analyzing file: boom" in result.stderr
    assert "invalid record definition" not in result.stderr


def test_cli_analyze_directory(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test main() rejects a directory passed to --analyze."""
    assert main(["--analyze", str(tmp_path)]) == 1
    assert "not found" in capsys.readouterr().err.lower()
