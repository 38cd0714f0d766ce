"""
tests/unit/test_cli.py
======================
Tests for the factorkb command-line entry point.
"""
import pytest

from factorkb.cli import build_parser, main, parse_expression_arg
from factorkb.version import FRAMEWORK_DESCRIPTION


class TestExpressionArgs:
    def test_bare_word_is_symbol_name(self):
        assert parse_expression_arg("rain") == "rain"

    def test_json_expression(self):
        assert parse_expression_arg('["not", "rain"]') == ["not", "rain"]


class TestMain:
    def test_consistent_file(self, assertions_file, capsys):
        assert main([str(assertions_file)]) == 0
        out = capsys.readouterr().out
        assert "Loaded 3 assertions" in out
        assert "[SYMBOLS:" in out
        assert "y=6" in out

    def test_conflicting_file(self, conflicting_file, capsys):
        assert main([str(conflicting_file)]) == 1
        assert "CONFLICT" in capsys.readouterr().out

    def test_query(self, assertions_file, capsys):
        assert main([str(assertions_file), "--given", "rain", "--query", "wet"]) == 0
        assert "? wet => T" in capsys.readouterr().out

    def test_unknown_query_answer(self, assertions_file, capsys):
        assert main([str(assertions_file), "--query", "wet"]) == 0
        assert "? wet => unknown" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json")]) == 2
        assert "error:" in capsys.readouterr().err

    def test_given_without_query_rejected(self, assertions_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(assertions_file), "--given", "rain"])
        assert exc.value.code == 2
        assert "--given needs at least one --query" in capsys.readouterr().err

    def test_parser_description(self):
        assert build_parser().description == FRAMEWORK_DESCRIPTION
