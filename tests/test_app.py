"""Tests for app.py - demo command set and command line entry point."""

import io

import pytest
from structlog.testing import capture_logs

from app import App, build_evaluator, main, new_context, parse_address
from config import Limits


class TestDemoCommands:
    """Test the demo command set."""

    @pytest.fixture
    def evaluator(self):
        return build_evaluator()

    @pytest.mark.parametrize("line,expected", [
        ("echo", "Ok"),
        ("echo hello world", "hello world"),
        ("add 1 2 3", "6"),
        ("add 1 (add 2 (neg 3))", "0"),
        ("echo (#a (b) c)", "a (b) c"),
        ("fail", "Err: Command failed"),
        ("fail out of fuel", "Err: out of fuel"),
        ("add 1 (fail boom)", "Err: boom"),
    ])
    def test_lines(self, evaluator, line, expected):
        assert evaluator.evaluate(line, new_context()).render() == expected

    def test_log_level(self, evaluator):
        context = new_context()
        assert evaluator.evaluate("log level", context).text == "0"
        assert evaluator.evaluate("log level 3", context).render() == "Ok"
        assert evaluator.evaluate("log level", context).text == "3"
        assert context["level"] == 3

    def test_log_level_out_of_range(self, evaluator):
        result = evaluator.evaluate("log level 300", new_context())
        assert result.is_err
        assert "Expected <u8> but got: 300 (out of range)" in result.text


class TestParseAddress:
    """Test HOST:PORT parsing."""

    def test_valid(self):
        assert parse_address("127.0.0.1:7000") == ("127.0.0.1", 7000)

    @pytest.mark.parametrize("value", ["7000", ":7000", "host:port", "host:"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_address(value)


class TestApp:
    """Test App lifecycle."""

    def test_limits_from_env(self, monkeypatch):
        monkeypatch.setenv("NESTSHELL_MAX_DEPTH", "3")
        app = App()
        assert app.limits.max_depth == 3
        assert app.evaluator.limits is app.limits

    def test_run_shell(self):
        output = io.StringIO()
        app = App(Limits())
        count = app.run_shell(io.StringIO("add 1 2\nlog level 5\nlog level\n"), output)
        assert count == 3
        assert output.getvalue() == "3\nOk\n5\n"


class TestMain:
    """Test command line parsing."""

    @pytest.fixture(autouse=True)
    def captured_logs(self, monkeypatch):
        monkeypatch.setattr("app.configure_logging", lambda level: None)
        with capture_logs() as logs:
            yield logs

    def test_shell_mode(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("add 2 2\n"))
        assert main([]) == 0
        assert capsys.readouterr().out == "4\n"

    def test_max_depth_flag(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("add (add (add 1))\n"))
        main(["--max-depth", "1"])
        assert capsys.readouterr().out.startswith("Err: Command nesting too deep")

    def test_invalid_limit(self):
        with pytest.raises(SystemExit):
            main(["--max-input-length", "0"])

    def test_invalid_address(self):
        with pytest.raises(SystemExit):
            main(["--serve", "nowhere"])

    def test_evaluation_is_logged(self, monkeypatch, captured_logs):
        monkeypatch.setattr("sys.stdin", io.StringIO("add 1\nnope\n"))
        main([])
        events = [entry["event"] for entry in captured_logs]
        assert "command_invoked" in events
        assert "stream_ended" in events
