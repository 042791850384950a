"""
Tests for the console entry point.
"""
import pytest

from main import parse_args, run_console


def feed(monkeypatch, lines):
    remaining = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])

        assert args.session_id is None
        assert args.database_url is None
        assert args.no_weather is False

    def test_options(self):
        args = parse_args(["--session-id", "abc", "--no-weather", "--database-url", "sqlite://"])

        assert args.session_id == "abc"
        assert args.no_weather is True
        assert args.database_url == "sqlite://"


class TestRunConsole:
    def test_complete_booking(self, agent, booking_service, monkeypatch, capsys):
        feed(monkeypatch, ["hi", "2 guests", "tomorrow", "7pm", "thai", "no", "Alice Smith"])

        assert run_console(agent, "console") == 0
        assert booking_service.list_bookings().total == 1
        assert capsys.readouterr().out

    @pytest.mark.parametrize("word", ["quit", "EXIT", "bye"])
    def test_exit_words(self, agent, monkeypatch, word):
        feed(monkeypatch, ["4 people", word])

        assert run_console(agent, "console") == 1
        assert agent.get_session("console") is not None

    def test_end_of_input(self, agent, monkeypatch):
        feed(monkeypatch, ["hello"])
        assert run_console(agent, "console") == 1

    def test_reset_and_blank_lines(self, agent, monkeypatch):
        feed(monkeypatch, ["4 people", "reset", "", "   "])

        assert run_console(agent, "console") == 1
        assert agent.get_session("console") is None
