import signal
import threading
from unittest.mock import Mock

import pytest

from hostcrawl import cli


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "hostcrawl" in capsys.readouterr().out


def test_crawl_requires_start_url():
    with pytest.raises(SystemExit) as exc:
        cli.main(["crawl"])
    assert exc.value.code == 2


def test_flags_are_passed_to_orchestrator(monkeypatch):
    orchestrator = Mock()
    monkeypatch.setattr(cli, "crawl_orchestrator", orchestrator)

    code = cli.main([
        "crawl", "https://example.com/",
        "--concurrency", "4",
        "--max-pages", "10",
        "--timeout-ms", "2500",
        "--format", "json",
        "--strip-tracking",
        "--priority", "shallow",
    ])

    assert code == 0
    args, kwargs = orchestrator.call_args
    assert args == ("https://example.com/",)
    assert kwargs["concurrency"] == 4.0
    assert kwargs["max_pages"] == 10.0
    assert kwargs["timeout_ms"] == 2500.0
    assert kwargs["format"] == "json"
    assert kwargs["strip_tracking"] is True
    assert kwargs["priority"] == "shallow"
    assert kwargs["quiet"] is None
    assert isinstance(kwargs["stop_event"], threading.Event)


def test_invalid_start_url_exits_with_error(capsys):
    code = cli.main(["crawl", "ftp://example.com/"])
    assert code == 1
    assert "Error: Start URL must use http or https protocol." in capsys.readouterr().err


def test_invalid_option_exits_with_error(capsys):
    code = cli.main(["crawl", "https://example.com/", "--concurrency", "0"])
    assert code == 1
    assert "Error: concurrency must be a positive integer." in capsys.readouterr().err


def test_unexpected_error_exits_with_error(monkeypatch, capsys):
    monkeypatch.setattr(cli, "crawl_orchestrator", Mock(side_effect=RuntimeError("kaboom")))
    assert cli.main(["crawl", "https://example.com/"]) == 1
    assert "Error: kaboom" in capsys.readouterr().err


def test_sigint_sets_stop_event_and_restores_handler():
    stop = threading.Event()
    previous = signal.getsignal(signal.SIGINT)
    with cli.sigint_cancels(stop):
        handler = signal.getsignal(signal.SIGINT)
        handler(signal.SIGINT, None)
    assert stop.is_set()
    assert signal.getsignal(signal.SIGINT) is previous
