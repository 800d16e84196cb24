import logging
import sys

import pytest

from downpour import cli
from downpour.models import PrintMode


def test_parse_defaults(monkeypatch):
    for name in ("DOWNPOUR_CONCURRENCY", "DOWNPOUR_REQUESTS", "DOWNPOUR_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)

    ns, args = cli.parse_args(["http://localhost:8080/"])

    assert args.url == "http://localhost:8080/"
    assert args.concurrency == 1
    assert args.total_requests == 1
    assert args.print_mode is PrintMode.INLINE
    assert ns.timeout is None
    assert not ns.debug


def test_parse_flags():
    ns, args = cli.parse_args(
        ["-c", "8", "-n", "500", "-p", "multiline", "--timeout", "2.5", "--debug", "http://x/"]
    )

    assert (args.concurrency, args.total_requests) == (8, 500)
    assert args.print_mode is PrintMode.MULTILINE
    assert ns.timeout == 2.5
    assert ns.debug


def test_env_defaults(monkeypatch):
    monkeypatch.setenv("DOWNPOUR_CONCURRENCY", "4")
    monkeypatch.setenv("DOWNPOUR_REQUESTS", "40")
    monkeypatch.setenv("DOWNPOUR_TIMEOUT_S", "3")

    ns, args = cli.parse_args(["http://x/"])

    assert (args.concurrency, args.total_requests) == (4, 40)
    assert ns.timeout == 3.0


@pytest.mark.parametrize("argv", [["-c", "0", "http://x/"], ["-n", "-5", "http://x/"], []])
def test_invalid_arguments_exit_with_usage(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(argv)
    assert exc_info.value.code == 2


def test_main_with_zero_requests(monkeypatch, capsys):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)

    code = cli.main(["-n", "0", "-p", "multiline", "http://127.0.0.1:9/"])

    assert code == 0
    assert "Errors:" not in capsys.readouterr().out
