import logging

import pytest

from opskit.logdemo import main, run_multi, run_single


def _lines(text):
    return [line for line in text.splitlines() if line]


def test_run_single_logs_every_level(capsys):
    root = logging.getLogger()
    handlers_before = list(root.handlers)
    level_before = root.level
    run_single(0.2)
    lines = _lines(capsys.readouterr().out)
    assert [line.split()[1] for line in lines] == ["ERROR", "WARN", "INFO", "DEBUG", "TRACE"]
    assert [line.split()[-1] for line in lines] == [
        "error",
        "warning",
        "info",
        "debug",
        "trace",
    ]
    assert all("[opskit.logdemo]" in line for line in lines)
    assert root.handlers == handlers_before
    assert root.level == level_before


def test_run_multi_routes_targets(tmp_path, capsys):
    run_multi(tmp_path, 0.2)
    out = capsys.readouterr().out
    assert len(_lines(out)) == 5
    assert '"get 0"' not in out
    assert "this won't get displayed" not in out
    command = (tmp_path / "command.log").read_text()
    assert command.endswith(' "get 0" 0 0\n')
    assert len(_lines(command)) == 1


def test_main_single(capsys):
    assert main(["single", "--duration", "0.1"]) == 0
    assert "error" in capsys.readouterr().out


def test_main_multi(tmp_path, capsys):
    assert main(["multi", "--duration", "0.1", "--directory", str(tmp_path)]) == 0
    assert (tmp_path / "command.log").exists()
    assert "warning" in capsys.readouterr().out


def test_main_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        main(["bogus"])