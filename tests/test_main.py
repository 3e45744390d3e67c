import logging
from unittest.mock import patch

from CMTV.main import build_parser, main


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.files == []
    assert args.interval == 1.0
    assert args.log_dir == "app_log"
    assert args.log_level == "INFO"


def test_parser_accepts_files_and_options():
    args = build_parser().parse_args(["a.log", "b.log", "--interval", "0.5", "--log-level", "DEBUG"])

    assert args.files == ["a.log", "b.log"]
    assert args.interval == 0.5
    assert args.log_level == "DEBUG"


@patch("CMTV.main.configure_logging")
def test_main_rejects_non_positive_interval(mock_configure):
    assert main(["--interval", "0"]) == 2
    mock_configure.assert_not_called()


@patch("CMTV.UI.run_app")
@patch("CMTV.main.configure_logging")
def test_main_runs_app(mock_configure, mock_run_app, tmp_path):
    assert main(["x.log", "y.log", "--log-dir", str(tmp_path), "--interval", "2"]) == 0

    mock_configure.assert_called_once_with(str(tmp_path), logging.INFO)
    mock_run_app.assert_called_once_with(["x.log", "y.log"], poll_interval=2.0)


@patch("CMTV.UI.run_app", side_effect=RuntimeError("no terminal"))
@patch("CMTV.main.configure_logging")
def test_main_reports_errors(mock_configure, mock_run_app, capsys):
    assert main([]) == 1
    assert "no terminal" in capsys.readouterr().err


def test_configure_logging_writes_to_file(tmp_path):
    from CMTV.log_setup import configure_logging

    root = logging.getLogger()
    saved = root.handlers[:]
    saved_level = root.level
    root.handlers = []
    try:
        log_path = configure_logging(str(tmp_path / "logs"), logging.DEBUG)
        logging.getLogger("CMTV.test").info("hello log")
        for handler in root.handlers:
            handler.flush()

        with open(log_path, encoding="utf-8") as f:
            content = f.read()
        assert " - CMTV.test - INFO - hello log" in content
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved
        root.setLevel(saved_level)
