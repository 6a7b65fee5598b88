"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repowiki.cli import _build_parser, main
from repowiki.demo import demo_report
from repowiki.stores import JsonReportStore


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze", "https://github.com/o/r"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "https://github.com/o/r", "--verbose"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_analyze_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["analyze", "https://github.com/o/r", "--no-cache", "--format", "json", "-o", "out.json"]
    )
    assert args.no_cache is True
    assert args.format == "json"
    assert args.output == Path("out.json")
    assert args.config is None


def test_cli_sandbox_command_flag_does_not_clobber_subcommand() -> None:
    parser = _build_parser()
    args = parser.parse_args(["sandbox", "https://github.com/o/r", "--command", "pytest -q"])
    assert args.command == "sandbox"
    assert args.test_command == "pytest -q"


def test_cli_rejects_unknown_format() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["demo", "--format", "pdf"])


def test_demo_command_writes_report(tmp_path: Path) -> None:
    target = tmp_path / "out" / "react.md"

    main(["demo", "--output", str(target)])

    text = target.read_text(encoding="utf-8")
    assert text.startswith("# facebook/react")
    assert "## Wiki" in text


def test_demo_command_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    main(["demo", "--format", "json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["repo_info"]["owner"] == "facebook"


def test_cache_clear_removes_report(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cache_path = tmp_path / "report.json"
    monkeypatch.setenv("REPOWIKI_CACHE_PATH", str(cache_path))
    JsonReportStore(cache_path).put("facebook/react", demo_report())
    assert cache_path.exists()

    main(["cache", "clear", "--config", str(tmp_path)])

    assert not cache_path.exists()


def test_sandbox_without_cached_report_exits(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("REPOWIKI_CACHE_PATH", str(tmp_path / "missing.json"))

    with pytest.raises(SystemExit) as excinfo:
        main(["sandbox", "https://github.com/o/r", "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "No cached report" in capsys.readouterr().err


def test_analyze_invalid_url_exits_with_message(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("REPOWIKI_CACHE_PATH", str(tmp_path / "report.json"))

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", "not-a-url", "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "Invalid GitHub URL" in capsys.readouterr().err


def test_screenshot_missing_image_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["screenshot", str(tmp_path / "nope.png"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1


def test_serve_delegates_to_run_service(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {}

    def fake_run_service(host: str, port: int) -> None:
        calls["host"] = host
        calls["port"] = port

    monkeypatch.setattr("repowiki.service.run_service", fake_run_service)

    main(["serve", "--port", "9000"])

    assert calls == {"host": "127.0.0.1", "port": 9000}
