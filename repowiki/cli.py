"""CLI entrypoints for repowiki commands."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from .config import ConfigError, RepoWikiConfig, load_config
from .demo import demo_report
from .github import GitHubError, InvalidRepositoryError
from .llm import LLMError
from .logging import configure_logging
from .models import CachedReport, SandboxResult, ScreenshotAnalysis
from .pipeline import ReportPipeline
from .postproc import OUTPUT_FORMATS, ReportRenderer
from .stages import StageError
from .stores import JsonReportStore


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .repowiki.yml or the directory holding it (defaults to cwd).",
    )


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the rendered report to this file instead of stdout.",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="markdown",
        help="Output format for the report.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repowiki",
        description="Analyse a public GitHub repository and generate a wiki-style report.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run the full analysis pipeline for a repository URL.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_config_option(analyze_parser)
    _add_output_options(analyze_parser)
    analyze_parser.add_argument("url", help="Repository URL, e.g. https://github.com/owner/repo")
    analyze_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore any cached report and analyse from scratch.",
    )

    sandbox_parser = subparsers.add_parser(
        "sandbox",
        help="Simulate the test run for a previously analysed repository.",
    )
    _add_verbose_option(sandbox_parser, suppress_default=True)
    _add_config_option(sandbox_parser)
    sandbox_parser.add_argument("url", help="Repository URL of the cached report.")
    sandbox_parser.add_argument(
        "--command",
        dest="test_command",
        default=None,
        help="Test command to simulate (defaults to the first detected test command).",
    )

    screenshot_parser = subparsers.add_parser(
        "screenshot",
        help="Analyse a screenshot of source code.",
    )
    _add_verbose_option(screenshot_parser, suppress_default=True)
    _add_config_option(screenshot_parser)
    screenshot_parser.add_argument("image", type=Path, help="Path to the image file.")
    screenshot_parser.add_argument(
        "--mime-type",
        default=None,
        help="Image MIME type (guessed from the file name when omitted).",
    )

    demo_parser = subparsers.add_parser(
        "demo",
        help="Render the bundled facebook/react sample report.",
    )
    _add_verbose_option(demo_parser, suppress_default=True)
    _add_output_options(demo_parser)

    cache_parser = subparsers.add_parser("cache", help="Manage the local report cache.")
    _add_verbose_option(cache_parser, suppress_default=True)
    _add_config_option(cache_parser)
    cache_parser.add_argument("action", choices=("clear",), help="Cache operation to perform.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repowiki commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "demo":
        _emit(ReportRenderer().render(demo_report(), args.format), args.output)
        return
    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    try:
        if args.command == "analyze":
            report = asyncio.run(_analyze(config, args.url, skip_cache=bool(args.no_cache)))
            _emit(ReportRenderer().render(report, args.format), args.output)
        elif args.command == "sandbox":
            result = asyncio.run(_sandbox(config, args.url, args.test_command))
            if result is None:
                parser.exit(
                    1,
                    f"No cached report for {args.url}. Run `repowiki analyze {args.url}` first.\n",
                )
            print(_format_sandbox(result))
        elif args.command == "screenshot":
            if not args.image.is_file():
                parser.exit(1, f"Image not found: {args.image}\n")
            mime_type = args.mime_type or mimetypes.guess_type(args.image.name)[0] or "image/jpeg"
            analysis = asyncio.run(_screenshot(config, args.image.read_bytes(), mime_type))
            print(json.dumps(analysis.to_dict(), indent=2))
        elif args.command == "cache":
            JsonReportStore(config.cache.path).clear()
            print(f"Cache cleared at {config.cache.path}")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except InvalidRepositoryError as exc:
        parser.exit(1, f"{exc}\n")
    except GitHubError as exc:
        parser.exit(1, f"repowiki {args.command} failed: {exc}\n")
    except (StageError, LLMError) as exc:
        parser.exit(1, f"repowiki {args.command} failed: {exc}\nRun with --verbose for more details.\n")


async def _analyze(config: RepoWikiConfig, url: str, *, skip_cache: bool) -> CachedReport:
    pipeline = ReportPipeline.from_config(config)
    try:
        return await pipeline.run(url, skip_cache=skip_cache)
    finally:
        await pipeline.aclose()


async def _sandbox(
    config: RepoWikiConfig, url: str, command: Optional[str]
) -> Optional[SandboxResult]:
    pipeline = ReportPipeline.from_config(config)
    try:
        report = pipeline.cached_report(url)
        if report is None:
            return None
        return await pipeline.run_sandbox(report, command)
    finally:
        await pipeline.aclose()


async def _screenshot(config: RepoWikiConfig, data: bytes, mime_type: str) -> ScreenshotAnalysis:
    pipeline = ReportPipeline.from_config(config)
    try:
        return await pipeline.analyze_screenshot(data, mime_type)
    finally:
        await pipeline.aclose()


def _format_sandbox(result: SandboxResult) -> str:
    lines = [f"Status: {result.status}", "", result.summary]
    if result.failures:
        lines.extend(["", "Failures:", *(f"- {item}" for item in result.failures)])
    if result.fixes:
        lines.extend(["", "Suggested fixes:", *(f"- {item}" for item in result.fixes)])
    return "\n".join(lines)


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(f"Report written to {_relativize(output)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
