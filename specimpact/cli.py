"""CLI interface for specimpact.

Provides commands for analyzing a commit and for inspecting the test
blocks and importers the analysis is built on.
"""

import json
import sys
from pathlib import Path

import click

from specimpact import __version__
from specimpact.analyzers.constants import AnalyzerConfig
from specimpact.logging import set_verbosity


def _build_config(
    test_suffixes: tuple[str, ...],
    source_ext: str | None,
    test_callees: tuple[str, ...],
) -> AnalyzerConfig:
    return AnalyzerConfig.from_env().with_overrides(
        test_suffixes=test_suffixes,
        source_extension=source_ext,
        test_callees=test_callees,
    )


def _file_kind_options(func):
    """Options overriding the recognized file kinds."""
    func = click.option(
        "--test-callee",
        "test_callees",
        multiple=True,
        help="Callee recognized as a test definition, e.g. 'test.step'. Repeatable.",
    )(func)
    func = click.option(
        "--source-ext",
        default=None,
        help="Extension of helper source files (default: .ts).",
    )(func)
    func = click.option(
        "--test-suffix",
        "test_suffixes",
        multiple=True,
        help="Suffix marking a test file (default: .spec.ts, .test.ts). Repeatable.",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="specimpact")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
def cli(verbose: bool) -> None:
    """specimpact - find the tests impacted by a commit."""
    set_verbosity(verbose)


@cli.command()
@click.option("--commit", "-c", required=True, help="Commit to analyze (SHA or any git revision).")
@click.option(
    "--repo",
    "-r",
    "repo_path",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    default=".",
    help="Path to the repository (default: current directory).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text)",
)
@click.option(
    "--depth",
    type=click.IntRange(min=1),
    default=1,
    help="Import hops followed for helper changes (default: 1, direct importers).",
)
@_file_kind_options
def analyze(
    commit: str,
    repo_path: str,
    output_format: str,
    depth: int,
    test_suffixes: tuple[str, ...],
    source_ext: str | None,
    test_callees: tuple[str, ...],
) -> None:
    """Analyze a commit and list the impacted tests."""
    from specimpact.analyzers.impact import AnalysisError, analyze_commit
    from specimpact.utils.summarize import render_text

    if not (Path(repo_path) / ".git").exists():
        click.echo(f"Error: Not a git repository: {repo_path}", err=True)
        sys.exit(1)

    config = _build_config(test_suffixes, source_ext, test_callees)
    try:
        report = analyze_commit(repo_path, commit, config=config, depth=depth)
    except AnalysisError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(report.model_dump_json(indent=2, by_alias=True))
        return

    for line in render_text(report):
        click.echo(line)


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--test-callee",
    "test_callees",
    multiple=True,
    help="Callee recognized as a test definition. Repeatable.",
)
def tests(file_path: str, test_callees: tuple[str, ...]) -> None:
    """List the test blocks found in a file.

    FILE_PATH: Test file to parse.
    """
    from specimpact.analyzers.code_parser import extract_test_blocks

    config = _build_config((), None, test_callees)
    content = Path(file_path).read_text(encoding="utf-8", errors="replace")
    blocks = extract_test_blocks(file_path, content, config.test_callees)
    click.echo(json.dumps([block.model_dump(by_alias=True) for block in blocks], indent=2))


@cli.command()
@click.argument("helper_path")
@click.option(
    "--repo",
    "-r",
    "repo_path",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    default=".",
    help="Path to the repository (default: current directory).",
)
@click.option("--depth", type=click.IntRange(min=1), default=1, help="Import hops (default: 1)")
@_file_kind_options
def importers(
    helper_path: str,
    repo_path: str,
    depth: int,
    test_suffixes: tuple[str, ...],
    source_ext: str | None,
    test_callees: tuple[str, ...],
) -> None:
    """List the test files importing a helper.

    HELPER_PATH: Helper file, relative to the repository root.
    """
    from specimpact.analyzers.imports import ImportResolver

    config = _build_config(test_suffixes, source_ext, test_callees)
    resolver = ImportResolver(repo_path, config)
    found = resolver.test_files_importing(helper_path, depth=depth)
    for path in sorted(found):
        click.echo(path.relative_to(resolver.repo_path).as_posix())


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
