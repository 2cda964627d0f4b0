#!/usr/bin/env python3
"""
Resume Markup Compilation CLI

Runs resume markup through the compilation pipeline: validation, remote and
local typesetting tiers, and the parsed fallback preview.

Commands:
    compile  - Compile a .tex file to PDF (never fails without a document)
    validate - Check markup structure without compiling
    simplify - Print or save the compatibility-simplified markup

Examples:\n

    compile_markup.py compile resume.tex                      # Compile next to the source

    compile_markup.py compile resume.tex --offline --preview  # Fallback/local only, show text

    compile_markup.py validate resume.tex                     # Structure check only

    compile_markup.py simplify resume.tex -o simple.tex       # Save simplified markup
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from resumepilot.contexts.compilation import MarkupValidationError, open_pipeline, simplify, validate
from resumepilot.contexts.compilation.logger import setup_compilation_logger
from resumepilot.utils.pdf_processing import extract_pdf_text
from resumepilot.utils.settings import load_pipeline_settings

load_dotenv()

app = typer.Typer(
    help="Compile resume markup to PDF through tiered typesetting engines with a local fallback",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def read_markup(tex_file: Path) -> str:
    if not tex_file.exists():
        typer.secho(f"Error: File not found: {tex_file}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return tex_file.read_text(encoding="utf-8")


@app.command("compile")
def compile_command(
    tex_file: Annotated[Path, typer.Argument(help="Resume markup (.tex)")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="PDF destination (default: next to the source)"),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Pipeline settings YAML (default: packaged config)"),
    ] = None,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Disable remote engines (local engine and fallback only)"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show every attempt and warning"),
    ] = False,
    preview: Annotated[
        bool,
        typer.Option("--preview", help="Print the text of the produced PDF"),
    ] = False,
    log_dir: Annotated[
        Optional[Path],
        typer.Option("--log-dir", help="Also write a DEBUG log file to this directory"),
    ] = None,
):
    """
    Compile resume markup to PDF.

    Always writes a document: the typeset PDF, the fallback preview, or an
    error notice when the markup fails validation.

    Examples:\n

        $ compile_markup.py compile resume.tex                   # Compile

        $ compile_markup.py compile resume.tex --offline         # No network

        $ compile_markup.py compile resume.tex -o out/cv.pdf -v  # Custom output, verbose
    """
    source = read_markup(tex_file)

    try:
        settings = load_pipeline_settings(config)
    except (FileNotFoundError, ValueError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if offline:
        settings = settings.without_remote_engines()

    engine_ids = [engine.id for engine in settings.enabled_engines]
    log_file = setup_compilation_logger(
        log_dir, engines=engine_ids, console_level="DEBUG" if verbose else "INFO"
    )

    typer.secho(f"\nCompiling: {tex_file}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Engines: {', '.join(engine_ids) or 'none (fallback only)'}")
    typer.echo("")

    async def _compile():
        async with open_pipeline(settings) as pipeline:
            return await pipeline.compile(source)

    result = asyncio.run(_compile())

    output_path = output or tex_file.with_suffix(".pdf")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.document)

    typer.echo("")
    if result.success and result.tier == "fallback":
        typer.secho("! Fallback preview produced", fg=typer.colors.YELLOW, bold=True)
    elif result.success:
        typer.secho(
            f"✓ Typeset by {result.engine_id} ({result.tier} markup)", fg=typer.colors.GREEN, bold=True
        )
    else:
        typer.secho(
            f"✗ Compilation failed with {len(result.errors)} errors", fg=typer.colors.RED, bold=True
        )
        for error in result.errors[:10]:
            typer.secho(f"  - {error}", fg=typer.colors.RED)

    warning_limit = len(result.warnings) if verbose else 3
    for warning in result.warnings[:warning_limit]:
        typer.echo(f"  - {warning}")
    if len(result.warnings) > warning_limit:
        typer.echo(f"  ... and {len(result.warnings) - warning_limit} more warnings (use --verbose)")

    typer.echo(f"  PDF: {output_path} ({result.page_count or '?'} pages, {result.elapsed_s:.1f}s)")
    if log_file:
        typer.echo(f"  Log: {log_file}")

    if preview:
        typer.echo("")
        typer.secho("Document text:", bold=True)
        typer.echo(extract_pdf_text(result.document))
    typer.echo("")

    raise typer.Exit(code=0 if result.success else 1)


@app.command("validate")
def validate_command(
    tex_file: Annotated[Path, typer.Argument(help="Resume markup (.tex)")],
):
    """
    Check markup structure (document markers and brace balance) without compiling.

    Examples:\n

        $ compile_markup.py validate resume.tex
    """
    try:
        validate(read_markup(tex_file)).raise_for_errors()
    except MarkupValidationError as e:
        typer.secho(f"\n✗ {len(e.errors)} structural errors", fg=typer.colors.RED, bold=True)
        for error in e.errors:
            typer.secho(f"  - {error}", fg=typer.colors.RED)
        typer.echo("")
        raise typer.Exit(code=1)

    typer.secho("\n✓ Markup is structurally valid\n", fg=typer.colors.GREEN, bold=True)


@app.command("simplify")
def simplify_command(
    tex_file: Annotated[Path, typer.Argument(help="Resume markup (.tex)")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write simplified markup here instead of stdout"),
    ] = None,
):
    """
    Rewrite markup for wider engine compatibility.

    Drops icon-font packages, replaces glyph macros with text labels, and
    resets page geometry, leaving the document content untouched.

    Examples:\n

        $ compile_markup.py simplify resume.tex                  # Print to stdout

        $ compile_markup.py simplify resume.tex -o simple.tex    # Save to file
    """
    source = read_markup(tex_file)
    simplified = simplify(source)

    if output is None:
        typer.echo(simplified)
        return

    output.write_text(simplified, encoding="utf-8")
    status = "unchanged" if simplified == source else "simplified"
    typer.secho(f"\n✓ Markup {status}: {output}\n", fg=typer.colors.GREEN, bold=True)


if __name__ == "__main__":
    app()
