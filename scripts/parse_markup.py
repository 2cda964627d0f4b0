#!/usr/bin/env python3
"""
Command-line interface for parsing resume markup into a structured YAML model.

Shows what the fallback path would recover from a document: header fields,
classified sections and their entries.
"""

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from resumepilot.contexts.parsing import parse
from resumepilot.contexts.parsing.logger import setup_parsing_logger

load_dotenv()

app = typer.Typer(
    add_completion=False,
    help="Parse resume markup (Jake-style, moderncv, plain article) into structured YAML",
)


@app.command()
def main(
    tex_file: Annotated[Path, typer.Argument(help="Resume markup (.tex)")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write YAML here instead of stdout"),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log which strategy matched each section"),
    ] = False,
):
    """
    Parse a .tex resume and dump the recovered model as YAML.

    Examples:\n

        $ parse_markup.py resume.tex                 # Print YAML

        $ parse_markup.py resume.tex -o resume.yaml  # Save YAML
    """
    if not tex_file.exists():
        typer.secho(f"Error: File not found: {tex_file}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    setup_parsing_logger(console_level="DEBUG" if debug else "INFO")

    model = parse(tex_file.read_text(encoding="utf-8"))
    yaml_text = OmegaConf.to_yaml(OmegaConf.create(model.to_dict()))

    if output is None:
        typer.echo(yaml_text)
        return

    output.write_text(yaml_text, encoding="utf-8")
    typer.secho(f"\n✓ Model written: {output}\n", fg=typer.colors.GREEN, bold=True)


if __name__ == "__main__":
    app()
