"""Entry point: servergen / python -m servergen

Reads an OpenAPI file and writes a generated server project.
"""

from __future__ import annotations

import click

from . import generate_code
from .errors import GeneratorError
from .gen_logging import configure_logging
from .targets import available_targets


@click.command(help="Generate server code from an OpenAPI specification.")
@click.option(
    "--in", "-i", "spec_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to input OpenAPI specification (JSON or YAML)",
)
@click.option(
    "--lang", "-l", "language",
    default="python-fastapi",
    show_default=True,
    type=click.Choice(available_targets()),
    help="Target language/framework for generation",
)
@click.option(
    "--out", "-o", "output_dir",
    default="./code",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Output directory for generated code",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug output.")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only show warnings and errors.")
def main(spec_path: str, language: str, output_dir: str, verbose: bool, quiet: bool) -> None:
    configure_logging(verbose=verbose, quiet=quiet)
    try:
        generate_code(spec_path, language, output_dir)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Successfully generated {language} project at {output_dir}")


if __name__ == "__main__":
    main()
