from pathlib import Path
from typing import Optional

import click

from dtsgen.errors import GeneratorError
from dtsgen.logger import logger, setup_logging
from dtsgen.models import Module
from dtsgen.parser import parse_code
from dtsgen.settings import GeneratorSettings, load_settings
from dtsgen.writer import format_module


def _parse_source(source: Path, settings: GeneratorSettings) -> Module:
    module_name = settings.module_name or source.stem
    logger.debug("Parsing source", path=str(source), module=module_name)
    try:
        return parse_code(
            source.read_text(encoding="utf-8"), module_name, settings.resolver
        )
    except GeneratorError as ex:
        click.echo(f"Error: {ex}", err=True)
        raise SystemExit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def main(ctx: click.Context) -> None:
    """
    Generate TypeScript declaration files from JSDoc-annotated JavaScript.
    Set DTSGEN_DEBUG=1 for debug logging on stderr.
    """
    settings = load_settings()
    setup_logging(settings.debug)
    ctx.obj = settings


@main.command()
@click.argument(
    "source",
    type=click.Path(
        exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path
    ),
)
@click.argument(
    "out_file",
    required=False,
    type=click.Path(file_okay=True, dir_okay=False, writable=True, path_type=Path),
)
@click.pass_obj
def generate(
    settings: GeneratorSettings, source: Path, out_file: Optional[Path]
) -> None:
    """
    Write the declaration file of SOURCE to OUT_FILE, or print it.
    """
    module = _parse_source(source, settings)

    emitter = settings.emitter
    if out_file is not None:
        text = format_module(module, emitter.model_copy(update={"colors": False}))
        out_file.write_text(text, encoding="utf-8")
        logger.info("Declaration file written", path=str(out_file))
        return

    click.echo(format_module(module, emitter), nl=False)


@main.command()
@click.argument(
    "source",
    type=click.Path(
        exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path
    ),
)
@click.pass_obj
def inspect(settings: GeneratorSettings, source: Path) -> None:
    """
    Print the validated declaration model of SOURCE as JSON.
    """
    module = _parse_source(source, settings)
    click.echo(module.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
