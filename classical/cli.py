"""
ClassiCore CLI
==============

Click-based command-line interface for the classical cipher lab.
Provides subcommands to encode, decode and visualize text with any
cipher family, analyse ciphertext, list the LCG presets and generate
one-time-pad keys.

Usage::

    python -m classical encode caesar "HELLO" --key 3
    python -m classical decode vigenere "LXFOPVEFRNHR" --key LEMON
    python -m classical visualize hill "HELP" --key 3,3,2,5
    python -m classical encode super "ATTACK AT DAWN" --key LEMON --key2 ZEBRA --order trans-sub
    python -m classical encode lcg "Hello" --preset MINSTD --seed 42
    python -m classical analyze vigenere "<ciphertext>"
    python -m classical presets
    python -m classical keygen 20 --format hex

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import json
from typing import Any, Optional

import click
from rich.markup import escape

from shared.config import ClassiConfig
from shared.console import ClassiConsole

from classical import __version__
from classical.core.engine import KEY_FORMATS, CipherEngine
from classical.core.errors import CipherError
from classical.output.console import ClassiConsoleOutput


# ===================================================================== #
#  CLI Group
# ===================================================================== #

@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to ClassiCore configuration file (TOML).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Output format (default from configuration).",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress the banner.",
)
@click.version_option(__version__, prog_name="classicore")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    output: Optional[str],
    quiet: bool,
) -> None:
    """ClassiCore -- Classical Cipher Lab & Cryptanalysis Toolkit.

    Encode, decode and visualize classical ciphers, and analyse
    ciphertext with frequency, index-of-coincidence and Kasiski tools.
    """
    ctx.ensure_object(dict)

    classi_config = ClassiConfig.load(config) if config else ClassiConfig()
    output_format = output or classi_config.global_settings.output_format
    ctx.obj["config"] = classi_config
    ctx.obj["output_format"] = output_format

    console = ClassiConsole()
    ctx.obj["console"] = console
    ctx.obj["engine"] = CipherEngine(classi_config)
    ctx.obj["display"] = ClassiConsoleOutput(console)

    if not quiet and output_format == "console":
        console.banner(version=__version__)


def _fail(ctx: click.Context, exc: Exception) -> None:
    """Report a cipher error and exit with status 1."""
    console: ClassiConsole = ctx.obj["console"]
    console.error(escape(str(exc)))
    ctx.exit(1)


def _emit_json(record: Any) -> None:
    if record is None:
        click.echo("null")
    else:
        click.echo(record.model_dump_json(indent=2))


# Options shared by the four cipher commands.
_FAMILY_ARGUMENT = click.argument("family")
_TEXT_ARGUMENT = click.argument("text")
_KEY_OPTIONS = [
    click.option("--key", "-k", default=None, help="Key: shift, keyword, rails, matrix (a,b,c,d) or LCG params."),
    click.option("--key2", default=None, help="Second key (double: key2, super: transposition key)."),
    click.option(
        "--order",
        type=click.Choice(["sub-trans", "trans-sub"]),
        default=None,
        help="Super encryption stage order.",
    ),
    click.option("--preset", default=None, help="LCG preset name (see `presets`)."),
    click.option("--seed", type=int, default=None, help="LCG seed (random when omitted)."),
]


def _key_options(func):
    for option in reversed(_KEY_OPTIONS):
        func = option(func)
    return func


# ===================================================================== #
#  Subcommands
# ===================================================================== #

@cli.command()
@_FAMILY_ARGUMENT
@_TEXT_ARGUMENT
@_key_options
@click.pass_context
def encode(ctx: click.Context, family: str, text: str, key, key2, order, preset, seed) -> None:
    """Encode TEXT with the cipher FAMILY."""
    _run_transform(ctx, "encode", family, text, key, key2, order, preset, seed)


@cli.command()
@_FAMILY_ARGUMENT
@_TEXT_ARGUMENT
@_key_options
@click.pass_context
def decode(ctx: click.Context, family: str, text: str, key, key2, order, preset, seed) -> None:
    """Decode TEXT with the cipher FAMILY."""
    _run_transform(ctx, "decode", family, text, key, key2, order, preset, seed)


def _run_transform(
    ctx: click.Context,
    operation: str,
    family: str,
    text: str,
    key: Optional[str],
    key2: Optional[str],
    order: Optional[str],
    preset: Optional[str],
    seed: Optional[int],
) -> None:
    engine: CipherEngine = ctx.obj["engine"]
    display: ClassiConsoleOutput = ctx.obj["display"]
    try:
        material = engine.parse_key(
            family, key, key2=key2, order=order, preset=preset, seed=seed
        )
        result = getattr(engine, operation)(family, text, material)
    except CipherError as exc:
        _fail(ctx, exc)
        return

    if ctx.obj["output_format"] == "json":
        _emit_json(result)
    else:
        display.display_result(result)


@cli.command()
@_FAMILY_ARGUMENT
@_TEXT_ARGUMENT
@_key_options
@click.pass_context
def visualize(ctx: click.Context, family: str, text: str, key, key2, order, preset, seed) -> None:
    """Show each step of encoding TEXT with FAMILY."""
    engine: CipherEngine = ctx.obj["engine"]
    display: ClassiConsoleOutput = ctx.obj["display"]
    try:
        material = engine.parse_key(
            family, key, key2=key2, order=order, preset=preset, seed=seed
        )
        record = engine.visualize(family, text, material)
    except CipherError as exc:
        _fail(ctx, exc)
        return

    if ctx.obj["output_format"] == "json":
        _emit_json(record)
    else:
        display.display_visualization(record)


@cli.command()
@_FAMILY_ARGUMENT
@_TEXT_ARGUMENT
@_key_options
@click.pass_context
def analyze(ctx: click.Context, family: str, text: str, key, key2, order, preset, seed) -> None:
    """Analyse ciphertext TEXT as if produced by FAMILY.

    The key is optional; when given, key-dependent assessments are added.
    """
    engine: CipherEngine = ctx.obj["engine"]
    display: ClassiConsoleOutput = ctx.obj["display"]
    try:
        material = None
        if key is not None or preset is not None:
            material = engine.parse_key(
                family, key, key2=key2, order=order, preset=preset, seed=seed
            )
        record = engine.analyze(family, text, material)
    except CipherError as exc:
        _fail(ctx, exc)
        return

    if ctx.obj["output_format"] == "json":
        _emit_json(record)
    else:
        display.display_analysis(record)


@cli.command()
@click.pass_context
def presets(ctx: click.Context) -> None:
    """List the built-in LCG presets."""
    engine: CipherEngine = ctx.obj["engine"]
    table = engine.presets()
    if ctx.obj["output_format"] == "json":
        click.echo(json.dumps(
            {name: preset.model_dump() for name, preset in table.items()}, indent=2
        ))
    else:
        ctx.obj["display"].display_presets(table)


@cli.command()
@click.argument("length", type=click.IntRange(min=1))
@click.option(
    "--format", "fmt",
    type=click.Choice(KEY_FORMATS),
    default="text",
    help="Key representation.",
)
@click.pass_context
def keygen(ctx: click.Context, length: int, fmt: str) -> None:
    """Generate a random one-time-pad key of LENGTH letters."""
    engine: CipherEngine = ctx.obj["engine"]
    key = engine.generate_key(length, fmt)
    if ctx.obj["output_format"] == "json":
        click.echo(json.dumps({"format": fmt, "key": key}, indent=2))
    else:
        ctx.obj["display"].display_key(key, fmt)


# ===================================================================== #
#  Entry Point
# ===================================================================== #

def main() -> None:
    """Main entry point for the ClassiCore CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
