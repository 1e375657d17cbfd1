"""CLI entry point for optar.

Commands:
    optar encode INPUT   Encode a file (or stdin) into printable pages
    optar info           Show the capacity of a page layout
    optar config         Show or save the effective configuration
"""

from __future__ import annotations

import logging
from typing import BinaryIO

import click

from ..errors import OptarError
from ..visual.geometry import LayoutConfig
from ..visual.packer import encode_stream
from ..visual.renderer import FileSink
from .config import AppConfig, DEFAULT_CONFIG_PATH, load_config, save_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _resolve_layout(config: AppConfig, layout: str | None) -> LayoutConfig:
    """Layout from the command line string if given, else from the config."""
    if layout is None:
        try:
            return config.to_layout_config()
        except ValueError as exc:
            raise click.ClickException(
                f"Invalid layout in configuration: {exc}") from exc
    try:
        parsed = LayoutConfig.from_string(layout)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--layout") from exc
    config.apply_layout(parsed)
    return parsed


@click.group()
@click.option("--config", "-c", type=click.Path(), default=None,
              help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Enable verbose/debug logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """optar: archive data on paper as printable raster pages."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["config"] = load_config(config)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("input_file", metavar="INPUT", type=click.File("rb"))
@click.option("--output", "-o", type=str, default=None,
              help="Base name of the page files (default: optar_out)")
@click.option("--layout", "-l", type=str, default=None,
              help="Layout string _-XCROSSES-YCROSSES-CPITCH-CHALF-FEC-BORDER-TEXTHEIGHT")
@click.option("--format", "-f", "ext", type=str, default=None,
              help="Image file extension (default: png)")
@click.pass_context
def encode(ctx: click.Context, input_file: BinaryIO, output: str | None,
           layout: str | None, ext: str | None) -> None:
    """Encode INPUT (a path, or - for stdin) into page images."""
    config: AppConfig = ctx.obj["config"]
    if output is not None:
        config.output_base = output
    if ext is not None:
        config.output_ext = ext

    level = "DEBUG" if ctx.obj.get("verbose") else config.log_level
    _setup_logging(level)

    page_layout = _resolve_layout(config, layout)
    sink = FileSink(ext=config.output_ext)
    try:
        paths = encode_stream(input_file, page_layout, sink,
                              base_name=config.output_base)
    except (OptarError, OSError, NotImplementedError) as exc:
        raise click.ClickException(str(exc)) from exc

    for path in paths:
        click.echo(path)


@cli.command()
@click.option("--layout", "-l", type=str, default=None,
              help="Layout string _-XCROSSES-YCROSSES-CPITCH-CHALF-FEC-BORDER-TEXTHEIGHT")
@click.pass_context
def info(ctx: click.Context, layout: str | None) -> None:
    """Show page size and channel capacity of a layout."""
    config: AppConfig = ctx.obj["config"]
    cfg = _resolve_layout(config, layout)

    click.echo(f"Layout:        {cfg.to_string()}")
    click.echo(f"FEC:           {cfg.fec_order} "
               f"({cfg.fec_order.small_bits}/{cfg.fec_order.large_bits} bits)")
    click.echo(f"Page size:     {cfg.width}x{cfg.height} px")
    click.echo(f"Total bits:    {cfg.total_bits}")
    click.echo(f"Used bits:     {cfg.used_bits}")
    click.echo(f"Symbols/page:  {cfg.fec_syms}")
    click.echo(f"Net bits:      {cfg.net_bits}")
    click.echo(f"Net bytes:     {cfg.net_bits // 8}")


@cli.command("config")
@click.option("--layout", "-l", type=str, default=None,
              help="Layout string to store instead of the current one")
@click.option("--save", "-s", is_flag=True, default=False,
              help="Save the configuration to the config file")
@click.pass_context
def config_cmd(ctx: click.Context, layout: str | None, save: bool) -> None:
    """Show the effective configuration, optionally saving it."""
    config: AppConfig = ctx.obj["config"]
    cfg = _resolve_layout(config, layout)
    click.echo(cfg.to_string())
    if save:
        save_config(config, ctx.obj["config_path"])
        click.echo(f"Configuration saved to {ctx.obj['config_path'] or DEFAULT_CONFIG_PATH}")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
