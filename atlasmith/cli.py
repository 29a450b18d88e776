"""
Atlasmith CLI - Command-line interface for packing sprite atlases
"""

import logging
import sys

import click
from pydantic import ValidationError

from atlasmith.build import build_atlas
from atlasmith.config import AtlasConfig, load_config
from atlasmith.exceptions import AtlasError, PackError, PackFailedError
from atlasmith.packing.grower import PageSpec
from atlasmith.schema.layout_io import load_layout


class SizeParam(click.ParamType):
    """Page size as 'N' (square) or 'WxH'."""
    name = "size"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        try:
            if 'x' in value.lower():
                w, h = value.lower().split('x', 1)
                return int(w), int(h)
            return int(value), int(value)
        except ValueError:
            self.fail(f"{value!r} is not a size like 256 or 512x256", param, ctx)


class GrowthParam(click.ParamType):
    """Growth step: 'pow2' or a pixel increment."""
    name = "growth"

    def convert(self, value, param, ctx):
        if isinstance(value, int) or value == 'pow2':
            return value
        try:
            return int(value)
        except ValueError:
            self.fail(f"{value!r} is neither 'pow2' nor an integer", param, ctx)


def _report_failures(error: PackError) -> None:
    for failure in error.failures:
        click.secho(f"  {failure.sprite_id}: {failure.reason.value} ({failure.message})", fg='red', err=True)


@click.group()
@click.version_option(package_name='atlasmith')
def cli():
    """
    Atlasmith - Pack sprites into texture atlases.

    Examples:
        atlasmith pack sprites/ fonts/m5x7.fnt -o build/
        atlasmith inspect build/atlas.json
    """
    pass


@cli.command()
@click.argument('sources', nargs=-1)
@click.option('-o', '--output', required=True, help='Output directory for page images and the layout index')
@click.option('--config', 'config_path', default=None, help='JSON config file (options below override it)')
@click.option('--name', default=None, help='Base name of written files (default: atlas)')
@click.option('--initial-size', type=SizeParam(), default=None, help='Initial page size, e.g. 256 or 512x256')
@click.option('--max-size', type=SizeParam(), default=None, help='Maximum page size, e.g. 2048')
@click.option('--growth', type=GrowthParam(), default=None, help="Growth step: 'pow2' or pixels")
@click.option('--padding', type=click.IntRange(min=0), default=None, help='Padding around every sprite')
@click.option('--rotate/--no-rotate', default=None, help='Allow 90 degree rotation')
@click.option('--extrude/--no-extrude', default=None, help='Fill padding with edge pixels')
@click.option('--single-page', is_flag=True, default=False, help='Fail instead of opening a second page')
@click.option('--format', 'fmt', type=click.Choice(['json', 'bin']), default=None, help='Layout index format')
@click.option('--verbose', '-v', is_flag=True, help='Show packing details')
def pack(sources, output, config_path, name, initial_size, max_size, growth, padding,
         rotate, extrude, single_page, fmt, verbose):
    """
    Pack sprite sources into atlas pages.

    SOURCES are PNG files, directories of PNGs, BMFont .fnt files or Tiled
    .tsj tilesets.

    Examples:
        atlasmith pack sprites/ -o build/
        atlasmith pack sprites/ --max-size 1024 --padding 2 --rotate -o build/
        atlasmith pack --config atlas.json -o build/
    """
    if verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    try:
        config = load_config(config_path) if config_path else AtlasConfig()

        page = config.page.model_dump()
        if initial_size:
            page['initial_width'], page['initial_height'] = initial_size
        if max_size:
            page['max_width'], page['max_height'] = max_size
        if growth is not None:
            page['growth_step'] = growth
        if single_page:
            page['allow_new_pages'] = False

        updates = {'page': PageSpec(**page), 'sources': config.sources + list(sources)}
        if name:
            updates['name'] = name
        if padding is not None:
            updates['padding'] = padding
        if rotate is not None:
            updates['allow_rotation'] = rotate
        if extrude is not None:
            updates['extrude'] = extrude
        if fmt:
            updates['format'] = fmt
        config = AtlasConfig.model_validate({**config.model_dump(), **updates})

        if not config.sources:
            raise ValueError("No sources given")

        click.echo(f"Packing {len(config.sources)} source(s) into {output}")
        result = build_atlas(config, output)

        for page_info, texture in zip(result.layout.pages, result.textures):
            click.echo(f"  page {page_info.index}: {page_info.width}x{page_info.height}, "
                       f"{len(page_info.placements)} sprites -> {texture}")
        click.secho(f"✓ Success! Layout written to {result.index}", fg='green')

    except PackFailedError as e:
        click.secho(f"Pack Error: {e}", fg='red', err=True)
        _report_failures(e)
        sys.exit(1)
    except PackError as e:
        click.secho(f"Invalid Sprites: {e}", fg='red', err=True)
        _report_failures(e)
        sys.exit(1)
    except (FileNotFoundError, AtlasError) as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)
    except (ValueError, ValidationError) as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)
    except Exception as e:
        click.secho(f"Unexpected error: {e}", fg='red', err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@cli.command()
@click.argument('layout_path')
@click.option('--verbose', '-v', is_flag=True, help='List every placement')
def inspect(layout_path, verbose):
    """
    Summarize a layout index (.json or .bin).

    Examples:
        atlasmith inspect build/atlas.json
        atlasmith inspect build/atlas.bin -v
    """
    try:
        layout = load_layout(layout_path)
    except (FileNotFoundError, ValueError, AtlasError) as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)

    click.echo(f"{len(layout.pages)} page(s), {len(layout.placements)} sprites, {len(layout.failures)} failures")
    for page in layout.pages:
        texture = f" [{page.texture}]" if page.texture else ""
        click.echo(f"Page {page.index}: {page.width}x{page.height}{texture}, "
                   f"{len(page.placements)} sprites, {page.fill_ratio:.1%} filled")
        if verbose:
            for p in page.placements:
                rotated = " rotated" if p.rotated else ""
                click.echo(f"  {p.sprite_id}: ({p.x}, {p.y}) {p.width}x{p.height}{rotated}")
    for font in layout.fonts:
        click.echo(f"Font {font.name}: line height {font.line_height}, base {font.base}, "
                   f"{len(font.glyph_only)} empty glyphs, {len(font.kernings)} kerning pairs")
    for failure in layout.failures:
        click.secho(f"Failed: {failure.sprite_id} ({failure.reason.value})", fg='yellow')


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
