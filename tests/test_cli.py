"""
Tests for Atlasmith CLI

These tests verify the CLI command structure, option handling and error
reporting. Sprites are small PNGs generated per test.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image
from atlasmith.cli import cli


@pytest.fixture
def sprite_dir(tmp_path):
    directory = tmp_path / "sprites"
    directory.mkdir()
    Image.new('RGBA', (16, 16), (255, 0, 0, 255)).save(directory / "a.png")
    Image.new('RGBA', (16, 16), (0, 255, 0, 255)).save(directory / "b.png")
    return directory


class TestCLI:
    """Test CLI command structure and basic functionality"""

    def test_cli_help(self):
        """Test that CLI help works"""
        runner = CliRunner()
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'Atlasmith' in result.output
        assert 'pack' in result.output
        assert 'inspect' in result.output

    def test_cli_version(self):
        """Test that version flag works"""
        runner = CliRunner()
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_pack_help(self):
        """Test that pack command help works"""
        runner = CliRunner()
        result = runner.invoke(cli, ['pack', '--help'])
        assert result.exit_code == 0
        assert 'Pack sprite sources' in result.output
        assert '--output' in result.output
        assert '--max-size' in result.output
        assert '--single-page' in result.output

    def test_pack_missing_output(self, sprite_dir):
        """Test that pack command requires output flag"""
        runner = CliRunner()
        result = runner.invoke(cli, ['pack', str(sprite_dir)])
        assert result.exit_code != 0
        assert 'output' in result.output.lower() or 'required' in result.output.lower()

    def test_pack_without_sources(self, tmp_path):
        """Test that pack refuses to run with nothing to pack"""
        runner = CliRunner()
        result = runner.invoke(cli, ['pack', '-o', str(tmp_path / "out")])
        assert result.exit_code == 1
        assert 'No sources given' in result.output

    def test_pack_works(self, tmp_path, sprite_dir):
        """Test that pack writes page images and the layout index"""
        runner = CliRunner()
        out = tmp_path / "out"
        result = runner.invoke(cli, [
            'pack', str(sprite_dir),
            '-o', str(out),
            '--initial-size', '32x16',
            '--max-size', '64',
            '--padding', '0',
            '--name', 'ui',
        ])

        assert result.exit_code == 0, result.output
        assert 'Success' in result.output
        assert (out / "ui_0.png").exists()

        document = json.loads((out / "ui.json").read_text())
        assert document["pages"][0]["width"] == 32
        assert document["pages"][0]["height"] == 16
        assert sorted(s["id"] for s in document["pages"][0]["sprites"]) == ["a", "b"]

    def test_pack_binary_format(self, tmp_path, sprite_dir):
        """Test that --format bin writes a binary index"""
        runner = CliRunner()
        out = tmp_path / "out"
        result = runner.invoke(cli, ['pack', str(sprite_dir), '-o', str(out), '--format', 'bin'])
        assert result.exit_code == 0, result.output
        assert (out / "atlas.bin").read_bytes()[:4] == b"ATLS"

    def test_pack_with_config(self, tmp_path, sprite_dir):
        """Test that config files are read and options override them"""
        config_path = tmp_path / "atlas.json"
        config_path.write_text(json.dumps({"name": "fromconfig", "padding": 0, "sources": ["sprites"]}))

        runner = CliRunner()
        out = tmp_path / "out"
        result = runner.invoke(cli, ['pack', '--config', str(config_path), '-o', str(out), '--name', 'override'])
        assert result.exit_code == 0, result.output
        assert (out / "override.json").exists()
        assert not (out / "fromconfig.json").exists()

    def test_pack_invalid_sprite(self, tmp_path, sprite_dir):
        """Test that sprites larger than the page ceiling are reported"""
        runner = CliRunner()
        result = runner.invoke(cli, [
            'pack', str(sprite_dir), '-o', str(tmp_path / "out"),
            '--initial-size', '8', '--max-size', '8',
        ])
        assert result.exit_code == 1
        assert 'Invalid Sprites' in result.output
        assert 'invalid_sprite' in result.output

    def test_pack_single_page_overflow(self, tmp_path, sprite_dir):
        """Test that leftover sprites are reported in single page mode"""
        runner = CliRunner()
        result = runner.invoke(cli, [
            'pack', str(sprite_dir), '-o', str(tmp_path / "out"),
            '--initial-size', '16', '--max-size', '16', '--padding', '0', '--single-page',
        ])
        assert result.exit_code == 1
        assert 'Pack Error' in result.output
        assert 'b: page_capacity_exhausted' in result.output

    def test_pack_bad_size(self, tmp_path, sprite_dir):
        """Test that malformed sizes are rejected by option parsing"""
        runner = CliRunner()
        result = runner.invoke(cli, ['pack', str(sprite_dir), '-o', str(tmp_path), '--max-size', 'huge'])
        assert result.exit_code == 2
        assert 'huge' in result.output

    def test_pack_initial_larger_than_max(self, tmp_path, sprite_dir):
        """Test that inconsistent page sizes fail cleanly"""
        runner = CliRunner()
        result = runner.invoke(cli, ['pack', str(sprite_dir), '-o', str(tmp_path), '--max-size', '128'])
        assert result.exit_code == 1
        assert 'Error' in result.output

    def test_pack_missing_source(self, tmp_path):
        """Test that a missing source path is reported"""
        runner = CliRunner()
        result = runner.invoke(cli, ['pack', '/nonexistent/sprites', '-o', str(tmp_path)])
        assert result.exit_code == 1
        assert 'not found' in result.output.lower()

    def test_inspect(self, tmp_path, sprite_dir):
        """Test that inspect summarizes a written layout"""
        runner = CliRunner()
        out = tmp_path / "out"
        runner.invoke(cli, ['pack', str(sprite_dir), '-o', str(out)])

        result = runner.invoke(cli, ['inspect', str(out / "atlas.json"), '-v'])
        assert result.exit_code == 0
        assert '1 page(s), 2 sprites, 0 failures' in result.output
        assert 'Page 0: 256x256 [atlas_0.png]' in result.output
        assert 'a: (' in result.output

    def test_inspect_missing_file(self):
        """Test that inspect handles a missing layout"""
        runner = CliRunner()
        result = runner.invoke(cli, ['inspect', str(Path('/nonexistent/atlas.json'))])
        assert result.exit_code == 1
        assert 'not found' in result.output.lower()

    def test_inspect_font(self, tmp_path):
        """Test that inspect lists the font blocks of a layout"""
        Image.new('RGBA', (8, 8), (255, 255, 255, 255)).save(tmp_path / "dots_0.png")
        (tmp_path / "dots.fnt").write_text(
            'info face="dots"\ncommon lineHeight=8 base=6\npage id=0 file="dots_0.png"\n'
            'char id=32 width=0 height=0 xadvance=3\nchar id=46 x=0 y=0 width=2 height=2 xadvance=3\n'
        )
        runner = CliRunner()
        out = tmp_path / "out"
        runner.invoke(cli, ['pack', str(tmp_path / "dots.fnt"), '-o', str(out)])

        result = runner.invoke(cli, ['inspect', str(out / "atlas.json")])
        assert result.exit_code == 0
        assert 'Font dots: line height 8, base 6, 1 empty glyphs, 0 kerning pairs' in result.output
