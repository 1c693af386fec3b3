# File: tests/test_cli.py
"""Тесты для CLI (`site_harvest/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `discover`, `crawl`, `config`, `--version`, а также обработку ошибок.
"""
import importlib
import json

import pytest
from click.testing import CliRunner

from site_harvest.aggregator import analyze_structure
from site_harvest.cli import cli
from site_harvest.engine import IngestSummary
from site_harvest.keys import KeyScheme
from site_harvest.storage import FileSystemSink, LoggingSink

# the package re-exports the click group under the same name as the module
cli_module = importlib.import_module("site_harvest.cli")


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Без configs/default.yaml в рабочем каталоге используются значения по умолчанию."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def fake_discovery(monkeypatch):
    calls = []

    async def fake(url, cfg):
        calls.append(url)
        return analyze_structure(["https://site.test/", "https://site.test/blog/a", "https://site.test/blog/b"])

    monkeypatch.setattr(cli_module, "run_discovery", fake)
    return calls


@pytest.fixture()
def fake_ingest(monkeypatch):
    calls = []

    async def fake(request, cfg, sink):
        calls.append((request, cfg, sink))
        return IngestSummary(pages=2, stored=2)

    monkeypatch.setattr(cli_module, "run_ingest", fake)
    return calls


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteHarvest" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text("renderer: static\nretry_times: 4\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["renderer"] == "static"
    assert data["retry_times"] == 4


def test_invalid_config_file_exits_with_error(tmp_path):
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text("- not\n- a mapping\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1


def test_discover_writes_manifest(tmp_path, fake_discovery):
    html = tmp_path / "structure.html"
    result = CliRunner().invoke(cli, ["discover", "https://site.test", "--html", str(html)])

    assert result.exit_code == 0, result.output
    assert fake_discovery == ["https://site.test"]
    assert "Total URLs found: 3" in result.output
    assert "/blog/: 2" in result.output

    manifest = json.loads((tmp_path / "manifest-site.test.json").read_text(encoding="utf-8"))
    assert manifest["totalUrls"] == 3
    assert manifest["sections"] == {"/": 1, "/blog/": 2}
    assert "https://site.test/blog/a" in html.read_text(encoding="utf-8")


def test_crawl_manifest_to_output_dir(tmp_path, manifest_file, fake_ingest):
    out = tmp_path / "out"
    result = CliRunner().invoke(
        cli,
        ["crawl", "--manifest", str(manifest_file), "--output-dir", str(out), "--key-scheme", "hierarchical"],
    )

    assert result.exit_code == 0, result.output
    assert "Crawl completed. Pages: 2, stored: 2" in result.output
    request, cfg, sink = fake_ingest[0]
    assert request.include_urls == ["https://site.test/a", "https://site.test/b/"]
    assert request.seed_url == "https://site.test/a"
    assert cfg.key_scheme is KeyScheme.HIERARCHICAL
    assert isinstance(sink, FileSystemSink)


def test_crawl_url_with_excludes(tmp_path, fake_ingest):
    patterns = tmp_path / "exclude.txt"
    patterns.write_text("# skip login\n/login\n\n\\?page=\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli,
        ["crawl", "https://site.test/docs/", "-d", "1", "-m", "5", "-e", "/admin", "--exclude-file", str(patterns)],
    )

    assert result.exit_code == 0, result.output
    request, _, sink = fake_ingest[0]
    assert (request.max_depth, request.max_pages) == (1, 5)
    assert request.exclude_patterns == ["/admin", "/login", "\\?page="]
    assert isinstance(sink, LoggingSink)


@pytest.mark.parametrize(
    "args",
    [
        ["crawl"],
        ["crawl", "--manifest", "missing.json"],
        ["crawl", "https://site.test/", "-e", "(unclosed"],
        ["crawl", "https://site.test/", "--output-dir", "out", "--bucket", "b"],
    ],
)
def test_crawl_configuration_errors(args, fake_ingest):
    result = CliRunner().invoke(cli, args)
    assert result.exit_code == 1
    assert fake_ingest == []
