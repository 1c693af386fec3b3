# === FILE: site_harvest/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SiteHarvest для командной строки.

Команды:
  discover  Найти URL сайта (sitemap или пробный обход) и сохранить манифест
  crawl     Обойти сайт или манифест и сохранить страницы в каталог / S3
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Пример:
  site-harvest discover https://example.com --html structure.html
  site-harvest crawl --manifest manifest-example.com.json --output-dir out
"""
import asyncio
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import click

from site_harvest import __version__
from site_harvest.aggregator import SiteStructure
from site_harvest.config import CrawlRequest, HarvestConfig, build_request, load_config
from site_harvest.engine import DiscoveryService, IngestionService, IngestSummary
from site_harvest.exceptions import ConfigurationError
from site_harvest.keys import KeyScheme
from site_harvest.logger import DEFAULT_FORMAT, init_logging
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import default_manifest_name, load_manifest, render_json
from site_harvest.storage import StorageSink, build_sink

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str) -> NoReturn:
    click.secho(message, fg='red', err=True)
    sys.exit(1)


async def run_discovery(url: str, cfg: HarvestConfig) -> SiteStructure:
    return await DiscoveryService(url, cfg).discover()


async def run_ingest(request: CrawlRequest, cfg: HarvestConfig, sink: StorageSink) -> IngestSummary:
    return await IngestionService(request, cfg, sink).run()


def read_patterns(path: Path) -> List[str]:
    """Одна регулярка на строку; пустые строки и строки с # пропускаются."""
    lines = path.read_text(encoding='utf-8').splitlines()
    return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith('#')]


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteHarvest CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('discover', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Файл манифеста (default: manifest-<host>.json)'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт о структуре сайта'
)
@click.pass_context
def discover(ctx, url: str, output: Optional[Path], html_output: Optional[Path]):
    """Найти URL сайта и сохранить манифест для последующего crawl."""
    cfg = ctx.obj['config']
    try:
        structure = asyncio.run(run_discovery(url, cfg))
    except ConfigurationError as e:
        print_error(f'Ошибка конфигурации: {e}')

    click.echo('\n--- Site Structure Analysis ---')
    click.echo(f'Total URLs found: {structure.total_urls}')
    click.echo('Section breakdown:')
    for section, count in structure.sections.items():
        click.echo(f'  {section}: {count}')

    try:
        manifest_path = render_json(structure, output or Path(default_manifest_name(url)))
    except OSError as e:
        print_error(f'Ошибка при сохранении манифеста: {e}')
    click.echo(f'\nManifest saved to {manifest_path}')
    click.echo('Edit this file to filter URLs and then run:')
    click.echo(f'  site-harvest crawl --manifest {manifest_path} --output-dir <DIR>')

    if html_output:
        try:
            saved_html = render_html(structure, html_output, site_url=url)
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}')
        click.echo(f'HTML report: {saved_html}')


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False, default='')
@click.option('--depth', '-d', type=click.IntRange(min=0), default=2, show_default=True, help='Глубина обхода')
@click.option('--max-pages', '-m', type=click.IntRange(min=1), default=50, show_default=True, help='Лимит страниц')
@click.option('--exclude', '-e', 'excludes', multiple=True, help='Регулярка для исключения URL (можно несколько)')
@click.option(
    '--exclude-file', 'exclude_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Файл с регулярками, по одной на строку'
)
@click.option(
    '--manifest', 'manifest',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Манифест из discover: обойти только перечисленные URL'
)
@click.option('--resources/--no-resources', default=False, show_default=True, help='Скачивать картинки и документы')
@click.option(
    '--output-dir', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Сохранять записи в каталог'
)
@click.option('--bucket', default=None, help='Сохранять записи в бакет S3')
@click.option('--profile', default=None, envvar='AWS_PROFILE', help='AWS-профиль для S3')
@click.option('--region', default=None, envvar='AWS_REGION', help='AWS-регион для S3')
@click.option(
    '--key-scheme', 'key_scheme',
    default=None,
    type=click.Choice([s.value for s in KeyScheme]),
    help='Схема ключей (override key_scheme из конфига)'
)
@click.pass_context
def crawl(ctx, url, depth, max_pages, excludes, exclude_file, manifest, resources,
          output_dir, bucket, profile, region, key_scheme):
    """Обойти сайт (или манифест) и сохранить страницы."""
    cfg: HarvestConfig = ctx.obj['config']
    if key_scheme:
        cfg = cfg.model_copy(update={'key_scheme': KeyScheme(key_scheme)})

    try:
        include_urls = load_manifest(manifest) if manifest else []
        patterns = list(excludes) + (read_patterns(exclude_file) if exclude_file else [])
        request = build_request(
            seed_url=url,
            max_depth=depth,
            max_pages=max_pages,
            exclude_patterns=patterns,
            include_urls=include_urls,
            include_resources=resources,
        )
        sink = build_sink(output_dir, bucket, profile=profile, region=region)
    except ConfigurationError as e:
        print_error(f'Ошибка конфигурации: {e}')

    click.echo(f'Starting crawl for {request.seed_url} -> {sink!r}')
    summary = asyncio.run(run_ingest(request, cfg, sink))
    click.echo(
        f'Crawl completed. Pages: {summary.pages}, stored: {summary.stored}, '
        f'failed: {summary.failed}, resources: {summary.resources_stored}'
    )


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
