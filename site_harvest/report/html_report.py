"""site_harvest.report.html_report: HTML-отчёт о структуре сайта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_harvest.aggregator import SiteStructure

TEMPLATE_NAME = "structure.html.j2"
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def render_html(
    structure: SiteStructure,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
    *,
    site_url: str = "",
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        structure: объект SiteStructure.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с шаблоном ``structure.html.j2``
            (по умолчанию шаблон из пакета).
        site_url: адрес сайта для заголовка отчёта.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "site_url": site_url,
        "total_urls": structure.total_urls,
        "sections": sorted(structure.sections.items(), key=lambda item: (-item[1], item[0])),
        "urls": structure.urls,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
