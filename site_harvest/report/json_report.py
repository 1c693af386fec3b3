# site_harvest/report/json_report.py

"""
Манифест discovery в JSON: запись SiteStructure и чтение списка URL обратно.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from site_harvest.aggregator import SiteStructure
from site_harvest.exceptions import ManifestError
from site_harvest.utils import url_domain


def default_manifest_name(site_url: str) -> str:
    """Имя файла манифеста по умолчанию: ``manifest-<host>.json``."""
    return f"manifest-{url_domain(site_url) or 'site'}.json"


def render_json(structure: SiteStructure, output_path: Union[Path, str]) -> Path:
    """
    Сохраняет SiteStructure в формате манифеста по указанному пути.

    :param structure: результат discovery
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    path = render_json(structure, 'manifest-example.com.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(structure.to_dict(), f, ensure_ascii=False, indent=2)

    return output


def load_manifest(path: Union[Path, str]) -> List[str]:
    """
    Читает манифест и возвращает список URL из поля ``urls``.

    Отсутствующий файл, битый JSON или отсутствие массива ``urls`` дают ManifestError.
    """
    manifest = Path(path).expanduser()
    if not manifest.is_file():
        raise ManifestError(f"Manifest file not found: {manifest}")
    try:
        data = json.loads(manifest.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Cannot read manifest {manifest}: {exc}", cause=exc) from exc
    urls = data.get('urls') if isinstance(data, dict) else None
    if not isinstance(urls, list):
        raise ManifestError(f"Manifest {manifest} has no 'urls' array")
    return [str(u) for u in urls if isinstance(u, str) and u.strip()]
