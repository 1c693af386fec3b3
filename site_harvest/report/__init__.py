"""site_harvest.report: манифест (JSON) и HTML-отчёт о структуре сайта."""

from __future__ import annotations

from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import default_manifest_name, load_manifest, render_json

__all__ = ["render_json", "render_html", "load_manifest", "default_manifest_name"]
