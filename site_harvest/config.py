# === FILE: site_harvest/config.py ===
"""
Модуль загрузки и валидации настроек SiteHarvest.
Схемы описаны на Pydantic: HarvestConfig (настройки процесса) и
CrawlRequest (параметры одного запуска обхода).
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Pattern, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from site_harvest.exceptions import ConfigurationError
from site_harvest.keys import KeyScheme
from site_harvest.utils import parse_url, url_domain

__all__ = ["HarvestConfig", "CrawlRequest", "build_request", "load_config"]


class HarvestConfig(BaseModel):
    """Настройки процесса: таймауты, рендерер, схема ключей, лимиты discovery."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field("SiteHarvestBot/1.0", min_length=1, description="Заголовок User-Agent.")
    navigation_timeout: float = Field(30.0, gt=0, description="Таймаут навигации на страницу (секунд).")
    fetch_timeout: float = Field(15.0, gt=0, description="Таймаут на загрузку sitemap/ресурса (секунд).")
    retry_times: int = Field(2, ge=0, description="Число повторов при 5xx/429 и сетевых ошибках.")
    renderer: Literal["browser", "static"] = Field("browser", description="Playwright или статический HTML.")
    headless: bool = Field(True, description="Запускать браузер без окна.")
    key_scheme: KeyScheme = Field(KeyScheme.HASH, description="Схема ключей хранилища.")
    sitemap_max_depth: int = Field(5, ge=0, description="Предел вложенности sitemap-index.")
    discovery_max_depth: int = Field(3, ge=0, description="Глубина запасного обхода при discovery.")
    discovery_max_pages: int = Field(200, ge=1, description="Лимит страниц запасного обхода.")
    min_image_size: int = Field(50, ge=0, description="Картинки меньше NxN считаются иконками.")
    resource_keywords: Tuple[str, ...] = Field(
        ("brochure", "specifications", "download"),
        description="Слова в тексте ссылки, помечающие документ для скачивания.",
    )

    @field_validator("resource_keywords", mode="after")
    def _lower_keywords(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(k.lower() for k in v if k)


class CrawlRequest(BaseModel):
    """Параметры одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: str = Field(..., description="Стартовый URL.")
    max_depth: Optional[int] = Field(None, ge=0, description="Глубина обхода, None = без ограничения.")
    max_pages: Optional[int] = Field(50, ge=1, description="Жёсткий лимит числа страниц.")
    exclude_patterns: List[str] = Field(default_factory=list, description="Регулярки для исключения URL.")
    include_urls: List[str] = Field(default_factory=list, description="Явный список URL (манифест).")
    include_resources: bool = Field(False, description="Скачивать картинки и документы страниц.")

    @model_validator(mode="before")
    @classmethod
    def _seed_from_manifest(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("seed_url") and data.get("include_urls"):
            data = {**data, "seed_url": data["include_urls"][0]}
        return data

    @field_validator("seed_url", mode="after")
    def _check_seed(cls, v: str) -> str:
        parts = parse_url(v)
        if parts is None or parts.scheme.lower() not in ("http", "https"):
            raise ValueError(f"seed URL must be an absolute http(s) URL, got {v!r}")
        return v.strip()

    @field_validator("exclude_patterns", mode="after")
    def _check_patterns(cls, v: List[str]) -> List[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid exclude pattern {pattern!r}: {exc}") from exc
        return v

    @property
    def manifest_mode(self) -> bool:
        return bool(self.include_urls)

    @property
    def page_limit(self) -> Optional[int]:
        """В режиме манифеста лимит равен длине манифеста."""
        if self.manifest_mode:
            return len(self.include_urls)
        return self.max_pages

    @property
    def domain(self) -> str:
        return url_domain(self.seed_url)

    def compiled_patterns(self) -> List[Pattern[str]]:
        return [re.compile(p) for p in self.exclude_patterns]


def build_request(**kwargs: Any) -> CrawlRequest:
    """Создаёт CrawlRequest, превращая ошибки валидации в ConfigurationError."""
    if not kwargs.get("seed_url") and not kwargs.get("include_urls"):
        raise ConfigurationError("No seed URL and no manifest URLs provided")
    try:
        return CrawlRequest(**kwargs)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid crawl request: {exc}", cause=exc) from exc


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> HarvestConfig:
    """
    Читает YAML или JSON и возвращает проверенный HarvestConfig.
    Без пути берёт configs/default.yaml, а если его нет, значения по умолчанию.
    Явно указанный, но отсутствующий файл даёт FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return HarvestConfig(**overrides)
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    merged: Dict[str, Any] = {**data, **overrides}
    return HarvestConfig(**merged)
