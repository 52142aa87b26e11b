"""
설정 로드: default.yaml → TemplateSettings → TemplateCollection.

default.yaml 예:
    templates:
      root: templates
      patterns: ["*.html", "*.js", "*.css"]
      dynamic: false
    logging:
      level: INFO

규칙:
- 설정 파일 없으면 빈 dict (기본값 사용)
- 상대 경로 root는 설정 파일 위치 기준
- TEMPLATES_DYNAMIC 환경변수가 dynamic 설정보다 우선 (개발용 토글)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import (
    CONFIG_FILENAME,
    CONFIG_LOGGING_SECTION,
    CONFIG_TEMPLATES_SECTION,
    DEFAULT_ENCODING,
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PATTERNS,
    DEFAULT_TEMPLATES_ROOT,
    DYNAMIC_ENV_VAR,
    TRUTHY_VALUES,
)
from src.templates.collection import TemplateCollection

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


# =============================================================================
# Config File
# =============================================================================

def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """설정 파일 로드."""
    if config_path is None:
        config_path = PROJECT_ROOT / CONFIG_FILENAME

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] | None = yaml.safe_load(f)
        return data or {}


def configure_logging(config: dict[str, Any]) -> None:
    """logging 섹션 적용 (level, format)."""
    section = config.get(CONFIG_LOGGING_SECTION) or {}
    level = str(section.get("level", DEFAULT_LOG_LEVEL)).upper()
    fmt = section.get("format", DEFAULT_LOG_FORMAT)
    logging.basicConfig(level=level, format=fmt)
    # 핸들러가 이미 있으면 basicConfig는 무시되므로 레벨은 직접 지정
    logging.getLogger().setLevel(level)


# =============================================================================
# Template Settings
# =============================================================================

def _env_dynamic() -> bool | None:
    value = os.getenv(DYNAMIC_ENV_VAR)
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in TRUTHY_VALUES


@dataclass
class TemplateSettings:
    """templates 섹션."""
    root: Path
    patterns: list[str] = field(default_factory=lambda: list(DEFAULT_PATTERNS))
    dynamic: bool = False
    encoding: str = DEFAULT_ENCODING

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        base_dir: Path | None = None,
    ) -> "TemplateSettings":
        """
        설정 dict에서 TemplateSettings 생성.

        Args:
            config: load_config() 결과
            base_dir: 상대 root 기준 경로 (기본: 프로젝트 루트)

        Raises:
            ValueError: 잘못된 타입 (patterns가 list 아님, dynamic이 bool 아님 등)
        """
        section = config.get(CONFIG_TEMPLATES_SECTION) or {}
        if not isinstance(section, dict):
            raise ValueError(f"'{CONFIG_TEMPLATES_SECTION}' section must be a mapping")

        root = Path(section.get("root", DEFAULT_TEMPLATES_ROOT))
        if not root.is_absolute():
            root = (base_dir or PROJECT_ROOT) / root

        patterns = section.get("patterns", list(DEFAULT_PATTERNS))
        if isinstance(patterns, str):
            patterns = [patterns]
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ValueError("'templates.patterns' must be a list of glob strings")

        dynamic = section.get("dynamic", False)
        if not isinstance(dynamic, bool):
            raise ValueError("'templates.dynamic' must be true or false")
        env_dynamic = _env_dynamic()
        if env_dynamic is not None:
            dynamic = env_dynamic

        encoding = section.get("encoding", DEFAULT_ENCODING)
        if not isinstance(encoding, str):
            raise ValueError("'templates.encoding' must be a string")

        return cls(root=root, patterns=patterns, dynamic=dynamic, encoding=encoding)


def create_collection(settings: TemplateSettings) -> TemplateCollection:
    """설정으로 컬렉션 생성 (초기 build 실패 시 예외 전파)."""
    if settings.dynamic:
        logger.info("Dynamic templates enabled: files are checked for changes on every access")
    return TemplateCollection(
        settings.root,
        settings.patterns,
        dynamic=settings.dynamic,
        encoding=settings.encoding,
    )
