"""
Core layer: 설정.

역할:
- default.yaml 로드, logging 설정
- TemplateSettings → TemplateCollection 생성
"""

from .config import (
    TemplateSettings,
    configure_logging,
    create_collection,
    load_config,
)

__all__ = [
    "load_config",
    "configure_logging",
    "TemplateSettings",
    "create_collection",
]
