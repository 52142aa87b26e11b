"""
Templates layer: 템플릿 로드 + 변경 감지.

역할:
- 디렉터리 순회 → 패턴 매칭 → 세트 컴파일 (loader.py)
- 세트 보관, dynamic 모드 변경 감지 및 전체 reload (collection.py)
"""

from .collection import TemplateCollection
from .loader import (
    LoadResult,
    TemplateSet,
    build_template_set,
    find_template_files,
    match_pattern,
    validate_patterns,
)

__all__ = [
    # collection
    "TemplateCollection",
    # loader
    "TemplateSet",
    "LoadResult",
    "build_template_set",
    "find_template_files",
    "match_pattern",
    "validate_patterns",
]
