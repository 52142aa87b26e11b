"""
Pytest fixtures for the template collection tests.

구성:
- 템플릿 트리 (a.html → s/b.html include, 매칭 안 되는 foo.bar)
- mtime을 명시적으로 올리는 편집 헬퍼 (파일시스템 timestamp 해상도에 의존하지 않음)
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

# 편집마다 mtime을 올리는 간격 (1초)
MTIME_STEP_NS = 1_000_000_000

# =============================================================================
# Template Tree Fixtures
# =============================================================================


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """
    기본 템플릿 트리.

    포함:
    - a.html: A({% include "s/b.html" %})
    - s/b.html: B()
    - foo.bar: 패턴에 매칭되지 않는 파일
    """
    root = tmp_path / "templates"
    (root / "s").mkdir(parents=True)
    (root / "a.html").write_text('A({% include "s/b.html" %})', encoding="utf-8")
    (root / "s" / "b.html").write_text("B()", encoding="utf-8")
    (root / "foo.bar").write_text("What!?", encoding="utf-8")
    return root


@pytest.fixture
def patterns() -> list[str]:
    return ["*.html", "*.blah"]


# =============================================================================
# Editing Helpers
# =============================================================================


def _write_later(path: Path, content: str, step_ns: int = MTIME_STEP_NS) -> int:
    previous = path.stat().st_mtime_ns if path.exists() else 0
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    new_mtime = max(previous, path.stat().st_mtime_ns) + step_ns
    os.utime(path, ns=(new_mtime, new_mtime))
    return new_mtime


@pytest.fixture
def write_later() -> Callable[..., int]:
    """
    파일 내용을 쓰고 mtime을 이전 값보다 확실히 늦게 설정.

    Returns:
        write_later(path, content) -> 새 mtime (ns)
    """
    return _write_later


@pytest.fixture
def bump_mtime() -> Callable[[Path], int]:
    """내용 변경 없이 mtime만 올림."""

    def _bump(path: Path) -> int:
        new_mtime = path.stat().st_mtime_ns + MTIME_STEP_NS
        os.utime(path, ns=(new_mtime, new_mtime))
        return new_mtime

    return _bump
