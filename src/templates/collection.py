"""
템플릿 컬렉션: 컴파일된 세트 보관 + 변경 감지 + 전체 reload.

동작 모드:
- static (dynamic=False): 생성 시 한 번만 컴파일, 이후 파일시스템 접근 없음
  → 락 없이 읽기 전용
- dynamic (dynamic=True): get() 호출마다 모든 파일 mtime 확인,
  하나라도 스냅샷보다 새로우면 세트 전체를 다시 컴파일 (개발용)

동시성 규칙 (dynamic):
- get() 전체(조회 + 변경 확인 + reload)가 하나의 임계 구역
- 세트와 스냅샷은 LoadResult 하나로 묶어 참조 한 번에 교체
- reload 실패 시 이전 세트 유지 (다음 get()에서 다시 시도)

템플릿 간 의존성 그래프가 없으므로 파일 하나만 바뀌어도 세트 전체를 교체함.
"""

import logging
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path

from jinja2 import Template

from src.domain.constants import DEFAULT_ENCODING
from src.domain.errors import (
    TemplateIOError,
    TemplateNotFoundError,
    TemplateRemovedError,
    TemplateSetError,
)
from src.templates.loader import (
    LoadResult,
    TemplateSet,
    build_template_set,
    validate_patterns,
)

logger = logging.getLogger(__name__)


class TemplateCollection:
    """
    디렉터리 하나 아래의 템플릿 전체를 관리.

    Usage:
        collection = TemplateCollection(
            root,                          # 템플릿 파일 검색 경로
            ["*.html", "*.js", "*.css"],   # base name 패턴
            dynamic=settings.dynamic,      # True면 변경 시 자동 재컴파일
        )
        template = collection.get("nav/login.html")
        html = template.render(user=user)
    """

    def __init__(
        self,
        root: Path | str,
        patterns: Iterable[str] | str,
        dynamic: bool = False,
        encoding: str = DEFAULT_ENCODING,
    ):
        """
        Args:
            root: 템플릿 루트 디렉터리
            patterns: base name glob 패턴 (순서 유지, 중복 제거)
            dynamic: get() 마다 변경 확인 여부
            encoding: 템플릿 파일 인코딩

        Raises:
            TemplateSetError: 초기 build 실패 (인스턴스 생성 안 됨)
        """
        self._root = Path(root)
        self._patterns = validate_patterns(patterns)
        self._dynamic = bool(dynamic)
        self._encoding = encoding

        # dynamic일 때만 획득
        self._lock = threading.Lock()
        self._reload_count = 0

        self._state: LoadResult = build_template_set(
            self._root, self._patterns, self._encoding
        )
        logger.info(
            f"Loaded {len(self._state.template_set)} templates from {self._root} "
            f"(patterns={list(self._patterns)}, dynamic={self._dynamic})"
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def root(self) -> Path:
        return self._root

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    @property
    def dynamic(self) -> bool:
        return self._dynamic

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def template_set(self) -> TemplateSet:
        """
        현재 세트 그대로 반환 (복사 아님, 변경 확인 없음).

        전체 이름 나열 등에 사용. 최신 내용이 필요하면 get()을 거칠 것.
        """
        return self._state.template_set

    def get_template_set(self) -> TemplateSet:
        return self.template_set

    @property
    def snapshot(self) -> Mapping[str, int]:
        """현재 세트를 만들 때 찍은 mtime 스냅샷 (상대 경로 → st_mtime_ns)."""
        return self._state.snapshot

    @property
    def reload_count(self) -> int:
        """생성 이후 성공한 reload 횟수."""
        return self._reload_count

    def names(self) -> list[str]:
        return self._state.template_set.names()

    def __contains__(self, name: object) -> bool:
        return name in self._state.template_set

    def __repr__(self) -> str:
        mode = "dynamic" if self._dynamic else "static"
        return (
            f"TemplateCollection(root={str(self._root)!r}, "
            f"patterns={list(self._patterns)!r}, mode={mode})"
        )

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, name: str) -> Template:
        """
        이름으로 템플릿 반환.

        dynamic이면 파일이 하나라도 바뀐 경우 세트 전체를 다시 컴파일한 뒤 반환.
        반환된 Template은 자신이 속한 세트에 고정되므로, 이후 reload가 일어나도
        계속 같은 내용으로 렌더링됨.

        Args:
            name: root 기준 상대 경로 (예: "s/b.html")

        Returns:
            컴파일된 jinja2.Template

        Raises:
            TemplateNotFoundError: 이름이 세트에 없음
            TemplateRemovedError: reload 후 이름이 사라짐
            TemplateIOError: 변경 확인 중 stat 실패
            TemplateSetError: reload 실패 (triggered_by 컨텍스트 포함)
        """
        if not self._dynamic:
            return self._lookup(self._state, name)

        with self._lock:
            state = self._state
            template = self._lookup(state, name)

            stale_path = self._find_stale_path(state, name)
            if stale_path is None:
                return template

            return self._reload(name, stale_path)

    def _lookup(self, state: LoadResult, name: str) -> Template:
        template = state.template_set.lookup(name)
        if template is None:
            raise TemplateNotFoundError(
                "template not found in collection",
                name=name,
                root=str(self._root),
                patterns=list(self._patterns),
            )
        return template

    def _find_stale_path(self, state: LoadResult, name: str) -> str | None:
        """
        스냅샷보다 mtime이 엄격히 큰 첫 파일 경로 반환 (없으면 None).

        하나만 찾으면 나머지는 확인하지 않음.
        """
        for rel_path, snapshot_mtime in state.snapshot.items():
            file_path = self._root / rel_path
            try:
                mtime_ns = file_path.stat().st_mtime_ns
            except OSError as e:
                raise TemplateIOError(
                    f"failed to get file info while checking for changes: {e.strerror or e}",
                    name=name,
                    template=rel_path,
                    path=str(file_path),
                    root=str(self._root),
                ) from e
            if mtime_ns > snapshot_mtime:
                return rel_path
        return None

    def _reload(self, name: str, stale_path: str) -> Template:
        """세트 전체 재컴파일 후 교체 (self._lock 보유 상태에서만 호출)."""
        logger.info(
            f"Template {stale_path!r} changed on disk, reloading {self._root} "
            f"(triggered by {name!r})"
        )

        try:
            new_state = build_template_set(self._root, self._patterns, self._encoding)
        except TemplateSetError as e:
            logger.warning(f"Reload failed, keeping previous template set: {e}")
            e.annotate(triggered_by=name)
            raise

        self._state = new_state
        self._reload_count += 1
        logger.info(f"Reloaded {len(new_state.template_set)} templates from {self._root}")

        template = new_state.template_set.lookup(name)
        if template is None:
            raise TemplateRemovedError(
                "template no longer found in collection after reload",
                name=name,
                root=str(self._root),
                patterns=list(self._patterns),
            )
        return template
