"""
템플릿 로더: 디렉터리 순회 → 패턴 매칭 → 전체 세트 컴파일.

규칙:
- 패턴은 파일 base name에만 매칭 ('/'가 들어간 패턴은 허용되지만 어떤 파일에도 매칭 안 됨)
- 파일 하나가 여러 패턴에 매칭돼도 한 번만 포함
- 멤버 이름 = root 기준 상대 경로 (POSIX), 템플릿 간 참조도 이 이름 사용
- 실패 시 전체 build 중단, 부분 세트 반환 금지
- 파일시스템 읽기 외 부수효과 없음
"""

import fnmatch
import logging
import os
import stat
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from jinja2 import DictLoader, Environment, Template, TemplateSyntaxError, select_autoescape

from src.domain.constants import AUTOESCAPE_EXTENSIONS, DEFAULT_ENCODING
from src.domain.errors import (
    EmptyTemplateSetError,
    TemplateCompileError,
    TemplateIOError,
    TemplatePatternError,
    TemplateTraversalError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Template Set
# =============================================================================

class TemplateSet:
    """
    한 번의 build로 만들어진 컴파일된 템플릿 세트.

    세트마다 전용 Jinja2 Environment를 가짐:
    - DictLoader: build 시점에 읽은 소스만 참조
    - auto_reload=False, cache_size=-1: 컴파일된 멤버를 계속 보관

    따라서 include/extends도 같은 build의 멤버로만 해석되고,
    이전 세트에서 받은 Template 핸들은 항상 이전 내용 그대로 렌더링됨.
    build가 끝난 뒤에는 읽기 전용.
    """

    def __init__(self) -> None:
        self._sources: dict[str, str] = {}
        self._members: dict[str, Template] = {}
        self._environment = Environment(
            loader=DictLoader(self._sources),
            autoescape=select_autoescape(AUTOESCAPE_EXTENSIONS),
            auto_reload=False,
            cache_size=-1,
            keep_trailing_newline=True,
        )

    def _compile(self, name: str, source: str) -> Template:
        """소스를 세트 멤버로 컴파일 (build 중에만 호출)."""
        self._sources[name] = source
        try:
            template = self._environment.get_template(name)
        except TemplateSyntaxError as e:
            raise TemplateCompileError(
                f"syntax error while parsing template: {e.message}",
                path=name,
                lineno=e.lineno,
            ) from e
        self._members[name] = template
        return template

    @property
    def environment(self) -> Environment:
        return self._environment

    def lookup(self, name: str) -> Template | None:
        """이름으로 멤버 조회 (없으면 None)."""
        return self._members.get(name)

    def names(self) -> list[str]:
        """멤버 이름 목록 (순회 순서)."""
        return list(self._members)

    def templates(self) -> list[Template]:
        return list(self._members.values())

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._members))

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"TemplateSet({self.names()!r})"


@dataclass(frozen=True)
class LoadResult:
    """
    build 결과: 컴파일된 세트 + 같은 build에서 찍은 mtime 스냅샷.

    snapshot: 상대 경로 → st_mtime_ns (읽기 전용)
    두 값은 항상 한 쌍으로 교체됨.
    """
    template_set: TemplateSet
    snapshot: Mapping[str, int]


# =============================================================================
# Pattern Matching
# =============================================================================

def _pattern_problem(pattern: object) -> str | None:
    """패턴이 잘못됐으면 사유 반환, 정상이면 None."""
    if not isinstance(pattern, str):
        return "pattern must be a string"
    if not pattern:
        return "pattern cannot be empty"
    if pattern.endswith("\\"):
        return "trailing '\\' escape"

    # fnmatch는 닫히지 않은 '['를 리터럴로 취급하므로 직접 검사
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c != "[":
            continue
        j = i
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] != "]":
            j += 1
        if j >= n:
            return "unterminated character class '['"
        i = j + 1
    return None


def validate_patterns(patterns: Iterable[str] | str) -> tuple[str, ...]:
    """
    glob 패턴 검증 + 순서 유지 중복 제거.

    Args:
        patterns: glob 패턴 목록 (단일 문자열도 허용)

    Returns:
        중복 제거된 패턴 튜플

    Raises:
        TemplatePatternError: 빈 목록, 빈 패턴, 잘못된 패턴 (닫히지 않은 '[', 끝의 '\\')
    """
    if isinstance(patterns, str):
        patterns = (patterns,)

    unique = tuple(dict.fromkeys(patterns))
    if not unique:
        raise TemplatePatternError("at least one pattern is required", patterns=[])

    for pattern in unique:
        problem = _pattern_problem(pattern)
        if problem:
            raise TemplatePatternError(
                f"malformed pattern: {problem}",
                pattern=pattern,
                patterns=list(unique),
            )
    return unique


def match_pattern(filename: str, patterns: Iterable[str]) -> str | None:
    """
    base name을 패턴 순서대로 검사, 처음 매칭된 패턴 반환.

    대소문자 구분 (fnmatchcase).
    """
    for pattern in patterns:
        if fnmatch.fnmatchcase(filename, pattern):
            return pattern
    return None


# =============================================================================
# Traversal
# =============================================================================

def find_template_files(root: Path, patterns: tuple[str, ...]) -> list[str]:
    """
    root 아래 모든 일반 파일 중 패턴에 매칭되는 상대 경로 목록.

    순서: 경로 이름순 깊이 우선 (결정적, 파일/디렉터리 구분 없이 이름으로 정렬).

    Args:
        root: 순회할 루트 디렉터리
        patterns: validate_patterns()를 거친 패턴

    Returns:
        POSIX 형식 상대 경로 목록 (예: ["a.html", "s/b.html"])

    Raises:
        TemplateTraversalError: root 또는 하위 디렉터리 접근 실패
        TemplateIOError: 매칭된 경로 stat 실패 (깨진 symlink 등)
    """
    if not root.is_dir():
        raise TemplateTraversalError(
            "root is not a readable directory",
            root=str(root),
            patterns=list(patterns),
        )

    files: list[str] = []
    for entry in _walk_sorted(root, root, patterns):
        if match_pattern(entry.name, patterns) is None:
            continue
        try:
            st = os.stat(entry.path)
        except OSError as e:
            raise TemplateIOError(
                f"failed to get file info: {e.strerror or e}",
                path=entry.path,
                root=str(root),
                patterns=list(patterns),
            ) from e
        if not stat.S_ISREG(st.st_mode):
            continue  # FIFO, 소켓, 디렉터리를 가리키는 symlink
        files.append(Path(entry.path).relative_to(root).as_posix())
    return files


def _walk_sorted(
    directory: Path,
    root: Path,
    patterns: tuple[str, ...],
) -> Iterator[os.DirEntry]:
    """
    디렉터리가 아닌 항목을 이름순(파일/디렉터리 구분 없이)으로 재귀 순회.

    예: a.html, b/a/x.html, b/y.html, z.html
    디렉터리 symlink는 따라가지 않음.
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise TemplateTraversalError(
            f"failed to traverse directory: {e.strerror or e}",
            root=str(root),
            path=e.filename,
            patterns=list(patterns),
        ) from e

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_sorted(Path(entry.path), root, patterns)
        else:
            yield entry


# =============================================================================
# Build
# =============================================================================

def build_template_set(
    root: Path | str,
    patterns: Iterable[str] | str,
    encoding: str = DEFAULT_ENCODING,
) -> LoadResult:
    """
    root 아래 매칭 파일 전체를 하나의 템플릿 세트로 컴파일.

    파일마다 (순회 순서대로): mtime 읽기 → 내용 읽기 → 상대 경로 이름으로 컴파일.

    Args:
        root: 템플릿 루트 디렉터리
        patterns: base name glob 패턴 (비어 있으면 안 됨)
        encoding: 템플릿 파일 인코딩

    Returns:
        LoadResult (세트 + mtime 스냅샷)

    Raises:
        TemplatePatternError: 잘못된 패턴
        TemplateTraversalError: 디렉터리 순회 실패
        TemplateIOError: stat/read 실패
        TemplateCompileError: 문법 에러 (문제 파일 경로 포함)
        EmptyTemplateSetError: 매칭 파일 0개
    """
    root = Path(root)
    patterns = validate_patterns(patterns)
    names = find_template_files(root, patterns)

    if not names:
        raise EmptyTemplateSetError(
            "zero templates found",
            root=str(root),
            patterns=list(patterns),
        )

    template_set = TemplateSet()
    snapshot: dict[str, int] = {}

    for name in names:
        file_path = root / name
        try:
            mtime_ns = file_path.stat().st_mtime_ns
        except OSError as e:
            raise TemplateIOError(
                f"failed to get file info: {e.strerror or e}",
                path=str(file_path),
                root=str(root),
                patterns=list(patterns),
            ) from e

        try:
            raw = file_path.read_bytes()
        except OSError as e:
            raise TemplateIOError(
                f"failed to read template file: {e.strerror or e}",
                path=str(file_path),
                root=str(root),
                patterns=list(patterns),
            ) from e

        try:
            source = raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise TemplateCompileError(
                f"template is not valid {encoding}",
                path=name,
                root=str(root),
                patterns=list(patterns),
            ) from e

        try:
            template_set._compile(name, source)
        except TemplateCompileError as e:
            e.annotate(root=str(root), patterns=list(patterns))
            raise

        snapshot[name] = mtime_ns

    logger.debug(f"Built template set under {root}: {len(template_set)} templates")
    return LoadResult(template_set=template_set, snapshot=MappingProxyType(snapshot))
