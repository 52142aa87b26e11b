"""
test_loader.py - 템플릿 로더 테스트

검증:
- 패턴 검증/매칭: base name 기준, 순서 유지 중복 제거, 잘못된 패턴 에러
- 순회: 재귀, 상대 POSIX 경로, 여러 패턴 매칭 시 한 번만 포함
- build: 세트 + 스냅샷 일치, 에러 시 전체 중단
"""

import os
from pathlib import Path

import pytest

from src.domain.errors import (
    EmptyTemplateSetError,
    ErrorCodes,
    TemplateCompileError,
    TemplateIOError,
    TemplatePatternError,
    TemplateSetError,
    TemplateTraversalError,
)
from src.templates.loader import (
    TemplateSet,
    build_template_set,
    find_template_files,
    match_pattern,
    validate_patterns,
)

# =============================================================================
# validate_patterns 테스트
# =============================================================================


class TestValidatePatterns:
    """패턴 검증 테스트."""

    def test_keeps_order_and_removes_duplicates(self):
        """순서 유지 + 중복 제거."""
        assert validate_patterns(["*.html", "*.js", "*.html"]) == ("*.html", "*.js")

    def test_single_string(self):
        """단일 문자열도 패턴 하나로 허용."""
        assert validate_patterns("*.html") == ("*.html",)

    def test_empty_list(self):
        """빈 목록 → 에러."""
        with pytest.raises(TemplatePatternError) as exc_info:
            validate_patterns([])

        assert exc_info.value.code == ErrorCodes.TEMPLATE_PATTERN_INVALID

    def test_empty_pattern(self):
        """빈 패턴 → 에러."""
        with pytest.raises(TemplatePatternError):
            validate_patterns(["*.html", ""])

    def test_unterminated_bracket(self):
        """닫히지 않은 '[' → 에러."""
        with pytest.raises(TemplatePatternError) as exc_info:
            validate_patterns(["[a-z.html"])

        assert exc_info.value.context["pattern"] == "[a-z.html"
        assert "[a-z.html" in str(exc_info.value)

    def test_valid_brackets(self):
        """정상 문자 클래스는 허용."""
        assert validate_patterns(["[ab].html", "[!x]*.txt", "[]]x"]) == (
            "[ab].html",
            "[!x]*.txt",
            "[]]x",
        )

    def test_trailing_backslash(self):
        """끝의 '\\' (이스케이프 대상 없음) → 에러."""
        with pytest.raises(TemplatePatternError) as exc_info:
            validate_patterns(["*.html\\"])

        assert exc_info.value.context["pattern"] == "*.html\\"

    def test_path_separator_allowed(self):
        """'/' 포함 패턴은 유효 (base name에는 매칭되지 않을 뿐)."""
        assert validate_patterns(["nav/*.html", "*.js"]) == ("nav/*.html", "*.js")


# =============================================================================
# match_pattern 테스트
# =============================================================================


class TestMatchPattern:
    """base name 매칭 테스트."""

    def test_first_match_returned(self):
        assert match_pattern("a.html", ["*.txt", "*.html", "a.*"]) == "*.html"

    def test_no_match(self):
        assert match_pattern("foo.bar", ["*.html", "*.blah"]) is None

    def test_case_sensitive(self):
        """대소문자 구분."""
        assert match_pattern("A.HTML", ["*.html"]) is None


# =============================================================================
# find_template_files 테스트
# =============================================================================


class TestFindTemplateFiles:
    """디렉터리 순회 테스트."""

    def test_recursive_relative_paths(self, template_root: Path):
        """하위 디렉터리 포함, 상대 POSIX 경로."""
        files = find_template_files(template_root, ("*.html",))

        assert files == ["a.html", "s/b.html"]

    def test_non_matching_files_ignored(self, template_root: Path):
        files = find_template_files(template_root, ("*.html", "*.blah"))

        assert "foo.bar" not in files

    def test_multiple_patterns_included_once(self, template_root: Path):
        """여러 패턴에 매칭돼도 한 번만."""
        files = find_template_files(template_root, ("*.html", "a.*", "*"))

        assert files.count("a.html") == 1

    def test_directories_not_matched(self, tmp_path: Path):
        """디렉터리 이름이 패턴에 매칭돼도 포함 안 됨."""
        (tmp_path / "dir.html").mkdir()
        (tmp_path / "dir.html" / "inner.html").write_text("x")

        files = find_template_files(tmp_path, ("*.html",))

        assert files == ["dir.html/inner.html"]

    def test_deterministic_order(self, tmp_path: Path):
        """정렬된 깊이 우선 순서."""
        for rel in ["z.html", "b/y.html", "a.html", "b/a/x.html"]:
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(rel)

        files = find_template_files(tmp_path, ("*.html",))

        assert files == ["a.html", "b/a/x.html", "b/y.html", "z.html"]

    def test_path_separator_pattern_never_matches(self, template_root: Path):
        """'/' 포함 패턴은 하위 디렉터리 파일에도 매칭 안 됨."""
        files = find_template_files(template_root, ("s/*.html", "*.blah"))

        assert files == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlink 미지원")
    def test_dangling_symlink(self, template_root: Path):
        """매칭된 깨진 symlink → stat 실패 → IOError."""
        os.symlink(template_root / "gone.html", template_root / "link.html")

        with pytest.raises(TemplateIOError) as exc_info:
            find_template_files(template_root, ("*.html",))

        assert exc_info.value.code == ErrorCodes.TEMPLATE_IO_FAILED
        assert exc_info.value.context["path"] == str(template_root / "link.html")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlink 미지원")
    def test_dangling_symlink_not_matched(self, template_root: Path):
        """패턴에 안 맞는 깨진 symlink는 무시."""
        os.symlink(template_root / "gone.txt", template_root / "link.txt")

        assert find_template_files(template_root, ("*.html",)) == ["a.html", "s/b.html"]

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFO 미지원")
    def test_fifo_skipped(self, template_root: Path):
        """일반 파일이 아닌 항목 (FIFO)은 건너뜀."""
        os.mkfifo(template_root / "pipe.html")

        assert find_template_files(template_root, ("*.html",)) == ["a.html", "s/b.html"]

    def test_missing_root(self, tmp_path: Path):
        """root 없음 → TraversalError."""
        with pytest.raises(TemplateTraversalError) as exc_info:
            find_template_files(tmp_path / "nope", ("*.html",))

        assert exc_info.value.code == ErrorCodes.TEMPLATE_TRAVERSAL_FAILED
        assert exc_info.value.context["root"] == str(tmp_path / "nope")

    def test_root_is_file(self, tmp_path: Path):
        file_path = tmp_path / "a.html"
        file_path.write_text("x")

        with pytest.raises(TemplateTraversalError):
            find_template_files(file_path, ("*.html",))

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root는 권한 검사를 우회함",
    )
    def test_unreadable_subdirectory(self, template_root: Path):
        """읽을 수 없는 하위 디렉터리 → TraversalError."""
        locked = template_root / "locked"
        locked.mkdir()
        (locked / "c.html").write_text("C")
        locked.chmod(0o000)

        try:
            with pytest.raises(TemplateTraversalError):
                find_template_files(template_root, ("*.html",))
        finally:
            locked.chmod(0o755)


# =============================================================================
# build_template_set 테스트
# =============================================================================


class TestBuildTemplateSet:
    """세트 build 테스트."""

    def test_members_named_by_relative_path(self, template_root: Path, patterns: list[str]):
        result = build_template_set(template_root, patterns)

        assert isinstance(result.template_set, TemplateSet)
        assert result.template_set.names() == ["a.html", "s/b.html"]
        assert len(result.template_set) == 2

    def test_snapshot_matches_set(self, template_root: Path, patterns: list[str]):
        """스냅샷 키 == 세트 멤버, 값 == 파일 mtime."""
        result = build_template_set(template_root, patterns)

        assert set(result.snapshot) == set(result.template_set)
        for name, mtime_ns in result.snapshot.items():
            assert mtime_ns == (template_root / name).stat().st_mtime_ns

    def test_snapshot_read_only(self, template_root: Path, patterns: list[str]):
        result = build_template_set(template_root, patterns)

        with pytest.raises(TypeError):
            result.snapshot["a.html"] = 0  # type: ignore[index]

    def test_members_reference_each_other(self, template_root: Path, patterns: list[str]):
        """상대 경로 이름으로 include."""
        result = build_template_set(template_root, patterns)

        template = result.template_set.lookup("a.html")
        assert template is not None
        assert template.render() == "A(B())"

    def test_lookup_missing(self, template_root: Path, patterns: list[str]):
        result = build_template_set(template_root, patterns)

        assert result.template_set.lookup("missing.html") is None
        assert "missing.html" not in result.template_set

    def test_trailing_newline_kept(self, tmp_path: Path):
        (tmp_path / "nl.txt").write_text("line\n")

        result = build_template_set(tmp_path, ["*.txt"])

        assert result.template_set.lookup("nl.txt").render() == "line\n"

    def test_zero_matches(self, template_root: Path):
        """매칭 0개 → EmptyTemplateSetError (root, patterns 포함)."""
        with pytest.raises(EmptyTemplateSetError) as exc_info:
            build_template_set(template_root, ["*.nothing"])

        err = exc_info.value
        assert err.code == ErrorCodes.TEMPLATE_SET_EMPTY
        assert err.context["root"] == str(template_root)
        assert err.context["patterns"] == ["*.nothing"]

    def test_path_separator_pattern_only(self, template_root: Path):
        """'/' 포함 패턴만 있으면 매칭 0개 → EmptyTemplateSetError."""
        with pytest.raises(EmptyTemplateSetError):
            build_template_set(template_root, ["s/*.html"])

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlink 미지원")
    def test_dangling_symlink_aborts_build(self, template_root: Path, patterns: list[str]):
        """매칭된 깨진 symlink → 세트 생성 안 됨."""
        os.symlink(template_root / "gone.html", template_root / "link.html")

        with pytest.raises(TemplateIOError) as exc_info:
            build_template_set(template_root, patterns)

        assert exc_info.value.context["root"] == str(template_root)

    def test_empty_directory(self, tmp_path: Path):
        with pytest.raises(EmptyTemplateSetError):
            build_template_set(tmp_path, ["*.html"])

    def test_syntax_error_names_path(self, template_root: Path, patterns: list[str]):
        """문법 에러 → 문제 파일 경로 포함."""
        (template_root / "s" / "broken.html").write_text("{% if %}")

        with pytest.raises(TemplateCompileError) as exc_info:
            build_template_set(template_root, patterns)

        err = exc_info.value
        assert err.code == ErrorCodes.TEMPLATE_COMPILE_FAILED
        assert err.context["path"] == "s/broken.html"
        assert err.context["lineno"] == 1
        assert "s/broken.html" in str(err)

    def test_invalid_encoding(self, tmp_path: Path):
        (tmp_path / "bin.html").write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(TemplateCompileError) as exc_info:
            build_template_set(tmp_path, ["*.html"])

        assert exc_info.value.context["path"] == "bin.html"

    def test_custom_encoding(self, tmp_path: Path):
        (tmp_path / "kr.html").write_bytes("한글".encode("euc-kr"))

        result = build_template_set(tmp_path, ["*.html"], encoding="euc-kr")

        assert result.template_set.lookup("kr.html").render() == "한글"

    def test_malformed_pattern(self, template_root: Path):
        with pytest.raises(TemplatePatternError):
            build_template_set(template_root, ["*.html", "[oops"])

    def test_all_errors_share_base(self, tmp_path: Path):
        """모든 loader 에러는 TemplateSetError."""
        with pytest.raises(TemplateSetError):
            build_template_set(tmp_path / "missing", ["*.html"])

    def test_sets_are_independent(self, template_root: Path, patterns: list[str]):
        """새 build는 이전 세트에 영향 없음 (include 포함)."""
        first = build_template_set(template_root, patterns)
        (template_root / "s" / "b.html").write_text("B(new)")
        second = build_template_set(template_root, patterns)

        assert first.template_set.lookup("a.html").render() == "A(B())"
        assert second.template_set.lookup("a.html").render() == "A(B(new))"

    def test_autoescape_by_extension(self, tmp_path: Path):
        """html은 autoescape, txt는 그대로."""
        (tmp_path / "page.html").write_text("{{ value }}")
        (tmp_path / "page.txt").write_text("{{ value }}")

        result = build_template_set(tmp_path, ["*.html", "*.txt"])

        assert result.template_set.lookup("page.html").render(value="<b>") == "&lt;b&gt;"
        assert result.template_set.lookup("page.txt").render(value="<b>") == "<b>"
