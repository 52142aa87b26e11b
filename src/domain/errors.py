"""
Error definitions for the template collection.

규칙:
- 조용한 실패 금지 → 모든 에러는 호출자에게 동기적으로 전달
- 자동 재시도 없음 (다음 get() 호출이 다시 reload 시도)
- 에러 컨텍스트 필수: root, patterns, path, name 중 해당하는 값
"""

from typing import Any


class TemplateSetError(Exception):
    """
    템플릿 세트 관련 에러의 기본 클래스.

    Usage:
        raise TemplateIOError("failed to read template file", path=str(path))
    """

    code = "TEMPLATE_SET_ERROR"

    def __init__(self, message: str, code: str | None = None, **context: Any) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        if ctx_str:
            return f"[{self.code}] {self.message} ({ctx_str})"
        return f"[{self.code}] {self.message}"

    def annotate(self, **context: Any) -> "TemplateSetError":
        """컨텍스트 추가 후 메시지 갱신 (같은 인스턴스 반환)."""
        self.context.update(context)
        self.args = (self._format_message(),)
        return self

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **{k: _jsonable(v) for k, v in self.context.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return str(value)


# =============================================================================
# Loader Errors
# =============================================================================

class TemplateTraversalError(TemplateSetError):
    """root 또는 하위 디렉터리 순회 실패."""

    code = "TEMPLATE_TRAVERSAL_FAILED"


class TemplatePatternError(TemplateSetError):
    """잘못된 glob 패턴 (빈 패턴, 닫히지 않은 '[' 등)."""

    code = "TEMPLATE_PATTERN_INVALID"


class TemplateIOError(TemplateSetError):
    """stat/read 실패."""

    code = "TEMPLATE_IO_FAILED"


class TemplateCompileError(TemplateSetError):
    """
    템플릿 문법 에러.

    context에 항상 문제 파일의 상대 경로(path)가 포함됨.
    """

    code = "TEMPLATE_COMPILE_FAILED"


class EmptyTemplateSetError(TemplateSetError):
    """순회 완료 후 매칭된 파일이 0개."""

    code = "TEMPLATE_SET_EMPTY"


# =============================================================================
# Lookup / Render Errors
# =============================================================================

class TemplateNotFoundError(TemplateSetError, LookupError):
    """요청한 이름이 현재 세트에 없음 (처음부터 존재하지 않음)."""

    code = "TEMPLATE_NOT_FOUND"


class TemplateRemovedError(TemplateNotFoundError):
    """
    reload 이후 이름이 사라짐 (삭제 또는 이름 변경).

    TemplateNotFoundError로도 잡을 수 있음.
    """

    code = "TEMPLATE_REMOVED"


class TemplateRenderError(TemplateSetError):
    """렌더링 중 Jinja2 런타임 에러."""

    code = "RENDER_FAILED"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Loader ===
    TEMPLATE_TRAVERSAL_FAILED = TemplateTraversalError.code
    TEMPLATE_PATTERN_INVALID = TemplatePatternError.code
    TEMPLATE_IO_FAILED = TemplateIOError.code
    TEMPLATE_COMPILE_FAILED = TemplateCompileError.code
    TEMPLATE_SET_EMPTY = EmptyTemplateSetError.code

    # === Lookup ===
    TEMPLATE_NOT_FOUND = TemplateNotFoundError.code
    TEMPLATE_REMOVED = TemplateRemovedError.code

    # === Render ===
    RENDER_FAILED = TemplateRenderError.code
