"""
HTML/텍스트 렌더러: Jinja2 Template → 문자열 또는 스트림.

- 컬렉션 조회(get)와 렌더링을 묶어 dynamic reload가 자동 적용되도록 함
- Jinja2 런타임 에러 → TemplateRenderError (RENDER_FAILED)
- 조회/빌드 에러는 그대로 전파
"""

from typing import Any, Protocol

from jinja2 import Template

from src.domain.errors import TemplateRenderError
from src.templates.collection import TemplateCollection


class TextStream(Protocol):
    def write(self, s: str, /) -> Any: ...


def render_template(template: Template, data: dict[str, Any] | None = None) -> str:
    """
    템플릿을 문자열로 렌더링.

    Raises:
        TemplateRenderError: RENDER_FAILED
    """
    try:
        return template.render(data or {})
    except Exception as e:
        raise TemplateRenderError(
            f"failed to render template: {e}",
            name=template.name,
        ) from e


def render_to_stream(
    template: Template,
    data: dict[str, Any] | None,
    stream: TextStream,
) -> None:
    """
    템플릿을 청크 단위로 stream에 씀.

    Args:
        template: 렌더링할 템플릿
        data: 컨텍스트
        stream: write(str)를 가진 객체 (io.StringIO, 텍스트 파일 등)

    Raises:
        TemplateRenderError: RENDER_FAILED (일부 청크는 이미 쓰였을 수 있음)
    """
    try:
        for chunk in template.generate(data or {}):
            stream.write(chunk)
    except Exception as e:
        raise TemplateRenderError(
            f"failed to render template: {e}",
            name=template.name,
        ) from e


class HtmlRenderer:
    """
    컬렉션 기반 렌더러.

    Usage:
        renderer = HtmlRenderer(collection)
        html = renderer.render("nav/login.html", {"user": user})
    """

    def __init__(self, collection: TemplateCollection):
        self.collection = collection

    def render(self, name: str, data: dict[str, Any] | None = None) -> str:
        template = self.collection.get(name)
        return render_template(template, data)

    def render_to(
        self,
        name: str,
        data: dict[str, Any] | None,
        stream: TextStream,
    ) -> None:
        template = self.collection.get(name)
        render_to_stream(template, data, stream)
