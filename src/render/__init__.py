"""
Render layer: 컴파일된 템플릿 → 출력.

역할:
- 템플릿 + 데이터 → 문자열 / 스트림
- Jinja2
"""

from .html import HtmlRenderer, render_template, render_to_stream

__all__ = [
    "render_template",
    "render_to_stream",
    "HtmlRenderer",
]
