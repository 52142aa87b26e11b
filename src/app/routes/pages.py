"""
Pages Routes: 컬렉션 템플릿 렌더링.

- GET /pages/{name} → 템플릿 렌더링 (query params = 컨텍스트)
- GET /api/templates → 현재 세트의 템플릿 목록 (변경 확인 없음)
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from src.domain.errors import TemplateNotFoundError, TemplateSetError
from src.render.html import HtmlRenderer
from src.templates.collection import TemplateCollection

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints


def _get_collection(request: Request) -> TemplateCollection:
    collection: TemplateCollection = request.app.state.collection
    return collection


# =============================================================================
# Page Routes (HTML)
# =============================================================================

@router.get("/{name:path}", response_class=HTMLResponse)
def render_page(request: Request, name: str) -> HTMLResponse:
    """
    템플릿 렌더링 (dynamic이면 변경 시 reload 후 렌더링).

    get()이 파일 I/O와 락 대기를 하므로 sync 핸들러 (threadpool에서 실행).
    """
    renderer = HtmlRenderer(_get_collection(request))
    data: dict[str, Any] = dict(request.query_params)

    try:
        content = renderer.render(name, data)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())
    except TemplateSetError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())

    return HTMLResponse(content=content)


# =============================================================================
# API Routes
# =============================================================================

@api_router.get("")
def list_templates(request: Request) -> dict[str, Any]:
    """템플릿 목록."""
    collection = _get_collection(request)
    return {
        "root": str(collection.root),
        "patterns": list(collection.patterns),
        "dynamic": collection.dynamic,
        "templates": collection.template_set.names(),
    }
