"""
FastAPI 애플리케이션 진입점.

시작 시 템플릿 컬렉션을 한 번 만들고, 요청마다 collection.get()으로 조회.
개발 중에는 TEMPLATES_DYNAMIC=1 로 실행하면 파일 수정이 바로 반영됨.

실행:
- 개발: TEMPLATES_DYNAMIC=1 uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from src.app.routes import pages
from src.core.config import (
    PROJECT_ROOT,
    TemplateSettings,
    configure_logging,
    create_collection,
    load_config,
)


def create_app(
    config: dict[str, Any] | None = None,
    base_dir: Path | None = None,
) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 dict (None이면 default.yaml 로드)
        base_dir: 상대 templates.root 기준 경로 (기본: 프로젝트 루트)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        애플리케이션 생명주기 관리.

        시작 시: 설정 로드, 컬렉션 생성 (실패하면 앱 시작 실패)
        """
        app_config = config if config is not None else load_config()
        configure_logging(app_config)

        settings = TemplateSettings.from_config(app_config, base_dir or PROJECT_ROOT)
        app.state.config = app_config
        app.state.collection = create_collection(settings)

        yield

    app = FastAPI(
        title="Monitored Templates",
        description="템플릿 디렉터리 로드 + 변경 감지 서빙",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(pages.router, prefix="/pages", tags=["Pages"])
    app.include_router(pages.api_router, prefix="/api/templates", tags=["Templates API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
