"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.app.routes import templates
from src.core.config import load_config
from src.core.logging import setup_logging
from src.preview.manager import MimetypePreviewManager
from src.storage.local import LocalRootFolder
from src.templates.registry import TemplateRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, 스토리지/미리보기/레지스트리 초기화
    종료 시: 정리할 리소스 없음
    """
    settings = load_config()
    setup_logging(settings.log_level)

    settings.data_root.mkdir(parents=True, exist_ok=True)

    registry = TemplateRegistry()
    registry.register_from_config(settings.template_support)

    app.state.settings = settings
    app.state.root_folder = LocalRootFolder(settings.data_root)
    app.state.preview_manager = MimetypePreviewManager(settings.preview_mimetypes)
    app.state.registry = registry

    logger.info(
        f"Template service started: data_root={settings.data_root}, "
        f"{len(registry)} template group(s) registered"
    )

    yield


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="File Templates",
    description="앱별 템플릿 mimetype 등록, Templates 폴더 조회, 템플릿 기반 파일 생성",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(
    templates.api_router, prefix="/api/templates", tags=["Templates API"]
)


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


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
