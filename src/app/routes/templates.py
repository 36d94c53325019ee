"""
Templates Routes: 템플릿 목록 조회 + 템플릿 기반 파일 생성.

- GET  /api/templates           → 그룹별 템플릿 목록
- POST /api/templates/create    → 파일 생성 (빈 파일 또는 템플릿 복사)

사용자: X-User-Id 헤더 (없으면 비로그인)
"""

from typing import Any

from fastapi import APIRouter, Depends, Form, Header, HTTPException, Request

from src.core.session import UserSession
from src.domain.errors import (
    FileConflictError,
    InvalidPathError,
    NoUserError,
    StorageUnavailableError,
    TemplateCreationError,
    TemplateError,
)
from src.templates.manager import TemplateManager

api_router = APIRouter()  # API endpoints


def _error_detail(e: TemplateError) -> dict[str, str]:
    return {"code": e.code, "message": e.message}


def get_template_manager(
    request: Request,
    x_user_id: str | None = Header(None),
) -> TemplateManager:
    """요청 단위 TemplateManager (레지스트리는 프로세스 공유)."""
    state = request.app.state
    return TemplateManager(
        root_folder=state.root_folder,
        user_session=UserSession.from_user_id(x_user_id),
        preview_manager=state.preview_manager,
        registry=state.registry,
        templates_folder=state.settings.templates_folder,
    )


# =============================================================================
# API Routes
# =============================================================================

@api_router.get("")
def list_mimetypes(
    manager: TemplateManager = Depends(get_template_manager),
) -> list[dict[str, Any]]:
    """등록된 그룹별 템플릿 목록."""
    try:
        return [entry.to_dict() for entry in manager.list_mimetypes()]
    except InvalidPathError as e:
        raise HTTPException(status_code=400, detail=_error_detail(e)) from e
    except StorageUnavailableError as e:
        raise HTTPException(status_code=503, detail=_error_detail(e)) from e


@api_router.post("/create")
def create_from_template(
    file_path: str = Form(...),
    template_path: str = Form(""),
    manager: TemplateManager = Depends(get_template_manager),
) -> dict[str, Any]:
    """
    템플릿 기반 파일 생성.

    - 400: 경로로 쓸 수 없는 사용자 ID
    - 409: 대상 경로에 파일 존재
    - 401: 비로그인
    - 500: 생성 실패 (상세 원인은 서버 로그)
    """
    try:
        return manager.create_from_template(file_path, template_path).to_dict()
    except FileConflictError as e:
        raise HTTPException(status_code=409, detail=_error_detail(e)) from e
    except NoUserError as e:
        raise HTTPException(status_code=401, detail=_error_detail(e)) from e
    except InvalidPathError as e:
        raise HTTPException(status_code=400, detail=_error_detail(e)) from e
    except TemplateCreationError as e:
        raise HTTPException(status_code=500, detail=_error_detail(e)) from e
