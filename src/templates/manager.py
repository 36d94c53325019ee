"""
템플릿 관리자: 템플릿 목록 조회 + 템플릿 기반 파일 생성.

규칙:
- 목록 조회는 레지스트리/스토리지를 변경하지 않음
- Templates 폴더 없음/접근 불가/비로그인 → 해당 그룹 templates = []
  (그 외 스토리지 장애는 전파)
- 생성은 기존 파일을 덮어쓰지 않음 (FileConflictError)
- 생성 중 실패는 로그에 원인 기록 후 TemplateCreationError 하나로 수렴
"""

import logging
from collections.abc import Iterable

from src.core.session import UserSession
from src.domain.constants import TEMPLATES_FOLDER_NAME
from src.domain.errors import (
    FileConflictError,
    NotFoundError,
    NotPermittedError,
    NoUserError,
    StorageError,
    TemplateCreationError,
)
from src.domain.schemas import (
    MimetypeListing,
    ProbeResult,
    TemplateFileInfo,
    TemplateGroup,
)
from src.preview.manager import PreviewManager
from src.storage.base import Folder, Node, RootFolder
from src.templates.registry import TemplateRegistry

logger = logging.getLogger(__name__)

# Templates 폴더 조회 시 "템플릿 없음"으로 처리하는 에러
TEMPLATE_FOLDER_MISSING_ERRORS = (NotFoundError, NotPermittedError, NoUserError)


class TemplateManager:
    """
    요청 단위 템플릿 서비스.

    사용자 uid는 생성 시점에 한 번만 읽음.
    레지스트리는 프로세스 단위 객체를 주입받음.
    """

    def __init__(
        self,
        root_folder: RootFolder,
        user_session: UserSession,
        preview_manager: PreviewManager,
        registry: TemplateRegistry,
        templates_folder: str = TEMPLATES_FOLDER_NAME,
    ) -> None:
        self.root_folder = root_folder
        self.preview_manager = preview_manager
        self.registry = registry
        self.templates_folder = templates_folder

        user = user_session.get_user()
        self.user_id = user.uid if user else None

    # =========================================================================
    # Registry
    # =========================================================================

    def register_template_support(
        self,
        app_id: str,
        mimetypes: Iterable[str],
        action_label: str,
        file_extension: str,
    ) -> TemplateGroup:
        """레지스트리에 그룹 추가 (시작 단계 전용)."""
        return self.registry.register(app_id, mimetypes, action_label, file_extension)

    # =========================================================================
    # List
    # =========================================================================

    def list_mimetypes(self) -> list[MimetypeListing]:
        """
        등록된 그룹별 템플릿 파일 목록.

        - 그룹 순서 = 등록 순서, 템플릿이 없어도 그룹은 항상 포함
        - 파일 순서 = 스토리지 목록 순서
        - mimetype 정확히 일치 (대소문자 구분)

        Raises:
            StorageUnavailableError: Templates 폴더 조회 중 백엔드 장애
            InvalidPathError: 파일 포맷팅 실패
        """
        return [
            MimetypeListing(
                group=group,
                templates=[self.format_file(f) for f in self._get_template_files(group.mimetypes)],
            )
            for group in self.registry.list_groups()
        ]

    def get_template_folder(self) -> Folder:
        """
        현재 사용자의 Templates 폴더.

        Raises:
            NoUserError: 비로그인
            InvalidPathError: 경로로 쓸 수 없는 사용자 ID
            NotFoundError: 폴더 없음 (같은 이름의 파일 포함)
            NotPermittedError: 접근 불가
        """
        node = self._get_user_folder().get(self.templates_folder + "/")
        if not isinstance(node, Folder):
            raise NotFoundError(
                f"{self.templates_folder} is not a folder",
                path=node.get_path(),
            )
        return node

    def _get_template_files(self, mimetypes: Iterable[str]) -> list[Node]:
        try:
            folder = self.get_template_folder()
        except TEMPLATE_FOLDER_MISSING_ERRORS as e:
            logger.debug(f"No template folder for user {self.user_id!r}: {e}")
            return []

        wanted = set(mimetypes)
        return [
            node
            for node in folder.get_directory_listing()
            if node.is_file() and node.get_mimetype() in wanted
        ]

    # =========================================================================
    # Create
    # =========================================================================

    def probe_exists(self, user_folder: Folder, path: str) -> ProbeResult:
        """
        대상 경로 존재 확인.

        NOT_FOUND만 생성 진행 가능. 그 외 스토리지 에러는 ERROR.
        """
        try:
            user_folder.get(path)
        except NotFoundError:
            return ProbeResult.NOT_FOUND
        except StorageError as e:
            logger.warning(f"Existence probe failed for {path}: {e}")
            return ProbeResult.ERROR
        return ProbeResult.EXISTS

    def create_from_template(self, file_path: str, template_path: str = "") -> TemplateFileInfo:
        """
        빈 파일 또는 템플릿 복사본 생성.

        1. 대상 존재 확인 (EXISTS → 충돌)
        2. 빈 파일 생성 (원자적 create-if-absent)
        3. template_path가 있으면 템플릿 내용으로 덮어씀
        4. 생성된 파일 메타데이터 반환

        Args:
            file_path: 사용자 루트 기준 대상 경로
            template_path: 사용자 루트 기준 템플릿 경로 ("" = 빈 파일)

        Returns:
            생성된 파일의 TemplateFileInfo

        Raises:
            NoUserError: 비로그인
            InvalidPathError: 경로로 쓸 수 없는 사용자 ID
            FileConflictError: 대상 경로에 이미 파일 존재
            TemplateCreationError: 생성/복사 실패 (원인은 로그에만)
        """
        user_folder = self._get_user_folder(create=True)

        probe = self.probe_exists(user_folder, file_path)
        if probe == ProbeResult.EXISTS:
            logger.info(f"Refusing to create {file_path}: file already exists")
            raise FileConflictError("File already exists", path=file_path)
        if probe == ProbeResult.ERROR:
            logger.error(f"Cannot verify that {file_path} is free, aborting creation")
            raise TemplateCreationError(path=file_path)

        try:
            target = user_folder.new_file(file_path, exclusive=True)
            if template_path != "":
                template = user_folder.get(template_path)
                template.copy(target.get_path())
            return self.format_file(user_folder.get(file_path))
        except FileConflictError:
            # 확인과 생성 사이에 다른 요청이 먼저 생성
            logger.info(f"Refusing to create {file_path}: created concurrently")
            raise
        except Exception as e:
            logger.error(
                f"Failed to create {file_path} from template {template_path!r}: {e}",
                exc_info=True,
            )
            raise TemplateCreationError(path=file_path) from e

    # =========================================================================
    # Formatting
    # =========================================================================

    def format_file(self, node: Node) -> TemplateFileInfo:
        """
        노드 → TemplateFileInfo.

        Raises:
            InvalidPathError: 사용자 루트 밖의 노드 (복구하지 않음)
        """
        return TemplateFileInfo(
            basename=node.get_name(),
            etag=node.get_etag(),
            fileid=node.get_id(),
            filename=self._get_user_folder().get_relative_path(node.get_path()),
            lastmod=node.get_mtime(),
            mime=node.get_mimetype(),
            size=node.get_size(),
            type=node.get_type().value,
            has_preview=self.preview_manager.is_available(node),
        )

    def _get_user_folder(self, create: bool = False) -> Folder:
        return self.root_folder.get_user_folder(self.user_id, create=create)
