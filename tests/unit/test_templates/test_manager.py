"""
test_manager.py - 템플릿 관리자 테스트

검증:
- list_mimetypes: 등록 순서, mimetype 정확히 일치, Templates 폴더 없음 → []
- create_from_template: 빈 파일/템플릿 복사, 기존 파일 덮어쓰기 금지
- 생성 실패 → TemplateCreationError (원인은 로그에만)
- format_file: 사용자 루트 밖 노드 → InvalidPathError 전파
"""

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.core.session import UserSession
from src.domain.errors import (
    FileConflictError,
    InvalidPathError,
    NotFoundError,
    NotPermittedError,
    NoUserError,
    StorageUnavailableError,
    TemplateCreationError,
)
from src.domain.schemas import ProbeResult
from src.preview.manager import MimetypePreviewManager
from src.storage.base import Folder, RootFolder
from src.storage.local import LocalFolder, LocalRootFolder
from src.templates.manager import TemplateManager
from src.templates.registry import TemplateRegistry

# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def text_group(registry: TemplateRegistry) -> TemplateRegistry:
    """text/plain 그룹 등록."""
    registry.register("text", ["text/plain"], "Text file", "txt")
    return registry


@pytest.fixture
def anonymous_manager(
    root_folder: LocalRootFolder,
    preview_manager: MimetypePreviewManager,
    registry: TemplateRegistry,
) -> TemplateManager:
    """비로그인 TemplateManager."""
    return TemplateManager(
        root_folder=root_folder,
        user_session=UserSession.from_user_id(None),
        preview_manager=preview_manager,
        registry=registry,
    )


def _mock_manager(folder: MagicMock, registry: TemplateRegistry) -> TemplateManager:
    """주어진 폴더 mock을 사용자 루트로 쓰는 TemplateManager."""
    root = MagicMock(spec=RootFolder)
    root.get_user_folder.return_value = folder
    return TemplateManager(
        root_folder=root,
        user_session=UserSession.from_user_id("alice"),
        preview_manager=MimetypePreviewManager(),
        registry=registry,
    )


# =============================================================================
# list_mimetypes 테스트
# =============================================================================

class TestListMimetypes:
    """list_mimetypes 테스트."""

    def test_end_to_end_example(
        self,
        manager: TemplateManager,
        text_group: TemplateRegistry,
        templates_dir: Path,
    ):
        """text/plain 그룹에는 a.txt만 포함."""
        listing = manager.list_mimetypes()

        assert len(listing) == 1
        entry = listing[0]
        assert entry.group.app == "text"
        assert entry.group.label == "Text file"
        assert entry.group.extension == "txt"
        assert list(entry.group.mimetypes) == ["text/plain"]
        assert [t.basename for t in entry.templates] == ["a.txt"]

    def test_template_metadata(
        self,
        manager: TemplateManager,
        text_group: TemplateRegistry,
        templates_dir: Path,
    ):
        """포맷팅된 메타데이터."""
        info = manager.list_mimetypes()[0].templates[0]
        st = (templates_dir / "a.txt").stat()

        assert info.filename == "/Templates/a.txt"
        assert info.fileid == st.st_ino
        assert info.size == len(b"plain template")
        assert info.lastmod == int(st.st_mtime)
        assert info.mime == "text/plain"
        assert info.type == "file"
        assert info.has_preview is True
        assert info.etag

    def test_groups_in_registration_order(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
        templates_dir: Path,
    ):
        """그룹 순서 = 등록 순서, 각 그룹은 자기 mimetype만."""
        registry.register("md", ["text/markdown"], "Markdown", "md")
        registry.register("text", ["text/plain"], "Text file", "txt")

        listing = manager.list_mimetypes()

        assert [e.group.app for e in listing] == ["md", "text"]
        assert [t.basename for t in listing[0].templates] == ["b.md"]
        assert [t.basename for t in listing[1].templates] == ["a.txt"]

    def test_group_with_several_mimetypes(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
        templates_dir: Path,
    ):
        """여러 mimetype 그룹: 스토리지 순서 유지."""
        registry.register("text", ["text/plain", "text/markdown"], "Any text", "txt")

        templates = manager.list_mimetypes()[0].templates

        assert [t.basename for t in templates] == ["a.txt", "b.md"]

    def test_mimetype_match_is_case_sensitive(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
        templates_dir: Path,
    ):
        """대소문자 다르면 불일치."""
        registry.register("text", ["Text/Plain"], "Text file", "txt")

        assert manager.list_mimetypes()[0].templates == []

    def test_group_without_templates_kept(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
        templates_dir: Path,
    ):
        """템플릿 없는 그룹도 결과에 포함."""
        registry.register("office", ["application/vnd.oasis.opendocument.text"], "Document", "odt")

        listing = manager.list_mimetypes()

        assert len(listing) == 1
        assert listing[0].templates == []

    def test_subfolders_ignored(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
        templates_dir: Path,
    ):
        """하위 폴더는 템플릿 아님."""
        (templates_dir / "nested").mkdir()
        (templates_dir / "nested" / "c.txt").write_bytes(b"nested")
        registry.register("dirs", ["httpd/unix-directory"], "Folder", "")
        registry.register("text", ["text/plain"], "Text file", "txt")

        listing = manager.list_mimetypes()

        assert listing[0].templates == []
        assert [t.basename for t in listing[1].templates] == ["a.txt"]

    def test_missing_templates_folder(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
        user_folder: LocalFolder,
    ):
        """Templates 폴더 없음 → 모든 그룹 templates = []."""
        registry.register("text", ["text/plain"], "Text file", "txt")
        registry.register("md", ["text/markdown"], "Markdown", "md")

        listing = manager.list_mimetypes()

        assert [e.group.app for e in listing] == ["text", "md"]
        assert all(e.templates == [] for e in listing)

    def test_templates_is_a_file(
        self,
        manager: TemplateManager,
        text_group: TemplateRegistry,
        user_files: Path,
    ):
        """Templates가 파일이면 폴더 없음과 동일."""
        (user_files / "Templates").write_bytes(b"not a folder")

        assert manager.list_mimetypes()[0].templates == []

    def test_anonymous_user(
        self,
        anonymous_manager: TemplateManager,
        text_group: TemplateRegistry,
    ):
        """비로그인 → 예외 없이 빈 목록."""
        listing = anonymous_manager.list_mimetypes()

        assert len(listing) == 1
        assert listing[0].templates == []

    def test_listing_does_not_create_user_folder(
        self,
        root_folder: LocalRootFolder,
        preview_manager: MimetypePreviewManager,
        text_group: TemplateRegistry,
        data_root: Path,
    ):
        """처음 보는 사용자 조회 → 빈 목록, 사용자 폴더 생성 안 함."""
        stranger = TemplateManager(
            root_folder=root_folder,
            user_session=UserSession.from_user_id("mallory"),
            preview_manager=preview_manager,
            registry=text_group,
        )

        listing = stranger.list_mimetypes()

        assert listing[0].templates == []
        assert list(data_root.iterdir()) == []

    def test_anonymous_listing_writes_nothing(
        self,
        anonymous_manager: TemplateManager,
        text_group: TemplateRegistry,
        data_root: Path,
    ):
        anonymous_manager.list_mimetypes()

        assert list(data_root.iterdir()) == []

    def test_not_permitted_treated_as_missing(self, registry: TemplateRegistry):
        """접근 불가 → 빈 목록."""
        registry.register("text", ["text/plain"], "Text file", "txt")
        folder = MagicMock(spec=Folder)
        folder.get.side_effect = NotPermittedError("denied")

        listing = _mock_manager(folder, registry).list_mimetypes()

        assert listing[0].templates == []

    def test_storage_outage_propagates(self, registry: TemplateRegistry):
        """백엔드 장애는 숨기지 않음."""
        registry.register("text", ["text/plain"], "Text file", "txt")
        folder = MagicMock(spec=Folder)
        folder.get.side_effect = StorageUnavailableError("backend down")

        with pytest.raises(StorageUnavailableError):
            _mock_manager(folder, registry).list_mimetypes()

    def test_does_not_mutate(
        self,
        manager: TemplateManager,
        text_group: TemplateRegistry,
        templates_dir: Path,
    ):
        """조회는 레지스트리/스토리지를 변경하지 않음."""
        before_files = sorted(p.name for p in templates_dir.iterdir())

        manager.list_mimetypes()
        manager.list_mimetypes()

        assert len(text_group) == 1
        assert sorted(p.name for p in templates_dir.iterdir()) == before_files

    def test_to_dict(
        self,
        manager: TemplateManager,
        text_group: TemplateRegistry,
        templates_dir: Path,
    ):
        """API 응답 형태."""
        data = manager.list_mimetypes()[0].to_dict()

        assert data["app"] == "text"
        assert data["label"] == "Text file"
        assert data["extension"] == "txt"
        assert data["mimetypes"] == ["text/plain"]
        assert set(data["templates"][0]) == {
            "basename", "etag", "fileid", "filename",
            "lastmod", "mime", "size", "type", "hasPreview",
        }


# =============================================================================
# create_from_template 테스트
# =============================================================================

class TestCreateFromTemplate:
    """create_from_template 테스트."""

    def test_creates_empty_file(
        self,
        manager: TemplateManager,
        user_files: Path,
    ):
        """template_path 없음 → 빈 파일."""
        (user_files / "Documents").mkdir()

        info = manager.create_from_template("/Documents/new.txt")

        assert (user_files / "Documents" / "new.txt").read_bytes() == b""
        assert info.basename == "new.txt"
        assert info.filename == "/Documents/new.txt"
        assert info.size == 0
        assert info.mime == "text/plain"
        assert info.type == "file"

    def test_second_create_conflicts(
        self,
        manager: TemplateManager,
        user_files: Path,
    ):
        """같은 경로 재생성 → FileConflictError, 파일 하나만 존재."""
        (user_files / "Documents").mkdir()
        manager.create_from_template("/Documents/new.txt")
        (user_files / "Documents" / "new.txt").write_bytes(b"edited")

        with pytest.raises(FileConflictError) as exc_info:
            manager.create_from_template("/Documents/new.txt")

        assert exc_info.value.code == "FILE_ALREADY_EXISTS"
        assert "already exists" in exc_info.value.message
        assert [p.name for p in (user_files / "Documents").iterdir()] == ["new.txt"]
        assert (user_files / "Documents" / "new.txt").read_bytes() == b"edited"

    def test_conflict_not_logged_as_error(
        self,
        manager: TemplateManager,
        user_files: Path,
        caplog: pytest.LogCaptureFixture,
    ):
        """충돌은 ERROR 로그 아님."""
        (user_files / "taken.txt").write_bytes(b"x")

        with caplog.at_level(logging.INFO), pytest.raises(FileConflictError):
            manager.create_from_template("/taken.txt")

        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_copies_template_content(
        self,
        manager: TemplateManager,
        user_files: Path,
    ):
        """템플릿 복사: 내용 일치."""
        (user_files / "Documents").mkdir()
        (user_files / "Templates").mkdir()
        (user_files / "Templates" / "blank.odt").write_bytes(b"PK\x03\x04odt body")

        info = manager.create_from_template("/Documents/new.odt", "/Templates/blank.odt")

        assert (user_files / "Documents" / "new.odt").read_bytes() == b"PK\x03\x04odt body"
        assert info.filename == "/Documents/new.odt"
        assert info.size == len(b"PK\x03\x04odt body")
        assert info.mime == "application/vnd.oasis.opendocument.text"
        # 원본 유지
        assert (user_files / "Templates" / "blank.odt").exists()

    def test_missing_template_fails_generically(
        self,
        manager: TemplateManager,
        user_files: Path,
        caplog: pytest.LogCaptureFixture,
    ):
        """템플릿 없음 → TemplateCreationError, 원인은 로그와 __cause__에만."""
        with caplog.at_level(logging.ERROR), pytest.raises(TemplateCreationError) as exc_info:
            manager.create_from_template("/new.odt", "/Templates/missing.odt")

        err = exc_info.value
        assert err.code == "TEMPLATE_CREATE_FAILED"
        assert err.message == "Failed to create file from template"
        assert "missing.odt" not in str(err)
        assert isinstance(err.__cause__, NotFoundError)

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors
        assert errors[-1].exc_info is not None
        assert "missing.odt" in errors[-1].getMessage()

    def test_failed_copy_leaves_empty_file(
        self,
        manager: TemplateManager,
        user_files: Path,
    ):
        """복사 실패 시 생성된 빈 파일은 남음."""
        with pytest.raises(TemplateCreationError):
            manager.create_from_template("/new.odt", "/Templates/missing.odt")

        assert (user_files / "new.odt").read_bytes() == b""

    def test_missing_parent_folder(
        self,
        manager: TemplateManager,
        user_folder: LocalFolder,
    ):
        """부모 폴더 없음 → TemplateCreationError."""
        with pytest.raises(TemplateCreationError):
            manager.create_from_template("/NoSuchFolder/new.txt")

    def test_creates_home_for_new_user(
        self,
        root_folder: LocalRootFolder,
        preview_manager: MimetypePreviewManager,
        registry: TemplateRegistry,
        data_root: Path,
    ):
        """첫 생성 요청 → 사용자 루트 생성 후 파일 생성."""
        newcomer = TemplateManager(
            root_folder=root_folder,
            user_session=UserSession.from_user_id("frank"),
            preview_manager=preview_manager,
            registry=registry,
        )

        info = newcomer.create_from_template("/first.txt")

        assert (data_root / "frank" / "files" / "first.txt").is_file()
        assert info.filename == "/first.txt"

    def test_anonymous_user(self, anonymous_manager: TemplateManager):
        """비로그인 → NoUserError."""
        with pytest.raises(NoUserError):
            anonymous_manager.create_from_template("/new.txt")

    def test_probe_error_aborts(self, registry: TemplateRegistry):
        """존재 확인 실패 (NOT_FOUND 아님) → 생성하지 않음."""
        folder = MagicMock(spec=Folder)
        folder.get.side_effect = NotPermittedError("denied")

        with pytest.raises(TemplateCreationError):
            _mock_manager(folder, registry).create_from_template("/new.txt")

        folder.new_file.assert_not_called()

    def test_concurrent_create_conflicts(self, registry: TemplateRegistry):
        """확인 후 다른 요청이 먼저 생성 → FileConflictError 그대로 전파."""
        folder = MagicMock(spec=Folder)
        folder.get.side_effect = NotFoundError("missing")
        folder.new_file.side_effect = FileConflictError("File already exists")

        with pytest.raises(FileConflictError):
            _mock_manager(folder, registry).create_from_template("/new.txt")

        folder.new_file.assert_called_once_with("/new.txt", exclusive=True)


# =============================================================================
# probe_exists 테스트
# =============================================================================

class TestProbeExists:
    """probe_exists 테스트."""

    def test_exists(self, manager: TemplateManager, user_folder: LocalFolder, user_files: Path):
        (user_files / "a.txt").write_bytes(b"")

        assert manager.probe_exists(user_folder, "/a.txt") == ProbeResult.EXISTS

    def test_not_found(self, manager: TemplateManager, user_folder: LocalFolder):
        assert manager.probe_exists(user_folder, "/a.txt") == ProbeResult.NOT_FOUND

    def test_error(self, manager: TemplateManager, user_folder: LocalFolder):
        """경로 오류 → ERROR."""
        assert manager.probe_exists(user_folder, "/../escape.txt") == ProbeResult.ERROR


# =============================================================================
# format_file 테스트
# =============================================================================

class TestFormatFile:
    """format_file 테스트."""

    def test_node_outside_user_root(
        self,
        manager: TemplateManager,
        user_folder: LocalFolder,
        root_folder: LocalRootFolder,
        data_root: Path,
    ):
        """다른 사용자 파일 → InvalidPathError 전파."""
        bob = root_folder.get_user_folder("bob", create=True)
        (data_root / "bob" / "files" / "x.txt").write_bytes(b"bob")

        with pytest.raises(InvalidPathError):
            manager.format_file(bob.get("x.txt"))

    def test_folder_node(
        self,
        manager: TemplateManager,
        user_folder: LocalFolder,
        templates_dir: Path,
    ):
        """폴더 포맷팅."""
        info = manager.format_file(user_folder.get("Templates"))

        assert info.type == "dir"
        assert info.mime == "httpd/unix-directory"
        assert info.filename == "/Templates"
        assert info.has_preview is False

    def test_register_template_support_delegates(
        self,
        manager: TemplateManager,
        registry: TemplateRegistry,
    ):
        """서비스 등록 → 레지스트리."""
        manager.register_template_support("text", ["text/plain"], "Text file", "txt")

        assert [g.app for g in registry.list_groups()] == ["text"]
