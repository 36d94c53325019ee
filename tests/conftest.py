"""
Pytest fixtures for the template service tests.

구성:
- data_root: tmp_path 아래 사용자 데이터 루트
- alice: 기본 로그인 사용자 (Templates 폴더 포함)
"""

from pathlib import Path

import pytest

from src.core.session import UserSession
from src.preview.manager import MimetypePreviewManager
from src.storage.local import LocalFolder, LocalRootFolder
from src.templates.manager import TemplateManager
from src.templates.registry import TemplateRegistry

# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """테스트용 데이터 루트."""
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def root_folder(data_root: Path) -> LocalRootFolder:
    """LocalRootFolder 인스턴스."""
    return LocalRootFolder(data_root)


@pytest.fixture
def user_folder(root_folder: LocalRootFolder) -> LocalFolder:
    """alice 사용자 루트."""
    return root_folder.get_user_folder("alice", create=True)


@pytest.fixture
def user_files(data_root: Path, user_folder: LocalFolder) -> Path:
    """alice 사용자 루트의 실제 디렉터리."""
    return data_root / "alice" / "files"


@pytest.fixture
def templates_dir(user_files: Path) -> Path:
    """
    alice의 Templates 폴더.

    포함:
    - a.txt (text/plain)
    - b.md (text/markdown)
    """
    path = user_files / "Templates"
    path.mkdir()
    (path / "a.txt").write_bytes(b"plain template")
    (path / "b.md").write_bytes(b"# markdown template")
    return path


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def registry() -> TemplateRegistry:
    """빈 TemplateRegistry."""
    return TemplateRegistry()


@pytest.fixture
def preview_manager() -> MimetypePreviewManager:
    """기본 패턴 PreviewManager."""
    return MimetypePreviewManager()


@pytest.fixture
def manager(
    root_folder: LocalRootFolder,
    preview_manager: MimetypePreviewManager,
    registry: TemplateRegistry,
) -> TemplateManager:
    """alice로 로그인한 TemplateManager."""
    return TemplateManager(
        root_folder=root_folder,
        user_session=UserSession.from_user_id("alice"),
        preview_manager=preview_manager,
        registry=registry,
    )
