"""
로컬 파일시스템 Storage 구현.

구조:
<data_root>/
├── .locks/              # 복사 대상별 락 파일
└── <uid>/files/...      # 사용자 루트

보장:
- new_file(exclusive=True): O_EXCL 생성 → 검사와 생성 사이 경쟁 없음
- copy(): 대상별 FileLock + temp → os.replace (중간 상태 없음)
- ".." 로 사용자 루트 탈출 불가 (InvalidPathError)
- OSError → StorageError 계열로 변환 (원인은 __cause__에 보존)
"""

import hashlib
import logging
import mimetypes
import os
import shutil
import stat
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from src.domain.constants import (
    COPY_LOCK_BUCKETS,
    COPY_LOCK_TIMEOUT,
    DEFAULT_MIMETYPE,
    DIRECTORY_MIMETYPE,
    ETAG_LENGTH,
    LOCKS_DIR_NAME,
    USER_FILES_DIR,
)
from src.domain.errors import (
    FileConflictError,
    InvalidPathError,
    NotFoundError,
    NotPermittedError,
    NoUserError,
    StorageUnavailableError,
)
from src.domain.schemas import NodeType
from src.storage.base import File, Folder, Node, RootFolder

logger = logging.getLogger(__name__)

# mimetypes 모듈 결과가 플랫폼마다 다른 확장자 고정
_EXT_MIME = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".odt": "application/vnd.oasis.opendocument.text",
    ".ods": "application/vnd.oasis.opendocument.spreadsheet",
    ".odp": "application/vnd.oasis.opendocument.presentation",
    ".odg": "application/vnd.oasis.opendocument.graphics",
    ".ott": "application/vnd.oasis.opendocument.text-template",
    ".ots": "application/vnd.oasis.opendocument.spreadsheet-template",
    ".otp": "application/vnd.oasis.opendocument.presentation-template",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".drawio": "application/x-drawio",
}


# =============================================================================
# Path Helpers
# =============================================================================

def normalize_path(path: str) -> str:
    """
    상대 경로 정규화.

    - 앞뒤 "/" 제거, 빈 세그먼트와 "." 제거
    - ".." 포함 시 InvalidPathError

    Returns:
        "a/b/c" 형태 ("" = 폴더 자신)
    """
    if "\0" in path:
        raise InvalidPathError("Path contains NUL byte", path=path)

    parts = []
    for part in path.replace("\\", "/").split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            raise InvalidPathError(f"Path escapes its folder: {path}", path=path)
        parts.append(part)
    return "/".join(parts)


def _join(base: str, rel: str) -> str:
    if not base:
        return rel
    if not rel:
        return base
    return f"{base}/{rel}"


def detect_mimetype(name: str) -> str:
    """확장자 기반 mimetype."""
    ext = os.path.splitext(name)[1].lower()
    if ext in _EXT_MIME:
        return _EXT_MIME[ext]
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed or DEFAULT_MIMETYPE


@contextmanager
def _storage_errors(path: str) -> Generator[None, None, None]:
    """OSError → StorageError 계열 변환."""
    try:
        yield
    except (FileNotFoundError, NotADirectoryError) as e:
        raise NotFoundError(f"{path} not found", path=path) from e
    except PermissionError as e:
        raise NotPermittedError(f"Access to {path} not permitted", path=path) from e
    except IsADirectoryError as e:
        raise NotPermittedError(f"{path} is a folder", path=path) from e
    except OSError as e:
        raise StorageUnavailableError(
            f"Storage operation failed for {path}",
            path=path,
            errno=e.errno,
        ) from e


# =============================================================================
# Nodes
# =============================================================================

class LocalNode(Node):
    """
    로컬 노드 공통 구현.

    rel: 사용자 루트 기준 정규화 경로 ("" = 루트)
    """

    def __init__(self, root: "LocalRootFolder", uid: str, rel: str) -> None:
        self.root = root
        self.uid = uid
        self.rel = rel

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_path()!r})"

    @property
    def fs_path(self) -> Path:
        return self.root.fs_path(self.uid, self.rel)

    def _stat(self) -> os.stat_result:
        with _storage_errors(self.get_path()):
            return self.fs_path.stat()

    def get_name(self) -> str:
        return self.rel.rsplit("/", 1)[-1] if self.rel else self.uid

    def get_path(self) -> str:
        base = f"/{self.uid}/{USER_FILES_DIR}"
        return f"{base}/{self.rel}" if self.rel else base

    def get_etag(self) -> str:
        st = self._stat()
        raw = f"{self.get_path()}:{st.st_mtime_ns}:{st.st_size}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:ETAG_LENGTH]

    def get_id(self) -> int:
        return self._stat().st_ino

    def get_mtime(self) -> int:
        return int(self._stat().st_mtime)


class LocalFile(LocalNode, File):
    """로컬 파일."""

    def get_type(self) -> NodeType:
        return NodeType.FILE

    def get_mimetype(self) -> str:
        return detect_mimetype(self.get_name())

    def get_size(self) -> int:
        return self._stat().st_size

    def get_content(self) -> bytes:
        with _storage_errors(self.get_path()):
            return self.fs_path.read_bytes()

    def copy(self, dest_path: str) -> Node:
        uid, rel = self.root.resolve_absolute(dest_path)
        if not rel:
            raise NotPermittedError("Cannot overwrite a user root", path=dest_path)
        target = self.root.fs_path(uid, rel)

        with _storage_errors(dest_path), self.root.copy_lock(dest_path):
            if target.is_dir():
                raise NotPermittedError(f"{dest_path} is a folder", path=dest_path)
            if not target.parent.is_dir():
                raise NotFoundError(f"Parent folder of {dest_path} not found", path=dest_path)
            _atomic_copy(self.fs_path, target)

        logger.debug(f"Copied {self.get_path()} -> {dest_path}")
        return LocalFile(self.root, uid, rel)


class LocalFolder(LocalNode, Folder):
    """로컬 폴더."""

    def get_type(self) -> NodeType:
        return NodeType.FOLDER

    def get_mimetype(self) -> str:
        return DIRECTORY_MIMETYPE

    def get_size(self) -> int:
        """하위 파일 크기 합."""
        total = 0
        with _storage_errors(self.get_path()):
            for dirpath, _, filenames in os.walk(self.fs_path):
                for name in filenames:
                    total += (Path(dirpath) / name).stat().st_size
        return total

    def copy(self, dest_path: str) -> Node:
        uid, rel = self.root.resolve_absolute(dest_path)
        target = self.root.fs_path(uid, rel)

        with _storage_errors(dest_path), self.root.copy_lock(dest_path):
            if target.exists():
                raise NotPermittedError(f"{dest_path} already exists", path=dest_path)
            shutil.copytree(self.fs_path, target)

        return LocalFolder(self.root, uid, rel)

    def _child(self, rel: str) -> LocalNode:
        path = f"/{self.uid}/{USER_FILES_DIR}/{rel}"
        with _storage_errors(path):
            st = self.root.fs_path(self.uid, rel).stat()
        if stat.S_ISDIR(st.st_mode):
            return LocalFolder(self.root, self.uid, rel)
        return LocalFile(self.root, self.uid, rel)

    def get(self, path: str) -> Node:
        rel = _join(self.rel, normalize_path(path))
        if rel == self.rel:
            return self
        return self._child(rel)

    def node_exists(self, path: str) -> bool:
        try:
            self.get(path)
            return True
        except NotFoundError:
            return False

    def new_file(self, path: str, exclusive: bool = True) -> File:
        rel = _join(self.rel, normalize_path(path))
        if not rel:
            raise InvalidPathError("Cannot create a file without a name", path=path)
        fs = self.root.fs_path(self.uid, rel)
        full_path = f"/{self.uid}/{USER_FILES_DIR}/{rel}"

        flags = os.O_CREAT | os.O_WRONLY | (os.O_EXCL if exclusive else os.O_TRUNC)
        with _storage_errors(full_path):
            try:
                fd = os.open(fs, flags, 0o644)
            except FileExistsError as e:
                raise FileConflictError("File already exists", path=full_path) from e
            os.close(fd)

        logger.debug(f"Created empty file {full_path}")
        return LocalFile(self.root, self.uid, rel)

    def new_folder(self, path: str) -> Folder:
        rel = _join(self.rel, normalize_path(path))
        full_path = f"/{self.uid}/{USER_FILES_DIR}/{rel}"
        with _storage_errors(full_path):
            self.root.fs_path(self.uid, rel).mkdir(parents=True, exist_ok=True)
        return LocalFolder(self.root, self.uid, rel)

    def get_directory_listing(self) -> list[Node]:
        with _storage_errors(self.get_path()):
            names = sorted(entry.name for entry in os.scandir(self.fs_path))
        return [self._child(_join(self.rel, name)) for name in names]

    def get_relative_path(self, path: str) -> str:
        own = self.get_path()
        if path == own:
            return "/"
        if not path.startswith(own + "/"):
            raise InvalidPathError(f"{path} is not inside {own}", path=path, folder=own)
        rel = path[len(own):]
        if ".." in rel.split("/"):
            raise InvalidPathError(f"Malformed path: {path}", path=path)
        return rel


# =============================================================================
# Root
# =============================================================================

class LocalRootFolder(RootFolder):
    """
    로컬 디렉터리 기반 저장소 루트.

    Args:
        data_root: 사용자 데이터 루트 경로
    """

    def __init__(self, data_root: Path) -> None:
        self.data_root = Path(data_root)
        self._locks_dir = self.data_root / LOCKS_DIR_NAME

    def fs_path(self, uid: str, rel: str) -> Path:
        base = self.data_root / uid / USER_FILES_DIR
        return base / rel if rel else base

    def resolve_absolute(self, path: str) -> tuple[str, str]:
        """
        절대 경로 "/<uid>/files/..." → (uid, rel).

        Raises:
            InvalidPathError: 형식 불일치
        """
        parts = path.strip("/").split("/", 2)
        if len(parts) < 2 or not parts[0] or parts[1] != USER_FILES_DIR:
            raise InvalidPathError(f"Not a user file path: {path}", path=path)
        rel = normalize_path(parts[2]) if len(parts) == 3 else ""
        return parts[0], rel

    def get_user_folder(self, user_id: str | None, create: bool = False) -> Folder:
        if not user_id:
            raise NoUserError("No user logged in")
        if "/" in user_id or "\\" in user_id or user_id.startswith("."):
            raise InvalidPathError(f"Invalid user id: {user_id}", user_id=user_id)

        folder = self.fs_path(user_id, "")
        path = f"/{user_id}/{USER_FILES_DIR}"
        with _storage_errors(path):
            if create:
                folder.mkdir(parents=True, exist_ok=True)
            elif not folder.is_dir():
                raise NotFoundError(f"User folder {path} not found", path=path)
        return LocalFolder(self, user_id, "")

    @contextmanager
    def copy_lock(self, dest_path: str) -> Generator[None, None, None]:
        """
        복사 대상 락.

        대상 경로 해시를 COPY_LOCK_BUCKETS개 버킷으로 나눔 → 락 파일 수 고정.

        Raises:
            StorageUnavailableError: 락 timeout
        """
        self._locks_dir.mkdir(parents=True, exist_ok=True)
        bucket = int(hashlib.sha256(dest_path.encode("utf-8")).hexdigest(), 16) % COPY_LOCK_BUCKETS
        lock = FileLock(self._locks_dir / f"copy-{bucket:02x}.lock", timeout=COPY_LOCK_TIMEOUT)

        try:
            lock.acquire()
        except Timeout as e:
            raise StorageUnavailableError(
                f"Failed to acquire copy lock for {dest_path}",
                path=dest_path,
                timeout=COPY_LOCK_TIMEOUT,
            ) from e
        try:
            yield
        finally:
            lock.release()


def _atomic_copy(src: Path, dst: Path) -> None:
    """
    원자적 파일 복사.

    - temp (같은 디렉터리) → os.replace
    - 내용 + 속성 (mode, mtime) 복사
    - 실패 시 temp 정리, 기존 대상 보존
    """
    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(dir=dst.parent, suffix=".tmp", delete=False) as f:
            temp_path = Path(f.name)
            with open(src, "rb") as source:
                shutil.copyfileobj(source, f)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(f"File fsync failed for {dst}: {e}")

        shutil.copystat(src, temp_path)
        os.replace(temp_path, dst)
    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise
