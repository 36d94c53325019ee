"""
Storage 인터페이스: 사용자별 계층형 파일 저장소.

템플릿 서비스가 사용하는 연산만 정의:
- 경로 → 노드 조회, 디렉터리 목록
- 빈 파일 생성 (원자적 create-if-absent), 복사
- 메타데이터 조회 (name, etag, id, mtime, mimetype, size, type, path)

경로 규칙:
- get_path(): 절대 경로 "/<uid>/files/..."
- Folder.get(path): 폴더 기준 상대 경로 ("/" 시작 허용)
"""

from abc import ABC, abstractmethod

from src.domain.schemas import NodeType


class Node(ABC):
    """파일 또는 폴더."""

    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def get_etag(self) -> str: ...

    @abstractmethod
    def get_id(self) -> int: ...

    @abstractmethod
    def get_path(self) -> str:
        """절대 경로 ("/<uid>/files/...")."""

    @abstractmethod
    def get_mtime(self) -> int: ...

    @abstractmethod
    def get_mimetype(self) -> str: ...

    @abstractmethod
    def get_size(self) -> int: ...

    @abstractmethod
    def get_type(self) -> NodeType: ...

    @abstractmethod
    def copy(self, dest_path: str) -> "Node":
        """
        dest_path(절대 경로)로 내용/속성 복사.

        대상이 파일이면 덮어씀.

        Raises:
            NotFoundError: 대상 부모 폴더 없음
            NotPermittedError: 덮어쓸 수 없는 대상
        """

    def is_file(self) -> bool:
        return self.get_type() == NodeType.FILE


class File(Node):
    """파일 노드."""

    @abstractmethod
    def get_content(self) -> bytes: ...


class Folder(Node):
    """폴더 노드."""

    @abstractmethod
    def get(self, path: str) -> Node:
        """
        상대 경로로 노드 조회.

        Raises:
            NotFoundError: 노드 없음
            NotPermittedError: 접근 불가
            InvalidPathError: 폴더 밖을 가리키는 경로
        """

    @abstractmethod
    def node_exists(self, path: str) -> bool: ...

    @abstractmethod
    def new_file(self, path: str, exclusive: bool = True) -> File:
        """
        빈 파일 생성.

        exclusive=True: 이미 존재하면 FileConflictError (원자적 검사+생성).
        """

    @abstractmethod
    def new_folder(self, path: str) -> "Folder": ...

    @abstractmethod
    def get_directory_listing(self) -> list[Node]:
        """직계 자식 목록 (이름순)."""

    @abstractmethod
    def get_relative_path(self, path: str) -> str:
        """
        절대 경로 → 이 폴더 기준 상대 경로 ("/" 시작).

        Raises:
            InvalidPathError: 이 폴더 밖의 경로
        """


class RootFolder(ABC):
    """전체 저장소 루트."""

    @abstractmethod
    def get_user_folder(self, user_id: str | None, create: bool = False) -> Folder:
        """
        사용자 루트 폴더.

        create=False: 조회 전용, 폴더가 없으면 NotFoundError.
        create=True: 없으면 생성 (쓰기 경로 전용).

        Raises:
            NoUserError: user_id 없음
            NotFoundError: create=False이고 폴더 없음
            InvalidPathError: 경로로 쓸 수 없는 user_id
        """
