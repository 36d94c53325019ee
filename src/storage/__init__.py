"""
Storage layer: 사용자별 파일 저장소.

역할:
- 인터페이스 (base.py): 템플릿 서비스가 의존하는 연산
- 로컬 구현 (local.py): data_root 아래 디렉터리 기반
"""

from .base import File, Folder, Node, RootFolder
from .local import LocalFile, LocalFolder, LocalRootFolder, detect_mimetype, normalize_path

__all__ = [
    # base
    "Node",
    "File",
    "Folder",
    "RootFolder",
    # local
    "LocalRootFolder",
    "LocalFolder",
    "LocalFile",
    "detect_mimetype",
    "normalize_path",
]
