"""
미리보기 관리자.

실제 렌더링은 하지 않음. 등록된 mimetype 패턴으로 가능 여부만 판단.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable

from src.storage.base import Node

# 설정이 없을 때 기본 패턴
DEFAULT_PREVIEW_MIMETYPES = (
    r"image/(png|jpeg|gif|bmp|webp)",
    r"text/plain",
    r"text/markdown",
    r"application/pdf",
)


class PreviewManager(ABC):
    """미리보기 제공자 인터페이스."""

    @abstractmethod
    def is_available(self, file: Node) -> bool: ...


class MimetypePreviewManager(PreviewManager):
    """
    mimetype 정규식 기반 PreviewManager.

    Args:
        patterns: mimetype 정규식 목록 (fullmatch)
    """

    def __init__(self, patterns: Iterable[str] = DEFAULT_PREVIEW_MIMETYPES) -> None:
        self.patterns = [re.compile(p) for p in patterns]

    def is_available(self, file: Node) -> bool:
        if not file.is_file():
            return False
        mimetype = file.get_mimetype()
        return any(p.fullmatch(mimetype) for p in self.patterns)
