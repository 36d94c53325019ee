"""
Data schemas for the template service.

규칙:
- TemplateGroup: 등록 후 불변
- TemplateFileInfo: 조회 시마다 새로 계산, 저장하지 않음
- to_dict() 키 = API 응답 키
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Enums
# =============================================================================

class NodeType(str, Enum):
    """스토리지 노드 타입."""
    FILE = "file"
    FOLDER = "dir"


class ProbeResult(str, Enum):
    """
    대상 경로 존재 확인 결과.

    NOT_FOUND일 때만 생성 진행 가능.
    """
    EXISTS = "exists"
    NOT_FOUND = "not_found"
    ERROR = "error"


# =============================================================================
# Template Schemas
# =============================================================================

@dataclass(frozen=True)
class TemplateGroup:
    """앱이 등록한 템플릿 지원 mimetype 그룹."""
    app: str
    label: str
    extension: str
    mimetypes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "app": self.app,
            "label": self.label,
            "extension": self.extension,
            "mimetypes": list(self.mimetypes),
        }


@dataclass(frozen=True)
class TemplateFileInfo:
    """
    외부 노출용 파일 메타데이터.

    filename은 사용자 루트 기준 상대 경로.
    """
    basename: str
    etag: str
    fileid: int
    filename: str
    lastmod: int
    mime: str
    size: int
    type: str
    has_preview: bool = False

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용."""
        return {
            "basename": self.basename,
            "etag": self.etag,
            "fileid": self.fileid,
            "filename": self.filename,
            "lastmod": self.lastmod,
            "mime": self.mime,
            "size": self.size,
            "type": self.type,
            "hasPreview": self.has_preview,
        }


@dataclass
class MimetypeListing:
    """list_mimetypes() 결과 한 항목: 그룹 + 매칭된 템플릿 파일."""
    group: TemplateGroup
    templates: list[TemplateFileInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.group.to_dict(),
            "templates": [t.to_dict() for t in self.templates],
        }
