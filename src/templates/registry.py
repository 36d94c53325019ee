"""
템플릿 레지스트리: 앱별 템플릿 지원 mimetype 그룹.

규칙:
- 등록 순서 보존 (list_groups 결과 순서 = 등록 순서)
- 검증/중복 제거 없음: 같은 (app, extension)도 그대로 추가
- 등록은 시작 단계에서만. 이후에는 읽기 전용으로 취급 (락 없음)
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from src.domain.schemas import TemplateGroup

logger = logging.getLogger(__name__)


class TemplateRegistry:
    """프로세스 수명 동안 유지되는 TemplateGroup 목록."""

    def __init__(self) -> None:
        self._groups: list[TemplateGroup] = []

    def register(
        self,
        app_id: str,
        mimetypes: Iterable[str],
        action_label: str,
        file_extension: str,
    ) -> TemplateGroup:
        """
        그룹 등록.

        Args:
            app_id: 등록하는 앱 ID
            mimetypes: 템플릿으로 인정할 mimetype 목록 (순서 보존)
            action_label: 표시 이름 (예: "New text file")
            file_extension: 생성될 파일 확장자

        Returns:
            추가된 TemplateGroup
        """
        group = TemplateGroup(
            app=app_id,
            label=action_label,
            extension=file_extension,
            mimetypes=tuple(mimetypes),
        )
        self._groups.append(group)
        logger.debug(f"Registered template support: {app_id} .{file_extension} {list(group.mimetypes)}")
        return group

    def register_from_config(self, entries: Iterable[dict[str, Any]]) -> list[TemplateGroup]:
        """
        설정 파일의 template_support 목록 등록.

        entries: [{app, label, extension, mimetypes}, ...]
        """
        return [
            self.register(
                app_id=entry["app"],
                mimetypes=entry.get("mimetypes", []),
                action_label=entry.get("label", ""),
                file_extension=entry.get("extension", ""),
            )
            for entry in entries
        ]

    def list_groups(self) -> list[TemplateGroup]:
        """등록 순서대로 복사본 반환."""
        return list(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[TemplateGroup]:
        return iter(self.list_groups())
