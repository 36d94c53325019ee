"""Preview layer: 미리보기 가능 여부 판단."""

from .manager import MimetypePreviewManager, PreviewManager

__all__ = [
    "PreviewManager",
    "MimetypePreviewManager",
]
