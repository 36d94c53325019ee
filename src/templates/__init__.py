"""
Templates layer: 템플릿 서비스 모듈.

역할:
- 앱별 템플릿 지원 그룹 등록 (registry.py)
- 템플릿 목록 조회, 템플릿 기반 파일 생성 (manager.py)

주의: 폴더 구분
- src/templates/ → 코드 (이 모듈)
- <data_root>/<uid>/files/Templates/ → 사용자 템플릿 파일
"""

from .manager import TemplateManager
from .registry import TemplateRegistry

__all__ = [
    "TemplateManager",
    "TemplateRegistry",
]
