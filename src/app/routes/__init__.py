"""
FastAPI Routes.

API 라우트 (REST)
"""

from . import templates

__all__ = ["templates"]
