"""
Core layer: 설정, 로깅, 세션.

역할:
- default.yaml 로드 (config.py)
- 루트 로거 설정 (logging.py)
- 요청 사용자 (session.py)
"""

from .config import Settings, load_config
from .logging import setup_logging
from .session import User, UserSession

__all__ = [
    # config
    "Settings",
    "load_config",
    # logging
    "setup_logging",
    # session
    "User",
    "UserSession",
]
