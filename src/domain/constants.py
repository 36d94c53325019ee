"""
Domain Constants: 템플릿 서비스 전역 상수.

폴더 이름, mimetype, 기본 설정값 등 시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# User Folder Structure (사용자 폴더 구조)
# =============================================================================
# <data_root>/
# └── <uid>/
#     └── files/           # 사용자 루트 (상대 경로 기준)
#         └── Templates/   # 템플릿 스캔 대상 폴더

USER_FILES_DIR = "files"
TEMPLATES_FOLDER_NAME = "Templates"

# =============================================================================
# Mimetypes
# =============================================================================

DIRECTORY_MIMETYPE = "httpd/unix-directory"
DEFAULT_MIMETYPE = "application/octet-stream"

# =============================================================================
# Storage
# =============================================================================

# 복사 대상 파일 락 timeout (초)
COPY_LOCK_TIMEOUT = 10.0

# 복사 락 파일 수 (대상 경로 해시 버킷)
COPY_LOCK_BUCKETS = 16

# 락 파일 디렉터리 (data_root 기준)
LOCKS_DIR_NAME = ".locks"

# etag 길이 (hex)
ETAG_LENGTH = 32

# =============================================================================
# Config
# =============================================================================

CONFIG_ENV_VAR = "FILE_TEMPLATES_CONFIG"
DEFAULT_CONFIG_FILENAME = "default.yaml"
