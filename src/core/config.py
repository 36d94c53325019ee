"""
설정 로드: default.yaml → Settings.

우선순위:
1. load_config(path) 인자
2. 환경변수 FILE_TEMPLATES_CONFIG
3. 프로젝트 루트 default.yaml
파일이 없으면 기본값.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILENAME,
    TEMPLATES_FOLDER_NAME,
)
from src.preview.manager import DEFAULT_PREVIEW_MIMETYPES

PROJECT_ROOT = Path(__file__).parent.parent.parent


@dataclass
class Settings:
    """애플리케이션 설정."""
    data_root: Path = PROJECT_ROOT / "data"
    templates_folder: str = TEMPLATES_FOLDER_NAME
    preview_mimetypes: list[str] = field(default_factory=lambda: list(DEFAULT_PREVIEW_MIMETYPES))
    log_level: str = "INFO"

    # 시작 시 등록할 템플릿 그룹: [{app, label, extension, mimetypes}, ...]
    template_support: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> "Settings":
        """
        YAML dict → Settings.

        상대 경로 data_root는 base_dir(설정 파일 위치) 기준.
        """
        storage = data.get("storage") or {}
        preview = data.get("preview") or {}
        logging_cfg = data.get("logging") or {}
        defaults = cls()

        data_root = Path(storage.get("data_root", defaults.data_root))
        if not data_root.is_absolute() and base_dir is not None:
            data_root = base_dir / data_root

        return cls(
            data_root=data_root,
            templates_folder=storage.get("templates_folder", defaults.templates_folder),
            preview_mimetypes=list(preview.get("mimetypes", defaults.preview_mimetypes)),
            log_level=str(logging_cfg.get("level", defaults.log_level)).upper(),
            template_support=list(data.get("template_support") or []),
        )


def load_config(config_path: Path | None = None) -> Settings:
    """설정 파일 로드."""
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else PROJECT_ROOT / DEFAULT_CONFIG_FILENAME

    if not config_path.exists():
        return Settings()

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    return Settings.from_dict(data, base_dir=config_path.parent)
