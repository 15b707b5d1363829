"""
서버 설정: default.yaml 로드 + ServerConfig 구성.

규칙:
- 설정은 시작 시 한 번만 구성 → 이후 읽기 전용 (frozen)
- 전역 변수 금지: create_app(config)로 명시적으로 전달
- host/port는 설정 불가 (loopback + OS 할당 포트)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from src.domain.errors import ErrorCodes, SiteError

# =============================================================================
# Constants
# =============================================================================

# 프로젝트 루트의 default.yaml
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "default.yaml"

# 패키지에 포함된 데모 사이트 (embed 백엔드 + live 기본 루트)
SITE_PACKAGE = "src.site"
BUNDLED_SITE_ROOT = Path(__file__).parent.parent / "site"

LISTEN_HOST = "127.0.0.1"
LISTEN_PORT = 0  # OS가 ephemeral 포트 할당

DEFAULT_SITE_CONTEXT: dict[str, Any] = {"Title": "Demo"}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class ServerConfig:
    """
    서버 전체 설정. 시작 시 한 번 생성, 이후 불변.

    embed=True  → 패키지 리소스(PackageStore)에서 템플릿 읽기
    embed=False → site_root 디렉터리(DirectoryStore)에서 매 요청 읽기
    """
    embed: bool = False
    site_root: Path = BUNDLED_SITE_ROOT
    site_package: str = SITE_PACKAGE

    page_dir: str = "src"
    partial_dir: str = "tmpl"
    static_dir: str = "static"
    favicon_path: str = "static/img/favicon.svg"
    template_ext: str = ".jinja"
    index_name: str = "index.html"
    recursive_partials: bool = True

    stream: bool = False
    log_level: str = "INFO"

    site: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_SITE_CONTEXT))
    )


# =============================================================================
# Loading
# =============================================================================

def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    설정 파일 로드.

    파일이 없으면 빈 dict (모든 값 기본값 사용).
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SiteError(
            ErrorCodes.INVALID_CONFIG,
            "config root must be a mapping",
            path=str(config_path),
        )
    return data


def build_config(raw: Mapping[str, Any], embed: bool = False) -> ServerConfig:
    """
    load_config() 결과 → ServerConfig.

    Args:
        raw: YAML에서 읽은 설정 dict (알 수 없는 키는 무시)
        embed: CLI -e 플래그

    Returns:
        불변 ServerConfig

    Raises:
        SiteError: INVALID_CONFIG (섹션/값 타입 오류)
    """
    site = _section(raw, "site", default=DEFAULT_SITE_CONTEXT)
    paths = _section(raw, "paths")
    templates = _section(raw, "templates")
    render = _section(raw, "render")
    logging_cfg = _section(raw, "logging")

    site_root = paths.get("site_root")
    if site_root is not None and not isinstance(site_root, str):
        raise SiteError(
            ErrorCodes.INVALID_CONFIG,
            "'site_root' must be a path string",
            key="site_root",
            got=site_root,
        )
    defaults = ServerConfig()

    extension = str(templates.get("extension", defaults.template_ext))
    if not extension.startswith("."):
        extension = f".{extension}"

    return ServerConfig(
        embed=embed,
        site_root=Path(site_root) if site_root else defaults.site_root,
        page_dir=str(templates.get("page_dir", defaults.page_dir)).strip("/"),
        partial_dir=str(templates.get("partial_dir", defaults.partial_dir)).strip("/"),
        static_dir=str(templates.get("static_dir", defaults.static_dir)).strip("/"),
        favicon_path=str(templates.get("favicon", defaults.favicon_path)).lstrip("/"),
        template_ext=extension,
        index_name=str(templates.get("index", defaults.index_name)),
        recursive_partials=_flag(templates, "recursive", defaults.recursive_partials),
        stream=_flag(render, "stream", defaults.stream),
        log_level=str(logging_cfg.get("level", defaults.log_level)).upper(),
        site=MappingProxyType(dict(site)),
    )


# =============================================================================
# Internal Helpers
# =============================================================================

def _section(
    raw: Mapping[str, Any],
    name: str,
    default: Mapping[str, Any] | None = None,
) -> Mapping[str, Any]:
    value = raw.get(name)
    if value is None:
        return default if default is not None else {}
    if not isinstance(value, Mapping):
        raise SiteError(
            ErrorCodes.INVALID_CONFIG,
            f"'{name}' section must be a mapping",
            section=name,
            got=type(value).__name__,
        )
    return value


def _flag(section: Mapping[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise SiteError(
            ErrorCodes.INVALID_CONFIG,
            f"'{key}' must be true or false",
            key=key,
            got=value,
        )
    return value
