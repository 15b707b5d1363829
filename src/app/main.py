"""
FastAPI 애플리케이션 진입점.

실행:
- 기본 (live 디렉터리): uv run python -m src.app.main
- embed (패키지 리소스): uv run python -m src.app.main -e
- uvicorn 직접: uv run uvicorn src.app.main:create_app --factory

loopback의 OS 할당 포트에 바인드하고 접속 URL을 stdout에 출력한다.
"""

import argparse
import logging
import socket
import sys
from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.app.routes import pages
from src.core.config import LISTEN_HOST, LISTEN_PORT, ServerConfig, build_config, load_config
from src.core.logging import setup_logging, uvicorn_log_level
from src.domain.errors import SiteError
from src.templates.extractor import PatternExtractor
from src.templates.renderer import PageRenderer
from src.templates.resolver import DependencyResolver
from src.templates.store import ContentStore, DirectoryStore, PackageStore, collect_files

logger = logging.getLogger(__name__)


# =============================================================================
# Store Selection
# =============================================================================

def create_store(config: ServerConfig) -> ContentStore:
    """embed 플래그 → 저장소 구현 선택 (이후 코드는 capability만 사용)."""
    if config.embed:
        return PackageStore(config.site_package)
    return DirectoryStore(config.site_root)


def _static_files(config: ServerConfig, store: ContentStore) -> StaticFiles | None:
    if not store.is_dir(config.static_dir):
        logger.warning(f"Static directory not found: {config.static_dir} ({store!r})")
        return None
    if config.embed:
        return StaticFiles(packages=[(config.site_package, config.static_dir)])
    return StaticFiles(directory=config.site_root / config.static_dir)


def _load_favicon(config: ServerConfig, store: ContentStore) -> bytes | None:
    try:
        return store.read(config.favicon_path)
    except OSError:
        logger.warning(f"Favicon not found: {config.favicon_path} ({store!r})")
        return None


# =============================================================================
# App Factory
# =============================================================================

def create_app(config: ServerConfig | None = None) -> FastAPI:
    """
    앱 생성.

    시작 시 한 번만:
    - 후보 템플릿 수집 (실패 → SiteError, startup-fatal)
    - 저장소/해석기/렌더러 구성 → app.state

    Args:
        config: 서버 설정 (None이면 default.yaml + 기본값)

    Returns:
        FastAPI 앱

    Raises:
        SiteError: TEMPLATE_ROOT_UNREADABLE, INVALID_CONFIG
    """
    if config is None:
        config = build_config(load_config())

    store = create_store(config)
    candidates = collect_files(store, config.partial_dir, recursive=config.recursive_partials)
    resolver = DependencyResolver(store, candidates, PatternExtractor())
    renderer = PageRenderer(
        store,
        resolver,
        site=config.site,
        page_dir=config.page_dir,
        template_ext=config.template_ext,
        index_name=config.index_name,
    )

    app = FastAPI(
        title="Template Page Server",
        description="페이지 요청 → 참조 템플릿 번들 해석 → 렌더",
        version="0.1.0",
        # 모든 경로는 catch-all 페이지 라우트 몫 (/docs → src/docs/index.jinja)
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.store = store
    app.state.renderer = renderer
    app.state.favicon = _load_favicon(config, store)

    # Static files (catch-all보다 먼저 등록)
    static_app = _static_files(config, store)
    if static_app is not None:
        app.mount("/static", static_app, name="static")

    app.include_router(pages.router, tags=["Pages"])

    return app


# =============================================================================
# CLI Entry Point
# =============================================================================

def bind_socket(host: str = LISTEN_HOST, port: int = LISTEN_PORT) -> socket.socket:
    """loopback 소켓 바인드 (port=0 → OS가 포트 할당)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind((host, port))
    sock.set_inheritable(True)
    return sock


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="템플릿 페이지 서버",
    )
    parser.add_argument(
        "-e",
        "--embed",
        action="store_true",
        help="True: 패키지 리소스(embed), False: 파일시스템 (기본: 파일시스템)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = build_config(load_config(), embed=args.embed)
    except SiteError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)

    try:
        app = create_app(config)
    except SiteError as e:
        logger.error(f"Startup failed: {e}")
        return 1

    sock = bind_socket()
    host, port = sock.getsockname()[:2]
    print(f"http://{host}:{port}", flush=True)

    server = uvicorn.Server(
        uvicorn.Config(app, log_level=uvicorn_log_level(config.log_level))
    )
    server.run(sockets=[sock])
    return 0


if __name__ == "__main__":
    sys.exit(main())
