"""
Page Routes: favicon + catch-all 페이지 렌더.

- GET /favicon.ico → 시작 시 읽어 둔 SVG
- GET /<path>      → 경로 매핑 → 번들 해석 → 컴파일 → 실행

에러 정책:
- 본문 전송 전 SiteError → 400 + 에러 텍스트
- 스트리밍 중 실행 에러 → 로그만 (PageRenderer.stream)
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response, StreamingResponse

from src.core.config import ServerConfig
from src.domain.constants import FAVICON_CONTENT_TYPE, get_mime_type
from src.domain.errors import SiteError
from src.domain.schemas import TargetKind
from src.templates.renderer import PageRenderer
from src.templates.store import ContentStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_renderer(request: Request) -> PageRenderer:
    """Request에서 PageRenderer 가져오기."""
    return request.app.state.renderer


def get_store(request: Request) -> ContentStore:
    """Request에서 활성 저장소 가져오기."""
    return request.app.state.store


def get_config(request: Request) -> ServerConfig:
    """Request에서 ServerConfig 가져오기."""
    return request.app.state.config


# =============================================================================
# Fixed Routes
# =============================================================================

@router.get("/favicon.ico")
def favicon(request: Request) -> Response:
    """파비콘 (SVG)."""
    favicon_bytes: bytes | None = request.app.state.favicon
    if favicon_bytes is None:
        return PlainTextResponse("favicon not found", status_code=404)
    return Response(content=favicon_bytes, media_type=FAVICON_CONTENT_TYPE)


# =============================================================================
# Catch-all Page Route
# =============================================================================

@router.get("/{page_path:path}")
def render_page(request: Request, page_path: str) -> Response:
    """
    페이지 렌더.

    동기 핸들러: 파일 I/O + 렌더는 FastAPI threadpool에서 요청별로 실행.
    """
    renderer = get_renderer(request)
    url_path = request.url.path

    try:
        target = renderer.target_for(url_path)
        if target.kind == TargetKind.FILE:
            return _send_file(get_store(request), target.path)

        bundle = renderer.resolve(target.path)
        if get_config(request).stream:
            return StreamingResponse(renderer.stream(bundle), media_type="text/html")
        return HTMLResponse(content=renderer.render(bundle))

    except SiteError as e:
        logger.warning(f"Page render failed for {url_path}: {e}")
        return PlainTextResponse(str(e), status_code=400)


def _send_file(store: ContentStore, path: str) -> Response:
    """템플릿이 아닌 파일 그대로 전송 (없으면 404)."""
    try:
        content = store.read(path)
    except OSError:
        return PlainTextResponse("404 page not found", status_code=404)
    return Response(content=content, media_type=get_mime_type(path))
