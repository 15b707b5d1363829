"""
Domain Constants: 사이트 레이아웃, 콘텐츠 타입.

사이트 디렉터리 구조:
<site root>/
├── src/       # 페이지 소스 (URL 1:1 매핑)
├── tmpl/      # 재사용 조각 (include/extends/import 대상)
└── static/    # /static/* 그대로 전송
    └── img/favicon.svg
"""

import posixpath

# =============================================================================
# Content Types
# =============================================================================

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
FAVICON_CONTENT_TYPE = "image/svg+xml"

MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
}


def get_mime_type(filename: str) -> str:
    """
    파일명에서 MIME 타입 추출.

    Args:
        filename: 파일명 (확장자 포함)

    Returns:
        MIME 타입 문자열 (알 수 없으면 octet-stream)
    """
    ext = posixpath.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, "application/octet-stream")
