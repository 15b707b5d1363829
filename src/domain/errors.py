"""
Error definitions for the page server.

규칙:
- 조용한 실패 금지 → SiteError로 명시적 실패
- 요청 단위 에러는 400 응답으로 변환 (서버는 계속 동작)
- 템플릿 루트 읽기 실패만 startup-fatal
"""

from typing import Any


class SiteError(Exception):
    """
    페이지 렌더링 파이프라인 에러.

    code로 종류를 구분하고, context에 경로 등 진단 정보를 담는다.

    Usage:
        raise SiteError("PAGE_NOT_FOUND", "page source not found", path="src/a.jinja")
    """

    def __init__(self, code: str, message: str = "", **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        text = f"[{self.code}] {self.message}".rstrip()
        return f"{text} ({ctx_str})" if ctx_str else text

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class HelperError(SiteError):
    """템플릿 helper 함수 오용 (dict 인자 개수/키 타입)."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(ErrorCodes.HELPER_MISUSE, message, **context)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Startup (fatal) ===
    TEMPLATE_ROOT_UNREADABLE = "TEMPLATE_ROOT_UNREADABLE"
    INVALID_CONFIG = "INVALID_CONFIG"

    # === Request ===
    INVALID_PATH = "INVALID_PATH"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    NOT_A_TEMPLATE = "NOT_A_TEMPLATE"
    TEMPLATE_READ_FAILED = "TEMPLATE_READ_FAILED"

    # === Render ===
    TEMPLATE_COMPILE_FAILED = "TEMPLATE_COMPILE_FAILED"
    TEMPLATE_EXECUTE_FAILED = "TEMPLATE_EXECUTE_FAILED"
    HELPER_MISUSE = "HELPER_MISUSE"
