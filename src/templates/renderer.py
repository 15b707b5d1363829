"""
Page renderer: URL 경로 매핑 + 번들 컴파일/실행 (Jinja2).

경로 매핑 (확장자 기준, 순서대로):
- 확장자 없음 → 디렉터리로 보고 index 파일명 추가, 그 확장자로 계속
- .html      → 템플릿 확장자로 치환 (.html 요청 = 템플릿 렌더)
- 템플릿 확장자 → 렌더
- 그 외       → 일반 파일 응답 (템플릿 시스템 밖)

컴파일:
- 번들 파일을 base name으로 DictLoader에 등록 (뒤쪽이 우선 → 페이지가 최종)
- helper는 dict 하나만 등록
- 실행 전에 번들 전체를 파싱 → 문법 에러는 응답 시작 전에 400
"""

import logging
import posixpath
from collections.abc import Iterator, Mapping
from typing import Any

from jinja2 import DictLoader, Environment, Template, TemplateError

from src.domain.errors import ErrorCodes, HelperError, SiteError
from src.domain.schemas import PageTarget, ResolvedBundle, TargetKind
from src.templates.resolver import DependencyResolver
from src.templates.store import ContentStore, normalize_path

logger = logging.getLogger(__name__)

HTML_EXT = ".html"


# =============================================================================
# Helper Functions (템플릿에서 호출)
# =============================================================================

def build_dict(*values: Any) -> dict[str, Any]:
    """
    dict("k1", v1, "k2", v2, ...) → {"k1": v1, "k2": v2}.

    include에 넘길 데이터 묶음을 템플릿 안에서 만들 때 사용.

    Raises:
        HelperError: 인자 개수가 홀수, 또는 키가 문자열이 아님
    """
    if len(values) % 2 != 0:
        raise HelperError(
            "parameters must be even",
            count=len(values),
        )

    result: dict[str, Any] = {}
    for key, value in zip(values[::2], values[1::2]):
        if not isinstance(key, str):
            raise HelperError(
                'type must equal to "string"',
                key=key,
                type=type(key).__name__,
            )
        result[key] = value
    return result


TEMPLATE_HELPERS = {"dict": build_dict}


# =============================================================================
# Request Path Mapping
# =============================================================================

def map_request_path(
    url_path: str,
    page_dir: str = "src",
    template_ext: str = ".jinja",
    index_name: str = "index.html",
) -> PageTarget:
    """
    URL 경로 → 페이지 소스 경로.

    Examples:
        "/"            → template  src/index.jinja
        "/about.html"  → template  src/about.jinja
        "/docs/"       → template  src/docs/index.jinja
        "/a.jinja"     → template  src/a.jinja
        "/robots.txt"  → file      src/robots.txt

    Raises:
        SiteError: INVALID_PATH (page_dir 밖으로 나가는 경로)
    """
    rel = normalize_path(url_path)
    source = posixpath.join(page_dir, rel) if rel else page_dir
    ext = posixpath.splitext(url_path)[1]

    if ext == "":
        source = posixpath.join(source, index_name)
        ext = posixpath.splitext(index_name)[1]

    if ext == HTML_EXT and template_ext != HTML_EXT:
        source = source[: -len(HTML_EXT)] + template_ext
        ext = template_ext

    if ext == template_ext:
        return PageTarget(TargetKind.TEMPLATE, source)

    return PageTarget(TargetKind.FILE, source)


# =============================================================================
# Page Renderer
# =============================================================================

class PageRenderer:
    """
    번들 컴파일 + 실행.

    컴파일 결과는 캐시하지 않는다 (매 요청 새로 읽고 새로 컴파일).
    """

    def __init__(
        self,
        store: ContentStore,
        resolver: DependencyResolver,
        site: Mapping[str, Any],
        page_dir: str = "src",
        template_ext: str = ".jinja",
        index_name: str = "index.html",
    ):
        self.store = store
        self.resolver = resolver
        self.site = site
        self.page_dir = page_dir
        self.template_ext = template_ext
        self.index_name = index_name

    def target_for(self, url_path: str) -> PageTarget:
        return map_request_path(
            url_path,
            page_dir=self.page_dir,
            template_ext=self.template_ext,
            index_name=self.index_name,
        )

    def resolve(self, page_path: str) -> ResolvedBundle:
        bundle = self.resolver.resolve(page_path)
        logger.info(f"Templates used on this page: {bundle.to_list()}")
        return bundle

    # =========================================================================
    # Compile
    # =========================================================================

    def compile(self, bundle: ResolvedBundle) -> Template:
        """
        번들 → 하나의 템플릿 단위 (entry = 페이지 base name).

        Raises:
            SiteError: TEMPLATE_READ_FAILED, TEMPLATE_COMPILE_FAILED
        """
        sources: dict[str, str] = {}
        for path in bundle:
            try:
                content = self.store.read(path)
            except OSError as e:
                code = (
                    ErrorCodes.PAGE_NOT_FOUND if path == bundle.page
                    else ErrorCodes.TEMPLATE_READ_FAILED
                )
                raise SiteError(code, "template could not be read", path=path) from e
            sources[posixpath.basename(path)] = content.decode("utf-8", errors="replace")

        env = Environment(loader=DictLoader(sources), autoescape=True)
        env.globals.update(TEMPLATE_HELPERS)

        try:
            for name in sources:
                env.get_template(name)
            return env.get_template(bundle.page_name)
        except TemplateError as e:
            raise SiteError(
                ErrorCodes.TEMPLATE_COMPILE_FAILED,
                str(e),
                page=bundle.page,
                template=getattr(e, "name", None),
                line=getattr(e, "lineno", None),
            ) from e

    # =========================================================================
    # Execute
    # =========================================================================

    def render(self, bundle: ResolvedBundle) -> str:
        """
        버퍼 렌더: 전체 출력이 완성된 뒤에만 응답 시작.

        Raises:
            SiteError: 컴파일/실행 실패 (HelperError 포함)
        """
        template = self.compile(bundle)
        try:
            return template.render(self._context())
        except SiteError:
            raise
        except Exception as e:
            raise self._execute_error(bundle, e) from e

    def stream(self, bundle: ResolvedBundle) -> Iterator[str]:
        """
        스트리밍 렌더.

        첫 청크는 응답 시작 전에 생성 → 초반 에러는 여전히 400.
        이후 실행 에러는 헤더가 이미 나간 뒤라 로그만 남기고 스트림 종료.

        Raises:
            SiteError: 컴파일 실패, 첫 청크 생성 실패
        """
        template = self.compile(bundle)
        chunks = template.generate(self._context())
        try:
            first = next(chunks, "")
        except SiteError:
            raise
        except Exception as e:
            raise self._execute_error(bundle, e) from e

        return self._drain(bundle, first, chunks)

    def _drain(self, bundle: ResolvedBundle, first: str, rest: Iterator[str]) -> Iterator[str]:
        yield first
        try:
            yield from rest
        except Exception as e:
            logger.warning(
                f"Template execution failed after response started: {bundle.page}: {e}",
                exc_info=True,
            )

    def _context(self) -> dict[str, Any]:
        return {"site": self.site}

    def _execute_error(self, bundle: ResolvedBundle, error: Exception) -> SiteError:
        return SiteError(
            ErrorCodes.TEMPLATE_EXECUTE_FAILED,
            str(error),
            page=bundle.page,
            error_type=type(error).__name__,
        )
