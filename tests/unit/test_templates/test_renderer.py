"""
test_renderer.py - 경로 매핑 + 컴파일/실행 테스트

검증:
- URL → 소스 경로 매핑 규칙 (index, .html 별칭, 일반 파일)
- dict helper (짝수 인자, 문자열 키)
- 번들 컴파일 (페이지 entry, 문법 에러 → TEMPLATE_COMPILE_FAILED)
- 버퍼/스트리밍 렌더 에러 처리
"""

import logging
from pathlib import Path
from types import MappingProxyType

import pytest

from src.domain.errors import ErrorCodes, HelperError, SiteError
from src.domain.schemas import ResolvedBundle, TargetKind
from src.templates.renderer import PageRenderer, build_dict, map_request_path
from src.templates.resolver import DependencyResolver
from src.templates.store import DirectoryStore, collect_files

# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def site(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "tmpl").mkdir()
    return tmp_path


def write(root: Path, rel: str, content: str) -> None:
    target = root / rel
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")


def make_renderer(root: Path) -> PageRenderer:
    store = DirectoryStore(root)
    resolver = DependencyResolver(store, collect_files(store, "tmpl"))
    return PageRenderer(store, resolver, site=MappingProxyType({"Title": "Demo"}))


# =============================================================================
# map_request_path
# =============================================================================

class TestMapRequestPath:
    """URL 경로 매핑 테스트."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("/", "src/index.jinja"),
            ("", "src/index.jinja"),
            ("/docs/", "src/docs/index.jinja"),
            ("/docs", "src/docs/index.jinja"),
            ("/about.html", "src/about.jinja"),
            ("/blog/post.html", "src/blog/post.jinja"),
            ("/about.jinja", "src/about.jinja"),
        ],
    )
    def test_template_targets(self, url, expected):
        target = map_request_path(url)

        assert target.kind == TargetKind.TEMPLATE
        assert target.path == expected

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("/robots.txt", "src/robots.txt"),
            ("/img/logo.png", "src/img/logo.png"),
        ],
    )
    def test_other_extensions_are_files(self, url, expected):
        target = map_request_path(url)

        assert target.kind == TargetKind.FILE
        assert target.path == expected

    def test_dotted_directory_uses_last_segment(self):
        """확장자는 마지막 경로 요소 기준."""
        target = map_request_path("/v1.2/guide")

        assert target.kind == TargetKind.TEMPLATE
        assert target.path == "src/v1.2/guide/index.jinja"

    def test_custom_layout(self):
        target = map_request_path(
            "/",
            page_dir="pages",
            template_ext=".j2",
            index_name="home.html",
        )

        assert target.path == "pages/home.j2"

    def test_html_as_template_extension(self):
        """템플릿 확장자가 .html이면 치환 없이 렌더."""
        target = map_request_path("/about.html", template_ext=".html")

        assert target.kind == TargetKind.TEMPLATE
        assert target.path == "src/about.html"

    def test_parent_escape_rejected(self):
        with pytest.raises(SiteError) as exc_info:
            map_request_path("/../secret.html")

        assert exc_info.value.code == ErrorCodes.INVALID_PATH

    def test_target_name(self):
        assert map_request_path("/about.html").name == "about.jinja"


# =============================================================================
# dict helper
# =============================================================================

class TestBuildDict:
    """dict helper 테스트."""

    def test_pairs(self):
        assert build_dict("title", "About", "count", 3) == {"title": "About", "count": 3}

    def test_empty(self):
        assert build_dict() == {}

    def test_later_key_wins(self):
        assert build_dict("a", 1, "a", 2) == {"a": 2}

    def test_odd_count(self):
        """홀수 인자 → HELPER_MISUSE."""
        with pytest.raises(HelperError) as exc_info:
            build_dict("title", "About", "orphan")

        assert exc_info.value.code == ErrorCodes.HELPER_MISUSE
        assert exc_info.value.context["count"] == 3

    def test_non_string_key(self):
        """문자열 아닌 키 → HELPER_MISUSE."""
        with pytest.raises(HelperError) as exc_info:
            build_dict(1, "one")

        assert exc_info.value.code == ErrorCodes.HELPER_MISUSE
        assert exc_info.value.context["type"] == "int"


# =============================================================================
# Compile / Render
# =============================================================================

class TestRender:
    """번들 컴파일/실행 테스트."""

    def test_render_page_without_includes(self, site):
        write(site, "src/index.jinja", "<h1>{{ site.Title }}</h1>")
        renderer = make_renderer(site)

        html = renderer.render(renderer.resolve("src/index.jinja"))

        assert html == "<h1>Demo</h1>"

    def test_render_with_include(self, site):
        write(site, "tmpl/header.jinja", "<header>{{ site.Title }}</header>")
        write(site, "src/about.jinja", '{% include "header.jinja" %}<p>about</p>')
        renderer = make_renderer(site)

        bundle = renderer.resolve("src/about.jinja")
        html = renderer.render(bundle)

        assert bundle.to_list() == ["tmpl/header.jinja", "src/about.jinja"]
        assert html == "<header>Demo</header><p>about</p>"

    def test_render_with_extends_and_dict(self, site):
        write(site, "tmpl/layout/base.jinja", "<main>{% block content %}{% endblock %}</main>")
        write(site, "tmpl/card.jinja", "<b>{{ card.title }}</b>")
        write(
            site,
            "src/page.jinja",
            '{% extends "base.jinja" %}{% block content %}'
            '{% with card = dict("title", "Hi") %}{% include "card.jinja" %}{% endwith %}'
            "{% endblock %}",
        )
        renderer = make_renderer(site)

        html = renderer.render(renderer.resolve("src/page.jinja"))

        assert html == "<main><b>Hi</b></main>"

    def test_autoescape(self, site):
        write(site, "src/index.jinja", "{{ site.Title }}")
        store = DirectoryStore(site)
        renderer = PageRenderer(
            store,
            DependencyResolver(store, []),
            site={"Title": "<script>"},
        )

        assert renderer.render(renderer.resolve("src/index.jinja")) == "&lt;script&gt;"

    def test_page_wins_over_partial_with_same_name(self, site):
        """DictLoader에서 페이지가 마지막 → entry는 페이지."""
        write(site, "src/index.jinja", "page")
        renderer = make_renderer(site)
        bundle = ResolvedBundle(("src/index.jinja",))

        assert renderer.render(bundle) == "page"

    def test_compile_error(self, site):
        """문법 에러 → TEMPLATE_COMPILE_FAILED."""
        write(site, "src/broken.jinja", "{% if %}")
        renderer = make_renderer(site)

        with pytest.raises(SiteError) as exc_info:
            renderer.render(renderer.resolve("src/broken.jinja"))

        assert exc_info.value.code == ErrorCodes.TEMPLATE_COMPILE_FAILED

    def test_compile_error_in_partial_detected_before_render(self, site):
        """조각의 문법 에러도 실행 전에 발견."""
        write(site, "tmpl/bad.jinja", "{% for %}")
        write(site, "src/page.jinja", '{% if false %}{% include "bad.jinja" %}{% endif %}ok')
        renderer = make_renderer(site)

        with pytest.raises(SiteError) as exc_info:
            renderer.compile(renderer.resolve("src/page.jinja"))

        assert exc_info.value.code == ErrorCodes.TEMPLATE_COMPILE_FAILED
        assert exc_info.value.context["template"] == "bad.jinja"

    def test_helper_odd_arguments(self, site):
        """dict 홀수 인자 → HelperError 전파."""
        write(site, "src/page.jinja", '{% set d = dict("a") %}{{ d }}')
        renderer = make_renderer(site)

        with pytest.raises(HelperError):
            renderer.render(renderer.resolve("src/page.jinja"))

    def test_missing_include_at_runtime(self, site):
        """번들에 없는 include → TEMPLATE_EXECUTE_FAILED."""
        write(site, "src/page.jinja", '{% include "ghost.jinja" %}')
        renderer = make_renderer(site)

        with pytest.raises(SiteError) as exc_info:
            renderer.render(renderer.resolve("src/page.jinja"))

        assert exc_info.value.code == ErrorCodes.TEMPLATE_EXECUTE_FAILED

    def test_page_removed_between_resolve_and_compile(self, site):
        write(site, "src/page.jinja", "x")
        renderer = make_renderer(site)
        bundle = renderer.resolve("src/page.jinja")
        (site / "src" / "page.jinja").unlink()

        with pytest.raises(SiteError) as exc_info:
            renderer.compile(bundle)

        assert exc_info.value.code == ErrorCodes.PAGE_NOT_FOUND

    def test_resolve_logs_bundle(self, site, caplog):
        write(site, "src/index.jinja", "x")
        renderer = make_renderer(site)

        with caplog.at_level(logging.INFO, logger="src.templates.renderer"):
            renderer.resolve("src/index.jinja")

        assert "Templates used on this page" in caplog.text
        assert "src/index.jinja" in caplog.text


# =============================================================================
# Streaming
# =============================================================================

class TestStream:
    """스트리밍 렌더 테스트."""

    def test_stream_output_matches_render(self, site):
        write(site, "tmpl/header.jinja", "<header>{{ site.Title }}</header>")
        write(site, "src/page.jinja", '{% include "header.jinja" %}{% for i in range(3) %}{{ i }}{% endfor %}')
        renderer = make_renderer(site)
        bundle = renderer.resolve("src/page.jinja")

        assert "".join(renderer.stream(bundle)) == renderer.render(bundle)

    def test_error_in_first_chunk_raises(self, site):
        """첫 청크 생성 중 에러 → 응답 시작 전 예외."""
        write(site, "src/page.jinja", '{{ dict("odd") }}')
        renderer = make_renderer(site)

        with pytest.raises(HelperError):
            renderer.stream(renderer.resolve("src/page.jinja"))

    def test_error_after_first_chunk_is_logged(self, site, caplog):
        """첫 청크 이후 에러 → 로그만 남기고 스트림 종료."""
        write(
            site,
            "src/page.jinja",
            'before{% for i in range(2) %}{{ i }}{% endfor %}{{ dict("odd") }}after',
        )
        renderer = make_renderer(site)
        chunks = renderer.stream(renderer.resolve("src/page.jinja"))

        with caplog.at_level(logging.WARNING, logger="src.templates.renderer"):
            output = "".join(chunks)

        assert output.startswith("before")
        assert "after" not in output
        assert "Template execution failed after response started" in caplog.text

    def test_empty_page_streams_empty(self, site):
        write(site, "src/empty.jinja", "")
        renderer = make_renderer(site)

        assert "".join(renderer.stream(renderer.resolve("src/empty.jinja"))) == ""
