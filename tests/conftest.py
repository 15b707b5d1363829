"""
Pytest fixtures for the page server tests.

구성:
- 임시 사이트 트리 (src/, tmpl/, static/)
- ServerConfig / FastAPI TestClient
- 실제 소켓에 바인드한 live 서버
"""

import asyncio
import threading
import time
from collections.abc import Callable, Generator
from dataclasses import replace
from pathlib import Path

import httpx
import pytest
import uvicorn
from fastapi.testclient import TestClient

from src.app.main import bind_socket, create_app
from src.core.config import ServerConfig

FAVICON_SVG = b'<svg xmlns="http://www.w3.org/2000/svg"></svg>'

# =============================================================================
# Site Fixtures
# =============================================================================


def write_files(root: Path, files: dict[str, str | bytes]) -> None:
    """{상대경로: 내용} → 파일 생성."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """
    최소 사이트 트리.

    포함:
    - src/index.jinja (참조 없음)
    - tmpl/ (빈 디렉터리)
    - static/img/favicon.svg
    """
    root = tmp_path / "site"
    write_files(
        root,
        {
            "src/index.jinja": "<h1>{{ site.Title }}</h1>",
            "static/img/favicon.svg": FAVICON_SVG,
            "static/css/style.css": "body { margin: 0; }",
        },
    )
    (root / "tmpl").mkdir()
    return root


@pytest.fixture
def site_files(site_root: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """사이트 트리에 파일 추가하는 함수."""

    def _add(files: dict[str, str | bytes]) -> Path:
        write_files(site_root, files)
        return site_root

    return _add


@pytest.fixture
def config(site_root: Path) -> ServerConfig:
    """임시 사이트 기준 live 설정."""
    return ServerConfig(site_root=site_root)


@pytest.fixture
def make_client(config: ServerConfig) -> Callable[..., TestClient]:
    """
    TestClient 생성 함수.

    후보 목록은 앱 생성 시점에 수집되므로, tmpl/ 파일을 만든 뒤에 호출한다.
    키워드 인자는 ServerConfig 필드 오버라이드.
    """

    def _make(**overrides: object) -> TestClient:
        return TestClient(create_app(replace(config, **overrides)))

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    """기본 사이트 TestClient."""
    return make_client()


# =============================================================================
# Live Server Fixture
# =============================================================================


@pytest.fixture
def live_server(config: ServerConfig) -> Generator[str, None, None]:
    """
    실제 loopback 소켓(OS 할당 포트)에서 앱 실행.

    Returns:
        서버 URL (예: "http://127.0.0.1:54321")
    """
    app = create_app(config)
    sock = bind_socket()
    host, port = sock.getsockname()[:2]

    server = uvicorn.Server(uvicorn.Config(app, log_level="error"))

    def run_server() -> None:
        asyncio.run(server.serve(sockets=[sock]))

    thread = threading.Thread(target=run_server, daemon=True)
    thread.start()

    # 서버가 준비될 때까지 대기
    base_url = f"http://{host}:{port}"
    for _ in range(50):
        try:
            response = httpx.get(f"{base_url}/favicon.ico", timeout=1.0)
            if response.status_code == 200:
                break
        except httpx.TransportError:
            time.sleep(0.1)
    else:
        raise RuntimeError("Failed to start test server")

    yield base_url

    # 서버 종료
    server.should_exit = True
    thread.join(timeout=5)
    sock.close()
