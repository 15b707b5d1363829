#!/usr/bin/env python3
"""
show_bundle.py - 페이지가 사용하는 템플릿 번들 출력

서버와 같은 규칙으로 URL 경로를 매핑하고, 해석된 번들을 한 줄에 하나씩 출력한다.
(마지막 줄 = 페이지 파일)

사용법:
    # live 디렉터리 기준
    uv run python scripts/show_bundle.py /about.html

    # 패키지 리소스 기준
    uv run python scripts/show_bundle.py / --embed
"""

import argparse
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.app.main import create_store
from src.core.config import ServerConfig, build_config, load_config
from src.domain.errors import ErrorCodes, SiteError
from src.domain.schemas import ResolvedBundle, TargetKind
from src.templates.renderer import map_request_path
from src.templates.resolver import DependencyResolver
from src.templates.store import collect_files

# 로깅 설정
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def bundle_for(url_path: str, config: ServerConfig) -> ResolvedBundle:
    """
    URL 경로 → 번들.

    Raises:
        SiteError: 템플릿이 아닌 경로, 페이지 없음, 루트 읽기 실패 등
    """
    target = map_request_path(
        url_path,
        page_dir=config.page_dir,
        template_ext=config.template_ext,
        index_name=config.index_name,
    )
    if target.kind != TargetKind.TEMPLATE:
        raise SiteError(
            ErrorCodes.NOT_A_TEMPLATE,
            "path is served as a plain file",
            path=target.path,
        )

    store = create_store(config)
    candidates = collect_files(store, config.partial_dir, recursive=config.recursive_partials)
    return DependencyResolver(store, candidates).resolve(target.path)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="페이지 템플릿 번들 출력",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "url_path",
        help="요청 경로 (예: /, /about.html)",
    )
    parser.add_argument(
        "-e",
        "--embed",
        action="store_true",
        help="패키지 리소스 기준으로 해석 (기본: 파일시스템)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="설정 파일 경로 (기본: default.yaml)",
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(load_config(args.config), embed=args.embed)
        bundle = bundle_for(args.url_path, config)
    except SiteError as e:
        logger.error(str(e))
        return 1

    for path in bundle:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
