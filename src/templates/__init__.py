"""
Templates layer: 페이지 번들 해석 + 렌더.

역할:
- 저장소 추상화 + 후보 파일 수집 (store.py)
- 참조 추출 (extractor.py)
- 의존성 해석, 순환 차단 (resolver.py)
- 경로 매핑, 컴파일/실행 (renderer.py)

주의: 폴더 구분
- src/templates/ → 코드 (이 모듈)
- src/site/ → 데이터 (페이지/조각 템플릿, 정적 파일)
"""

from .extractor import INCLUDE_PATTERN, PatternExtractor, ReferenceExtractor, extract_references
from .renderer import PageRenderer, build_dict, map_request_path
from .resolver import DependencyResolver
from .store import ContentStore, DirectoryStore, PackageStore, collect_files

__all__ = [
    # store
    "ContentStore",
    "DirectoryStore",
    "PackageStore",
    "collect_files",
    # extractor
    "ReferenceExtractor",
    "PatternExtractor",
    "INCLUDE_PATTERN",
    "extract_references",
    # resolver
    "DependencyResolver",
    # renderer
    "PageRenderer",
    "build_dict",
    "map_request_path",
]
