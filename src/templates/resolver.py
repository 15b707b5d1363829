"""
Dependency resolver: 페이지 → 함께 컴파일할 템플릿 번들.

알고리즘:
1. 페이지 내용 읽기 (실패 → PAGE_NOT_FOUND)
2. 직접 참조 추출
3. 후보 목록을 수집 순서대로 순회, base name이 참조에 있으면
   추가 후 그 파일의 참조를 재귀적으로 해석 (발견한 파일은 바로 뒤에 붙음)
4. visited(base name 집합)로 순환/중복 차단
5. 페이지 파일을 마지막에 추가 (entry template)

순서 보장: 위상 정렬 아님. 컴파일러는 번들 안에 모든 참조 파일이
있기만 하면 되고, 페이지가 마지막이어야 entry가 된다.
"""

import logging
import posixpath
from collections.abc import Sequence

from src.domain.errors import ErrorCodes, SiteError
from src.domain.schemas import ResolvedBundle
from src.templates.extractor import PatternExtractor, ReferenceExtractor
from src.templates.store import ContentStore

logger = logging.getLogger(__name__)


class DependencyResolver:
    """
    참조 그래프를 고정점까지 따라가는 해석기.

    candidates는 시작 시 한 번 수집된 목록으로, 요청 간 공유되며 변경되지 않는다.
    """

    def __init__(
        self,
        store: ContentStore,
        candidates: Sequence[str],
        extractor: ReferenceExtractor | None = None,
    ):
        """
        Args:
            store: 활성 저장소 (파일 내용은 매 해석마다 새로 읽음)
            candidates: collect_files() 결과
            extractor: 참조 추출기 (기본: PatternExtractor)
        """
        self.store = store
        self.candidates = tuple(candidates)
        self.extractor = extractor if extractor is not None else PatternExtractor()

    def resolve(self, page_path: str) -> ResolvedBundle:
        """
        페이지 번들 해석.

        Args:
            page_path: 페이지 소스 경로 (예: "src/about.jinja")

        Returns:
            ResolvedBundle (참조 파일들 + 페이지 파일 마지막)

        Raises:
            SiteError: PAGE_NOT_FOUND, TEMPLATE_READ_FAILED
        """
        try:
            content = self.store.read(page_path)
        except OSError as e:
            raise SiteError(
                ErrorCodes.PAGE_NOT_FOUND,
                "page source not found",
                path=page_path,
            ) from e

        # 페이지 자신의 이름도 visited: 같은 이름의 partial은 어차피 페이지에 가려짐
        visited = {posixpath.basename(page_path)}
        files: list[str] = []
        self._walk(self.extractor.extract(content), visited, files)
        files.append(page_path)

        bundle = ResolvedBundle(tuple(files))
        logger.debug(f"Resolved {page_path}: {bundle.to_list()}")
        return bundle

    def _walk(self, references: set[str], visited: set[str], files: list[str]) -> None:
        if not references:
            return

        for candidate in self.candidates:
            name = posixpath.basename(candidate)
            if name not in references or name in visited:
                continue

            visited.add(name)
            files.append(candidate)
            self._walk(self._references_of(candidate), visited, files)

    def _references_of(self, path: str) -> set[str]:
        try:
            content = self.store.read(path)
        except OSError as e:
            raise SiteError(
                ErrorCodes.TEMPLATE_READ_FAILED,
                "referenced template could not be read",
                path=path,
            ) from e
        return self.extractor.extract(content)
