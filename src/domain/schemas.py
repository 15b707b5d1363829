"""
Data schemas for the page server.

규칙:
- 경로는 사이트 루트 기준 POSIX 문자열 (예: src/about.jinja)
- 참조 매칭은 base filename 기준 (전체 경로 아님)
"""

import posixpath
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

# =============================================================================
# Request Target
# =============================================================================

class TargetKind(str, Enum):
    """요청 경로 매핑 결과 종류."""
    TEMPLATE = "template"  # 템플릿 렌더
    FILE = "file"          # 그대로 전송


@dataclass(frozen=True)
class PageTarget:
    """URL 경로 → 사이트 내부 경로 매핑 결과."""
    kind: TargetKind
    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)


# =============================================================================
# Resolved Bundle
# =============================================================================

@dataclass(frozen=True)
class ResolvedBundle:
    """
    한 페이지를 렌더하기 위해 함께 컴파일할 파일 목록.

    - 참조된 템플릿 전부 + 마지막에 페이지 파일 (entry template)
    - 같은 경로 중복 금지, 최소 1개 (페이지 파일)
    """
    files: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.files:
            raise ValueError("ResolvedBundle must contain at least the page file")
        if len(set(self.files)) != len(self.files):
            raise ValueError(f"ResolvedBundle contains duplicate paths: {self.files}")

    @property
    def page(self) -> str:
        """Entry 템플릿 경로 (항상 마지막)."""
        return self.files[-1]

    @property
    def page_name(self) -> str:
        return posixpath.basename(self.page)

    @property
    def partials(self) -> tuple[str, ...]:
        return self.files[:-1]

    def __iter__(self) -> Iterator[str]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def to_list(self) -> list[str]:
        return list(self.files)
