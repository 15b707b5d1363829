"""
Content store: 템플릿/정적 파일 저장소 추상화 + 파일 수집.

두 백엔드는 같은 capability(read, list_files)를 제공한다:
- DirectoryStore: live 디렉터리 (수정 즉시 반영, 재시작 불필요)
- PackageStore: 패키지에 포함된 읽기 전용 리소스 (importlib.resources)

경로 규칙:
- 저장소 루트 기준 POSIX 상대 경로 ("tmpl/header.jinja")
- 목록은 이름순 정렬 → 수집 순서가 결정론적
"""

import logging
import posixpath
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Protocol, runtime_checkable

from src.domain.errors import ErrorCodes, SiteError

logger = logging.getLogger(__name__)


# =============================================================================
# Protocol
# =============================================================================

@runtime_checkable
class ContentStore(Protocol):
    """템플릿 파일 저장소."""

    def read(self, path: str) -> bytes:
        """파일 내용 읽기. 없으면 OSError (FileNotFoundError 등)."""
        ...

    def list_files(self, directory: str, recursive: bool = True) -> list[str]:
        """directory 아래 파일 경로 목록 (디렉터리 자체는 제외)."""
        ...

    def is_dir(self, path: str) -> bool:
        ...


def normalize_path(path: str) -> str:
    """
    저장소 상대 경로 정규화.

    Raises:
        SiteError: INVALID_PATH (루트 밖으로 나가는 경로, NUL 바이트 포함)
    """
    if "\x00" in path:
        raise SiteError(
            ErrorCodes.INVALID_PATH,
            "path contains a null byte",
            path=path,
        )
    parts = [p for p in path.replace("\\", "/").split("/") if p not in ("", ".")]
    if ".." in parts:
        raise SiteError(
            ErrorCodes.INVALID_PATH,
            "path escapes the store root",
            path=path,
        )
    return "/".join(parts)


# =============================================================================
# Live Directory
# =============================================================================

class DirectoryStore:
    """
    파일시스템 디렉터리 백엔드.

    매 호출마다 디스크에서 읽음 (캐시 없음).
    """

    def __init__(self, root: Path):
        """
        Args:
            root: 사이트 루트 디렉터리
        """
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryStore({str(self.root)!r})"

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def list_files(self, directory: str, recursive: bool = True) -> list[str]:
        base = normalize_path(directory)
        target = self._resolve(directory)
        if not target.is_dir():
            raise NotADirectoryError(f"not a directory: {target}")

        results: list[str] = []
        for entry in sorted(target.iterdir(), key=lambda p: p.name):
            rel = posixpath.join(base, entry.name) if base else entry.name
            if entry.is_dir():
                if recursive:
                    results.extend(self.list_files(rel, recursive))
                continue
            results.append(rel)
        return results

    def is_dir(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def _resolve(self, path: str) -> Path:
        rel = normalize_path(path)
        return self.root / rel if rel else self.root


# =============================================================================
# Embedded Package Resources
# =============================================================================

class PackageStore:
    """
    패키지 리소스 백엔드 (읽기 전용).

    설치된 패키지(wheel/zip 포함) 안의 파일을 importlib.resources로 읽는다.
    """

    def __init__(self, package: str):
        """
        Args:
            package: 리소스를 담은 패키지 이름 (예: "src.site")
        """
        self.package = package

    def __repr__(self) -> str:
        return f"PackageStore({self.package!r})"

    def read(self, path: str) -> bytes:
        node = self._resolve(path)
        if not node.is_file():
            raise FileNotFoundError(f"{self.package}:{path}")
        return node.read_bytes()

    def list_files(self, directory: str, recursive: bool = True) -> list[str]:
        base = normalize_path(directory)
        node = self._resolve(directory)
        if not node.is_dir():
            raise FileNotFoundError(f"{self.package}:{directory} is not a directory")

        results: list[str] = []
        for entry in sorted(node.iterdir(), key=lambda t: t.name):
            if entry.name == "__pycache__":
                continue
            rel = posixpath.join(base, entry.name) if base else entry.name
            if entry.is_dir():
                if recursive:
                    results.extend(self.list_files(rel, recursive))
                continue
            results.append(rel)
        return results

    def is_dir(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def _resolve(self, path: str) -> Traversable:
        node = resources.files(self.package)
        rel = normalize_path(path)
        for part in rel.split("/") if rel else ():
            node = node.joinpath(part)
        return node


# =============================================================================
# File Collector
# =============================================================================

def collect_files(
    store: ContentStore,
    root: str,
    recursive: bool = True,
) -> list[str]:
    """
    root 아래의 후보 템플릿 파일 수집.

    확장자 필터 없음: root 아래 모든 파일이 후보.
    (템플릿이 아닌 파일도 base name이 참조와 같으면 번들에 포함됨)

    Args:
        store: 활성 저장소
        root: 수집 루트 (예: "tmpl")
        recursive: 하위 디렉터리까지 내려갈지 여부

    Returns:
        정렬된 파일 경로 목록

    Raises:
        SiteError: TEMPLATE_ROOT_UNREADABLE (root 없음/목록 실패, startup-fatal)
    """
    try:
        files = store.list_files(root, recursive=recursive)
    except OSError as e:
        raise SiteError(
            ErrorCodes.TEMPLATE_ROOT_UNREADABLE,
            f"cannot list template root: {e}",
            root=root,
            store=repr(store),
        ) from e

    logger.info(f"Collected {len(files)} template candidates under {root!r} ({store!r})")
    return files
