"""
Reference extractor: 템플릿 소스에서 직접 참조하는 템플릿 이름 추출.

대상 구문 (Jinja2):
    {% include "header.jinja" %}
    {%- include 'card.jinja' with context -%}
    {% extends "layout.jinja" %}
    {% import "macros.jinja" as m %}
    {% from "forms.jinja" import field %}

- 따옴표 안의 리터럴 이름만 캡처, 뒤따르는 인자는 무시
- 대소문자 구분, 전체 내용 한 번에 스캔
- 같은 이름 여러 번 → 1개로 합침
- 변수/리스트로 지정한 이름({% include name %})은 추출 불가 (구조적 매칭)
"""

import re
from typing import Protocol

# 여는 구분자(+trim 마커) · 키워드 · 따옴표 이름 · 나머지 인자 · 닫는 구분자(+trim 마커)
INCLUDE_PATTERN = re.compile(
    r"\{%[-+]?\s*"
    r"(?:include|extends|import|from)\s+"
    r"(?P<quote>[\"'])(?P<name>[^\"'()\s]+)(?P=quote)"
    r".*?[-+]?%\}",
    re.DOTALL,
)


class ReferenceExtractor(Protocol):
    """참조 추출기 인터페이스 (정규식 → 실제 파서로 교체 가능)."""

    def extract(self, content: bytes) -> set[str]:
        ...


class PatternExtractor:
    """정규식 기반 참조 추출기."""

    def __init__(self, pattern: re.Pattern[str] = INCLUDE_PATTERN):
        if "name" not in pattern.groupindex:
            raise ValueError("pattern must define a 'name' group")
        self.pattern = pattern

    def extract(self, content: bytes) -> set[str]:
        """
        직접 참조 이름 집합 반환.

        Args:
            content: 템플릿 원본 바이트

        Returns:
            참조 이름 집합 (매칭 없으면 빈 집합)
        """
        text = content.decode("utf-8", errors="replace")
        return {match.group("name") for match in self.pattern.finditer(text)}


def extract_references(content: bytes) -> set[str]:
    """기본 패턴으로 추출."""
    return PatternExtractor().extract(content)
