"""
Bundled demo site (패키지 리소스).

embed 모드에서는 importlib.resources로, live 모드에서는 기본 site_root로 사용.
- src/   → 페이지
- tmpl/  → 재사용 조각
- static/ → 정적 파일
"""
