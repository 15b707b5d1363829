"""
App layer: HTTP 서버 (FastAPI + uvicorn).

역할:
- 앱 팩토리 (create_app), CLI 진입점 (main)
- favicon, /static, catch-all 페이지 라우트
- ⚠️ 템플릿 해석/렌더 로직 없음 (src/templates에 위임)
"""
