"""
FastAPI Routes.

페이지 라우트 (favicon, catch-all 렌더)
"""

from . import pages

__all__ = ["pages"]
