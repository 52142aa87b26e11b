"""
FastAPI Routes.

페이지 라우트 (HTML) + API 라우트
"""

from . import pages

__all__ = ["pages"]
