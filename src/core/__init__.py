"""
Core layer: 설정과 로깅.

역할:
- default.yaml → ServerConfig (시작 시 1회, 이후 불변)
- 로깅 포맷/레벨 설정
"""

from .config import ServerConfig, build_config, load_config
from .logging import setup_logging

__all__ = [
    # config
    "ServerConfig",
    "load_config",
    "build_config",
    # logging
    "setup_logging",
]
