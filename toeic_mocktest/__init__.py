# toeic_mocktest/__init__.py
"""
TOEIC Mock Test Module
Multi-section mock tests with autosaved answers, finish-time scoring and review
"""

__version__ = "1.0.0"
__description__ = "TOEIC-style mock test scoring and review service"

# Core module exports
from .core.config import config
from .main import app

__all__ = ["app", "config"]
