"""TRELLIS Python package.

Public API:
  - import from `trellis.api` (preferred) or `import trellis` (re-export)
"""

from __future__ import annotations

from .api import *  # noqa: F401,F403
from . import api as _api

__all__ = list(_api.__all__)

__version__ = "0.3.0"
