from __future__ import annotations

"""
gopack: ESM link resolution for static-site builds.

Rewrites the import/export paths of compiled components into paths a
browser can load directly, mirroring npm dependencies into the build.
"""

__version__ = "0.1.0"

from gopack.core.pipeline.engine import run_gopack  # noqa: E402
from gopack.domain.resolution_models import ResolutionReport  # noqa: E402

__all__ = ["run_gopack", "ResolutionReport", "__version__"]
