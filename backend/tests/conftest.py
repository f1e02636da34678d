"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure backend root is on path when running pytest from repo root or backend
backend = Path(__file__).resolve().parent.parent
if str(backend) not in sys.path:
    sys.path.insert(0, str(backend))

from housing.data.geo import RegionBBox  # noqa: E402

# Tunisia, the deployment region of the university catalog
TUNISIA_BBOX = RegionBBox(min_latitude=30, max_latitude=38, min_longitude=7, max_longitude=12)


@pytest.fixture
def tunisia_bbox() -> RegionBBox:
    return TUNISIA_BBOX
