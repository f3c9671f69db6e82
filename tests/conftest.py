from __future__ import annotations

import pytest

from tests.fakes import build_world


@pytest.fixture
def world():
    return build_world()
