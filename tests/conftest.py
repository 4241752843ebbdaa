"""Root pytest configuration for all tests.

Provides sample site directories and the in-memory engine used by the
push and pull tests.
"""

import pytest

from src.models.locale import set_locale
from tests.fixtures.sample_sites import (
    CONTENT_SITE,
    DEEP_BRANCH_SITE,
    LAYOUT_CYCLE_SITE,
    LAYOUT_SITE,
    SIMPLE_SITE,
    SLUG_SITE,
    write_site,
)
from tests.helpers.fake_engine import FakeEngine


@pytest.fixture(autouse=True)
def reset_active_locale():
    """No test leaks an active locale into the next one."""
    set_locale(None)
    yield
    set_locale(None)


@pytest.fixture
def simple_site(tmp_path):
    return write_site(str(tmp_path / 'simple'), SIMPLE_SITE)


@pytest.fixture
def layout_site(tmp_path):
    return write_site(str(tmp_path / 'layouts'), LAYOUT_SITE)


@pytest.fixture
def layout_cycle_site(tmp_path):
    return write_site(str(tmp_path / 'cycle'), LAYOUT_CYCLE_SITE)


@pytest.fixture
def content_site(tmp_path):
    return write_site(str(tmp_path / 'content'), CONTENT_SITE)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def deep_branch_site(tmp_path):
    return write_site(str(tmp_path / 'deep'), DEEP_BRANCH_SITE)


@pytest.fixture
def slug_site(tmp_path):
    return write_site(str(tmp_path / 'slugs'), SLUG_SITE)
