"""
Unit tests for configuration helpers.
"""

from portal_access.config import ACCESS_LEVEL_RANGE, ROLE_DISPLAY_NAMES
from portal_access.models import Role


def test_every_role_has_display_name():
    assert set(ROLE_DISPLAY_NAMES) == {r.value for r in Role}


def test_access_levels_are_one_to_five():
    assert list(ACCESS_LEVEL_RANGE) == [1, 2, 3, 4, 5]
