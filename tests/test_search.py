"""
Unit tests for binary search helpers.
"""

import pytest

from logattrib.utils.search import find_first_index, find_last, find_last_index


class TestFindLast:
    """Test find_last_index and find_last."""

    def test_empty(self):
        """Test searching an empty sequence."""
        assert find_last_index([], lambda x: True) == -1
        assert find_last([], lambda x: True) is None

    def test_last_matching(self):
        """Test the last element of the matching prefix is found."""
        items = [1, 3, 3, 5, 8]
        assert find_last_index(items, lambda x: x <= 3) == 2
        assert find_last_index(items, lambda x: x <= 100) == 4
        assert find_last_index(items, lambda x: x < 1) == -1
        assert find_last(items, lambda x: x < 6) == 5

    def test_bounds(self):
        """Test inclusive search bounds."""
        items = [1, 2, 3, 4, 5]
        assert find_last_index(items, lambda x: x <= 4, 0, 2) == 2
        assert find_last_index(items, lambda x: x <= 4, 3, 4) == 3
        assert find_last_index(items, lambda x: x <= 1, 2, 4) == -1

    def test_out_of_range_bounds(self):
        """Test bounds outside the sequence."""
        with pytest.raises(IndexError):
            find_last_index([1, 2], lambda x: True, 0, 2)
        with pytest.raises(IndexError):
            find_last_index([1, 2], lambda x: True, -1)


class TestFindFirst:
    """Test find_first_index."""

    def test_first_matching(self):
        """Test the first element of the matching suffix is found."""
        items = [1, 3, 3, 5, 8]
        assert find_first_index(items, lambda x: x > 3) == 3
        assert find_first_index(items, lambda x: x > 0) == 0
        assert find_first_index(items, lambda x: x > 8) == -1
        assert find_first_index([], lambda x: True) == -1
