import pytest

from termpix.core.errors import MalformedSelectionError
from termpix.services.page_range import parse_page_range


def test_ranges_and_single_pages_are_zero_based():
    selection = parse_page_range("1-3,34")
    assert selection is not None
    assert selection.indices == (0, 1, 2, 33)


def test_empty_selection_means_no_filter():
    assert parse_page_range(None) is None
    assert parse_page_range("") is None
    assert parse_page_range(" , ,") is None


def test_whitespace_and_duplicates_are_normalized():
    selection = parse_page_range(" 5 , 1-2, 2 ,,")
    assert selection.indices == (0, 1, 4)
    assert len(selection) == 3
    assert 4 in selection
    assert 3 not in selection


def test_invalid_ranges_are_rejected():
    for bad in ["3-2", "2-2", "0", "0-3", "a", "1-2-3", "-1", "1-", "1.5"]:
        with pytest.raises(MalformedSelectionError):
            parse_page_range(bad)
