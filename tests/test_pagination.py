import pytest

from pasturepickup.discovery.engine import paginate


def test_pages_cover_all_items_in_order():
    pages = paginate(list(range(10)), 4)
    assert [len(p) for p in pages] == [4, 4, 2]
    assert [x for page in pages for x in page] == list(range(10))
    assert pages.page_count == 3
    assert len(pages) == 3
    assert pages.total_items == 10


def test_iteration_is_restartable():
    pages = paginate(list(range(5)), 2)
    assert list(pages) == list(pages) == [[0, 1], [2, 3], [4]]


def test_cursor_returns_empty_after_last_page():
    cursor = paginate(list(range(10)), 4).cursor()
    assert cursor.next() == [0, 1, 2, 3]
    assert cursor.next() == [4, 5, 6, 7]
    assert cursor.has_more
    assert cursor.next() == [8, 9]
    assert not cursor.has_more
    assert cursor.next() == []
    assert cursor.next() == []
    assert cursor.pages_consumed == 3


def test_page_index_out_of_range_is_empty():
    pages = paginate(["a", "b", "c"], 2)
    assert pages.page(0) == ["a", "b"]
    assert pages.page(1) == ["c"]
    assert pages.page(2) == []
    assert pages.page(-1) == []


def test_empty_input():
    pages = paginate([], 8)
    assert list(pages) == []
    assert pages.page_count == 0
    assert pages.cursor().next() == []


@pytest.mark.parametrize("size", [0, -1])
def test_non_positive_page_size_is_rejected(size):
    with pytest.raises(ValueError):
        paginate([1, 2, 3], size)
