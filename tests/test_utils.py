import pytest

from damc.utils import is_number, remove_all


@pytest.mark.parametrize("text", ["0", "7", "42", "000123", "9876543210"])
def test_digit_strings_are_numbers(text):
    assert is_number(text) is True


@pytest.mark.parametrize("text", ["", "-1", "1.5", "abc", "12a", " 1", "+3", "١٢"])
def test_other_strings_are_not_numbers(text):
    assert is_number(text) is False


def test_remove_all_removes_every_occurrence_in_place():
    items = [1, 2, 1, 3, 1]
    original = items
    remove_all(items, 1)
    assert items == [2, 3]
    assert items is original


def test_remove_all_keeps_order_of_remaining_items():
    items = ["b", "a", "c", "a", "d"]
    remove_all(items, "a")
    assert items == ["b", "c", "d"]


def test_remove_all_without_match_leaves_list_unchanged():
    items = [4, 5, 6]
    remove_all(items, 9)
    assert items == [4, 5, 6]


def test_remove_all_on_empty_list():
    items = []
    remove_all(items, 1)
    assert items == []