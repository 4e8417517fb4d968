import pytest

from damc.osc_arrays import OscArray, OscContainerArray, OscGenericArray
from damc.osc_node import OscContainer
from damc.osc_root import OscRoot
from damc.osc_variables import OscVariable


@pytest.fixture
def root():
    return OscRoot()


def test_append_creates_items_with_default(root):
    array = OscArray(root, "arr", 1.5)
    array.append()
    array.append()
    assert list(array) == [0, 1]
    assert len(array) == 2
    assert array[0].value == 1.5
    assert isinstance(array[1], OscVariable)
    assert array[1].full_address == "/arr/1"


def test_resize_grows_and_shrinks_from_largest(root):
    array = OscArray(root, "arr", 0.0)
    array.resize(4)
    assert list(array) == [0, 1, 2, 3]
    array.resize(2)
    assert list(array) == [0, 1]
    assert "3" not in array.children
    assert "1" in array.children


def test_resize_negative_raises(root):
    array = OscArray(root, "arr", 0.0)
    with pytest.raises(ValueError):
        array.resize(-1)


def test_erase_resets_next_key_to_max(root):
    array = OscArray(root, "arr", 0.0)
    array.resize(3)
    array.erase(2)
    assert 2 not in array
    assert array.next_key() == 2


def test_insert_moves_next_key_past_key(root):
    array = OscArray(root, "arr", 0.0)
    array.insert(5)
    assert 5 in array
    assert array.next_key() == 6


def test_missing_key_raises_key_error(root):
    array = OscArray(root, "arr", 0.0)
    array.append()
    with pytest.raises(KeyError):
        array[7]
    assert 7 not in array
    assert list(array) == [0]


def test_duplicate_keys_from_osc_are_removed(root):
    array = OscArray(root, "arr", 0.0)
    root.execute_path("arr/keys", [1, 1, 2])
    assert list(array) == [1, 2]


def test_keys_from_osc_remove_items(root):
    array = OscArray(root, "arr", 0.0)
    array.resize(3)
    root.execute_path("arr/keys", [0, 2])
    assert list(array) == [0, 2]
    assert "1" not in array.children


def test_direct_access_creates_item(root):
    array = OscArray(root, "arr", 0.0)
    root.execute_path("arr/3", [2.5])
    assert list(array) == [3]
    assert array[3].value == 2.5


def test_converters_are_applied_to_new_items(root):
    array = OscArray(root, "arr", 1.0)
    array.set_osc_converters(lambda v: v * 2, lambda v: v / 2)
    array.append()
    assert array[0].get_to_osc() == 2.0
    array[0].set_from_osc(8.0)
    assert array[0].value == 4.0


def test_change_callbacks_are_registered(root):
    seen = []
    array = OscArray(root, "arr", 1.0)
    array.add_change_callback(seen.append)
    array.append()
    array[0].set(3.0)
    assert seen == [1.0, 3.0]


def test_items_are_in_key_order(root):
    array = OscArray(root, "arr", 0.0)
    array.insert(4)
    array.insert(1)
    keys = [key for key, _ in array.items()]
    assert keys == [1, 4]
    assert [item.name for item in array.values()] == ["1", "4"]


def test_missing_factory_raises(root):
    array = OscGenericArray(root, "arr")
    with pytest.raises(RuntimeError):
        array.append()
    assert len(array) == 0


def test_container_array_uses_factory(root):
    array = OscContainerArray(root, "filters")
    array.set_factory(lambda parent, key: OscContainer(parent, str(key)))
    array.resize(2)
    assert [item.full_address for item in array.values()] == ["/filters/0", "/filters/1"]