import logging

import pytest

from damc.osc_node import (
    OscContainer,
    OscEndpoint,
    OscNode,
    check_osc_arguments,
    convert_argument,
    node_sort_key,
)


class _Value(OscNode):
    def __init__(self, parent, name, text, persisted=True):
        self._text = text
        self._persisted = persisted
        super().__init__(parent, name)

    def get_as_string(self):
        return self._text

    def is_persisted(self):
        return self._persisted


class _Dumping(OscContainer):
    def __init__(self, parent, name):
        self.dumps = 0
        super().__init__(parent, name)

    def dump(self):
        self.dumps += 1


def _endpoint(parent, name, received):
    endpoint = OscEndpoint(parent, name)
    endpoint.set_callback(received.append)
    return endpoint


def test_node_sort_key_orders_names_before_numbers():
    assert node_sort_key("a") < node_sort_key("b")
    assert node_sort_key("b") < node_sort_key("2")
    assert node_sort_key("2") < node_sort_key("10")
    assert node_sort_key("z") < node_sort_key("1")
    names = ["10", "b", "2", "a"]
    assert sorted(names, key=node_sort_key) == ["a", "b", "2", "10"]


def test_check_osc_arguments():
    assert check_osc_arguments([1, 2.0, "s", True], int, float, str, bool)
    assert not check_osc_arguments([True], int)
    assert not check_osc_arguments([1], int, int)
    assert not check_osc_arguments([b"x"], str)


def test_convert_argument_between_numbers():
    assert convert_argument(True, int) == 1
    assert convert_argument(2.7, int) == 2
    assert convert_argument(3, float) == 3.0
    assert convert_argument(0, bool) is False
    assert convert_argument("x", str) == "x"


def test_convert_argument_rejects_strings():
    with pytest.raises(TypeError):
        convert_argument("x", int)
    with pytest.raises(TypeError):
        convert_argument(1, str)
    with pytest.raises(TypeError):
        convert_argument(float("inf"), int)


def test_full_address():
    top = OscContainer(None, "")
    child = OscContainer(top, "a")
    endpoint = OscEndpoint(child, "b")
    assert top.full_address == ""
    assert endpoint.full_address == "/a/b"
    assert OscEndpoint(None, "alone").full_address == "/alone"


def test_execute_path_reaches_endpoint():
    top = OscContainer(None, "")
    child = OscContainer(top, "a")
    received = []
    _endpoint(child, "b", received)
    top.execute_path("a/b", [1])
    assert received == [[1]]


def test_single_wildcard():
    top = OscContainer(None, "")
    child = OscContainer(top, "a")
    received = []
    _endpoint(child, "x", received)
    _endpoint(child, "y", received)
    top.execute_path("a/*", ["v"])
    assert received == [["v"], ["v"]]


def test_double_wildcard_reaches_nested():
    top = OscContainer(None, "")
    inner = OscContainer(OscContainer(top, "a"), "b")
    received = []
    _endpoint(inner, "target", received)
    _endpoint(top, "target", received)
    top.execute_path("**/**/target", [2])
    assert received == [[2], [2]]


def test_unknown_address_is_logged(caplog):
    top = OscContainer(None, "")
    received = []
    _endpoint(top, "x", received)
    with caplog.at_level(logging.WARNING):
        top.execute_path("missing/x", [1])
    assert received == []
    assert "missing" in caplog.text


@pytest.mark.parametrize(
    "address, expected",
    [("a/b/c", ("a", "b/c")), ("a", ("a", "")), ("a/", ("a", ""))],
)
def test_split_address(address, expected):
    assert OscContainer.split_address(address) == expected


def test_duplicate_child_raises():
    top = OscContainer(None, "")
    OscEndpoint(top, "x")
    with pytest.raises(ValueError):
        OscEndpoint(top, "x")


def test_children_ordering():
    top = OscContainer(None, "")
    for name in ["3", "z", "1", "b"]:
        OscEndpoint(top, name)
    assert list(top.children) == ["b", "dump", "z", "1", "3"]


def test_detach_removes_from_parent():
    top = OscContainer(None, "")
    child = OscContainer(top, "a")
    grandchild = OscEndpoint(child, "b")
    child.detach()
    assert "a" not in top.children
    assert child.parent is None
    assert grandchild.parent is None
    assert child.children == {}


def test_set_parent_moves_node():
    first = OscContainer(None, "first")
    second = OscContainer(None, "second")
    node = OscEndpoint(first, "n")
    node.set_parent(second)
    assert "n" not in first.children
    assert second.children["n"] is node
    assert node.full_address == "/second/n"


def test_get_as_string_empty_without_values():
    top = OscContainer(None, "")
    OscContainer(top, "a")
    _Value(top, "hidden", "5", persisted=False)
    assert top.get_as_string() == ""


def test_get_as_string_flat():
    top = OscContainer(None, "")
    _Value(top, "x", "1")
    assert top.get_as_string() == '{\n\t"x": 1\n}'


def test_get_as_string_nested():
    top = OscContainer(None, "")
    child = OscContainer(top, "a")
    _Value(child, "x", "1")
    assert top.get_as_string() == '{\n\t"a": {\n\t\t"x": 1\n\t}\n}'


def test_dump_endpoint_calls_dump():
    top = OscContainer(None, "")
    node = _Dumping(top, "d")
    top.execute_path("d/dump", [])
    assert node.dumps == 1


def test_get_argument_as_logs_bad_type(caplog):
    node = OscEndpoint(None, "n")
    with caplog.at_level(logging.ERROR):
        assert node.get_argument_as("text", float) is None
    assert "Bad argument type" in caplog.text
    assert node.get_argument_as(4, float) == 4.0


def test_get_root_without_root_is_none():
    top = OscContainer(None, "")
    assert OscEndpoint(top, "x").get_root() is None