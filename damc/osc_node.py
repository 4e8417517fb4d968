"""Tree of addressable OSC nodes: plain nodes, endpoints and containers."""

import logging

from .utils import is_number

log = logging.getLogger(__name__)

ARGUMENT_TYPES = (bool, int, float, str)
KEYS_NODE = "keys"


def _argument_type(argument):
    # bool first: it is a subclass of int
    for kind in ARGUMENT_TYPES:
        if isinstance(argument, kind):
            return kind
    raise TypeError(f"unsupported OSC argument type: {type(argument).__name__}")


def node_sort_key(name):
    """Sort key putting non-numeric names first, then numbers by value."""
    if is_number(name):
        return (1, int(name), "")
    return (0, 0, name)


def check_osc_arguments(arguments, *args):
    """Return True if ``arguments`` has exactly the argument types listed in ``args``."""
    if len(arguments) != len(args):
        return False
    try:
        return all(_argument_type(argument) is kind for argument, kind in zip(arguments, args))
    except TypeError:
        return False


def convert_argument(argument, kind):
    """Convert an OSC argument to ``kind``; strings only convert to strings.

    Raises TypeError when the conversion is not possible.
    """
    if kind not in ARGUMENT_TYPES:
        raise TypeError(f"unsupported OSC argument type: {kind!r}")
    source = _argument_type(argument)
    if source is kind:
        return argument
    if source is str or kind is str:
        raise TypeError(f"{argument!r} is not a {kind.__name__}")
    try:
        return kind(argument)
    except (OverflowError, ValueError) as exc:
        raise TypeError(f"{argument!r} cannot be converted to {kind.__name__}") from exc


class OscNode:
    """A named node with a full OSC address inside a tree of containers."""

    def __init__(self, parent, name):
        self._name = name
        self._full_address = ""
        self._parent = None
        self.set_parent(parent)

    @property
    def name(self):
        return self._name

    @property
    def full_address(self):
        return self._full_address

    @property
    def parent(self):
        return self._parent

    def set_parent(self, parent):
        """Move this node under ``parent`` (or detach it when ``parent`` is None)."""
        if parent is self._parent:
            return
        if self._parent is not None:
            self._parent.remove_child(self, self._name)
            self._parent = None
        if parent is not None:
            parent.add_child(self._name, self)
            self._full_address = parent.full_address + "/" + self._name
        elif self._name:
            self._full_address = "/" + self._name
        else:
            self._full_address = ""
        self._parent = parent

    def get_root(self):
        """Return the root of the tree, or None if it has none."""
        if self._parent is not None:
            return self._parent.get_root()
        return None

    def execute(self, arguments):
        """Act on this node with the given arguments."""

    def execute_path(self, address, arguments):
        """Execute the node at ``address`` relative to this one."""
        if address in ("", "/"):
            self.execute(arguments)

    def get_as_string(self):
        """Return the persisted representation of this node, empty when none."""
        return ""

    def send_message(self, arguments):
        """Send ``arguments`` to this node's address through the root."""
        root = self.get_root()
        if root is not None:
            root.send_message(self._full_address, arguments)

    def dump(self):
        """Send the current state of this node."""

    def is_persisted(self):
        return True

    def get_argument_as(self, argument, kind):
        """Convert ``argument`` to ``kind``, or log and return None when it cannot be."""
        try:
            return convert_argument(argument, kind)
        except TypeError:
            log.error(
                "%s: Bad argument type: %r is not a %s",
                self._full_address,
                argument,
                getattr(kind, "__name__", kind),
            )
            return None

    def detach(self):
        """Remove this node from its parent."""
        if self._parent is not None:
            self._parent.remove_child(self, self._name)
            self._parent = None


class OscEndpoint(OscNode):
    """A node that runs a callback when executed."""

    def __init__(self, parent, name):
        self._callback = None
        super().__init__(parent, name)

    def set_callback(self, callback):
        self._callback = callback

    def execute(self, arguments):
        if self._callback is not None:
            self._callback(arguments)

    def get_as_string(self):
        return ""


class OscContainer(OscNode):
    """A node holding named children, with wildcard address dispatch."""

    _depth = 0

    def __init__(self, parent, name):
        self._children = {}
        super().__init__(parent, name)
        self._dump_endpoint = OscEndpoint(self, "dump")
        self._dump_endpoint.set_callback(lambda arguments: self.dump())

    @property
    def children(self):
        """Children ordered with names first and numbers by value."""
        return dict(sorted(self._children.items(), key=lambda item: node_sort_key(item[0])))

    def add_child(self, name, child):
        if name in self._children:
            raise ValueError(f"Error adding child {name} to {self.full_address}, already existing")
        self._children[name] = child

    def remove_child(self, node, name):
        root = self.get_root()
        if root is not None:
            root.node_removed(node)
        self._children.pop(name, None)

    @staticmethod
    def split_address(address):
        """Split ``address`` into the first component and the rest."""
        slash = address.find("/")
        if slash < 0:
            return address, ""
        return address[:slash], address[slash + 1 :]

    def execute_path(self, address, arguments):
        if address in ("", "/"):
            log.debug("Executing address %s", self.full_address)
            self.execute(arguments)
            return

        child_name, remaining = self.split_address(address)

        if child_name == "*":
            for child in list(self.children.values()):
                child.execute_path(remaining, arguments)
        elif child_name == "**":
            while remaining.startswith("**/"):
                _, remaining = self.split_address(remaining)
            self.execute_path(remaining, arguments)
            for child in list(self.children.values()):
                child.execute_path(address, arguments)
        else:
            child = self._children.get(child_name)
            if child is None:
                log.warning("Address %s not found from %s", child_name, self.full_address)
                return
            child.execute_path(remaining, arguments)

    def get_as_string(self):
        children = self.children
        if not children:
            return ""
        indent = "\t" * OscContainer._depth
        entries = []
        OscContainer._depth += 1
        try:
            for name, child in children.items():
                if not child.is_persisted():
                    continue
                data = child.get_as_string()
                if data:
                    entries.append(f'{indent}\t"{name}": {data}')
        finally:
            OscContainer._depth -= 1
        if not entries:
            return ""
        return "{\n" + ",\n".join(entries) + "\n" + indent + "}"

    def detach(self):
        children = self._children
        self._children = {}
        for child in children.values():
            child.set_parent(None)
        super().detach()