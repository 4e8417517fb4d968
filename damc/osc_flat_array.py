"""An OSC node holding a flat list of values of one type."""

import logging

from .osc_node import ARGUMENT_TYPES, OscContainer, convert_argument
from .osc_variables import _format_scalar

log = logging.getLogger(__name__)


class OscFlatArray(OscContainer):
    """A list of bool, int, float or str values set and published as one message."""

    def __init__(self, parent, name, kind):
        if kind not in ARGUMENT_TYPES:
            raise TypeError(f"unsupported OSC array type: {kind!r}")
        self._kind = kind
        self._values = []
        self._change_callbacks = []
        self._check_callbacks = []
        super().__init__(parent, name)
        root = self.get_root()
        if root is not None:
            root.add_pending_config_node(self)

    @property
    def kind(self):
        return self._kind

    @property
    def data(self):
        """A copy of the current values."""
        return list(self._values)

    def update_data(self, mutator, from_osc=False):
        """Let ``mutator`` edit the list in place; return True if the change was kept."""
        saved = list(self._values)
        mutator(self._values)
        return self._check_data(saved, from_osc)

    def set_data(self, new_data):
        """Replace every value; return True if the data changed."""
        converted = [convert_argument(value, self._kind) for value in new_data]

        def replace(values):
            values[:] = converted

        return self.update_data(replace)

    def get_as_string(self):
        result = "[" + "".join(f" {_format_scalar(value)}," for value in self._values)
        if result.endswith(","):
            result = result[:-1]
        return result + " ]"

    def execute(self, arguments):
        def replace(values):
            values.clear()
            for argument in arguments:
                value = self.get_argument_as(argument, self._kind)
                if value is not None:
                    values.append(value)

        self.update_data(replace, True)

    def add_check_callback(self, callback):
        """Add a validator called with each candidate list; it is called once now."""
        self._check_callbacks.append(callback)
        callback(self.data)

    def add_change_callback(self, callback):
        """Add a listener called with the old and new lists; it is called once now."""
        self._change_callbacks.append(callback)
        callback([], self.data)

    def call_check_callbacks(self, values):
        return all(callback(values) for callback in list(self._check_callbacks))

    def _notify_osc(self):
        self.send_message(list(self._values))

    def dump(self):
        self._notify_osc()

    def _check_data(self, saved, from_osc):
        if self._values == saved:
            return False
        if self.call_check_callbacks(self.data):
            new = self.data
            for callback in list(self._change_callbacks):
                callback(list(saved), list(new))
            root = self.get_root()
            if not from_osc or (root is not None and root.is_value_authority()):
                self._notify_osc()
            if root is not None:
                root.notify_value_changed()
            return True

        log.warning("%s: refused invalid value", self.full_address)
        self._values[:] = saved
        if from_osc:
            # Tell the client that sent it that the value did not change
            self._notify_osc()
        return False