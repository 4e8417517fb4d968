"""Observable OSC variables: read-only, writable, dynamic and combined."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .osc_node import ARGUMENT_TYPES, OscContainer, OscEndpoint, convert_argument

log = logging.getLogger(__name__)


def _kind_of(value):
    # bool first: it is a subclass of int
    for kind in ARGUMENT_TYPES:
        if isinstance(value, kind):
            return kind
    raise TypeError(f"unsupported OSC variable type: {type(value).__name__}")


def _format_scalar(value):
    """Render a value the way the persisted configuration stores it."""
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    return f"{value:f}"


def _is_authority(node):
    root = node.get_root()
    return root is not None and root.is_value_authority()


class OscReadOnlyVariable(OscContainer):
    """A typed value published at an OSC address, with check and change callbacks."""

    def __init__(self, parent, name, initial_value):
        self._kind = _kind_of(initial_value)
        self._value = initial_value
        self._is_default = True
        self._to_osc = None
        self._from_osc = None
        self._check_callbacks = []
        self._change_callbacks = []
        super().__init__(parent, name)
        if _is_authority(self):
            self._notify_osc()

    @property
    def kind(self):
        """The Python type of the value: bool, int, float or str."""
        return self._kind

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        self.set(value)

    def get(self):
        return self._value

    @property
    def is_default(self):
        """True while the value has never been explicitly set."""
        return self._is_default

    def set(self, value, from_osc=False):
        """Set the value if it passes every check callback.

        Change callbacks run and the new value is sent over OSC unless it came
        from OSC and this side is not the value authority.
        """
        value = convert_argument(value, self._kind)
        if value == self._value and not self._is_default:
            return
        if self.call_check_callbacks(value):
            log.debug("%s: set to %r", self.full_address, value)
            self._is_default = False
            self._value = value
            self.call_change_callbacks(value)
            if not from_osc or _is_authority(self):
                self._notify_osc()
        else:
            log.warning("%s: refused invalid value %r", self.full_address, value)
            if from_osc:
                # Tell the client that sent it that the value did not change
                self._notify_osc()

    def set_default(self, value):
        """Set the value while it is still the default, keeping it marked as default."""
        if self._is_default:
            self._is_default = False
            try:
                self.set(value)
            finally:
                self._is_default = True

    def force_default(self, value):
        """Set the value and mark it as default again."""
        self._is_default = False
        try:
            self.set(value)
        finally:
            self._is_default = True

    def set_osc_converters(self, to_osc, from_osc):
        """Use ``to_osc`` and ``from_osc`` to map values to and from their OSC form."""
        self._to_osc = to_osc
        self._from_osc = from_osc

    def add_check_callback(self, callback):
        """Add a validator called with each candidate value; it is called once now."""
        self._check_callbacks.append(callback)
        callback(self._value)

    def add_change_callback(self, callback):
        """Add a listener called with each new value; it is called once now."""
        self._change_callbacks.append(callback)
        callback(self._value)

    def call_change_callbacks(self, value):
        for callback in list(self._change_callbacks):
            callback(value)

    def call_check_callbacks(self, value):
        return all(callback(value) for callback in list(self._check_callbacks))

    def _notify_osc(self):
        self.send_message([self.get_to_osc()])

    def dump(self):
        self._notify_osc()

    def get_to_osc(self):
        """Return the value as sent over OSC."""
        if self._to_osc is None:
            return self._value
        return self._to_osc(self._value)

    def set_from_osc(self, value):
        """Set the value from its OSC form."""
        if self._from_osc is not None:
            value = self._from_osc(value)
        self.set(value, True)


class OscVariable(OscReadOnlyVariable):
    """A writable, optionally persisted OSC variable.

    Booleans get a ``toggle`` endpoint, numbers ``increment`` and ``decrement``.
    """

    def __init__(self, parent, name, initial_value, persist=True):
        super().__init__(parent, name, initial_value)
        self.increment_amount = None
        self._sub_endpoints = []

        if persist:
            root = self.get_root()
            if root is not None:
                root.add_pending_config_node(self)
            self.add_change_callback(lambda value: self._notify_root_changed())

        if self.kind is bool:
            self._add_endpoint("toggle", self._toggle)
        elif self.kind is not str:
            self.increment_amount = self.kind(1)
            self._add_endpoint("increment", lambda arguments: self._step(arguments, 1))
            self._add_endpoint("decrement", lambda arguments: self._step(arguments, -1))

    def _notify_root_changed(self):
        root = self.get_root()
        if root is not None:
            root.notify_value_changed()

    def _add_endpoint(self, name, callback):
        endpoint = OscEndpoint(self, name)
        endpoint.set_callback(callback)
        self._sub_endpoints.append(endpoint)

    def _toggle(self, arguments):
        log.debug("%s: Toggling", self.full_address)
        self.set_from_osc(not self.get_to_osc())

    def _step(self, arguments, sign):
        amount = self.increment_amount
        if arguments:
            converted = self.get_argument_as(arguments[0], self.kind)
            if converted is not None:
                amount = converted
        log.debug("%s: Stepping by %r", self.full_address, sign * amount)
        self.set_from_osc(self.get_to_osc() + sign * amount)

    def execute(self, arguments):
        if arguments:
            value = self.get_argument_as(arguments[0], self.kind)
            if value is not None:
                self.set_from_osc(value)

    def get_as_string(self):
        if self.is_default:
            return ""
        return _format_scalar(self.get_to_osc())


class OscDynamicVariable(OscContainer):
    """A list of values computed on demand by a read callback."""

    def __init__(self, parent, name):
        self._read_callback = None
        super().__init__(parent, name)

    def get(self):
        if self._read_callback is None:
            return []
        return list(self._read_callback())

    def set_read_callback(self, callback):
        self._read_callback = callback

    def dump(self):
        self.send_message(self.get())

    def get_as_string(self):
        return ""


@dataclass
class _Source:
    variable: Any
    check: Optional[Callable[[], bool]]
    call_on_change_when_ready: bool


class OscCombinedVariable:
    """Runs a callback once all of several variables have been set and pass their checks."""

    def __init__(self):
        self._sources = []
        self._callback = None
        self._all_set = False
        self._checking = False

    def add_variable(self, variable, call_on_change_when_ready=False, check=None):
        """Watch ``variable``; ``check`` is an extra readiness condition and validator."""
        self._sources.append(_Source(variable, check, call_on_change_when_ready))
        if check is not None:
            variable.add_check_callback(lambda value: check())
        variable.add_change_callback(lambda value: self._check_variables())

    def set_callback(self, callback):
        """Set the callback run whenever a watched variable changes while all are ready."""
        self._callback = callback
        if self._all_set and callback is not None:
            callback()

    def is_ready(self):
        return all(
            not source.variable.is_default and (source.check is None or source.check())
            for source in self._sources
        )

    def _check_variables(self):
        if self._checking:
            return
        self._all_set = self.is_ready()
        if not self._all_set:
            return
        if self._callback is not None:
            self._callback()
        self._checking = True
        try:
            for source in list(self._sources):
                if source.call_on_change_when_ready:
                    variable = source.variable
                    variable.call_change_callbacks(variable.value)
        finally:
            self._checking = False