"""Root of the OSC node tree and the connectors that carry its packets."""

import abc
import logging
import math

from .osc_node import OscContainer
from .oscwire import (
    BundleReader,
    MessageWriter,
    OscError,
    is_bundle,
    parse_message,
)

log = logging.getLogger(__name__)

OUTPUT_MAX_SIZE = 65536
_MAX_ARGUMENTS = 254

SLIP_END = 0xC0
SLIP_ESC = 0xDB
SLIP_ESC_END = 0xDC
SLIP_ESC_ESC = 0xDD


def _format_argument(argument):
    if isinstance(argument, bool):
        return "true" if argument else "false"
    if isinstance(argument, float):
        if math.isnan(argument):
            return "nan"
        if math.isinf(argument):
            return "inf" if argument > 0 else "-inf"
        if argument.is_integer():
            return str(int(argument))
        return repr(argument)
    return str(argument)


def format_arguments(arguments):
    """Render a list of OSC arguments as ``[ a, b ]``."""
    result = "[" + "".join(f" {_format_argument(argument)}," for argument in arguments)
    if result.endswith(","):
        result = result[:-1]
    return result + " ]"


def _type_tag(argument):
    if isinstance(argument, bool):
        return "T" if argument else "F"
    if isinstance(argument, int):
        return "i"
    if isinstance(argument, float):
        return "f"
    if isinstance(argument, str):
        return "s"
    raise TypeError(f"unsupported OSC argument type: {type(argument).__name__}")


def _read_arguments(message):
    arguments = []
    for tag in message.format:
        argument = False
        if tag == "s":
            text = message.next_string()
            argument = text if text is not None else ""
        elif tag == "f":
            argument = message.next_float()
        elif tag == "i":
            argument = message.next_int32()
        elif tag == "F":
            argument = False
        elif tag == "I":
            argument = math.inf
        elif tag == "T":
            argument = True
        else:
            skip = {
                "b": message.next_blob,
                "m": message.next_midi,
                "d": message.next_double,
                "h": message.next_int64,
                "t": message.next_timetag,
            }.get(tag)
            if skip is not None:
                skip()
            log.error(" Unsupported format: %s", tag)
        arguments.append(argument)
    return arguments


class OscRoot(OscContainer):
    """Top of the node tree: dispatches received packets and sends messages."""

    def __init__(self, notify_at_init=False):
        self._connectors = {}
        self._pending_config = {}
        self._notify_at_init = notify_at_init
        self.on_value_changed = None
        super().__init__(None, "")

    def _decode_packet(self, data):
        try:
            messages = BundleReader(data) if is_bundle(data) else [parse_message(data)]
            for message in messages:
                yield message.address, message.format, _read_arguments(message)
        except OscError as exc:
            log.warning("Dropping malformed OSC packet: %s", exc)

    def on_packet_received(self, data):
        """Execute every message held in an OSC packet or bundle."""
        for address, format, arguments in self._decode_packet(bytes(data)):
            if "meter" not in address:
                log.debug(
                    "OSC message received: %s %s %s", address, format, format_arguments(arguments)
                )
            self.execute_path(address[1:], arguments)

    def print_all_nodes(self):
        log.info("Nodes:\n%s", self.get_as_string())

    def trigger_address(self, address):
        """Execute the node at ``address`` with no arguments."""
        self.execute_path(address[1:], [])

    def add_connector(self, connector):
        self._connectors[connector] = None

    def remove_connector(self, connector):
        self._connectors.pop(connector, None)

    def send_message(self, address, arguments):
        """Encode a message and hand it to every connector."""
        arguments = list(arguments)
        if len(arguments) > _MAX_ARGUMENTS:
            raise OscError(f"Too many arguments, can't send OSC message: {len(arguments)}")

        tags = "".join(_type_tag(argument) for argument in arguments)
        writer = MessageWriter(address, "," + tags, OUTPUT_MAX_SIZE)
        for argument in arguments:
            if isinstance(argument, bool):
                continue
            if isinstance(argument, int):
                writer.write_int32(argument)
            elif isinstance(argument, float):
                writer.write_float(argument)
            else:
                writer.write_string(argument)

        data = writer.getvalue()
        log.debug("Sending OSC message %s %s", address, format_arguments(arguments))
        for connector in list(self._connectors):
            connector.send_message(data)

    def is_value_authority(self):
        return self._notify_at_init

    def notify_value_changed(self):
        if self.on_value_changed is not None:
            self.on_value_changed()

    def add_pending_config_node(self, node):
        log.debug("Adding node %s as pending configuration", node.full_address)
        self._pending_config[node] = None

    def node_removed(self, node):
        self._pending_config.pop(node, None)

    def load_node_config(self, config_values):
        """Execute each pending node with its value from ``config_values``, once."""
        log.debug("Traversing OscNode to assign configuration values")
        while self._pending_config:
            node = next(iter(self._pending_config))
            del self._pending_config[node]
            values = config_values.get(node.full_address)
            if values is not None:
                node.execute(values)

    def get_root(self):
        return self


class OscConnector(abc.ABC):
    """A transport for OSC packets, optionally SLIP framed."""

    def __init__(self, root, use_slip):
        self._root = root
        self._use_slip = use_slip
        self._escaping = False
        self._input = bytearray()
        if root is not None:
            root.add_connector(self)

    @property
    def root(self):
        return self._root

    def send_message(self, data):
        """Frame ``data`` if needed and send it."""
        data = bytes(data)
        if self._use_slip:
            escaped = data.replace(bytes([SLIP_ESC]), bytes([SLIP_ESC, SLIP_ESC_ESC])).replace(
                bytes([SLIP_END]), bytes([SLIP_ESC, SLIP_ESC_END])
            )
            self.send_data(bytes([SLIP_END]) + escaped + bytes([SLIP_END]))
        else:
            self.send_data(data)

    def data_received(self, data):
        """Feed received bytes; complete packets are passed to the root."""
        if self._root is None:
            return
        if not self._use_slip:
            self._root.on_packet_received(bytes(data))
            return
        for byte in bytes(data):
            if not self._escaping:
                if byte == SLIP_ESC:
                    self._escaping = True
                    continue
                if byte == SLIP_END:
                    if self._input:
                        packet = bytes(self._input)
                        self._input.clear()
                        self._root.on_packet_received(packet)
                    continue
            else:
                if byte == SLIP_ESC_END:
                    byte = SLIP_END
                elif byte == SLIP_ESC_ESC:
                    byte = SLIP_ESC
            self._escaping = False
            self._input.append(byte)

    @abc.abstractmethod
    def send_data(self, data):
        """Transmit already framed bytes."""

    def close(self):
        """Stop receiving messages from the root."""
        if self._root is not None:
            self._root.remove_connector(self)
            self._root = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()