"""Encoding and decoding of OSC messages and bundles."""

import struct

DEFAULT_MAX_SIZE = 65536
TIMETAG_IMMEDIATELY = 1
BUNDLE_HEADER = b"#bundle\0"
_BUNDLE_PREFIX_SIZE = 16
_NO_ARGUMENT_TAGS = "TFNI"


class OscError(ValueError):
    """Raised when an OSC packet cannot be parsed or written."""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


def _decode(raw):
    return raw.decode("utf-8", errors="replace")


def _padded_string(value):
    raw = value.encode("utf-8")
    if b"\0" in raw:
        raise OscError(f"string contains a null byte: {value!r}", -3)
    return raw + b"\0" * (4 - len(raw) % 4)


def is_bundle(data):
    """Return True if ``data`` starts with the OSC bundle header."""
    return bytes(data[:8]) == BUNDLE_HEADER


class MessageReader:
    """Reads the address, type tags and arguments of one OSC message."""

    def __init__(self, data):
        data = bytes(data)
        address_end = data.find(b"\0")
        if address_end < 0:
            address_end = len(data)
        comma = data.find(b",", address_end)
        if comma < 0:
            raise OscError("no type tag string in OSC message", -1)
        terminator = data.find(b"\0", comma)
        if terminator < 0:
            raise OscError("type tag string is not null terminated", -2)

        self.data = data
        self.address = _decode(data[:address_end])
        self.format = _decode(data[comma + 1 : terminator])
        self._start = (terminator + 4) & ~0x3
        self._marker = self._start

    def _take(self, size):
        end = self._marker + size
        if end > len(self.data):
            raise OscError("read past the end of the OSC message")
        chunk = self.data[self._marker : end]
        self._marker = end
        return chunk

    def _unpack(self, fmt, size):
        return struct.unpack(fmt, self._take(size))[0]

    def next_int32(self):
        """Read the next big-endian 32-bit signed integer."""
        return self._unpack(">i", 4)

    def next_int64(self):
        """Read the next big-endian 64-bit signed integer."""
        return self._unpack(">q", 8)

    def next_timetag(self):
        """Read the next 64-bit unsigned timetag."""
        return self._unpack(">Q", 8)

    def next_float(self):
        """Read the next 32-bit float."""
        return self._unpack(">f", 4)

    def next_double(self):
        """Read the next 64-bit float."""
        return self._unpack(">d", 8)

    def next_string(self):
        """Read the next string, or return None if it runs past the message."""
        end = self.data.find(b"\0", self._marker)
        if end < 0:
            return None
        value = _decode(self.data[self._marker : end])
        self._marker += (end - self._marker + 4) & ~0x3
        return value

    def next_blob(self):
        """Read the next blob, or return None if it runs past the message."""
        if self._marker + 4 > len(self.data):
            return None
        (size,) = struct.unpack_from(">i", self.data, self._marker)
        start = self._marker + 4
        if size < 0 or start + size > len(self.data):
            return None
        value = self.data[start : start + size]
        self._marker += (size + 7) & ~0x3
        return value

    def next_midi(self):
        """Read the next four MIDI bytes: port id, status, data1, data2."""
        return self._take(4)

    def reset(self):
        """Move the read position back to the first argument."""
        self._marker = self._start
        return self


class BundleReader:
    """Iterates over the messages held in an OSC bundle."""

    def __init__(self, data):
        data = bytes(data)
        if len(data) < _BUNDLE_PREFIX_SIZE or not is_bundle(data):
            raise OscError("not an OSC bundle")
        self.data = data
        (self.timetag,) = struct.unpack_from(">Q", data, 8)

    def __iter__(self):
        pos = _BUNDLE_PREFIX_SIZE
        while pos < len(self.data):
            if pos + 4 > len(self.data):
                raise OscError("truncated bundle element size")
            (size,) = struct.unpack_from(">I", self.data, pos)
            start = pos + 4
            end = start + size
            if end > len(self.data):
                raise OscError("bundle element exceeds the bundle")
            yield MessageReader(self.data[start:end])
            pos = end


def parse_message(data):
    """Parse one OSC message."""
    return MessageReader(data)


class MessageWriter:
    """Builds one OSC message argument by argument."""

    def __init__(self, address, format, max_size=DEFAULT_MAX_SIZE):
        self._max_size = max_size
        self._buffer = bytearray()
        if not format.startswith(","):
            format = "," + format
        try:
            self.write_string(address)
        except OscError as exc:
            raise OscError(f"cannot write OSC address {address!r}", -1) from exc
        try:
            self.write_string(format)
        except OscError as exc:
            raise OscError(f"cannot write OSC format {format!r}", -2) from exc

    def _append(self, chunk):
        if len(self._buffer) + len(chunk) > self._max_size:
            raise OscError("OSC message exceeds the maximum size", -3)
        self._buffer += chunk

    def _write_packed(self, fmt, value):
        try:
            chunk = struct.pack(fmt, value)
        except (struct.error, OverflowError) as exc:
            raise OscError(f"cannot encode {value!r} as {fmt}", -3) from exc
        self._append(chunk)

    def write_int32(self, value):
        self._write_packed(">i", value)

    def write_int64(self, value):
        self._write_packed(">q", value)

    def write_timetag(self, value):
        self._write_packed(">Q", value)

    def write_float(self, value):
        self._write_packed(">f", value)

    def write_double(self, value):
        self._write_packed(">d", value)

    def write_string(self, value):
        self._append(_padded_string(value))

    def write_blob(self, value):
        value = bytes(value)
        chunk = struct.pack(">i", len(value)) + value + b"\0" * (-len(value) % 4)
        self._append(chunk)

    def write_midi(self, value):
        value = bytes(value)
        if len(value) != 4:
            raise OscError("MIDI values are exactly 4 bytes", -3)
        self._append(value)

    def getvalue(self):
        """Return the bytes written so far."""
        return bytes(self._buffer)

    def __len__(self):
        return len(self._buffer)


_ARGUMENT_WRITERS = {
    "b": MessageWriter.write_blob,
    "f": MessageWriter.write_float,
    "d": MessageWriter.write_double,
    "i": MessageWriter.write_int32,
    "m": MessageWriter.write_midi,
    "t": MessageWriter.write_timetag,
    "h": MessageWriter.write_int64,
    "s": MessageWriter.write_string,
}


def write_message(address, format, *args, max_size=DEFAULT_MAX_SIZE):
    """Encode a whole OSC message; ``format`` holds the type tags without the comma."""
    writer = MessageWriter(address, "," + format, max_size)
    values = iter(args)
    for tag in format:
        if tag in _NO_ARGUMENT_TAGS:
            continue
        write = _ARGUMENT_WRITERS.get(tag)
        if write is None:
            raise OscError(f"unknown OSC type tag {tag!r}", -4)
        try:
            value = next(values)
        except StopIteration:
            raise OscError(f"missing argument for type tag {tag!r}", -3) from None
        write(writer, value)
    if next(values, None) is not None:
        raise OscError("more arguments than type tags", -3)
    return writer.getvalue()


class BundleWriter:
    """Builds an OSC bundle message by message."""

    def __init__(self, timetag=TIMETAG_IMMEDIATELY, max_size=DEFAULT_MAX_SIZE):
        if max_size < _BUNDLE_PREFIX_SIZE:
            raise OscError("bundle buffer too small", -3)
        self._max_size = max_size
        self._buffer = bytearray(BUNDLE_HEADER + struct.pack(">Q", timetag))

    def write_message(self, address, format, *args):
        """Append a message and return its size in bytes."""
        remaining = self._max_size - len(self._buffer)
        if remaining <= 0:
            raise OscError("OSC bundle is full", -3)
        message = write_message(address, format, *args, max_size=remaining - 4)
        self._buffer += struct.pack(">I", len(message)) + message
        return len(message)

    def getvalue(self):
        """Return the bytes of the bundle."""
        return bytes(self._buffer)

    def __len__(self):
        return len(self._buffer)


def format_message(message):
    """Describe a parsed message on one line without moving its read position."""
    reader = MessageReader(message.data)
    parts = [f"[{len(reader.data)} bytes] {reader.address} {reader.format}"]
    for tag in reader.format:
        if tag == "b":
            blob = reader.next_blob() or b""
            parts.append(f" [{len(blob)}]" + "".join(f"{byte:02X}" for byte in blob))
        elif tag == "m":
            midi = reader.next_midi()
            parts.append(" 0x" + "".join(f"{byte:02X}" for byte in midi))
        elif tag == "f":
            parts.append(f" {reader.next_float():g}")
        elif tag == "d":
            parts.append(f" {reader.next_double():g}")
        elif tag == "i":
            parts.append(f" {reader.next_int32()}")
        elif tag in "ht":
            parts.append(f" {reader.next_int64()}")
        elif tag == "s":
            text = reader.next_string()
            parts.append(f" {text if text is not None else '(null)'}")
        elif tag == "F":
            parts.append(" false")
        elif tag == "I":
            parts.append(" inf")
        elif tag == "N":
            parts.append(" nil")
        elif tag == "T":
            parts.append(" true")
        else:
            parts.append(f" Unknown format: '{tag}'")
    return "".join(parts)


def format_osc_buffer(data):
    """Parse raw bytes as an OSC message and describe it, or describe the error."""
    try:
        message = MessageReader(data)
    except OscError as exc:
        return f"Error while reading OSC buffer: {exc.code}"
    return format_message(message)