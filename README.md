# damc

Audio processing building blocks whose parameters live in an OSC
(Open Sound Control) address tree. Signals are handled as NumPy arrays,
multi-channel blocks as one row of samples per channel.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## OSC encoding: `damc.oscwire`

- `write_message(address, format, *args, max_size=...)` encodes a message;
  `format` holds the type tags without the leading comma (`b f d i m t h s`
  take an argument, `T F N I` do not).
- `parse_message(data)` returns a `MessageReader` with `address`, `format`
  and `next_int32`, `next_int64`, `next_timetag`, `next_float`,
  `next_double`, `next_string`, `next_blob`, `next_midi` and `reset`.
- `MessageWriter` builds a message argument by argument; `BundleWriter`
  and `BundleReader` write and iterate over bundles; `is_bundle` checks the
  header.
- `format_message` and `format_osc_buffer` describe a message on one line.
- Malformed or oversized packets raise `OscError` (a `ValueError`).

```python
from damc.oscwire import parse_message, write_message

packet = write_message("/volume", "f", 0.5, max_size=64)
reader = parse_message(packet)
print(reader.address, reader.format, reader.next_float())  # /volume f 0.5
```

## The parameter tree

- `damc.osc_root.OscRoot` is the top of the tree. `on_packet_received`
  decodes a message or bundle and executes the addressed nodes;
  `send_message` encodes a message and hands it to every connector;
  `load_node_config` applies a `{address: [arguments]}` mapping to the
  persisted nodes still pending configuration; `get_as_string` renders the
  persisted values as a JSON-like text.
- `damc.osc_node` holds `OscNode`, `OscEndpoint` (runs a callback) and
  `OscContainer` (named children, `*` and `**` wildcards in addresses, and a
  `dump` child endpoint).
- `damc.osc_variables` holds `OscReadOnlyVariable` and `OscVariable`
  (bool, int, float or str values with check and change callbacks and OSC
  converters; booleans get a `toggle` endpoint, numbers `increment` and
  `decrement`), `OscDynamicVariable` (values computed on demand) and
  `OscCombinedVariable` (a callback run once several variables are set).
- `damc.osc_flat_array.OscFlatArray` is a list of values of one type.
- `damc.osc_arrays` holds `OscGenericArray`, `OscArray` and
  `OscContainerArray`: items created by a factory under integer keys, with
  the key list published at `<address>/keys`.
- `damc.osc_root.OscConnector` is an abstract transport: subclass it and
  implement `send_data`; feed received bytes to `data_received`. With
  `use_slip=True` packets are SLIP framed in both directions.

```python
from damc.osc_root import OscConnector, OscRoot
from damc.osc_variables import OscVariable
from damc.oscwire import write_message


class Collector(OscConnector):
    def __init__(self, root):
        self.sent = []
        super().__init__(root, use_slip=False)

    def send_data(self, data):
        self.sent.append(data)


root = OscRoot(False)
volume = OscVariable(root, "volume", 1.0)
collector = Collector(root)
collector.data_received(write_message("/volume", "f", 0.5))
print(volume.value)  # 0.5
```

## Signal processing

- `damc.biquad`: `BiquadFilter` (`put`, `response`, `configure`),
  `FilterType` and `compute_coefficients`.
- `damc.delay_filter.DelayFilter`: whole-sample delay line.
- `damc.dithering.DitheringFilter`: bit-depth reduction with dither.
- `damc.dynamics`: `CompressorFilter` and `ExpanderFilter`, channels linked.
- `damc.eq_filter.EqFilter`: one EQ band per biquad, set through OSC.
- `damc.reverb.ReverbFilter`: all-pass reverberator with nested stages.
- `damc.peak_meter.PeakMeter`: decaying levels sent to
  `<parent>/meter_per_channel` (and `<parent>/meter` when enabled).
- `damc.filter_chain.FilterChain`: delay, six EQ bands, expander,
  compressor, reverb, per-channel balance, master volume, mute and metering;
  `log_scale_to_osc` and `log_scale_from_osc` convert between gain and dB.
- `damc.convolver.Convolver`: streaming FIR convolution.
- `damc.dft`: `dft` (full spectrum of a real signal) and `idft`
  (unnormalised inverse).

```python
from damc.biquad import BiquadFilter, FilterType

filt = BiquadFilter()
filt.configure(True, FilterType.LOW_PASS, 1000.0, 48000.0, 0.0, 0.707)
output = [filt.put(x) for x in (1.0, 0.0, 0.0, 0.0)]
```

## What it does not do

The package has no audio input or output: it does not open sound devices
or audio servers, it only transforms arrays you pass in. It has no network
transport of its own (`OscConnector.send_data` is yours to implement), no
command-line program, and it does not read HRTF files or place virtual
speakers; `Convolver` only applies an impulse response you supply.