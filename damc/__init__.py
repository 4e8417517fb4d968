"""Audio filters, dynamics, reverb, metering and convolution, with an OSC parameter tree."""

__version__ = "0.1.0"