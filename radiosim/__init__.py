"""
radiosim - Host-side LoRa/FSK Radio Emulator

A stand-in for a LoRa/FSK transceiver that lets radio-stack software
(packet schedulers, MAC state machines) run on a host without hardware.
Packets cross a simulated air interface as one JSON line each.

This package contains:
- radio/     : Modem model, time-on-air, mock radio transport
- config.py  : TOML configuration
- main.py    : radiosim command-line entry point
"""

__version__ = "0.1.0"
__author__ = "radiosim contributors"

# Core constants
MAX_PAYLOAD_LENGTH = 255  # bytes (radio FIFO limit)
DEFAULT_FREQUENCY = 868100000  # Hz
