"""
radiosim Radio Layer

- base      : Driver contract, event sink, errors
- modem     : FSK/LoRa parameter model
- airtime   : Time on air calculator
- mode      : Operating mode tracker
- envelope  : Air interface line format
- mock      : Mock radio on text streams
"""

from .base import (
    BaseRadio,
    ModemKind,
    RadioError,
    RadioEvents,
    RadioPacket,
    RadioState,
    TransportClosedError,
)

from .modem import (
    FskParameters,
    LoRaParameters,
    RadioConfiguration,
)

from .mode import ModeTracker, OperatingMode
from .airtime import time_on_air
from .envelope import AirEnvelope, decode_txpk
from .mock import MockRadio, RadioContext

__all__ = [
    'BaseRadio',
    'ModemKind',
    'RadioError',
    'RadioEvents',
    'RadioPacket',
    'RadioState',
    'TransportClosedError',
    'FskParameters',
    'LoRaParameters',
    'RadioConfiguration',
    'ModeTracker',
    'OperatingMode',
    'time_on_air',
    'AirEnvelope',
    'decode_txpk',
    'MockRadio',
    'RadioContext',
]
