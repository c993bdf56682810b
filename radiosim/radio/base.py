"""
radiosim Radio Base Class

Defines the generic radio driver contract that the mock radio fulfils,
so code written against a hardware driver can be pointed at the emulator.

Design Principles:
- Simple, blocking interface (one control thread)
- Completion reported through an optional event sink
- Configuration stored, never validated against hardware
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Callable, Any
import logging
import time


logger = logging.getLogger(__name__)


class RadioError(Exception):
    """Exception raised for radio-related errors."""
    pass


class TransportClosedError(RadioError):
    """The simulated air interface input is closed or unreadable."""
    pass


class ModemKind(Enum):
    """Modem selection. Only one is active at a time."""
    FSK = 0
    LORA = 1


class RadioState(Enum):
    """Radio status as reported to the driver user."""
    IDLE = auto()        # Not transmitting or receiving
    RX_RUNNING = auto()  # Receive in progress
    TX_RUNNING = auto()  # Transmit in progress
    CAD = auto()         # Channel activity detection in progress


@dataclass
class RadioPacket:
    """
    Packet received over the simulated air interface.
    """
    # Packet payload
    data: bytes
    
    # Receive timestamp (Unix time with microseconds)
    timestamp: float = field(default_factory=time.time)
    
    # Received Signal Strength Indicator (dBm)
    rssi: Optional[int] = None
    
    # Signal-to-Noise Ratio (dB)
    snr: Optional[float] = None
    
    @property
    def size(self) -> int:
        """Packet size in bytes."""
        return len(self.data)


@dataclass
class RadioEvents:
    """
    Driver callbacks.
    
    Every slot is optional; an unset slot means the notification
    is dropped silently.
    """
    on_tx_done: Optional[Callable[[], None]] = None
    on_rx_done: Optional[Callable[[bytes, int, int, float], None]] = None
    on_rx_timeout: Optional[Callable[[], None]] = None
    on_rx_error: Optional[Callable[[], None]] = None
    on_tx_timeout: Optional[Callable[[], None]] = None
    on_cad_done: Optional[Callable[[bool], None]] = None


class BaseRadio(ABC):
    """
    Abstract base class for radio drivers.
    
    Usage:
        radio = ConcreteRadio(events=RadioEvents(on_rx_done=handle))
        radio.set_channel(868100000)
        radio.configure_receive(ModemKind.LORA, bandwidth=0, datarate=7, ...)
        radio.receive(timeout_ms=3000)
    
    The events object may be a RadioEvents instance or any object
    exposing some of the same method names.
    """
    
    def __init__(self, name: str = "radio", events: Optional[Any] = None):
        """
        Initialize radio base class.
        
        Args:
            name: Human-readable name for this radio instance
            events: Event sink receiving completion notifications
        """
        self.name = name
        self._events = events
        
        # Statistics
        self._packets_sent = 0
        self._packets_received = 0
        self._rx_timeouts = 0
        self._rx_errors = 0
    
    @property
    def events(self) -> Optional[Any]:
        """Registered event sink."""
        return self._events
    
    def init(self, events: Optional[Any]) -> None:
        """Register (or replace) the event sink."""
        self._events = events
    
    @abstractmethod
    def get_status(self) -> RadioState:
        """Current radio status."""
        pass
    
    @abstractmethod
    def set_channel(self, frequency_hz: int) -> None:
        """Set the channel RF frequency in Hz."""
        pass
    
    @abstractmethod
    def configure_transmit(self, modem: ModemKind, **params) -> None:
        """
        Store transmit parameters.
        
        Must be called before time_on_air() for the same modem.
        """
        pass
    
    @abstractmethod
    def configure_receive(self, modem: ModemKind, **params) -> None:
        """Store receive parameters."""
        pass
    
    @abstractmethod
    def time_on_air(self, modem: ModemKind, payload_length: int) -> int:
        """
        Compute the time on air of a payload.
        
        Args:
            modem: Modem whose stored parameters are used
            payload_length: Payload length in bytes
        
        Returns:
            int: Time on air in milliseconds
        
        Raises:
            RadioError: If the modem was never configured
        """
        pass
    
    @abstractmethod
    def transmit(self, data: bytes) -> bool:
        """
        Transmit a packet.
        
        Blocks until the packet has been handed to the air interface,
        then fires on_tx_done.
        
        Returns:
            bool: True once transmission completed
        """
        pass
    
    @abstractmethod
    def receive(self, timeout_ms: int = 0) -> Optional[RadioPacket]:
        """
        Receive a packet.
        
        Fires on_rx_done or on_rx_timeout before returning.
        
        Returns:
            RadioPacket if received, None on timeout
        
        Raises:
            TransportClosedError: If the air interface went away
        """
        pass
    
    @abstractmethod
    def standby(self) -> None:
        """Put radio in standby."""
        pass
    
    @abstractmethod
    def sleep(self) -> None:
        """Put radio into low-power sleep mode."""
        pass
    
    def get_statistics(self) -> dict:
        """
        Get radio statistics.
        
        Returns:
            dict: Statistics including packets sent/received, errors
        """
        return {
            "name": self.name,
            "state": self.get_status().name,
            "packets_sent": self._packets_sent,
            "packets_received": self._packets_received,
            "rx_timeouts": self._rx_timeouts,
            "rx_errors": self._rx_errors,
        }
    
    def _notify(self, event: str, *args) -> None:
        """Invoke an event sink slot if one is registered."""
        if self._events is None:
            return
        handler = getattr(self._events, event, None)
        if handler is None:
            logger.debug(f"{self.name}: no handler for {event}")
            return
        handler(*args)
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - put the radio to sleep."""
        self.sleep()
        return False
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name} state={self.get_status().name}>"
