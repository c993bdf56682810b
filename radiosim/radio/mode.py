"""
radiosim Operating-Mode Tracker

Records what the simulated radio is doing, so a timeout can be
attributed to the transmitter or the receiver.
    
    IDLE -> STANDBY -> {TRANSMITTING | RECEIVING | RECEIVING_DUTY_CYCLE
                        | CHANNEL_ACTIVITY_DETECT} -> STANDBY -> ...
"""

import logging
from enum import Enum, auto

from .base import RadioState


logger = logging.getLogger(__name__)


class OperatingMode(Enum):
    """Internal operating mode of the radio."""
    IDLE = auto()
    STANDBY = auto()
    TRANSMITTING = auto()
    RECEIVING = auto()
    RECEIVING_DUTY_CYCLE = auto()
    CHANNEL_ACTIVITY_DETECT = auto()


ACTIVE_MODES = (
    OperatingMode.TRANSMITTING,
    OperatingMode.RECEIVING,
    OperatingMode.RECEIVING_DUTY_CYCLE,
    OperatingMode.CHANNEL_ACTIVITY_DETECT,
)

RECEIVE_MODES = (
    OperatingMode.RECEIVING,
    OperatingMode.RECEIVING_DUTY_CYCLE,
)


class ModeTracker:
    """
    Minimal operating mode state machine.
    
    Active modes are entered from standby only; configuration and
    completion both return the radio to standby.
    """
    
    def __init__(self):
        self._mode = OperatingMode.IDLE
    
    @property
    def mode(self) -> OperatingMode:
        return self._mode
    
    @property
    def is_transmitting(self) -> bool:
        return self._mode == OperatingMode.TRANSMITTING
    
    @property
    def is_receiving(self) -> bool:
        return self._mode in RECEIVE_MODES
    
    def standby(self) -> None:
        self._set(OperatingMode.STANDBY)
    
    def enter(self, mode: OperatingMode) -> None:
        """
        Enter an active mode.
        
        An active mode is left for standby first, the way the
        transceiver has to before switching operation.
        """
        if mode not in ACTIVE_MODES:
            raise ValueError(f"Not an active mode: {mode.name}")
        if self._mode != OperatingMode.STANDBY:
            self.standby()
        self._set(mode)
    
    def radio_state(self) -> RadioState:
        """Status as seen through the driver interface."""
        if self._mode == OperatingMode.TRANSMITTING:
            return RadioState.TX_RUNNING
        if self._mode in RECEIVE_MODES:
            return RadioState.RX_RUNNING
        if self._mode == OperatingMode.CHANNEL_ACTIVITY_DETECT:
            return RadioState.CAD
        return RadioState.IDLE
    
    def _set(self, mode: OperatingMode) -> None:
        if mode != self._mode:
            logger.debug(f"Mode {self._mode.name} -> {mode.name}")
        self._mode = mode
