"""
radiosim Mock Radio

A virtual LoRa/FSK transceiver whose air interface is a pair of text
streams (stdin/stdout by default).

Transmit writes one JSON envelope line per packet. Receive blocks on
one inbound line and reports it through the event sink:
- txpk envelope      -> on_rx_done
- anything else      -> on_rx_timeout
- payload too large  -> on_rx_error
- end of input       -> TransportClosedError

Register access, sleep, CAD, continuous wave, RX boosted and duty
cycle reception are placeholders returning default values.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Optional, Any, TextIO

from .base import (
    BaseRadio,
    ModemKind,
    RadioError,
    RadioPacket,
    RadioState,
    TransportClosedError,
)
from .modem import (
    RadioConfiguration,
    build_fsk_parameters,
    build_lora_parameters,
)
from .mode import ModeTracker, OperatingMode
from .airtime import time_on_air
from .envelope import AirEnvelope, decode_txpk


logger = logging.getLogger(__name__)


# Signal quality reported for every received packet
RX_RSSI = -110  # dBm
RX_SNR = 5      # dB

# Placeholder values of the stub operations
MOCK_RANDOM_VALUE = 5
RADIO_WAKEUP_TIME_MS = 5


@dataclass
class RadioContext:
    """State owned by one simulated radio."""
    configuration: RadioConfiguration = field(default_factory=RadioConfiguration)
    mode: ModeTracker = field(default_factory=ModeTracker)


class MockRadio(BaseRadio):
    """
    Simulated transceiver on a line-oriented air interface.
    
    Usage:
        events = RadioEvents(on_rx_done=handle_packet)
        radio = MockRadio(events=events)
        radio.set_channel(868100000)
        radio.configure_transmit(ModemKind.LORA, datarate=7, bandwidth=0)
        radio.transmit(b"Hello")          # writes an rxpk line
        radio.receive(timeout_ms=3000)    # blocks on a txpk line
    """
    
    def __init__(
        self,
        name: str = "mock",
        events: Optional[Any] = None,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        context: Optional[RadioContext] = None,
    ):
        """
        Initialize mock radio.
        
        Args:
            name: Radio instance name
            events: Event sink for completion notifications
            input_stream: Inbound air interface (default: stdin)
            output_stream: Outbound air interface (default: stdout)
            context: Configuration and mode state (default: fresh)
        """
        super().__init__(name, events)
        
        self._input = input_stream if input_stream is not None else sys.stdin
        self._output = output_stream if output_stream is not None else sys.stdout
        self._context = context or RadioContext()
    
    @property
    def context(self) -> RadioContext:
        return self._context
    
    @property
    def configuration(self) -> RadioConfiguration:
        return self._context.configuration
    
    @property
    def mode(self) -> OperatingMode:
        return self._context.mode.mode
    
    def get_status(self) -> RadioState:
        return self._context.mode.radio_state()
    
    # === Configuration ===
    
    def set_modem(self, modem: ModemKind) -> None:
        """Select the active modem."""
        self.configuration.modem = modem
    
    def set_channel(self, frequency_hz: int) -> None:
        """Set the channel RF frequency in Hz."""
        self.configuration.frequency_hz = frequency_hz
        logger.debug(f"{self.name}: channel {self.configuration.frequency_mhz:.6f} MHz")
    
    def check_rf_frequency(self, frequency_hz: int) -> bool:
        """Every frequency is supported."""
        return True
    
    def set_max_payload_length(self, modem: ModemKind, max_length: int) -> None:
        """Set the largest payload that can be sent or received."""
        self.configuration.max_payload_length = max_length
        if modem == ModemKind.LORA and self.configuration.lora is not None:
            self.configuration.lora.payload_length = max_length
    
    def set_public_network(self, enable: bool) -> None:
        """Select public or private LoRa sync word."""
        self.configuration.set_public_network(enable)
    
    def configure_transmit(
        self,
        modem: ModemKind,
        power: int = 14,
        fdev: int = 0,
        bandwidth: int = 0,
        datarate: int = 7,
        coderate: int = 1,
        preamble_len: int = 8,
        fix_len: bool = False,
        crc_on: bool = True,
        freq_hop_on: bool = False,
        hop_period: int = 0,
        iq_inverted: bool = False,
        timeout_ms: int = 3000,
    ) -> None:
        """
        Store transmission parameters.
        
        Args:
            modem: Modem to configure
            power: Output power in dBm
            fdev: Frequency deviation in Hz (FSK only)
            bandwidth: LoRa bandwidth class [0: 125 kHz, 1: 250 kHz, 2: 500 kHz],
                FSK bandwidth in Hz
            datarate: FSK bit rate in bits/s, LoRa spreading factor [5..12]
            coderate: LoRa coding rate [1: 4/5 .. 4: 4/8]
            preamble_len: FSK bytes, LoRa symbols
            fix_len: Fixed length packets
            crc_on: CRC enabled
            freq_hop_on: Ignored (hardware frequency hopping)
            hop_period: Ignored (hardware frequency hopping)
            iq_inverted: Inverted IQ (LoRa only)
            timeout_ms: Transmission timeout in ms
        """
        config = self.configuration
        self._context.mode.standby()
        
        if modem == ModemKind.FSK:
            config.fsk = build_fsk_parameters(
                datarate, fdev, bandwidth, preamble_len, fix_len, crc_on,
            )
        else:
            config.lora = build_lora_parameters(
                bandwidth, datarate, coderate, preamble_len, fix_len, crc_on,
                iq_inverted, config.max_payload_length,
            )
        
        config.modem = modem
        config.tx_power = power
        config.tx_timeout_ms = timeout_ms
    
    def configure_receive(
        self,
        modem: ModemKind,
        bandwidth: int = 0,
        datarate: int = 7,
        coderate: int = 1,
        bandwidth_afc: int = 0,
        preamble_len: int = 8,
        symb_timeout: int = 0,
        fix_len: bool = False,
        payload_len: int = 0,
        crc_on: bool = True,
        freq_hop_on: bool = False,
        hop_period: int = 0,
        iq_inverted: bool = False,
        rx_continuous: bool = False,
    ) -> None:
        """
        Store reception parameters.
        
        Arguments as for configure_transmit, plus:
            bandwidth_afc: AFC bandwidth in Hz (FSK only, ignored)
            symb_timeout: Single reception timeout, FSK bytes or LoRa symbols
            payload_len: Payload length when fix_len is set
            rx_continuous: Stay in reception after a packet
        """
        config = self.configuration
        self._context.mode.standby()
        
        if modem == ModemKind.FSK:
            config.fsk = build_fsk_parameters(
                datarate, 0, bandwidth, preamble_len, fix_len, crc_on,
            )
        else:
            config.lora = build_lora_parameters(
                bandwidth, datarate, coderate, preamble_len, fix_len, crc_on,
                iq_inverted,
                payload_len if fix_len else config.max_payload_length,
            )
        
        config.modem = modem
        config.symbol_timeout = symb_timeout
        config.rx_continuous = rx_continuous
    
    def time_on_air(self, modem: ModemKind, payload_length: int) -> int:
        return time_on_air(self.configuration, modem, payload_length)
    
    # === Air interface ===
    
    def transmit(self, data: bytes) -> bool:
        """Write one envelope to the air interface and fire on_tx_done."""
        max_length = self.configuration.max_payload_length
        if len(data) > max_length:
            raise RadioError(f"Packet too large: {len(data)} > {max_length}")
        
        self._context.mode.enter(OperatingMode.TRANSMITTING)
        
        envelope = AirEnvelope.for_payload(data, self.configuration.frequency_mhz)
        self._output.write(envelope.to_line())
        self._output.flush()
        logger.debug(f"{self.name}: TX {len(data)} bytes at {envelope.freq} MHz")
        
        self._packets_sent += 1
        self._context.mode.standby()
        self._notify("on_tx_done")
        return True
    
    def receive(self, timeout_ms: int = 0) -> Optional[RadioPacket]:
        """
        Wait for one inbound line and report it.
        
        The wait is not bounded by timeout_ms; only inbound data or the
        end of input release it.
        """
        logger.debug(f"{self.name}: RX with timeout {timeout_ms} ms")
        self._context.mode.enter(OperatingMode.RECEIVING)
        
        line = self._read_line()
        payload = decode_txpk(line) if line is not None else None
        
        if payload is None:
            self.signal_timeout()
            return None
        
        if len(payload) > self.configuration.max_payload_length:
            logger.warning(
                f"{self.name}: dropping {len(payload)} byte payload "
                f"(max {self.configuration.max_payload_length})"
            )
            self._rx_errors += 1
            self._end_receive()
            self._notify("on_rx_error")
            return None
        
        packet = RadioPacket(data=payload, rssi=RX_RSSI, snr=RX_SNR)
        logger.debug(f"{self.name}: RX {packet.size} bytes: {payload.hex()}")
        
        self._packets_received += 1
        self._end_receive()
        self._notify("on_rx_done", payload, packet.size, RX_RSSI, RX_SNR)
        return packet
    
    def signal_timeout(self) -> None:
        """
        Report expiry of the radio timeout.
        
        Fires on_tx_timeout while transmitting, on_rx_timeout while
        receiving, and nothing otherwise.
        """
        tracker = self._context.mode
        if tracker.is_transmitting:
            tracker.standby()
            self._notify("on_tx_timeout")
        elif tracker.is_receiving:
            self._rx_timeouts += 1
            self._end_receive()
            self._notify("on_rx_timeout")
    
    def _read_line(self) -> Optional[str]:
        """
        Block until one full line is available.
        
        Text streams backed by a byte buffer (stdin) are read as bytes,
        so undecodable input stays confined to its own line.
        
        Returns:
            The line, or None if it could not be decoded
        """
        source = getattr(self._input, "buffer", self._input)
        try:
            line = source.readline()
        except UnicodeDecodeError as e:
            logger.debug(f"{self.name}: undecodable line: {e}")
            return None
        except (OSError, ValueError) as e:
            self._context.mode.standby()
            raise TransportClosedError(f"Air interface unreadable: {e}") from e
        
        if not line:
            self._context.mode.standby()
            raise TransportClosedError("Air interface closed")
        
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        return line
    
    def _end_receive(self) -> None:
        if not self.configuration.rx_continuous:
            self._context.mode.standby()
    
    # === Mode control ===
    
    def standby(self) -> None:
        self._context.mode.standby()
    
    def sleep(self) -> None:
        """No sleep state is simulated."""
        pass
    
    def start_cad(self) -> None:
        """Channel activity detection placeholder; no result is reported."""
        self._context.mode.enter(OperatingMode.CHANNEL_ACTIVITY_DETECT)
        self._context.mode.standby()
    
    def set_rx_duty_cycle(self, rx_time: int, sleep_time: int) -> None:
        """Duty cycled reception placeholder."""
        self._context.mode.enter(OperatingMode.RECEIVING_DUTY_CYCLE)
        self._context.mode.standby()
    
    def rx_boosted(self, timeout_ms: int) -> None:
        pass
    
    def set_tx_continuous_wave(self, frequency_hz: int, power: int, time_s: int) -> None:
        pass
    
    def irq_process(self) -> None:
        """No interrupt sources are simulated."""
        pass
    
    # === Hardware placeholders ===
    
    def is_channel_free(
        self,
        modem: ModemKind,
        frequency_hz: int,
        rssi_threshold: int,
        max_carrier_sense_time: int,
    ) -> bool:
        return True
    
    def random(self) -> int:
        return MOCK_RANDOM_VALUE
    
    def rssi(self, modem: ModemKind) -> int:
        return 0
    
    def write(self, address: int, data: int) -> None:
        pass
    
    def read(self, address: int) -> int:
        return 0
    
    def write_buffer(self, address: int, data: bytes) -> None:
        pass
    
    def read_buffer(self, address: int, size: int) -> bytes:
        return bytes(size)
    
    def get_wakeup_time(self) -> int:
        """Board plus radio wakeup time in ms."""
        return RADIO_WAKEUP_TIME_MS
