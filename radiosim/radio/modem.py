"""
radiosim Modem Parameter Model

Holds the modulation and packet framing parameters of the FSK and
LoRa modems, as a driver would program them into the transceiver.

Derived fields:
- LoRa low data rate optimization follows (bandwidth, spreading factor)
- LoRa preamble is at least 12 symbols for SF5 and SF6
- FSK preamble and sync word lengths are kept in bits
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from .. import MAX_PAYLOAD_LENGTH, DEFAULT_FREQUENCY
from .base import ModemKind


logger = logging.getLogger(__name__)


# LoRa bandwidth classes, indexed by the driver bandwidth argument
LORA_BANDWIDTHS_HZ = (125000, 250000, 500000)

# LoRa spreading factors the transceiver accepts
LORA_SPREADING_FACTORS = range(5, 13)

# Minimum preamble for SF5/SF6 (symbols)
LORA_MIN_PREAMBLE_SF5_SF6 = 12

# FSK sync word length (bytes)
FSK_SYNC_WORD_BYTES = 3

# LoRa sync words
LORA_SYNC_WORD_PUBLIC = 0x34
LORA_SYNC_WORD_PRIVATE = 0x12


class CrcMode(IntEnum):
    """FSK CRC modes."""
    OFF = 0x01
    CRC_2_BYTES_CCITT = 0x06


class Whitening(IntEnum):
    """FSK DC-free encoding."""
    OFF = 0x00
    FREE_WHITENING = 0x01


@dataclass
class FskParameters:
    """FSK modulation and packet parameters."""
    bit_rate: int = 0                 # bits/s
    frequency_deviation: int = 0      # Hz
    bandwidth: int = 0                # Hz
    preamble_bits: int = 0
    sync_word_bits: int = FSK_SYNC_WORD_BYTES * 8
    fixed_length: bool = False
    crc_mode: CrcMode = CrcMode.OFF
    whitening: Whitening = Whitening.FREE_WHITENING
    
    @property
    def crc_on(self) -> bool:
        return self.crc_mode != CrcMode.OFF


@dataclass
class LoRaParameters:
    """LoRa modulation and packet parameters."""
    spreading_factor: int = 7
    bandwidth: int = 0                # class index: 0=125k, 1=250k, 2=500k
    coding_rate: int = 1              # 1=4/5 .. 4=4/8
    low_datarate_optimize: bool = False
    preamble_length: int = 8          # symbols
    fixed_length: bool = False
    crc_on: bool = True
    iq_inverted: bool = False
    payload_length: int = MAX_PAYLOAD_LENGTH


@dataclass
class RadioConfiguration:
    """
    Complete modem configuration of one radio.
    
    The fsk and lora slots stay None until the matching modem
    has been configured.
    """
    modem: ModemKind = ModemKind.LORA
    fsk: Optional[FskParameters] = None
    lora: Optional[LoRaParameters] = None
    
    # Channel
    frequency_hz: int = DEFAULT_FREQUENCY
    
    # Framing limits
    max_payload_length: int = MAX_PAYLOAD_LENGTH
    
    # Transmit side
    tx_power: int = 14                # dBm
    tx_timeout_ms: int = 0
    
    # Receive side
    rx_continuous: bool = False
    symbol_timeout: int = 0
    
    # Network type (LoRa sync word)
    public_network: bool = True
    sync_word: int = LORA_SYNC_WORD_PUBLIC
    
    @property
    def frequency_mhz(self) -> float:
        """Channel frequency in MHz, as reported on the air interface."""
        return self.frequency_hz / 1000000.0
    
    def set_public_network(self, enable: bool) -> None:
        self.public_network = enable
        self.sync_word = LORA_SYNC_WORD_PUBLIC if enable else LORA_SYNC_WORD_PRIVATE


def low_datarate_optimize(bandwidth: int, spreading_factor: int) -> bool:
    """
    Whether low data rate optimization is required.
    
    Needed when the symbol time reaches 16 ms: SF11/SF12 at 125 kHz
    and SF12 at 250 kHz.
    """
    if bandwidth == 0 and spreading_factor in (11, 12):
        return True
    if bandwidth == 1 and spreading_factor == 12:
        return True
    return False


def effective_preamble(spreading_factor: int, preamble_length: int) -> int:
    """Preamble length the modem actually uses, in symbols."""
    if spreading_factor in (5, 6) and preamble_length < LORA_MIN_PREAMBLE_SF5_SF6:
        return LORA_MIN_PREAMBLE_SF5_SF6
    return preamble_length


def build_fsk_parameters(
    datarate: int,
    fdev: int,
    bandwidth: int,
    preamble_len: int,
    fix_len: bool,
    crc_on: bool,
) -> FskParameters:
    """
    Build FSK parameters from driver arguments.
    
    Args:
        datarate: Bit rate in bits/s
        fdev: Frequency deviation in Hz
        bandwidth: Receiver bandwidth in Hz
        preamble_len: Preamble length in bytes
        fix_len: Fixed length packets
        crc_on: Append a 2 byte CCITT CRC
    """
    return FskParameters(
        bit_rate=datarate,
        frequency_deviation=fdev,
        bandwidth=bandwidth,
        preamble_bits=preamble_len << 3,
        sync_word_bits=FSK_SYNC_WORD_BYTES << 3,
        fixed_length=fix_len,
        crc_mode=CrcMode.CRC_2_BYTES_CCITT if crc_on else CrcMode.OFF,
        whitening=Whitening.FREE_WHITENING,
    )


def build_lora_parameters(
    bandwidth: int,
    datarate: int,
    coderate: int,
    preamble_len: int,
    fix_len: bool,
    crc_on: bool,
    iq_inverted: bool,
    payload_len: int,
) -> LoRaParameters:
    """
    Build LoRa parameters from driver arguments.
    
    Args:
        bandwidth: Bandwidth class [0: 125 kHz, 1: 250 kHz, 2: 500 kHz]
        datarate: Spreading factor [5..12]
        coderate: Coding rate [1: 4/5, 2: 4/6, 3: 4/7, 4: 4/8]
        preamble_len: Preamble length in symbols
        fix_len: Implicit (fixed length) header
        crc_on: Payload CRC enabled
        iq_inverted: Inverted IQ
        payload_len: Payload length for implicit header mode
    """
    if not 0 <= bandwidth < len(LORA_BANDWIDTHS_HZ):
        logger.warning(f"LoRa bandwidth index out of range: {bandwidth}")
    if datarate not in LORA_SPREADING_FACTORS:
        logger.warning(f"LoRa spreading factor out of range: {datarate}")
    
    return LoRaParameters(
        spreading_factor=datarate,
        bandwidth=bandwidth,
        coding_rate=coderate,
        low_datarate_optimize=low_datarate_optimize(bandwidth, datarate),
        preamble_length=effective_preamble(datarate, preamble_len),
        fixed_length=fix_len,
        crc_on=crc_on,
        iq_inverted=iq_inverted,
        payload_length=payload_len,
    )
