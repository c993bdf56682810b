"""
radiosim Time-on-Air Calculator

Pure functions of the stored modem parameters and a payload length.

FSK time on air is rounded to the nearest millisecond (half to even),
LoRa time on air is rounded up to the next whole millisecond.
"""

import math

from .base import ModemKind, RadioError
from .modem import RadioConfiguration, FskParameters, LoRaParameters


# LoRa symbol time in ms
#                 SF12    SF11    SF10   SF9    SF8    SF7
LORA_SYMBOL_TIME = (
    (32.768, 16.384, 8.192, 4.096, 2.048, 1.024),  # 125 kHz
    (16.384, 8.192, 4.096, 2.048, 1.024, 0.512),   # 250 kHz
    (8.192, 4.096, 2.048, 1.024, 0.512, 0.256),    # 500 kHz
)


def lora_symbol_time(bandwidth: int, spreading_factor: int) -> float:
    """
    Look up the LoRa symbol duration.
    
    Raises:
        RadioError: If the combination is outside the table
    """
    column = 12 - spreading_factor
    if not 0 <= bandwidth < len(LORA_SYMBOL_TIME) or not 0 <= column < 6:
        raise RadioError(
            f"No symbol time for bandwidth class {bandwidth}, SF{spreading_factor}"
        )
    return LORA_SYMBOL_TIME[bandwidth][column]


def fsk_time_on_air(params: FskParameters, payload_length: int) -> int:
    """FSK time on air in ms."""
    if params.bit_rate <= 0:
        raise RadioError(f"Invalid FSK bit rate: {params.bit_rate}")
    
    packet_bytes = (
        params.preamble_bits / 8
        + params.sync_word_bits / 8
        + (0 if params.fixed_length else 1)
        + payload_length
        + (2 if params.crc_on else 0)
    )
    return round(1000 * 8 * packet_bytes / params.bit_rate)


def lora_time_on_air(params: LoRaParameters, payload_length: int) -> int:
    """LoRa time on air in ms."""
    sf = params.spreading_factor
    ts = lora_symbol_time(params.bandwidth, sf)
    
    t_preamble = (params.preamble_length + 4.25) * ts
    
    numerator = (
        8 * payload_length
        - 4 * sf
        + 28
        + 16 * (1 if params.crc_on else 0)
        - (20 if params.fixed_length else 0)
    )
    denominator = 4 * (sf - (2 if params.low_datarate_optimize else 0))
    n = math.ceil(numerator / denominator) * (params.coding_rate + 4)
    
    n_payload = 8 + max(n, 0)
    t_payload = n_payload * ts
    
    return math.floor(t_preamble + t_payload + 0.999)


def time_on_air(config: RadioConfiguration, modem: ModemKind, payload_length: int) -> int:
    """
    Compute time on air for a payload under the stored parameters.
    
    Args:
        config: Radio configuration holding the modem parameters
        modem: Modem to compute for
        payload_length: Payload length in bytes
    
    Returns:
        int: Time on air in milliseconds
    
    Raises:
        RadioError: If the modem has not been configured
    """
    if modem == ModemKind.FSK:
        if config.fsk is None:
            raise RadioError("FSK modem not configured")
        return fsk_time_on_air(config.fsk, payload_length)
    
    if config.lora is None:
        raise RadioError("LoRa modem not configured")
    return lora_time_on_air(config.lora, payload_length)
