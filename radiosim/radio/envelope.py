"""
radiosim Air Envelope

Line format of packets crossing the simulated air interface.

Outbound (radio transmits), one JSON object per line:
    {"rxpk":[{"time":"2026-01-01T00:00:00.000000Z","tmst":123,"chan":2,
    "rfch":0,"freq":868.1,"stat":1,"modu":"LORA","datr":"SF7BW125",
    "codr":"4/6","rssi":-35,"lsnr":5.1,"size":5,"data":"SGVsbG8="}]}

Inbound (radio receives):
    {"txpk":{"data":"SGVsbG8=", ...}}

The channel, modulation and signal quality fields are fixed
placeholders, not derived from the modem configuration.
"""

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional


logger = logging.getLogger(__name__)


# Placeholder metadata for outbound packets
ENVELOPE_CHANNEL = 2
ENVELOPE_RF_CHAIN = 0
ENVELOPE_CRC_STATUS = 1
ENVELOPE_MODULATION = "LORA"
ENVELOPE_DATARATE = "SF7BW125"
ENVELOPE_CODING_RATE = "4/6"
ENVELOPE_RSSI = -35
ENVELOPE_SNR = 5.1

# Line terminator written after each envelope
LINE_TERMINATOR = "\r\n"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with microseconds."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def epoch_millis() -> int:
    """Milliseconds since the epoch, wrapped to 32 bits."""
    return int(time.time() * 1000) & 0xFFFFFFFF


@dataclass
class AirEnvelope:
    """One packet on the simulated air interface."""
    time: str
    tmst: int
    chan: int
    rfch: int
    freq: float
    stat: int
    modu: str
    datr: str
    codr: str
    rssi: int
    lsnr: float
    size: int
    data: str
    
    @classmethod
    def for_payload(
        cls,
        payload: bytes,
        frequency_mhz: float,
        now: Optional[datetime] = None,
    ) -> 'AirEnvelope':
        """
        Wrap a payload for transmission.
        
        Args:
            payload: Bytes to send
            frequency_mhz: Channel frequency in MHz
            now: Capture time (default: current UTC time)
        """
        return cls(
            time=utc_timestamp(now),
            tmst=epoch_millis(),
            chan=ENVELOPE_CHANNEL,
            rfch=ENVELOPE_RF_CHAIN,
            freq=round(frequency_mhz, 6),
            stat=ENVELOPE_CRC_STATUS,
            modu=ENVELOPE_MODULATION,
            datr=ENVELOPE_DATARATE,
            codr=ENVELOPE_CODING_RATE,
            rssi=ENVELOPE_RSSI,
            lsnr=ENVELOPE_SNR,
            size=len(payload),
            data=base64.b64encode(payload).decode("ascii"),
        )
    
    @property
    def payload(self) -> bytes:
        return base64.b64decode(self.data)
    
    def to_line(self) -> str:
        """Serialize as one terminated line."""
        return json.dumps({"rxpk": [asdict(self)]}, separators=(",", ":")) + LINE_TERMINATOR


def decode_txpk(line: str) -> Optional[bytes]:
    """
    Extract the payload of an inbound line.
    
    Args:
        line: One line read from the air interface
    
    Returns:
        Decoded payload, or None if the line is not a txpk envelope
    """
    text = line.strip()
    if not text:
        logger.debug("Empty line on air interface")
        return None
    
    try:
        root = json.loads(text)
    except ValueError as e:
        logger.debug(f"Unparsable line on air interface: {e}")
        return None
    
    if not isinstance(root, dict):
        return None
    
    txpk = root.get("txpk")
    if not isinstance(txpk, dict):
        logger.debug("Line carries no txpk object")
        return None
    
    data = txpk.get("data")
    if not isinstance(data, str):
        logger.debug("txpk carries no data string")
        return None
    
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Invalid base64 payload: {e}")
        return None
