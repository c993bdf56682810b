"""
radiosim Configuration Management

Handles loading and validation of configuration from TOML file.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

import toml

from . import MAX_PAYLOAD_LENGTH, DEFAULT_FREQUENCY


# Default configuration path
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "radiosim" / "config.toml"

MODEM_NAMES = ("lora", "fsk")


@dataclass
class RadioSettings:
    """Radio parameters applied at startup."""
    modem: str = "lora"
    frequency: int = DEFAULT_FREQUENCY  # Hz
    tx_power: int = 14  # dBm
    
    # LoRa
    bandwidth: int = 0  # 0=125k, 1=250k, 2=500k
    spreading_factor: int = 7
    coding_rate: int = 1  # 4/5
    iq_inverted: bool = False
    public_network: bool = True
    
    # FSK
    fsk_bitrate: int = 50000  # bits/s
    fsk_fdev: int = 25000  # Hz
    fsk_bandwidth: int = 50000  # Hz
    
    # Framing
    preamble_length: int = 8
    fixed_length: bool = False
    crc_on: bool = True
    max_payload_length: int = MAX_PAYLOAD_LENGTH
    
    # Timeouts
    tx_timeout_ms: int = 3000
    rx_timeout_ms: int = 3000


@dataclass
class Config:
    """
    Complete radiosim configuration.
    """
    radio: RadioSettings = field(default_factory=RadioSettings)
    
    config_path: Path = field(default_factory=lambda: DEFAULT_CONFIG_PATH)
    
    # Logging (always away from stdout, which carries the air interface)
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    
    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from file.
        
        Args:
            config_path: Path to config file (default: ~/.config/radiosim/config.toml)
        
        Returns:
            Loaded configuration
        
        Raises:
            ValueError: If the file is not valid TOML or a flag is not a boolean
        """
        path = config_path or DEFAULT_CONFIG_PATH
        config = cls()
        config.config_path = path
        
        if not path.exists():
            return config
        
        try:
            data = toml.load(path)
        except toml.TomlDecodeError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e
        
        config._apply_dict(data)
        return config
    
    def _apply_dict(self, data: Dict[str, Any]) -> None:
        """Apply dictionary data to config."""
        if "log_level" in data:
            self.log_level = str(data["log_level"]).upper()
        if "log_file" in data:
            self.log_file = Path(data["log_file"])
        
        if "radio" in data:
            r = data["radio"]
            if "modem" in r:
                self.radio.modem = str(r["modem"]).lower()
            for name in (
                "frequency", "tx_power", "bandwidth", "spreading_factor",
                "coding_rate", "fsk_bitrate", "fsk_fdev", "fsk_bandwidth",
                "preamble_length", "max_payload_length",
                "tx_timeout_ms", "rx_timeout_ms",
            ):
                if name in r:
                    setattr(self.radio, name, int(r[name]))
            for name in ("iq_inverted", "public_network", "fixed_length", "crc_on"):
                if name in r:
                    if not isinstance(r[name], bool):
                        raise ValueError(f"radio.{name} must be true or false, got {r[name]!r}")
                    setattr(self.radio, name, r[name])
    
    def validate(self) -> None:
        """
        Validate configuration.
        
        Raises:
            ValueError: If configuration is invalid
        """
        r = self.radio
        
        if r.modem not in MODEM_NAMES:
            raise ValueError(f"Invalid modem: {r.modem}")
        
        if r.frequency <= 0:
            raise ValueError(f"Invalid radio frequency: {r.frequency}")
        
        if r.modem == "lora":
            if r.bandwidth not in (0, 1, 2):
                raise ValueError(f"Invalid LoRa bandwidth class: {r.bandwidth}")
            if r.spreading_factor < 5 or r.spreading_factor > 12:
                raise ValueError(f"Invalid spreading factor: {r.spreading_factor}")
            if r.coding_rate < 1 or r.coding_rate > 4:
                raise ValueError(f"Invalid coding rate: {r.coding_rate}")
        elif r.fsk_bitrate <= 0:
            raise ValueError(f"Invalid FSK bit rate: {r.fsk_bitrate}")
        
        if r.max_payload_length < 1 or r.max_payload_length > MAX_PAYLOAD_LENGTH:
            raise ValueError(f"Invalid max payload length: {r.max_payload_length}")
        
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {self.log_level}")
