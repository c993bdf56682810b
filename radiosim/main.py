"""
radiosim Main Entry Point

Runs a mock radio on stdin/stdout so a peer process (or a human) can
exchange simulated packets with it:
    
    radiosim airtime 10 20 51   - time on air for payload lengths
    radiosim send "Hello"       - emit one rxpk envelope
    radiosim listen --echo      - receive txpk envelopes, send them back

Logs go to stderr; stdout carries only air interface lines.
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Optional, TextIO

from . import __version__
from .config import Config, DEFAULT_CONFIG_PATH
from .radio.base import ModemKind, RadioError, RadioEvents, TransportClosedError
from .radio.mock import MockRadio


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("radiosim")


def setup_logging(config: Config, verbose: bool = False) -> None:
    """Configure root logging away from stdout."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    if config.log_file:
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=str(config.log_file))
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def build_events() -> RadioEvents:
    """Event sink that reports radio activity in the log."""
    
    def on_tx_done() -> None:
        logger.debug("TX done")
    
    def on_rx_done(payload: bytes, size: int, rssi: int, snr: float) -> None:
        logger.info(f"RX {size} bytes (RSSI {rssi} dBm, SNR {snr} dB): {payload.hex()}")
    
    def on_rx_timeout() -> None:
        logger.info("RX timeout")
    
    def on_rx_error() -> None:
        logger.warning("RX error")
    
    return RadioEvents(
        on_tx_done=on_tx_done,
        on_rx_done=on_rx_done,
        on_rx_timeout=on_rx_timeout,
        on_rx_error=on_rx_error,
    )


def build_radio(
    config: Config,
    events: Optional[RadioEvents] = None,
    input_stream: Optional[TextIO] = None,
    output_stream: Optional[TextIO] = None,
) -> MockRadio:
    """
    Create a mock radio configured from the settings.
    
    Args:
        config: Loaded configuration
        events: Event sink (default: logging sink)
        input_stream: Inbound air interface (default: stdin)
        output_stream: Outbound air interface (default: stdout)
    """
    r = config.radio
    radio = MockRadio(
        "radiosim",
        events=events if events is not None else build_events(),
        input_stream=input_stream,
        output_stream=output_stream,
    )
    
    radio.set_channel(r.frequency)
    radio.set_public_network(r.public_network)
    
    if r.modem == "fsk":
        modem = ModemKind.FSK
        bandwidth = r.fsk_bandwidth
        datarate = r.fsk_bitrate
    else:
        modem = ModemKind.LORA
        bandwidth = r.bandwidth
        datarate = r.spreading_factor
    
    radio.set_max_payload_length(modem, r.max_payload_length)
    
    radio.configure_receive(
        modem,
        bandwidth=bandwidth,
        datarate=datarate,
        coderate=r.coding_rate,
        preamble_len=r.preamble_length,
        fix_len=r.fixed_length,
        payload_len=r.max_payload_length,
        crc_on=r.crc_on,
        iq_inverted=r.iq_inverted,
    )
    radio.configure_transmit(
        modem,
        power=r.tx_power,
        fdev=r.fsk_fdev,
        bandwidth=bandwidth,
        datarate=datarate,
        coderate=r.coding_rate,
        preamble_len=r.preamble_length,
        fix_len=r.fixed_length,
        crc_on=r.crc_on,
        iq_inverted=r.iq_inverted,
        timeout_ms=r.tx_timeout_ms,
    )
    return radio


# === Commands ===

def cmd_airtime(radio: MockRadio, config: Config, args: argparse.Namespace) -> int:
    """Print time on air per payload length."""
    modem = radio.configuration.modem
    for length in args.lengths:
        print(f"{modem.name} {length:>3} bytes: {radio.time_on_air(modem, length)} ms")
    return 0


def cmd_send(radio: MockRadio, config: Config, args: argparse.Namespace) -> int:
    """Transmit one payload."""
    if args.hex:
        try:
            payload = bytes.fromhex(args.payload)
        except ValueError as e:
            logger.error(f"Invalid hex payload: {e}")
            return 1
    else:
        payload = args.payload.encode("utf-8")
    
    modem = radio.configuration.modem
    try:
        airtime = f"{radio.time_on_air(modem, len(payload))} ms"
    except RadioError as e:
        logger.debug(f"No time on air: {e}")
        airtime = "unknown time"
    logger.info(f"Sending {len(payload)} bytes ({airtime} on air)")
    radio.transmit(payload)
    return 0


def cmd_listen(radio: MockRadio, config: Config, args: argparse.Namespace) -> int:
    """Receive until the air interface closes."""
    received = 0
    while args.count is None or received < args.count:
        try:
            packet = radio.receive(timeout_ms=config.radio.rx_timeout_ms)
        except TransportClosedError as e:
            logger.info(f"{e}, stopping")
            break
        
        if packet is None:
            continue
        
        received += 1
        if args.echo:
            radio.transmit(packet.data)
    
    logger.info(f"Statistics: {radio.get_statistics()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LoRa/FSK radio emulator")
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Configuration file path",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"radiosim {__version__}",
    )
    
    sub = parser.add_subparsers(dest="command", required=True)
    
    airtime = sub.add_parser("airtime", help="Compute time on air")
    airtime.add_argument("lengths", type=int, nargs="+", help="Payload lengths in bytes")
    airtime.set_defaults(func=cmd_airtime)
    
    send = sub.add_parser("send", help="Transmit one packet")
    send.add_argument("payload", help="Payload text")
    send.add_argument("--hex", action="store_true", help="Payload is hex encoded")
    send.set_defaults(func=cmd_send)
    
    listen = sub.add_parser("listen", help="Receive packets from stdin")
    listen.add_argument("--echo", action="store_true", help="Send received packets back")
    listen.add_argument("--count", type=int, default=None, help="Stop after N packets")
    listen.set_defaults(func=cmd_listen)
    
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    try:
        config = Config.load(args.config)
        config.validate()
    except ValueError as e:
        logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
        logger.error(f"Configuration error: {e}")
        return 1
    
    setup_logging(config, args.verbose)
    
    radio = build_radio(config)
    try:
        return args.func(radio, config, args)
    except RadioError as e:
        logger.error(f"Radio error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
