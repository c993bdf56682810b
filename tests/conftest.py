"""Shared fixtures for radiosim tests."""

import io

import pytest

from radiosim.radio import MockRadio, ModemKind


class EventRecorder:
    """Event sink that records every notification in order."""
    
    def __init__(self):
        self.calls = []
    
    def on_tx_done(self):
        self.calls.append(("tx_done",))
    
    def on_rx_done(self, payload, size, rssi, snr):
        self.calls.append(("rx_done", payload, size, rssi, snr))
    
    def on_rx_timeout(self):
        self.calls.append(("rx_timeout",))
    
    def on_rx_error(self):
        self.calls.append(("rx_error",))
    
    def on_tx_timeout(self):
        self.calls.append(("tx_timeout",))
    
    def on_cad_done(self, detected):
        self.calls.append(("cad_done", detected))
    
    @property
    def names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def output_stream():
    return io.StringIO()


@pytest.fixture
def make_radio(recorder, output_stream):
    """Factory for a mock radio reading the given text."""
    
    def factory(lines=""):
        radio = MockRadio(
            "test",
            events=recorder,
            input_stream=io.StringIO(lines),
            output_stream=output_stream,
        )
        radio.set_channel(868100000)
        radio.configure_transmit(ModemKind.LORA, datarate=7, bandwidth=0, coderate=1)
        return radio
    
    return factory
