"""Tests for the mock radio air interface."""

import base64
import io
import json

import pytest

from radiosim.radio import (
    MockRadio,
    ModemKind,
    OperatingMode,
    RadioError,
    RadioEvents,
    RadioState,
    TransportClosedError,
)
from radiosim.radio.mock import RX_RSSI, RX_SNR


HELLO_LINE = '{"txpk":{"data":"SGVsbG8="}}\n'


class TestTransmit:
    
    def test_writes_envelope_and_notifies(self, make_radio, recorder, output_stream):
        radio = make_radio()
        assert radio.transmit(b"Hello") is True
        
        pkt = json.loads(output_stream.getvalue())["rxpk"][0]
        assert pkt["data"] == "SGVsbG8="
        assert pkt["size"] == 5
        assert pkt["freq"] == pytest.approx(868.1)
        assert recorder.names == ["tx_done"]
    
    def test_one_line_per_packet(self, make_radio, output_stream):
        radio = make_radio()
        radio.transmit(b"a")
        radio.transmit(b"b")
        lines = output_stream.getvalue().splitlines()
        assert len(lines) == 2
    
    def test_returns_to_standby(self, make_radio):
        radio = make_radio()
        radio.transmit(b"x")
        assert radio.mode == OperatingMode.STANDBY
        assert radio.get_status() == RadioState.IDLE
    
    def test_mode_during_tx_done(self, output_stream):
        seen = []
        radio = MockRadio(output_stream=output_stream, input_stream=io.StringIO())
        radio.init(RadioEvents(on_tx_done=lambda: seen.append(radio.mode)))
        radio.transmit(b"x")
        assert seen == [OperatingMode.STANDBY]
    
    def test_oversized_payload_rejected(self, make_radio, recorder, output_stream):
        radio = make_radio()
        radio.set_max_payload_length(ModemKind.LORA, 4)
        with pytest.raises(RadioError):
            radio.transmit(b"Hello")
        assert output_stream.getvalue() == ""
        assert recorder.calls == []
    
    def test_statistics(self, make_radio):
        radio = make_radio()
        radio.transmit(b"x")
        stats = radio.get_statistics()
        assert stats["packets_sent"] == 1
        assert stats["state"] == "IDLE"


class TestReceive:
    
    def test_hello(self, make_radio, recorder):
        radio = make_radio(HELLO_LINE)
        packet = radio.receive(timeout_ms=1000)
        
        assert packet.data == b"Hello"
        assert packet.size == 5
        assert recorder.calls == [("rx_done", b"Hello", 5, RX_RSSI, RX_SNR)]
    
    def test_no_txpk_is_timeout(self, make_radio, recorder):
        radio = make_radio('{"foo":1}\n')
        assert radio.receive(1000) is None
        assert recorder.names == ["rx_timeout"]
    
    def test_whitespace_line_is_timeout(self, make_radio, recorder):
        radio = make_radio("   \n")
        assert radio.receive(1000) is None
        assert recorder.names == ["rx_timeout"]
    
    def test_malformed_json_is_timeout(self, make_radio, recorder):
        radio = make_radio('{"txpk": \n')
        assert radio.receive(1000) is None
        assert recorder.names == ["rx_timeout"]
    
    def test_undecodable_line_is_timeout(self, recorder):
        raw = b"\xff\xfe garbage\n" + HELLO_LINE.encode()
        radio = MockRadio(
            events=recorder,
            input_stream=io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8"),
            output_stream=io.StringIO(),
        )
        assert radio.receive(0) is None
        assert radio.receive(0).data == b"Hello"
        assert recorder.names == ["rx_timeout", "rx_done"]
        with pytest.raises(TransportClosedError):
            radio.receive(0)
    
    def test_decode_error_from_text_stream_is_timeout(self, recorder):
        class BadText:
            def readline(self):
                return b"\xff".decode("utf-8")
        
        radio = MockRadio(events=recorder, input_stream=BadText(), output_stream=io.StringIO())
        assert radio.receive(0) is None
        assert recorder.names == ["rx_timeout"]
    
    def test_end_of_input(self, make_radio, recorder):
        radio = make_radio("")
        with pytest.raises(TransportClosedError):
            radio.receive(1000)
        assert recorder.calls == []
        assert radio.mode == OperatingMode.STANDBY
    
    def test_closed_stream(self, recorder):
        stream = io.StringIO(HELLO_LINE)
        stream.close()
        radio = MockRadio(events=recorder, input_stream=stream, output_stream=io.StringIO())
        with pytest.raises(TransportClosedError):
            radio.receive(1000)
    
    def test_no_retry_after_close(self, make_radio, recorder):
        radio = make_radio(HELLO_LINE)
        radio.receive(1000)
        with pytest.raises(TransportClosedError):
            radio.receive(1000)
        assert recorder.names == ["rx_done"]
    
    def test_in_order_delivery(self, make_radio, recorder):
        radio = make_radio(HELLO_LINE + '{"foo":1}\n' + '{"txpk":{"data":"AQI="}}\n')
        radio.receive(0)
        radio.receive(0)
        radio.receive(0)
        assert recorder.names == ["rx_done", "rx_timeout", "rx_done"]
        assert recorder.calls[2][1] == b"\x01\x02"
    
    def test_oversized_payload_is_error(self, make_radio, recorder):
        radio = make_radio(HELLO_LINE)
        radio.set_max_payload_length(ModemKind.LORA, 4)
        assert radio.receive(1000) is None
        assert recorder.names == ["rx_error"]
        assert radio.get_statistics()["rx_errors"] == 1
    
    def test_max_payload_fits(self, make_radio, recorder):
        payload = bytes(range(255))
        line = json.dumps({"txpk": {"data": base64.b64encode(payload).decode()}})
        radio = make_radio(line + "\n")
        packet = radio.receive(1000)
        assert packet.data == payload
        assert recorder.calls[0][2] == 255
    
    def test_returns_to_standby(self, make_radio):
        radio = make_radio(HELLO_LINE + '{"foo":1}\n')
        radio.receive(0)
        assert radio.mode == OperatingMode.STANDBY
        radio.receive(0)
        assert radio.mode == OperatingMode.STANDBY
    
    def test_continuous_reception_stays_receiving(self, make_radio):
        radio = make_radio(HELLO_LINE)
        radio.configure_receive(ModemKind.LORA, rx_continuous=True)
        radio.receive(0)
        assert radio.mode == OperatingMode.RECEIVING
        assert radio.get_status() == RadioState.RX_RUNNING
    
    def test_statistics(self, make_radio):
        radio = make_radio(HELLO_LINE + '{"foo":1}\n')
        radio.receive(0)
        radio.receive(0)
        stats = radio.get_statistics()
        assert stats["packets_received"] == 1
        assert stats["rx_timeouts"] == 1


class TestRoundTrip:
    
    @pytest.mark.parametrize("payload", [b"", b"\x00", b"Hello", bytes(range(200))])
    def test_transmitted_payload_received(self, payload, output_stream):
        sender = MockRadio(input_stream=io.StringIO(), output_stream=output_stream)
        sender.transmit(payload)
        
        rxpk = json.loads(output_stream.getvalue())["rxpk"][0]
        inbound = json.dumps({"txpk": {"data": rxpk["data"]}}) + "\n"
        
        received = []
        receiver = MockRadio(
            events=RadioEvents(on_rx_done=lambda data, size, rssi, snr: received.append(data)),
            input_stream=io.StringIO(inbound),
            output_stream=io.StringIO(),
        )
        receiver.receive(0)
        assert received == [payload]


class TestEventSink:
    
    def test_missing_handlers_are_ignored(self, output_stream):
        radio = MockRadio(
            events=RadioEvents(),
            input_stream=io.StringIO(HELLO_LINE + '{"foo":1}\n'),
            output_stream=output_stream,
        )
        radio.transmit(b"x")
        assert radio.receive(0).data == b"Hello"
        assert radio.receive(0) is None
    
    def test_no_event_sink(self, output_stream):
        radio = MockRadio(input_stream=io.StringIO(HELLO_LINE), output_stream=output_stream)
        radio.transmit(b"x")
        assert radio.receive(0).data == b"Hello"
    
    def test_partial_object_sink(self, output_stream):
        class TxOnly:
            def __init__(self):
                self.done = 0
            
            def on_tx_done(self):
                self.done += 1
        
        sink = TxOnly()
        radio = MockRadio(
            events=sink,
            input_stream=io.StringIO('{"foo":1}\n'),
            output_stream=output_stream,
        )
        radio.transmit(b"x")
        radio.receive(0)
        assert sink.done == 1


class TestTimeoutDispatch:
    
    def test_tx_timeout_while_transmitting(self, make_radio, recorder):
        radio = make_radio()
        radio.context.mode.enter(OperatingMode.TRANSMITTING)
        radio.signal_timeout()
        assert recorder.names == ["tx_timeout"]
        assert radio.mode == OperatingMode.STANDBY
    
    @pytest.mark.parametrize("mode", [
        OperatingMode.RECEIVING, OperatingMode.RECEIVING_DUTY_CYCLE,
    ])
    def test_rx_timeout_while_receiving(self, make_radio, recorder, mode):
        radio = make_radio()
        radio.context.mode.enter(mode)
        radio.signal_timeout()
        assert recorder.names == ["rx_timeout"]
        assert radio.mode == OperatingMode.STANDBY
    
    def test_nothing_in_standby(self, make_radio, recorder):
        radio = make_radio()
        radio.signal_timeout()
        assert recorder.calls == []


class TestPlaceholders:
    
    def test_default_values(self):
        radio = MockRadio()
        assert radio.is_channel_free(ModemKind.LORA, 868100000, -90, 10) is True
        assert radio.random() == 5
        assert radio.rssi(ModemKind.LORA) == 0
        assert radio.read(0x0740) == 0
        assert radio.read_buffer(0, 4) == b"\x00\x00\x00\x00"
        assert radio.get_wakeup_time() == 5
    
    def test_no_ops(self, recorder):
        radio = MockRadio(events=recorder)
        radio.write(0x0740, 0x34)
        radio.write_buffer(0, b"\x01\x02")
        radio.sleep()
        radio.rx_boosted(1000)
        radio.set_tx_continuous_wave(868100000, 14, 10)
        radio.irq_process()
        assert recorder.calls == []
    
    def test_cad_and_duty_cycle_return_to_standby(self, recorder):
        radio = MockRadio(events=recorder)
        radio.start_cad()
        assert radio.mode == OperatingMode.STANDBY
        radio.set_rx_duty_cycle(100, 900)
        assert radio.mode == OperatingMode.STANDBY
        assert recorder.calls == []
    
    def test_context_manager(self):
        with MockRadio() as radio:
            radio.standby()
        assert radio.mode == OperatingMode.STANDBY
    
    def test_separate_contexts(self):
        first = MockRadio("a")
        second = MockRadio("b")
        first.set_channel(915000000)
        second.set_channel(868100000)
        assert first.configuration.frequency_hz == 915000000
        assert second.configuration is not first.configuration
