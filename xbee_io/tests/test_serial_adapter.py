import pytest
import serial

from xbee_io import metrics
from xbee_io.adapters.serial_port import SerialAdapter
from xbee_io.config import SerialSettings
from xbee_io.exceptions import AdapterError


def test_serial_open_read_close(fake_port, scenario_stream):
    metrics.reset_all()
    a = SerialAdapter(port="/dev/ttyFAKE", baudrate=9600, read_size=8)
    a.open()
    port = fake_port[0]
    assert port.port == "/dev/ttyFAKE"
    assert port.baudrate == 9600
    port.load(scenario_stream)
    first = a.read()
    second = a.read()
    assert first.data == scenario_stream[:8]
    assert second.data == scenario_stream[8:]
    # nothing waiting and nothing arrives before the timeout
    assert a.read() is None
    a.close()
    assert port.closed
    assert metrics.get("serial_read") == 2


def test_serial_from_settings(fake_port):
    a = SerialAdapter.from_settings(SerialSettings(port="COM3", baudrate=115200, timeout=0.2))
    a.open()
    assert fake_port[0].port == "COM3"
    assert fake_port[0].baudrate == 115200
    assert fake_port[0].timeout == 0.2
    a.close()


def test_serial_read_before_open_raises():
    a = SerialAdapter(port="/dev/ttyFAKE")
    with pytest.raises(AdapterError) as exc:
        a.read()
    assert exc.value.operation == "read"


def test_serial_open_failure_is_wrapped(monkeypatch):
    import xbee_io.adapters.serial_port as sp_mod

    def failing_ctor(*args, **kwargs):
        raise serial.SerialException("no such device")

    monkeypatch.setattr(sp_mod.serial, "Serial", failing_ctor)
    a = SerialAdapter(port="/dev/ttyMISSING")
    with pytest.raises(AdapterError) as exc:
        a.open()
    assert exc.value.adapter_type == "SerialAdapter"
    assert exc.value.operation == "open"
    assert isinstance(exc.value.original_error, serial.SerialException)


def test_iter_chunks_yields_until_closed(fake_port, scenario_stream):
    a = SerialAdapter(port="/dev/ttyFAKE", read_size=64)
    a.open()
    fake_port[0].load(scenario_stream)
    chunks = a.iter_chunks()
    assert next(chunks).data == scenario_stream
    a.close()
    assert list(chunks) == []


def test_iter_chunks_ends_when_closed_during_read(fake_port):
    a = SerialAdapter(port="/dev/ttyFAKE")
    a.open()
    port = fake_port[0]

    def read_while_closing(size=1):
        # another thread closes the port while this read is in flight
        a.close()
        raise serial.SerialException("port closed")

    port.read = read_while_closing
    assert list(a.iter_chunks()) == []


def test_iter_chunks_propagates_errors_on_open_port(fake_port):
    a = SerialAdapter(port="/dev/ttyFAKE")
    a.open()

    def failing_read(size=1):
        raise serial.SerialException("device unplugged")

    fake_port[0].read = failing_read
    with pytest.raises(AdapterError):
        list(a.iter_chunks())
    a.close()
