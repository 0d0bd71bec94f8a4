import pytest
import serial

from switchcfg import transport
from switchcfg.errors import TransportError, TransportOpenError
from switchcfg.session import Command

from conftest import port_info, write_replay


def test_replay_reads_lines_then_end(tmp_path, no_sleep):
    src = write_replay(tmp_path / "replay.txt", ["Enter password:", ">> Main#"])
    t = transport.ReplayTransport(src, delay=0.05)

    assert t.read_chunk() == "Enter password:\n"
    assert t.read_chunk() == ">> Main#\n"
    assert t.read_chunk() is transport.END_OF_INPUT
    assert t.read_chunk() is transport.END_OF_INPUT
    assert no_sleep == [0.05, 0.05]
    t.close()


def test_replay_normalises_crlf(tmp_path, no_sleep):
    src = tmp_path / "replay.txt"
    src.write_bytes(b"Enter password:\r\n")
    with transport.ReplayTransport(src) as t:
        assert t.read_chunk() == "Enter password:\n"


def test_replay_records_writes(tmp_path):
    src = write_replay(tmp_path / "replay.txt", ["x"])
    t = transport.ReplayTransport(src, delay=0)
    t.write_line(Command("admin"))
    t.write_line(Command("lines 0"))
    assert t.sent == ["admin", "lines 0"]
    assert t.writes[0].encode() == b"admin\r\n"
    t.close()
    assert t.read_chunk() is transport.END_OF_INPUT
    assert t.sent == ["admin", "lines 0"]


def test_replay_missing_source(tmp_path):
    with pytest.raises(TransportOpenError):
        transport.ReplayTransport(tmp_path / "missing.txt")


def test_serial_opens_8n1_no_flow_control(fake_serial):
    t = transport.SerialTransport("/dev/ttyUSB0", baudrate=9600)
    kwargs = fake_serial[0].kwargs
    assert kwargs["port"] == "/dev/ttyUSB0"
    assert kwargs["baudrate"] == 9600
    assert kwargs["bytesize"] == serial.EIGHTBITS
    assert kwargs["parity"] == serial.PARITY_NONE
    assert kwargs["stopbits"] == serial.STOPBITS_ONE
    assert not kwargs["xonxoff"] and not kwargs["rtscts"] and not kwargs["dsrdtr"]
    assert kwargs["timeout"] == 3.0
    assert kwargs["write_timeout"] == 3.0
    t.close()
    assert fake_serial[0].closed


def test_serial_open_failure(monkeypatch):
    def boom(**kwargs):
        raise serial.SerialException("could not open port COM9")

    monkeypatch.setattr(transport.serial, "Serial", boom)
    with pytest.raises(TransportOpenError):
        transport.SerialTransport("COM9")


def test_serial_reads_whatever_is_buffered(fake_serial, no_sleep):
    t = transport.SerialTransport("/dev/ttyUSB0")
    fake_serial[0].rx.extend(b"Enter pass")
    assert t.read_chunk() == "Enter pass"
    assert no_sleep == []


def test_serial_idle_returns_empty_after_backoff(fake_serial, no_sleep):
    t = transport.SerialTransport("/dev/ttyUSB0")
    assert t.read_chunk() == ""
    assert no_sleep == [0.1]


def test_serial_read_error_is_soft(fake_serial, no_sleep):
    t = transport.SerialTransport("/dev/ttyUSB0")
    fake_serial[0].fail_reads = 50
    for _ in range(50):
        assert t.read_chunk() == ""
    fake_serial[0].rx.extend(b">> Main#")
    assert t.read_chunk() == ">> Main#"


def test_serial_read_error_ceiling(fake_serial, no_sleep):
    t = transport.SerialTransport("/dev/ttyUSB0", max_read_errors=2)
    fake_serial[0].fail_reads = 3
    assert t.read_chunk() == ""
    assert t.read_chunk() == ""
    with pytest.raises(TransportError):
        t.read_chunk()


def test_serial_ceiling_counts_consecutive_errors_only(fake_serial, no_sleep):
    t = transport.SerialTransport("/dev/ttyUSB0", max_read_errors=1)
    ser = fake_serial[0]
    for _ in range(3):
        ser.fail_reads = 1
        assert t.read_chunk() == ""
        assert t.read_chunk() == ""


def test_serial_write_line_crlf(fake_serial):
    t = transport.SerialTransport("/dev/ttyUSB0")
    t.write_line(Command("admin"))
    assert fake_serial[0].tx == [b"admin\r\n"]


def test_resolve_port_exact(fake_ports):
    fake_ports.extend([port_info("/dev/ttyS0"), port_info("/dev/ttyUSB0", "USB Serial")])
    assert transport.resolve_port("/dev/ttyUSB0") == "/dev/ttyUSB0"
    assert transport.resolve_port("ttyUSB0") == "/dev/ttyUSB0"


def test_resolve_port_by_description(fake_ports):
    fake_ports.extend(
        [port_info("COM1", "Communications Port"), port_info("COM7", "Prolific USB-to-Serial Comm Port")]
    )
    assert transport.resolve_port("prolific") == "COM7"


def test_resolve_port_default(fake_ports, monkeypatch):
    monkeypatch.delenv("SWITCHCFG_PORT", raising=False)
    fake_ports.append(port_info("COM3"))
    assert transport.resolve_port(None) == "COM3"

    monkeypatch.setenv("SWITCHCFG_PORT", "COM3")
    assert transport.resolve_port() == "COM3"


def test_resolve_port_none_available(fake_ports, monkeypatch):
    monkeypatch.delenv("SWITCHCFG_PORT", raising=False)
    with pytest.raises(TransportOpenError):
        transport.resolve_port()


def test_resolve_port_no_match(fake_ports):
    fake_ports.append(port_info("COM1", "Communications Port"))
    with pytest.raises(TransportOpenError):
        transport.resolve_port("FTDI")
