from types import SimpleNamespace

import pytest
import serial

from switchcfg import transport
from switchcfg.transport import TransportBase, END_OF_INPUT

PASSWORD = "Enter password:"
SETUP = 'Would you like to run "Set Up" to configure the switch? [y/n]'
PENDING = "Confirm seeing above note [y]:"
MAIN = ">> Main#"

CONFIG_DUMP = [
    "/* dumped from switch",
    "ignored line",
    "/c/sys/access",
    "user admin",
    "",
    "snmp community public",
    "/",
    "trailer",
]


class ScriptedTransport(TransportBase):
    """Hands out fixed chunks, then END_OF_INPUT. Records writes."""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self._write_log = []
        self.closed = False

    def read_chunk(self):
        if not self._chunks:
            return END_OF_INPUT
        return self._chunks.pop(0)

    def write_line(self, command):
        self._write_log.append(command)

    def close(self):
        self.closed = True

    @property
    def sent(self):
        return [c.text for c in self._write_log]


class FakeSerial:
    """Stands in for serial.Serial: queued input, recorded output."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.rx = bytearray()
        self.tx = []
        self.fail_reads = 0
        self.closed = False

    @property
    def in_waiting(self):
        if self.fail_reads:
            self.fail_reads -= 1
            raise serial.SerialException("device reports readiness to read but returned no data")
        return len(self.rx)

    def read(self, size=1):
        out = bytes(self.rx[:size])
        del self.rx[:size]
        return out

    def write(self, data):
        self.tx.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def no_sleep(monkeypatch):
    calls = []
    monkeypatch.setattr(transport.time, "sleep", lambda s: calls.append(s))
    return calls


@pytest.fixture
def fake_serial(monkeypatch):
    opened = []

    def factory(**kwargs):
        ser = FakeSerial(**kwargs)
        opened.append(ser)
        return ser

    monkeypatch.setattr(transport.serial, "Serial", factory)
    return opened


@pytest.fixture
def fake_ports(monkeypatch):
    ports = []
    monkeypatch.setattr(transport.serial.tools.list_ports, "comports", lambda: list(ports))
    return ports


def port_info(device, description="n/a", hwid="n/a"):
    return SimpleNamespace(device=device, name=device.rsplit("/", 1)[-1], description=description, hwid=hwid)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "switch.txt"
    path.write_text("\n".join(CONFIG_DUMP) + "\n")
    return path


def write_replay(path, lines):
    path.write_text("\n".join(lines) + "\n")
    return path
