import io

import pytest

from lc3.console import StreamConsole
from lc3.cpu_core import CPU


@pytest.fixture
def make_machine():
    """Build a CPU wired to an in-memory console; returns (cpu, output)."""
    def build(keys: bytes = b"", program=(), origin=0x3000):
        out = io.BytesIO()
        cpu = CPU(StreamConsole(io.BytesIO(keys), out))
        cpu.mem.load(origin, program)
        cpu.reg.pc = origin
        return cpu, out
    return build


@pytest.fixture
def cpu(make_machine):
    return make_machine()[0]
