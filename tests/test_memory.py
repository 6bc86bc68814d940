import pytest

from lc3.config import KBSR_READY, MR_KBDR, MR_KBSR
from lc3.memory import Keyboard, Memory


class FakeKeyboard(Keyboard):
    def __init__(self, keys=b""):
        self.keys = bytearray(keys)
        self.polls = 0

    def key_ready(self):
        self.polls += 1
        return len(self.keys) > 0

    def read_key(self):
        return self.keys.pop(0)


def test_read_write_masks():
    mem = Memory()
    mem.write(0x1_0005, 0x1_2345)
    assert mem.read(0x0005) == 0x2345

def test_plain_address_keeps_value():
    mem = Memory(FakeKeyboard(b"a"))
    mem.write(0x4000, 7)
    for _ in range(3):
        assert mem.read(0x4000) == 7

def test_kbsr_latches_key():
    kb = FakeKeyboard(b"q")
    mem = Memory(kb)
    assert mem.read(MR_KBSR) == KBSR_READY
    assert mem.read(MR_KBDR) == ord("q")

def test_kbsr_clears_ready_when_idle():
    mem = Memory(FakeKeyboard())
    mem.write(MR_KBSR, KBSR_READY)
    assert mem.read(MR_KBSR) == 0

def test_kbsr_polls_on_every_read():
    kb = FakeKeyboard(b"xy")
    mem = Memory(kb)
    mem.read(MR_KBSR)
    mem.read(MR_KBSR)
    assert kb.polls == 2
    assert mem.read(MR_KBDR) == ord("y")
    assert mem.read(MR_KBSR) == 0

def test_kbdr_read_does_not_poll():
    kb = FakeKeyboard(b"z")
    mem = Memory(kb)
    mem.read(MR_KBDR)
    assert kb.polls == 0

def test_no_keyboard_reads_not_ready():
    mem = Memory()
    assert mem.read(MR_KBSR) == 0

def test_load_stops_at_top_of_memory():
    mem = Memory()
    assert mem.load(0xFFFE, [1, 2, 3, 4]) == 2
    assert mem.read(0xFFFE) == 1
    assert mem.read(0xFFFF) == 2
    assert mem.read(0x0000) == 0


def test_ldi_through_kbsr_polls_device(make_machine):
    # LDI R0, KBSR_PTR ; status read goes through the device hook
    cpu, _ = make_machine(keys=b"k", program=[0xA000, MR_KBSR])
    cpu.step()
    assert cpu.reg[0] == KBSR_READY
    assert cpu.mem.read(MR_KBDR) == ord("k")

def test_keyboard_poll_loop(make_machine):
    program = [
        0xA003,     # POLL LDI R0, KBSRPTR
        0x07FE,     #      BRzp POLL
        0xA002,     #      LDI R0, KBDRPTR
        0xF025,     #      HALT
        MR_KBSR,
        MR_KBDR,
    ]
    cpu, _ = make_machine(keys=b"!", program=program)
    cpu.run()
    assert cpu.reg[0] == ord("!")
