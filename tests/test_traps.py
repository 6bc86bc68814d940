from lc3.config import EOF_WORD
from lc3.cpu_core import MachineState
from lc3.registers import CondFlag
from lc3.traps import TrapVector, run_trap


def string_words(text):
    return [ord(c) for c in text] + [0]


def test_getc(make_machine):
    cpu, out = make_machine(keys=b"a")
    run_trap(cpu, TrapVector.GETC)
    assert cpu.reg[0] == ord("a")
    assert out.getvalue() == b""

def test_getc_at_eof(make_machine):
    cpu, _ = make_machine()
    run_trap(cpu, TrapVector.GETC)
    assert cpu.reg[0] == EOF_WORD

def test_out_writes_low_byte(make_machine):
    cpu, out = make_machine()
    cpu.reg[0] = 0x4142
    run_trap(cpu, TrapVector.OUT)
    assert out.getvalue() == b"B"

def test_puts_stops_at_first_zero(make_machine):
    cpu, out = make_machine()
    cpu.mem.load(0x4000, string_words("hi") + string_words("there"))
    cpu.reg[0] = 0x4000
    run_trap(cpu, TrapVector.PUTS)
    assert out.getvalue() == b"hi"

def test_puts_empty(make_machine):
    cpu, out = make_machine()
    cpu.reg[0] = 0x4000
    run_trap(cpu, TrapVector.PUTS)
    assert out.getvalue() == b""

def test_in_prompts_and_echoes(make_machine):
    cpu, out = make_machine(keys=b"z")
    run_trap(cpu, TrapVector.IN)
    assert cpu.reg[0] == ord("z")
    assert out.getvalue() == b"Enter a char: z"

def test_in_at_eof_does_not_echo(make_machine):
    cpu, out = make_machine()
    run_trap(cpu, TrapVector.IN)
    assert cpu.reg[0] == EOF_WORD
    assert out.getvalue() == b"Enter a char: "

def test_putsp_two_chars_per_word(make_machine):
    cpu, out = make_machine()
    # "Hello" packed low byte first, odd length leaves a zero high byte
    cpu.mem.load(0x4000, [0x6548, 0x6C6C, 0x006F, 0x0000, 0x5858])
    cpu.reg[0] = 0x4000
    run_trap(cpu, TrapVector.PUTSP)
    assert out.getvalue() == b"Hello"

def test_putsp_even_length(make_machine):
    cpu, out = make_machine()
    cpu.mem.load(0x4000, [0x6261, 0x6463, 0x0000])
    cpu.reg[0] = 0x4000
    run_trap(cpu, TrapVector.PUTSP)
    assert out.getvalue() == b"abcd"

def test_halt(make_machine):
    cpu, out = make_machine()
    run_trap(cpu, TrapVector.HALT)
    assert cpu.state is MachineState.HALTED
    assert out.getvalue() == b"HALT\n"

def test_unknown_vector_is_ignored(make_machine):
    cpu, out = make_machine()
    cpu.reg[0] = 0x1234
    run_trap(cpu, 0x26)
    run_trap(cpu, 0x00)
    assert cpu.state is MachineState.RUNNING
    assert cpu.reg[0] == 0x1234
    assert out.getvalue() == b""

def test_trap_instruction_dispatches(make_machine):
    cpu, out = make_machine(program=[0x5020, 0x1021 + 0x40, 0xF021, 0xF025])
    cpu.reg[1] = ord("A") - 1
    cpu.run()
    assert out.getvalue() == b"AHALT\n"

def test_trap_leaves_flags_alone(make_machine):
    cpu, _ = make_machine(keys=b"\x00", program=[0xF020])
    cpu.reg.cond = CondFlag.NEG
    cpu.step()
    assert cpu.reg[0] == 0
    assert cpu.reg.cond is CondFlag.NEG
