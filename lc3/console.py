"""Character I/O the machine talks to: keyboard in, byte stream out."""
import contextlib
import logging
import os
import select
import sys
from typing import BinaryIO, Optional

from .config import EOF_WORD
from .memory import Keyboard

log = logging.getLogger(__name__)


class Console(Keyboard):
    """
    Byte-oriented console.
    • key_ready() : non-blocking "is a byte waiting?"
    • read_key()  : blocking read of one byte (EOF_WORD once input is exhausted)
    • write()     : queue bytes for output; flush() pushes them out
    • raw_mode()  : context manager for unbuffered, unechoed input
    """

    def write(self, data: bytes):
        raise NotImplementedError

    def flush(self):
        raise NotImplementedError

    def raw_mode(self):
        return contextlib.nullcontext(self)


class TerminalConsole(Console):
    """Console over real file descriptors (stdin/stdout by default)."""

    def __init__(self, infile=None, outfile: Optional[BinaryIO] = None):
        self.infile = infile if infile is not None else sys.stdin
        self.outfile = outfile if outfile is not None else sys.stdout.buffer
        self.fd = self.infile.fileno()

    def key_ready(self) -> bool:
        ready, _, _ = select.select([self.fd], [], [], 0)
        return len(ready) > 0

    def read_key(self) -> int:
        data = os.read(self.fd, 1)
        if not data:
            return EOF_WORD
        return data[0]

    def write(self, data: bytes):
        self.outfile.write(data)

    def flush(self):
        self.outfile.flush()

    @contextlib.contextmanager
    def raw_mode(self):
        """cbreak the terminal for the duration; a pipe is left alone."""
        if not os.isatty(self.fd):
            yield self
            return

        import termios
        import tty

        saved = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd, termios.TCSANOW)
        log.debug("terminal fd %d in cbreak mode", self.fd)
        try:
            yield self
        finally:
            termios.tcsetattr(self.fd, termios.TCSANOW, saved)
            log.debug("terminal fd %d restored", self.fd)


class StreamConsole(Console):
    """
    Console over in-memory binary streams.
    The source is read to EOF on first use, so it must not be a live pipe.
    """

    def __init__(self, source: BinaryIO, sink: BinaryIO):
        self.source = source
        self.sink = sink
        self._pending = None

    def _fill(self):
        if self._pending is None:
            self._pending = bytearray(self.source.read())

    def key_ready(self) -> bool:
        self._fill()
        return len(self._pending) > 0

    def read_key(self) -> int:
        self._fill()
        if not self._pending:
            return EOF_WORD
        return self._pending.pop(0)

    def write(self, data: bytes):
        self.sink.write(data)

    def flush(self):
        self.sink.flush()
