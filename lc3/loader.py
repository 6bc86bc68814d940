"""
Program image loading.

An image is a big-endian origin word followed by big-endian program words.
Words land at origin, origin+1, ... until the file or the address space runs
out, whichever comes first.
"""
import logging
import struct
from typing import BinaryIO

from .config import MEMORY_SIZE
from .memory import Memory

log = logging.getLogger(__name__)


class ImageLoadError(OSError):
    pass


def read_image_file(fp: BinaryIO, memory: Memory) -> int:
    """Load one image from an open binary file. Returns the word count."""
    header = fp.read(2)
    if len(header) < 2:
        raise ImageLoadError("image too short to hold an origin")
    origin, = struct.unpack(">H", header)

    max_read = MEMORY_SIZE - origin
    data = fp.read(max_read * 2)
    n_words = len(data) // 2      # a dangling odd byte is dropped
    words = struct.unpack(f">{n_words}H", data[:n_words * 2])
    count = memory.load(origin, words)
    log.debug("image origin=x%04X words=%d", origin, count)
    return count


def read_image(image_path: str, memory: Memory) -> int:
    try:
        with open(image_path, "rb") as fp:
            count = read_image_file(fp, memory)
    except ImageLoadError as e:
        raise ImageLoadError(f"{image_path}: {e}") from e
    except OSError as e:
        raise ImageLoadError(f"{image_path}: {e.strerror or e}") from e
    log.info("loaded %d words from %s", count, image_path)
    return count
