"""LC-3 style 16-bit virtual machine: CPU core, memory, traps and image loader."""

__version__ = "0.1.0"
