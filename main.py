"""Command-line entry point for the LC-3 virtual machine.
Run `python main.py image.obj [more.obj ...]` (or the installed `lc3vm`)
from the project root to load one or more program images and execute them."""
import argparse
import logging
import sys

from lc3 import config
from lc3.console import TerminalConsole
from lc3.cpu_core import CPU, IllegalOpcode, MachineState
from lc3.loader import ImageLoadError, read_image

log = logging.getLogger("lc3")


def parse_address(text: str) -> int:
    """Accept 0x3000, x3000 or 12288."""
    try:
        if text[:1] in "xX":
            value = int(text[1:], 16)
        else:
            value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an address: {text!r}")
    if not 0 <= value <= config.WORD_MASK:
        raise argparse.ArgumentTypeError(f"address out of range: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3vm",
        description="Run LC-3 program images",
    )
    parser.add_argument("images", nargs="*", metavar="image-file",
                        help="Program image(s): big-endian origin word followed by code")
    parser.add_argument("--pc-start", type=parse_address, default=config.PC_START,
                        help=f"Initial PC (default x{config.PC_START:04X})")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Trace every instruction (DEBUG logging)")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Diagnostic verbosity on stderr")
    return parser


def setup_logging(level: str, verbose: bool):
    level = logging.DEBUG if verbose else getattr(logging, level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # basicConfig leaves an already-configured root logger alone
    logging.getLogger().setLevel(level)


def main(argv=None, console=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.verbose)

    if not args.images:
        parser.print_usage(sys.stderr)
        print("lc3vm: at least one image file is required", file=sys.stderr)
        return config.EXIT_LOAD_FAILURE

    if console is None:
        console = TerminalConsole()
    cpu = CPU(console)

    for path in args.images:
        try:
            read_image(path, cpu.mem)
        except ImageLoadError as e:
            log.error("%s", e)
            print(f"Failed to load image: {path}", file=sys.stderr)
            return config.EXIT_LOAD_FAILURE

    cpu.reg.pc = args.pc_start

    try:
        with console.raw_mode():
            state = cpu.run()
    except IllegalOpcode as e:
        print(f"lc3vm: {e}", file=sys.stderr)
        return config.EXIT_ABORTED
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return config.EXIT_INTERRUPTED

    if state is MachineState.HALTED:
        return config.EXIT_OK
    return config.EXIT_ABORTED


if __name__ == "__main__":
    sys.exit(main())
