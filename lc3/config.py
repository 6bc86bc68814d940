"""
Machine constants and runtime defaults.
=======================================
Values the execution engine and the command-line front end share. Anything
the user can override lives in main.py as an argparse default that reads
from here.
"""

# =============================================================================
#  ADDRESS SPACE
# =============================================================================
MEMORY_SIZE = 1 << 16     # 65536 16-bit words
WORD_MASK = 0xFFFF
PC_START = 0x3000         # user programs are linked at x3000


# =============================================================================
#  MEMORY-MAPPED KEYBOARD
# =============================================================================
MR_KBSR = 0xFE00          # keyboard status
MR_KBDR = 0xFE02          # keyboard data
KBSR_READY = 0x8000       # bit 15: a character is waiting in KBDR


# =============================================================================
#  CONSOLE
# =============================================================================
HALT_MESSAGE = "HALT"
IN_PROMPT = "Enter a char: "
EOF_WORD = 0xFFFF         # what getchar()'s EOF looks like in a 16-bit register


# =============================================================================
#  PROCESS EXIT CODES
# =============================================================================
EXIT_OK = 0
EXIT_LOAD_FAILURE = 1
EXIT_INTERRUPTED = -2
EXIT_ABORTED = 134        # 128 + SIGABRT
