""" Command symbols definition.
"""

from enum import Enum

cmd_symbols = ['>', '<', '+', '-', '.', ',', '[', ']']

class Command(Enum):

    INCPTR = 0      # >
    DECPTR = 1      # <
    INC = 2         # +
    DEC = 3         # -
    WRITE = 4       # .
    READ = 5        # ,
    LOOPBEGIN = 6   # [
    LOOPEND = 7     # ]

    def __str__(self):
        return cmd_symbols[self.value]


CommandLoc = dict(zip(cmd_symbols, Command))
