""" Program: the validated instruction stream handed to the translater.
"""

from collections import namedtuple

from .grammar.commands import Command
from .errors import CompileError


class Instruction(namedtuple('Instruction', ['cmd', 'match'])):
    """ One command of the program.
        match: index of the partner bracket for LOOPBEGIN/LOOPEND, otherwise None.
    """

    def __new__(cls, cmd, match=None):
        return super().__new__(cls, cmd, match)

    def __repr__(self):
        if self.match is None:
            return '<%s>' % self.cmd.name
        return '<%s -> %d>' % (self.cmd.name, self.match)

    def __str__(self):
        return str(self.cmd)


class Program:
    """ Immutable sequence of instructions. Indices are stable and used as
        bracket match references.
    """

    def __init__(self, instructions, srcpos=None):
        self._instructions = tuple(instructions)
        self.srcpos = tuple(srcpos) if srcpos is not None else None

    def __len__(self):
        return len(self._instructions)

    def __getitem__(self, idx):
        return self._instructions[idx]

    def __iter__(self):
        return iter(self._instructions)

    def __eq__(self, other):
        return isinstance(other, Program) and self._instructions == other._instructions

    def __hash__(self):
        return hash(self._instructions)

    def __repr__(self):
        return '<Program %d instructions>' % len(self)

    def __str__(self):
        return ''.join(str(instr) for instr in self._instructions)

    def loops(self):
        """ Number of loops in the program.
        """
        return sum(1 for instr in self._instructions if instr.cmd == Command.LOOPBEGIN)

    def validate(self):
        """ Check that every bracket is linked to its partner at the same depth.
            Raises CompileError on a broken link.
        """
        stack = []

        for idx, instr in enumerate(self._instructions):

            if instr.cmd == Command.LOOPBEGIN:
                if instr.match is None or instr.match <= idx or instr.match >= len(self):
                    raise CompileError('Loop at #%d has an invalid end: %r' % (idx, instr.match))
                stack.append(idx)

            elif instr.cmd == Command.LOOPEND:
                if not stack:
                    raise CompileError('Loop end at #%d has no beginning' % idx)
                begin = stack.pop()
                if instr.match != begin or self._instructions[begin].match != idx:
                    raise CompileError('Loop end at #%d is not linked to #%d' % (idx, begin))

            elif instr.match is not None:
                raise CompileError('Instruction at #%d cannot have a match' % idx)

        if stack:
            raise CompileError('Loop at #%d has no end' % stack[-1])
