import logging

from . import lex

from .errors import UnmatchedOpenBracket, UnmatchedCloseBracket
from .grammar.commands import Command
from .program import Instruction, Program


logger = logging.getLogger(__name__)


class Parser:
    """
    The main parser for Brainfuck.
    Brackets are matched with an explicit stack of pending '[' positions, so
    nesting depth is not limited by the interpreter recursion limit.
    """

    def __init__(self):
        self.lexer = lex.Lexer()
        self.loopstack = []

    def clear(self):
        """ Clear lex and loop stack.
        """
        self.lexer.clear()
        self.loopstack.clear()

    def parse(self, source:str):
        """ Parse a source string.
            Returns a Program.
        """
        self.clear()
        self.lexer.load(source)
        return self._parse(self.lexer)

    def parse_file(self, filename):
        """ Parse a source file.
        """
        self.clear()
        self.lexer.load_file(filename)
        return self._parse(self.lexer)

    def parse_tokens(self, tokens):
        """ Parse an already lexed token sequence. Errors carry no line/column.
        """
        self.clear()
        return self._parse(tokens)

    def _parse(self, tokens):
        """ Raises UnmatchedCloseBracket at a ']' met with an empty stack, and
            UnmatchedOpenBracket at the leftmost '[' left open at the end.
        """
        instructions = []
        srcpos = []

        for token in tokens:

            if token.cmd == Command.LOOPBEGIN:
                self.loopstack.append(len(instructions))
                instructions.append(None)   # linked when the ']' arrives

            elif token.cmd == Command.LOOPEND:
                if not self.loopstack:
                    raise UnmatchedCloseBracket(token.pos, *self.locate(token.srcpos))
                begin = self.loopstack.pop()
                instructions[begin] = Instruction(Command.LOOPBEGIN, len(instructions))
                instructions.append(Instruction(Command.LOOPEND, begin))

            else:
                instructions.append(Instruction(token.cmd))

            srcpos.append(token.srcpos)

        if self.loopstack:
            begin = self.loopstack[0]
            self.loopstack.clear()
            raise UnmatchedOpenBracket(begin, *self.locate(srcpos[begin]))

        program = Program(instructions, srcpos)
        logger.debug('parsed %d instructions, %d loops', len(program), program.loops())
        return program

    def locate(self, srcpos):
        """ Returns (line, col) of a source offset, both 1-based.
            (None, None) when the raw text is not available.
        """
        source = self.lexer.source
        if source is None or srcpos is None:
            return None, None

        line = source.count('\n', 0, srcpos) + 1
        col = srcpos - (source.rfind('\n', 0, srcpos) + 1) + 1
        return line, col
