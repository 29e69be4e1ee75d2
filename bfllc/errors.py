""" Errors raised in bfllc
"""

class ReadError(RuntimeError):
    """ Errors in reading source
    """

    def __init__(self, err):
        super().__init__('Reading error: %s' % err)


class SynError(RuntimeError):
    """ General syntax error
    """

    def __init__(self, err, pos, line=None, col=None):
        self.err = err
        self.pos = pos
        self.line = line
        self.col = col

        if line is not None:
            super().__init__('SyntaxError at pos %d (line %d, col %d): ' % (self.pos, self.line, self.col) + self.err)
        else:
            super().__init__('SyntaxError at pos %d: ' % self.pos + self.err)


class UnmatchedOpenBracket(SynError):
    """ '[' without a matching ']'.
    """

    def __init__(self, pos, line=None, col=None):
        super().__init__('Unmatched "["', pos, line, col)


class UnmatchedCloseBracket(SynError):
    """ ']' without a matching '['.
    """

    def __init__(self, pos, line=None, col=None):
        super().__init__('Unmatched "]"', pos, line, col)


class CompileError(RuntimeError):
    """ Translate error
    """

    def __init__(self, err):
        super().__init__(err)


class VMError(RuntimeError):
    """ Runtime error inside the IR virtual machine.
    """

    def __init__(self, err):
        super().__init__('VMError: %s' % err)
