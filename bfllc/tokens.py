""" Tokens produced by the lexer.
"""

from collections import namedtuple


class Token(namedtuple('Token', ['cmd', 'pos', 'srcpos'])):
    """ Token object
        cmd ===> Command
        pos ===> offset in the filtered command sequence
        srcpos ===> offset in the raw source text
    """

    def __repr__(self):
        return '<%s, %d>' % (self.cmd.name, self.pos)
