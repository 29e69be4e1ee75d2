""" Lexer.
"""

import re
import logging

from .errors import ReadError

from .grammar.commands import CommandLoc

from .tokens import Token
from .util.ioutil import StrReader


logger = logging.getLogger(__name__)


class Lexer:

    """
    Token table:

    command:  [><+\\-.,\\[\\]]
    comment:  [^><+\\-.,\\[\\]]+
    """

    re_cmd = re.compile(r'[><+\-.,\[\]]')
    re_comment = re.compile(r'[^><+\-.,\[\]]+')

    def __init__(self):
        self.source = None

    def clear(self):
        self.source = None

    def load(self, source:str):
        """ Load an input string.
        """
        self.clear()
        self.source = source

    def load_file(self, filename):
        """ Load source from a file. Only ASCII command symbols are meaningful,
            so undecodable bytes are replaced instead of rejected.
        """
        try:
            with open(filename, 'r', encoding='utf-8', errors='replace') as finput:
                self.load(finput.read())
        except OSError as e:
            raise ReadError('Cannot read %s: %s' % (filename, e.strerror)) from e

    def __iter__(self):
        """ Iterate over tokens from the beginning of the source.
            Every call starts over, so the lexer can be walked more than once.
        """
        if self.source is None:
            return

        reader = StrReader(self.source)
        pos = 0

        while not reader.eof():

            if self.match(reader, self.re_comment):
                continue

            match_obj = self.re_cmd.match(reader.obj, reader.pos())
            yield Token(CommandLoc[match_obj.group()], pos, reader.pos())
            reader.forward(1)
            pos += 1

        logger.debug('lexed %d commands from %d characters', pos, len(self.source))

    def tokens(self):
        return list(self)

    def match(self, reader, regex):
        # skip over a match of regex, returns whether anything was consumed

        match_obj = regex.match(reader.obj, reader.pos())
        if match_obj:
            reader.seek(match_obj.end())
            return True
        else:
            return False
