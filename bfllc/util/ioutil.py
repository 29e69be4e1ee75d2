import os
import sys
import tempfile


class StrReader:
    """ Simple wrapper of string.
    """

    def __init__(self, src):
        self.obj = src
        self.ptr = 0

    def pos(self):
        return self.ptr

    def forward(self, c):
        self.ptr += c

    def seek(self, p):
        assert p >= 0
        self.ptr = p

    def eof(self):
        return self.ptr >= len(self.obj)


class StrWriter:
    """ Writer, output string into screen/file.
        A file target is written into a temporary sibling first and moved into
        place by close(), so the target either holds the complete output or
        is left untouched.
    """

    def __init__(self, src=None, sepline='\n'):

        self.target = None
        self.tmpname = None

        if not src:
            self.obj = sys.stdout
            self.closeable = False
        elif isinstance(src, (str, os.PathLike)):
            self.target = os.fspath(src)
            fd, self.tmpname = tempfile.mkstemp(
                prefix='.%s.' % os.path.basename(self.target),
                dir=os.path.dirname(os.path.abspath(self.target))
            )
            self.obj = os.fdopen(fd, 'w', encoding='utf-8', newline='\n')
            self.closeable = True
        elif hasattr(src, 'write'):
            self.obj = src
            self.closeable = False
        else:
            raise TypeError('Cannot write into %r' % src)

        self.sepline = sepline

    def write(self, c):
        self.obj.write(c)

    def writeln(self, c=''):
        self.write(c)
        self.obj.write(self.sepline)

    def close(self):

        if self.closeable:
            self.obj.close()
            if self.tmpname:
                os.chmod(self.tmpname, 0o644)
                os.replace(self.tmpname, self.target)
                self.tmpname = None

    def discard(self):
        """ Drop a partially written file target.
        """
        if self.closeable:
            self.obj.close()
            if self.tmpname:
                os.remove(self.tmpname)
                self.tmpname = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self.discard()
        return False
