""" Types used in IR.
"""

from enum import Enum
from collections import namedtuple


class ValType(Enum):
    """ Integer types, valued by bit width.
    """

    VOID = 0
    BOOL = 1
    CHAR = 8
    INT = 32
    LONG = 64

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name.lower()

    def mask(self):
        return (1 << self.value) - 1


class Pointer(namedtuple('Pointer', ['type'])):
    """ Pointer type; the pointee type is kept for the VM, the text form is opaque.
    """

    def unref_type(self):
        return self.type

    def __repr__(self):
        return '<Pointer %r>' % (self.type,)

    def __str__(self):
        return '%s *' % (self.type,)


class Array(namedtuple('Array', ['type', 'size'])):
    """ Array type;
    """

    def __repr__(self):
        return '<Array %r x %r>' % (self.type, self.size)

    def __str__(self):
        return '[%s x %d]' % (self.type, self.size)


class Value(namedtuple('Value', ['type', 'val'])):
    """ Represent an immediate value
    """

    def __repr__(self):
        return '[%s: %r]' % (self.type, self.val)

    def __str__(self):
        return '[const %s %r]' % (self.type, self.val)
