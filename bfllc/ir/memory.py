""" Memory model for intermediate representation
"""

from enum import Enum
from collections import namedtuple, OrderedDict


class Register(namedtuple('Register', ['type'])):
    """ Stores a register (temporary value in a function)
        type: can be ValType, Pointer;
    """

    def __repr__(self):
        return '<Register %r>' % str(self.type)

    def __str__(self):
        return '[%s]' % str(self.type)


class MemoryLoc(Enum):

    GLOBAL = 0
    LOCAL = 1


class Identifier(namedtuple('Identifier', ['loc', 'addr'])):

    def __repr__(self):
        return '<Identifier %r>' % self.addr

    def __str__(self):
        return '%%%d' % self.addr if self.loc == MemoryLoc.LOCAL else '@%s' % self.addr


class BasicBlock:
    """ Label plus straight-line code, closed by exactly one terminator.
    """

    def __init__(self, label:str):
        self.label = label
        self.codes = []     # list of TAC instances

    def __repr__(self):
        return '<BasicBlock %s>' % self.label

    def __str__(self):
        return '%%%s' % self.label

    def terminated(self):
        return bool(self.codes) and self.codes[-1].code.is_terminator()


class FunctionDecl(namedtuple('FunctionDecl', ['name', 'argtypes', 'rettype'])):
    """ Signature of an externally defined function.
    """


class Function:

    def __init__(self, name:str, rettype, argtypes=()):
        self.name = name
        self.rettype = rettype
        self.argtypes = tuple(argtypes)
        self.registers = []     # list of Register instances, indexed by Identifier.addr
        self.blocks = []        # list of BasicBlock instances, entry first

    def create_reg(self, mtype):
        self.registers.append(Register(mtype))
        return Identifier(MemoryLoc.LOCAL, len(self.registers) - 1)

    def append_block(self, label:str):
        self.blocks.append(BasicBlock(label))
        return self.blocks[-1]


class Module:

    def __init__(self, name:str, source_filename=None):
        self.name = name
        self.source_filename = source_filename or name
        self.declarations = OrderedDict()   # dict{name: FunctionDecl}
        self.functions = OrderedDict()      # dict{name: Function}

    def declare(self, name, argtypes, rettype):
        self.declarations[name] = FunctionDecl(name, tuple(argtypes), rettype)
        return self.declarations[name]

    def add_function(self, function:Function):
        self.functions[function.name] = function
        return function
