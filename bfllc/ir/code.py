from enum import Enum


class Code(Enum):
    """ Code used in bfllc IR.
    """
    # Terminator
    RET = 1
    BR = 2

    # Arithmetic Operator
    ADD = 10
    SUB = 11
    UREM = 14

    # Memory
    ALLOC = 30
    LOAD = 31
    STORE = 32
    GETPTR = 33

    # Cast
    ZEXT = 35
    TRUNC = 36

    # Control
    NE = 41
    PHI = 46
    CALL = 47

    def __str__(self):
        return self.name.lower()

    def is_terminator(self):
        return self.value < Code.ADD.value


class TAC:
    """ Three address code
    """
    def __init__(self, code:Code, ret, first, second=None, cond=None):
        """ code: Code instance.
            ret, first, second, cond: Can be identifier/value/block, depends on code.
        """
        self.code = code
        self.ret = ret
        self.first = first
        self.second = second
        self.cond = cond

    def __str__(self):
        ret = ''

        if self.ret is not None:
            ret += ('%s =' % str(self.ret))

        if self.code is not None:
            ret += (' %s' % str(self.code))

        if self.cond is not None:
            ret += (' %s' % str(self.cond))

        if isinstance(self.first, list):
            ret += (''.join((' %s' % str(s) for s in self.first)))
        elif self.first is not None:
            ret += (' %s' % str(self.first))

        if isinstance(self.second, list):
            ret += (''.join((' %s' % str(s) for s in self.second)))
        elif self.second is not None:
            ret += (' %s' % str(self.second))

        return ret
