""" Virtual machine executing bfllc IR code in process.
"""

import sys
import logging

from numpy import zeros, uint8

from ..ir.code import Code, TAC
from ..ir.types import ValType, Value, Array
from ..ir.memory import Module, Identifier, MemoryLoc

from ..errors import VMError


logger = logging.getLogger(__name__)


def _signed(val:int, tp:ValType):
    if val >> (tp.value - 1):
        return val - (1 << tp.value)
    return val


def _sizeof(tp):
    if isinstance(tp, Array):
        return tp.size * _sizeof(tp.type)
    elif tp == ValType.CHAR:
        return 1
    raise VMError('Unsupported memory type: %s' % tp)


class FuncEnv:

    def __init__(self, function):
        self.function = function
        self.registers = {}     # dict: register addr, value
        self.block = function.blocks[0]
        self.prevblock = None


class IRVM:
    """ Virtual machine executing bfllc IR code.
        Integers are kept unsigned and masked to their type width; pointers
        are (buffer index, offset) pairs into numpy byte buffers.
    """

    def __init__(self, module:Module, stdin=None, stdout=None, max_steps=None):
        """ stdin/stdout: binary streams, default to the process streams.
            max_steps: abort with VMError after executing this many codes.
        """
        self.module = module
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.max_steps = max_steps

        self.memory = []        # list of numpy arrays
        self.stacktop = None
        self.steps = 0

    def run(self, entry='main'):
        """ Execute the entry function, returns its exit status.
        """
        self.memory = []
        self.steps = 0

        try:
            function = self.module.functions[entry]
        except KeyError:
            raise VMError('No function named %s' % entry)

        self.stacktop = FuncEnv(function)
        ret = self.execute_function()

        if hasattr(self.stdout, 'flush'):
            self.stdout.flush()

        logger.debug('%s returned %r after %d steps', entry, ret, self.steps)
        return _signed(ret, function.rettype) if ret is not None else None

    def execute_function(self):
        """ Execute blocks until the function returns.
        """
        while True:
            block = self.stacktop.block
            for line in block.codes:
                done, ret = self.execute_line(line)
                if done:
                    return ret
                if line.code == Code.BR:
                    break
            else:
                raise VMError('Block %s fell through without a terminator' % block.label)

    def execute_line(self, line:TAC):
        """ Execute one line of code.
            Returns (returned, return value).
        """
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise VMError('Step limit %d exceeded' % self.max_steps)

        if line.code == Code.RET:
            return True, (None if line.first is None else self.get_val(line.first))

        elif line.code == Code.BR:
            if line.cond is None:
                self.jump(line.first)
            elif self.get_val(line.cond):
                self.jump(line.first)
            else:
                self.jump(line.second)

        elif line.code == Code.PHI:
            for val, block in line.first:
                if block is self.stacktop.prevblock:
                    self.set_val(line.ret, self.get_val(val))
                    break
            else:
                raise VMError('Phi has no entry for predecessor %r' % self.stacktop.prevblock)

        elif line.code == Code.ALLOC:
            self.memory.append(zeros(_sizeof(line.first), dtype=uint8))
            self.stacktop.registers[line.ret.addr] = (len(self.memory) - 1, 0)

        elif line.code == Code.GETPTR:  # ret = getptr base [idx...]
            bufidx, offset = self.get_val(line.first)
            elemtype = self.get_type(line.first).unref_type()
            for depth, idx in enumerate(line.second):
                if depth > 0:
                    elemtype = elemtype.type
                offset += _signed(self.get_val(idx), self.get_type(idx)) * _sizeof(elemtype)
            self.stacktop.registers[line.ret.addr] = (bufidx, offset)

        elif line.code == Code.LOAD:    # ret = load addr
            buf, offset = self.deref(line.first)
            self.set_val(line.ret, int(buf[offset]))

        elif line.code == Code.STORE:   # store val addr
            buf, offset = self.deref(line.second)
            buf[offset] = self.get_val(line.first) & 0xff

        elif line.code == Code.ADD:
            self.set_val(line.ret, self.get_val(line.first) + self.get_val(line.second))

        elif line.code == Code.SUB:
            self.set_val(line.ret, self.get_val(line.first) - self.get_val(line.second))

        elif line.code == Code.UREM:
            divisor = self.get_val(line.second)
            if divisor == 0:
                raise VMError('Division by zero')
            self.set_val(line.ret, self.get_val(line.first) % divisor)

        elif line.code in (Code.ZEXT, Code.TRUNC):
            self.set_val(line.ret, self.get_val(line.first))

        elif line.code == Code.NE:
            self.set_val(line.ret, int(self.get_val(line.first) != self.get_val(line.second)))

        elif line.code == Code.CALL:
            ret = self.call(line.first.name, [self.get_val(arg) for arg in line.second])
            if line.ret is not None:
                self.set_val(line.ret, ret)

        else:
            raise VMError('Unrecognized code: %s' % line.code)

        return False, None

    def call(self, name, args):
        """ The external functions the translater declares.
        """
        if name == 'getchar':
            char = self.stdin.read(1)
            return char[0] if char else -1

        elif name == 'putchar':
            self.stdout.write(bytes((args[0] & 0xff,)))
            return args[0]

        elif name == 'llvm.memset.p0.i64':
            bufidx, offset = args[0]
            buf = self.memory[bufidx]
            if offset < 0 or offset + args[2] > len(buf):
                raise VMError('memset out of range')
            buf[offset:offset + args[2]] = args[1] & 0xff
            return None

        raise VMError('Unknown function: %s' % name)

    def jump(self, block):
        self.stacktop.prevblock = self.stacktop.block
        self.stacktop.block = block

    def deref(self, id_):
        bufidx, offset = self.get_val(id_)
        buf = self.memory[bufidx]
        if not 0 <= offset < len(buf):
            raise VMError('Memory access out of range: offset %d of %d' % (offset, len(buf)))
        return buf, offset

    def get_type(self, id_or_val):
        if isinstance(id_or_val, Value):
            return id_or_val.type
        return self.stacktop.function.registers[id_or_val.addr].type

    def get_val(self, id_or_val):

        if isinstance(id_or_val, Value):
            if isinstance(id_or_val.type, ValType) and id_or_val.type != ValType.VOID:
                return id_or_val.val & id_or_val.type.mask()
            return id_or_val.val

        elif isinstance(id_or_val, Identifier) and id_or_val.loc == MemoryLoc.LOCAL:
            try:
                return self.stacktop.registers[id_or_val.addr]
            except KeyError:
                raise VMError('Register %%%d used before definition' % id_or_val.addr)

        raise VMError('Cannot recognize variable: %r' % str(id_or_val))

    def set_val(self, id_:Identifier, val):
        tp = self.get_type(id_)
        if isinstance(tp, ValType):
            val &= tp.mask()
        self.stacktop.registers[id_.addr] = val
