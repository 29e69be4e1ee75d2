import logging

from .grammar.commands import Command
from .program import Program

from .ir.code import Code, TAC
from .ir.types import ValType, Value, Array, Pointer
from .ir.memory import Module, Function

from .errors import CompileError


logger = logging.getLogger(__name__)


class Translater:
    """ Lower a Program into an IR module with a single `main` function.

        The cell index is an SSA value threaded through the generation; loop
        headers merge the index from the entry edge and the back edge with a
        phi node.
    """

    TAPE_SIZE = 30000           # number of cells on the tape
    POINTER_WRAP = False        # wrap the cell index around the tape ends instead of leaving it unchecked
    MODULE_NAME = 'bfllc'

    def __init__(self, tape_size=None, wrap=None):

        self.tape_size = self.TAPE_SIZE if tape_size is None else tape_size
        self.wrap = self.POINTER_WRAP if wrap is None else wrap

        if self.tape_size <= 0:
            raise ValueError('Tape size must be positive, got %d' % self.tape_size)

        self.module = None

        # temporary variables
        self.curfunction = None
        self.curblock = None
        self.tape = None
        self.cellidx = None
        self.loopcount = 0
        self.looplabelstack = []
        self.externs = {}

    def clear(self):
        self.module = None
        self.curfunction = None
        self.curblock = None
        self.tape = None
        self.cellidx = None
        self.loopcount = 0
        self.looplabelstack = []
        self.externs = {}

    def translate(self, program:Program, source_filename=None):
        """ Translate the whole program.
            Returns the IR Module.
        """
        self.clear()
        program.validate()

        self.module = Module(self.MODULE_NAME, source_filename)
        self.externs = {
            'getchar': self.module.declare('getchar', (), ValType.INT),
            'putchar': self.module.declare('putchar', (ValType.INT,), ValType.INT),
            'memset': self.module.declare('llvm.memset.p0.i64',
                (Pointer(ValType.CHAR), ValType.CHAR, ValType.LONG, ValType.BOOL), ValType.VOID),
        }

        self.curfunction = self.module.add_function(Function('main', ValType.INT))
        self.curblock = self.curfunction.append_block('entry')

        # the tape
        tapetype = Array(ValType.CHAR, self.tape_size)
        self.tape = self.create_reg(Pointer(tapetype))
        self.write(Code.ALLOC, self.tape, tapetype)
        self.write(Code.CALL, None, self.externs['memset'], [
            self.tape,
            Value(ValType.CHAR, 0),
            Value(ValType.LONG, self.tape_size),
            Value(ValType.BOOL, 0)
        ])

        self.cellidx = Value(ValType.LONG, 0)

        for idx, instr in enumerate(program):

            if instr.cmd == Command.LOOPBEGIN:
                self._translate_loop_begin(idx)

            elif instr.cmd == Command.LOOPEND:
                if not self.looplabelstack or self.looplabelstack[-1][0] != instr.match:
                    raise CompileError('Loop end at #%d does not close the innermost loop' % idx)
                self._translate_loop_end()

            else:
                self._translate_cmd(instr.cmd)

        if self.looplabelstack:
            raise CompileError('Loop at #%d has no end' % self.looplabelstack[-1][0])

        self.write(Code.RET, None, Value(ValType.INT, 0))

        logger.debug('translated %d instructions into %d blocks, %d registers',
            len(program), len(self.curfunction.blocks), len(self.curfunction.registers))

        module = self.module
        self.clear()
        return module

    def _translate_cmd(self, cmd:Command):

        if cmd == Command.INCPTR:
            self.cellidx = self._translate_move(1)

        elif cmd == Command.DECPTR:
            self.cellidx = self._translate_move(-1)

        elif cmd in (Command.INC, Command.DEC):
            ptr = self._translate_cellptr()
            val = self.create_reg(ValType.CHAR)
            self.write(Code.LOAD, val, ptr)
            newval = self.create_reg(ValType.CHAR)
            self.write(Code.ADD if cmd == Command.INC else Code.SUB, newval, val, Value(ValType.CHAR, 1))
            self.write(Code.STORE, None, newval, ptr)

        elif cmd == Command.READ:
            char = self.create_reg(ValType.INT)
            self.write(Code.CALL, char, self.externs['getchar'], [])
            byte = self.create_reg(ValType.CHAR)
            self.write(Code.TRUNC, byte, char, ValType.CHAR)
            ptr = self._translate_cellptr()
            self.write(Code.STORE, None, byte, ptr)

        elif cmd == Command.WRITE:
            ptr = self._translate_cellptr()
            byte = self.create_reg(ValType.CHAR)
            self.write(Code.LOAD, byte, ptr)
            char = self.create_reg(ValType.INT)
            self.write(Code.ZEXT, char, byte, ValType.INT)
            self.write(Code.CALL, self.create_reg(ValType.INT), self.externs['putchar'], [char])

        else:
            raise CompileError('Unrecognized command: %r' % cmd)

    def _translate_move(self, step:int):
        """ Returns the new cell index after moving by step (+1/-1).
        """
        newidx = self.create_reg(ValType.LONG)

        if not self.wrap:
            self.write(Code.ADD if step > 0 else Code.SUB, newidx, self.cellidx, Value(ValType.LONG, 1))
            return newidx

        # idx - 1 is computed as idx + (size - 1) so the urem never sees a negative index
        delta = 1 if step > 0 else self.tape_size - 1
        self.write(Code.ADD, newidx, self.cellidx, Value(ValType.LONG, delta))
        wrapped = self.create_reg(ValType.LONG)
        self.write(Code.UREM, wrapped, newidx, Value(ValType.LONG, self.tape_size))
        return wrapped

    def _translate_cellptr(self):
        """ Returns a pointer to the current cell.
        """
        ptr = self.create_reg(Pointer(ValType.CHAR))
        self.write(Code.GETPTR, ptr, self.tape, [Value(ValType.LONG, 0), self.cellidx])
        return ptr

    def _translate_loop_begin(self, begin:int):
        """ Close the current block with a branch into a new loop header, and
            continue in the loop body.
        """
        self.loopcount += 1
        name = 'loop%d' % self.loopcount

        lblcond = self.curfunction.append_block(name + '.cond')
        lblbody = self.curfunction.append_block(name + '.body')

        entryblock = self.curblock
        self.write(Code.BR, None, lblcond)

        # header: merge the cell index of the entry edge and the back edge
        self.curblock = lblcond
        phi = TAC(Code.PHI, self.create_reg(ValType.LONG), [(self.cellidx, entryblock)])
        self.curblock.codes.append(phi)
        self.cellidx = phi.ret

        ptr = self._translate_cellptr()
        val = self.create_reg(ValType.CHAR)
        self.write(Code.LOAD, val, ptr)
        cond = self.create_reg(ValType.BOOL)
        self.write(Code.NE, cond, val, Value(ValType.CHAR, 0))

        # false target is the exit block, appended once the body is done
        condbr = TAC(Code.BR, None, lblbody, None, cond=cond)
        self.curblock.codes.append(condbr)

        self.looplabelstack.append((begin, name, lblcond, phi, condbr))
        self.curblock = lblbody

    def _translate_loop_end(self):
        """ Branch back to the loop header and continue in the exit block.
        """
        begin, name, lblcond, phi, condbr = self.looplabelstack.pop()

        phi.first.append((self.cellidx, self.curblock))
        self.write(Code.BR, None, lblcond)

        lblend = self.curfunction.append_block(name + '.end')
        condbr.second = lblend

        self.curblock = lblend
        self.cellidx = phi.ret

    def create_reg(self, mtype):
        """ Create a temporary value in current function
        """
        return self.curfunction.create_reg(mtype)

    def write(self, code, ret, first=None, second=None, *args, **kwargs):

        if self.curblock.terminated():
            raise CompileError('Block %s is already terminated' % self.curblock.label)
        self.curblock.codes.append(TAC(code, ret, first, second, *args, **kwargs))
