""" Convert bfllc.IR ==> LLVM.IR
"""

import io
import logging

from ..ir.code import Code, TAC
from ..ir.types import ValType, Value, Array, Pointer
from ..ir.memory import Module, Function, FunctionDecl, BasicBlock, Identifier, MemoryLoc
from ..util.ioutil import StrWriter


logger = logging.getLogger(__name__)


class LLConverter:

    _TypeLoc = {
        ValType.VOID: 'void',
        ValType.BOOL: 'i1',
        ValType.CHAR: 'i8',
        ValType.INT: 'i32',
        ValType.LONG: 'i64'
    }

    _CastCodeLoc = {
        Code.ZEXT: 'zext',
        Code.TRUNC: 'trunc'
    }

    _IcmpCodeLoc = {
        Code.NE: 'ne'
    }

    _BinCodeLoc = {
        Code.ADD: 'add',
        Code.SUB: 'sub',
        Code.UREM: 'urem'
    }

    def __init__(self, module:Module):
        """ Add a module object
        """
        self.writer = None
        self.module = module

        self.curfunction = None
        self.regnames = {}

    def render(self):
        """ Returns the LLVM IR text of the module.
        """
        buf = io.StringIO()
        self.writer = StrWriter(buf)
        self.format_module()
        self.writer = None
        return buf.getvalue()

    def output(self, filename=None):
        """ filename: None==> stdout; name ==> write filename atomically;
        """
        text = self.render()
        with StrWriter(filename) as writer:
            writer.write(text)

        if filename:
            logger.debug('wrote %d bytes of IR to %s', len(text), filename)

    def format_module(self):

        self.writeln('; ModuleID = \'%s\'', self.module.name)
        self.writeln('source_filename = "%s"', self.format_str(self.module.source_filename))

        for decl in self.module.declarations.values():
            self.writeln('')
            self.format_function_decl(decl)

        for function in self.module.functions.values():
            self.writeln('')
            self.format_function(function)

    def format_function_decl(self, decl:FunctionDecl):
        self.writeln('declare %s @%s(%s)',
            self.format_type(decl.rettype),
            decl.name,
            ', '.join((self.format_type(s) for s in decl.argtypes))
        )

    def format_function(self, function:Function):

        self.curfunction = function
        self.number_registers(function)

        self.writeln('define %s @%s(%s) {',
            self.format_type(function.rettype),
            function.name,
            ', '.join((self.format_type(argtype) for argtype in function.argtypes))
        )

        for idx, block in enumerate(function.blocks):
            if idx > 0:
                self.writeln('')
            self.writeln('%s:', block.label)
            for code in block.codes:
                self.format_tac(code)

        self.writeln('}')
        self.curfunction = None

    def number_registers(self, function:Function):
        """ Unnamed values must be numbered in textual order; the translater
            may create them in a different order, so number them here.
        """
        self.regnames = {}
        for block in function.blocks:
            for code in block.codes:
                if code.ret is not None:
                    self.regnames[code.ret.addr] = len(self.regnames)

    def format_tac(self, tac:TAC):

        if tac.code == Code.RET:
            if tac.first is None or self.get_type(tac.first) == ValType.VOID:
                self.writeln('  ret void')
            else:
                self.writeln('  ret %s', self.format_var_with_type(tac.first))

        elif tac.code == Code.BR:
            if tac.cond is not None:
                self.writeln('  br %s, label %s, label %s',
                    self.format_var_with_type(tac.cond),
                    self.format_label(tac.first),
                    self.format_label(tac.second)
                )
            else:
                self.writeln('  br label %s', self.format_label(tac.first))

        elif tac.code == Code.ALLOC:
            self.writeln('  %s = alloca %s, align 1',
                self.format_id(tac.ret),
                self.format_type(tac.first)
            )

        elif tac.code == Code.LOAD:
            self.writeln('  %s = load %s, %s',
                self.format_id(tac.ret),
                self.format_type(self.get_type(tac.ret)),
                self.format_var_with_type(tac.first)
            )

        elif tac.code == Code.STORE:
            self.writeln('  store %s, %s',
                self.format_var_with_type(tac.first),
                self.format_var_with_type(tac.second)
            )

        elif tac.code == Code.GETPTR:
            self.writeln('  %s = getelementptr inbounds %s, %s, %s',
                self.format_id(tac.ret),
                self.format_type(self.get_type(tac.first).unref_type()),
                self.format_var_with_type(tac.first),
                ', '.join((self.format_var_with_type(v) for v in tac.second))
            )

        elif tac.code in LLConverter._BinCodeLoc:
            self.writeln('  %s = %s %s %s, %s',
                self.format_id(tac.ret),
                LLConverter._BinCodeLoc[tac.code],
                self.format_type(self.get_type(tac.ret)),
                self.format_var(tac.first),
                self.format_var(tac.second)
            )

        elif tac.code in LLConverter._CastCodeLoc:
            self.writeln('  %s = %s %s to %s',
                self.format_id(tac.ret),
                LLConverter._CastCodeLoc[tac.code],
                self.format_var_with_type(tac.first),
                self.format_type(tac.second)
            )

        elif tac.code in LLConverter._IcmpCodeLoc:
            self.writeln('  %s = icmp %s %s %s, %s',
                self.format_id(tac.ret),
                LLConverter._IcmpCodeLoc[tac.code],
                self.format_type(self.get_type(tac.first)),
                self.format_var(tac.first),
                self.format_var(tac.second)
            )

        elif tac.code == Code.PHI:
            self.writeln('  %s = phi %s %s',
                self.format_id(tac.ret),
                self.format_type(self.get_type(tac.ret)),
                ', '.join(('[ %s, %s ]' % (self.format_var(val), self.format_label(block))
                    for val, block in tac.first))
            )

        elif tac.code == Code.CALL:
            decl = tac.first
            args = ', '.join((self.format_var_with_type(v) for v in tac.second))

            if tac.ret is not None:
                self.writeln('  %s = call %s @%s(%s)',
                    self.format_id(tac.ret),
                    self.format_type(decl.rettype),
                    decl.name,
                    args
                )
            else:
                self.writeln('  call %s @%s(%s)',
                    self.format_type(decl.rettype),
                    decl.name,
                    args
                )

        else:
            raise RuntimeError('Unrecognized TAC: %r' % str(tac))

    def get_type(self, id_or_val):

        if isinstance(id_or_val, Value):
            return id_or_val.type

        elif isinstance(id_or_val, Identifier) and id_or_val.loc == MemoryLoc.LOCAL:
            return self.curfunction.registers[id_or_val.addr].type

        else:
            raise RuntimeError('Cannot recognize variable: %r' % str(id_or_val))

    def format_label(self, block:BasicBlock):
        return '%%%s' % block.label

    def format_id(self, id_:Identifier):

        if id_.loc == MemoryLoc.GLOBAL:
            return '@%s' % str(id_.addr)
        else:
            return '%%%d' % self.regnames[id_.addr]

    def format_var(self, id_or_val):
        if isinstance(id_or_val, Identifier):
            return self.format_id(id_or_val)

        elif isinstance(id_or_val, Value):
            if id_or_val.type == ValType.BOOL:
                return 'true' if id_or_val.val else 'false'
            return str(id_or_val.val)

        else:
            raise RuntimeError('Unrecognized variable: %r' % str(id_or_val))

    def format_var_with_type(self, id_or_val):
        """ id/var ==> 'type id/var'
        """
        return '%s %s' % (
            self.format_type(self.get_type(id_or_val)),
            self.format_var(id_or_val)
        )

    def format_type(self, tp):

        if isinstance(tp, Pointer):
            return 'ptr'

        elif isinstance(tp, Array):
            return '[%d x %s]' % (tp.size, self.format_type(tp.type))

        elif isinstance(tp, ValType):
            return LLConverter._TypeLoc[tp]

        else:
            raise RuntimeError('Unrecognized type: %r' % str(tp))

    def format_str(self, string:str):
        # quotes, backslashes and non-printables are written as \XX escapes
        return ''.join((c if ' ' <= c <= '~' and c not in '"\\' else
            ''.join(('\\%02X' % b for b in c.encode('utf-8'))) for c in string))

    def writeln(self, string:str, *args):
        self.writer.writeln(string % args if args else string)
