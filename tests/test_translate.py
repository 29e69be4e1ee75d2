import pytest

from bfllc.parse import Parser
from bfllc.program import Instruction, Program
from bfllc.translate import Translater
from bfllc.grammar.commands import Command
from bfllc.ir.code import Code
from bfllc.ir.types import ValType, Array
from bfllc.errors import CompileError


def translate(source, **kwargs):
    return Translater(**kwargs).translate(Parser().parse(source))


def codes(block):
    return [tac.code for tac in block.codes]


def test_empty_program():
    module = translate('')
    main = module.functions['main']
    assert [b.label for b in main.blocks] == ['entry']
    assert codes(main.blocks[0]) == [Code.ALLOC, Code.CALL, Code.RET]
    assert main.blocks[0].codes[0].first == Array(ValType.CHAR, Translater.TAPE_SIZE)
    assert main.blocks[0].codes[-1].first.val == 0


def test_declarations():
    module = translate('')
    assert list(module.declarations) == ['getchar', 'putchar', 'llvm.memset.p0.i64']
    assert module.declarations['getchar'].rettype == ValType.INT
    assert module.declarations['putchar'].argtypes == (ValType.INT,)


def test_cell_arithmetic():
    main = translate('+-').functions['main']
    entry = main.blocks[0]
    assert codes(entry)[2:] == [
        Code.GETPTR, Code.LOAD, Code.ADD, Code.STORE,
        Code.GETPTR, Code.LOAD, Code.SUB, Code.STORE,
        Code.RET,
    ]
    add = entry.codes[4]
    assert main.registers[add.ret.addr].type == ValType.CHAR


def test_pointer_moves_thread_values():
    main = translate('>><').functions['main']
    moves = [tac for tac in main.blocks[0].codes if tac.code in (Code.ADD, Code.SUB)]
    assert [tac.code for tac in moves] == [Code.ADD, Code.ADD, Code.SUB]
    assert moves[0].first.val == 0
    assert moves[1].first == moves[0].ret
    assert moves[2].first == moves[1].ret


def test_pointer_wrap():
    main = translate('<', wrap=True, tape_size=16).functions['main']
    entry = main.blocks[0]
    assert codes(entry)[2:] == [Code.ADD, Code.UREM, Code.RET]
    assert entry.codes[2].second.val == 15
    assert entry.codes[3].second.val == 16


def test_io_calls():
    main = translate(',.').functions['main']
    entry = main.blocks[0]
    assert codes(entry)[2:] == [
        Code.CALL, Code.TRUNC, Code.GETPTR, Code.STORE,
        Code.GETPTR, Code.LOAD, Code.ZEXT, Code.CALL,
        Code.RET,
    ]
    assert entry.codes[2].first.name == 'getchar'
    assert entry.codes[9].first.name == 'putchar'
    assert entry.codes[9].second == [entry.codes[8].ret]


def test_loop_blocks():
    main = translate('[-]').functions['main']
    assert [b.label for b in main.blocks] == ['entry', 'loop1.cond', 'loop1.body', 'loop1.end']

    entry, cond, body, end = main.blocks
    assert entry.codes[-1].code == Code.BR and entry.codes[-1].first is cond
    assert codes(cond) == [Code.PHI, Code.GETPTR, Code.LOAD, Code.NE, Code.BR]
    assert cond.codes[-1].first is body
    assert cond.codes[-1].second is end
    assert body.codes[-1].first is cond
    assert codes(end) == [Code.RET]


def test_loop_phi_merges_entry_and_back_edge():
    main = translate('>[>]').functions['main']
    entry, cond, body, end = main.blocks
    phi = cond.codes[0]
    (inval, inblock), (backval, backblock) = phi.first
    assert inblock is entry
    assert inval == entry.codes[2].ret
    assert backblock is body
    assert backval == body.codes[0].ret
    assert body.codes[0].first == phi.ret


def test_nested_loops():
    main = translate('++[>++[>++<-]<-]').functions['main']
    assert [b.label for b in main.blocks] == [
        'entry',
        'loop1.cond', 'loop1.body',
        'loop2.cond', 'loop2.body', 'loop2.end',
        'loop1.end',
    ]
    blocks = {b.label: b for b in main.blocks}

    phis = [tac for b in main.blocks for tac in b.codes if tac.code == Code.PHI]
    assert len(phis) == 2
    assert all(len(phi.first) == 2 for phi in phis)

    inner = blocks['loop2.cond'].codes[0]
    assert inner.first[0][1] is blocks['loop1.body']
    assert inner.first[1][1] is blocks['loop2.body']

    outer = blocks['loop1.cond'].codes[0]
    assert outer.first[0][1] is blocks['entry']
    assert outer.first[1][1] is blocks['loop2.end']


def test_every_block_has_one_terminator():
    main = translate('+[>[-]<[->+<]]>[.,]').functions['main']
    for block in main.blocks:
        terminators = [tac for tac in block.codes if tac.code.is_terminator()]
        assert len(terminators) == 1
        assert block.codes[-1] is terminators[0]


def test_registers_defined_once():
    main = translate('++[>++[>++<-]<-]>>.').functions['main']
    defined = [tac.ret.addr for b in main.blocks for tac in b.codes if tac.ret is not None]
    assert len(defined) == len(set(defined))
    assert sorted(defined) == list(range(len(main.registers)))


def test_deep_nesting():
    depth = 5000
    main = translate('[' * depth + ']' * depth).functions['main']
    assert len(main.blocks) == 1 + 3 * depth


def test_translater_is_reusable():
    translater = Translater()
    program = Parser().parse('[-]')
    first = translater.translate(program)
    second = translater.translate(program)
    assert first is not second
    assert [b.label for b in second.functions['main'].blocks] == ['entry', 'loop1.cond', 'loop1.body', 'loop1.end']


def test_malformed_program():
    program = Program([Instruction(Command.LOOPBEGIN, 7), Instruction(Command.LOOPEND, 0)])
    with pytest.raises(CompileError):
        Translater().translate(program)


def test_invalid_tape_size():
    with pytest.raises(ValueError):
        Translater(tape_size=0)


def test_subclass_overrides_defaults():

    class SmallWrappingTranslater(Translater):
        TAPE_SIZE = 8
        POINTER_WRAP = True
        MODULE_NAME = 'small'

    translater = SmallWrappingTranslater()
    assert translater.tape_size == 8
    assert translater.wrap is True

    module = translater.translate(Parser().parse('<'))
    assert module.name == 'small'
    entry = module.functions['main'].blocks[0]
    assert entry.codes[0].first == Array(ValType.CHAR, 8)
    assert codes(entry)[2:] == [Code.ADD, Code.UREM, Code.RET]
    assert entry.codes[2].second.val == 7


def test_arguments_override_subclass_defaults():

    class SmallTranslater(Translater):
        TAPE_SIZE = 8

    translater = SmallTranslater(tape_size=32, wrap=False)
    assert translater.tape_size == 32
    assert translater.wrap is False
