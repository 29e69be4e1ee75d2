from bfllc.lex import Lexer
from bfllc.grammar.commands import Command


def lex(source):
    lexer = Lexer()
    lexer.load(source)
    return lexer


def test_empty_input():
    assert lex('').tokens() == []


def test_unloaded_lexer_yields_nothing():
    assert list(Lexer()) == []


def test_all_commands():
    cmds = [t.cmd for t in lex('><+-.,[]')]
    assert cmds == [
        Command.INCPTR, Command.DECPTR, Command.INC, Command.DEC,
        Command.WRITE, Command.READ, Command.LOOPBEGIN, Command.LOOPEND,
    ]


def test_comments_are_dropped():
    tokens = lex('hello + world\n\t- [ comment ] !').tokens()
    assert ''.join(str(t.cmd) for t in tokens) == '+-[]'


def test_positions():
    tokens = lex('a+ b-').tokens()
    assert [t.pos for t in tokens] == [0, 1]
    assert [t.srcpos for t in tokens] == [1, 4]


def test_restartable():
    lexer = lex('+x[-]y.')
    first = lexer.tokens()
    second = list(lexer)
    assert first == second
    assert len(first) == 5


def test_lazy():
    it = iter(lex('+' * 10))
    assert next(it).pos == 0
    assert next(it).pos == 1


def test_load_file(tmp_path):
    path = tmp_path / 'prog.bf'
    path.write_bytes(b'+\xff\xfe.')
    lexer = Lexer()
    lexer.load_file(str(path))
    assert [t.cmd for t in lexer] == [Command.INC, Command.WRITE]
