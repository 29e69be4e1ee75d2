import re

from bfllc.api import CompileOptions, compile_string
from bfllc.parse import Parser
from bfllc.translate import Translater
from bfllc.vm.llconv import LLConverter


EMPTY_IR = '''; ModuleID = 'bfllc'
source_filename = "bfllc"

declare i32 @getchar()

declare i32 @putchar(i32)

declare void @llvm.memset.p0.i64(ptr, i8, i64, i1)

define i32 @main() {
entry:
  %0 = alloca [30000 x i8], align 1
  call void @llvm.memset.p0.i64(ptr %0, i8 0, i64 30000, i1 false)
  ret i32 0
}
'''


def render(source, **kwargs):
    return compile_string(source, options=CompileOptions(**kwargs)).ir


def test_empty_program():
    assert render('') == EMPTY_IR


def test_source_filename():
    ir = compile_string('', source_filename='hello.bf').ir
    assert 'source_filename = "hello.bf"' in ir


def test_increment():
    ir = render('+')
    assert '''entry:
  %0 = alloca [30000 x i8], align 1
  call void @llvm.memset.p0.i64(ptr %0, i8 0, i64 30000, i1 false)
  %1 = getelementptr inbounds [30000 x i8], ptr %0, i64 0, i64 0
  %2 = load i8, ptr %1
  %3 = add i8 %2, 1
  store i8 %3, ptr %1
  ret i32 0
''' in ir


def test_io():
    ir = render(',.')
    assert '%1 = call i32 @getchar()' in ir
    assert '%2 = trunc i32 %1 to i8' in ir
    assert '%6 = zext i8 %5 to i32' in ir
    assert '%7 = call i32 @putchar(i32 %6)' in ir


def test_pointer_moves():
    ir = render('><')
    assert '%1 = add i64 0, 1' in ir
    assert '%2 = sub i64 %1, 1' in ir


def test_pointer_wrap():
    ir = render('<', wrap=True, tape_size=8)
    assert '%0 = alloca [8 x i8], align 1' in ir
    assert '%1 = add i64 0, 7' in ir
    assert '%2 = urem i64 %1, 8' in ir


def test_loop():
    ir = render('[-]')
    assert '''  br label %loop1.cond

loop1.cond:
  %1 = phi i64 [ 0, %entry ], [ %1, %loop1.body ]
  %2 = getelementptr inbounds [30000 x i8], ptr %0, i64 0, i64 %1
  %3 = load i8, ptr %2
  %4 = icmp ne i8 %3, 0
  br i1 %4, label %loop1.body, label %loop1.end

loop1.body:
''' in ir
    assert '''  br label %loop1.cond

loop1.end:
  ret i32 0
}
''' in ir


def test_nested_loops():
    ir = render('++[>++[>++<-]<-]')
    labels = re.findall(r'^(\S+):$', ir, re.MULTILINE)
    assert labels == [
        'entry',
        'loop1.cond', 'loop1.body',
        'loop2.cond', 'loop2.body', 'loop2.end',
        'loop1.end',
    ]
    phis = re.findall(r'= phi i64 \[ (\S+), %(\S+) \], \[ (\S+), %(\S+) \]', ir)
    assert [(p[1], p[3]) for p in phis] == [('entry', 'loop2.end'), ('loop1.body', 'loop2.body')]


def test_values_numbered_in_textual_order():
    ir = render('+[>[-]<[->+<]]>>.,')
    defined = [int(n) for n in re.findall(r'^  %(\d+) = ', ir, re.MULTILINE)]
    assert defined == list(range(len(defined)))


def test_deterministic():
    source = '++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.'
    first = render(source)
    second = LLConverter(Translater().translate(Parser().parse(source))).render()
    assert first == second


def test_output_to_file(tmp_path):
    path = tmp_path / 'out.ll'
    module = Translater().translate(Parser().parse(''))
    LLConverter(module).output(str(path))
    assert path.read_text() == EMPTY_IR
    assert [p.name for p in tmp_path.iterdir()] == ['out.ll']


def test_output_to_stdout(capsys):
    module = Translater().translate(Parser().parse(''))
    LLConverter(module).output()
    assert capsys.readouterr().out == EMPTY_IR


def test_source_filename_escaped():
    ir = compile_string('', source_filename='my "prog".bf').ir
    assert 'source_filename = "my \\22prog\\22.bf"' in ir
