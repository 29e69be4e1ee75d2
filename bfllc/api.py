""" Compile Brainfuck source into an IR module and its LLVM text.
"""

import os
from collections import namedtuple

from .parse import Parser
from .program import Program
from .translate import Translater
from .vm.llconv import LLConverter


class CompileOptions(namedtuple('CompileOptions', ['tape_size', 'wrap'])):
    """ None ==> keep the Translater default.
    """

    def __new__(cls, tape_size=None, wrap=None):
        return super().__new__(cls, tape_size, wrap)


CompileResult = namedtuple('CompileResult', ['program', 'module', 'ir'])


def compile_program(program:Program, options=None, source_filename=None):

    options = options or CompileOptions()
    translater = Translater(tape_size=options.tape_size, wrap=options.wrap)
    module = translater.translate(program, source_filename=source_filename)
    return CompileResult(program, module, LLConverter(module).render())


def compile_string(source:str, options=None, source_filename=None):
    return compile_program(Parser().parse(source), options, source_filename)


def compile_file(filename, options=None):
    """ The module's source_filename is the base name of filename.
    """
    program = Parser().parse_file(filename)
    return compile_program(program, options, os.path.basename(os.fspath(filename)))
