import os
import sys
import logging
import subprocess

from .errors import ReadError, SynError, VMError
from .api import CompileOptions, compile_file
from .util.ioutil import StrWriter
from .vm.irvm import IRVM


logger = logging.getLogger('bfllc')


USAGE = '''Please use 'bfllc compile' / 'bfllc interpret' to start bfllc.
'''

COMPILE_USAGE = '''bfllc compile [-o OUT] [-emit-llvm] [-wrap] [-tape N] [-v] [ARGS...] FILE
-o names the executable, or the .ll file with -emit-llvm.
Additional arguments will be passed to clang.'''

INTERPRET_USAGE = '''bfllc interpret [-wrap] [-tape N] [-v] FILE'''


def parse_args(args):
    """ Split the command arguments into (filename, options, rest).
        Unknown dash arguments are kept in rest.
    """
    filename = None
    opts = {'output': None, 'emit_llvm': False, 'wrap': None, 'tape_size': None, 'verbose': False}
    rest = []

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == '-o' or arg == '-tape':
            if i + 1 >= len(args):
                raise ValueError('%s needs a value' % arg)
            if arg == '-o':
                opts['output'] = args[i + 1]
            else:
                opts['tape_size'] = int(args[i + 1])
            i += 2
            continue
        elif arg == '-emit-llvm':
            opts['emit_llvm'] = True
        elif arg == '-wrap':
            opts['wrap'] = True
        elif arg == '-v':
            opts['verbose'] = True
        elif not arg.startswith('-'):
            filename = arg
        else:
            rest.append(arg)
        i += 1

    return filename, opts, rest


def run_compile(filename, opts, clangargs):

    options = CompileOptions(tape_size=opts['tape_size'], wrap=opts['wrap'])
    result = compile_file(filename, options=options)

    # -o names the .ll only when clang is not run; otherwise it is clang's output
    irfilename = os.path.splitext(filename)[0] + '.ll'
    if opts['output'] and opts['emit_llvm']:
        irfilename = opts['output']
    elif opts['output']:
        clangargs = clangargs + ['-o', opts['output']]

    with StrWriter(irfilename) as writer:
        writer.write(result.ir)
    logger.debug('wrote %d bytes of IR to %s', len(result.ir), irfilename)

    if opts['emit_llvm']:
        return 0

    logger.debug('running clang %s %s', ' '.join(clangargs), irfilename)
    try:
        proc = subprocess.run(['clang'] + clangargs + [irfilename])
    except FileNotFoundError:
        print('Error: clang not found; use -emit-llvm to keep the IR only', file=sys.stderr)
        return 1
    finally:
        os.remove(irfilename)

    return proc.returncode


def run_interpret(filename, opts):

    options = CompileOptions(tape_size=opts['tape_size'], wrap=opts['wrap'])
    result = compile_file(filename, options=options)
    return IRVM(result.module).run() & 0xff


def main(argv=None):

    argv = sys.argv[1:] if argv is None else list(argv)

    if len(argv) == 0 or argv[0] == '-h':
        print(USAGE)
        return 0

    command, args = argv[0], argv[1:]

    if command not in ('compile', 'interpret'):
        print('Error: Unknown command %s' % command, file=sys.stderr)
        return 1

    if '-h' in args:
        print(COMPILE_USAGE if command == 'compile' else INTERPRET_USAGE)
        return 0

    try:
        filename, opts, rest = parse_args(args)
    except ValueError as e:
        print('Error: %s' % e, file=sys.stderr)
        return 1

    if opts['verbose']:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    if not filename:
        print('Error: No input files', file=sys.stderr)
        return 1

    try:
        if command == 'compile':
            return run_compile(filename, opts, rest)
        else:
            if rest:
                print('Error: Unknown arguments %s' % ' '.join(rest), file=sys.stderr)
                return 1
            return run_interpret(filename, opts)

    except (ReadError, SynError, VMError, ValueError, OSError) as e:
        print('Error: %s' % e, file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
