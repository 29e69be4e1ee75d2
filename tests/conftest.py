import pytest

from bfllc.api import CompileOptions, compile_string

from harness import execute


@pytest.fixture
def run_bf():
    def run(source, stdin=b'', **kwargs):
        result = compile_string(source, options=CompileOptions(**kwargs))
        return execute(result.module, stdin)[1]
    return run
