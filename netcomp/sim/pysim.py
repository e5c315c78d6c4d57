from contextlib import contextmanager
import keyword
import os
import tempfile

from ..back._proc import ProcedureCompiler, decode_outputs


__all__ = ["convert", "compile_netlist", "simulate"]


class _PythonCompiler(ProcedureCompiler):
    reserved = frozenset(keyword.kwlist) | frozenset(keyword.softkwlist) | {"int"}
    indent = "    "

    def emit_comment(self, text):
        self.emitter(f"# {text}")

    def emit_header(self, inputs, outputs):
        self.emitter(f"def {self.name}({', '.join(inputs)}):")
        with self.emitter.indent():
            self.emitter(f"# Inputs : {', '.join(inputs)}")
            self.emitter(f"# Outputs: {', '.join(outputs)}")

    def emit_cells(self, cells):
        for name, value in cells:
            self.emitter(f"{name} = {value}")

    def emit_memory(self, name, params):
        init = ", ".join(f"{value:#x}" for value in params.init)
        padding = params.depth - len(params.init)
        if not params.init:
            self.emitter(f"{name} = [0] * {padding}")
        elif padding:
            self.emitter(f"{name} = [{init}] + [0] * {padding}")
        else:
            self.emitter(f"{name} = [{init}]")

    def emit_bind(self, dest, expr, comment=None):
        if comment is None:
            self.emitter(f"{dest} = {expr}")
        else:
            self.emitter(f"{dest} = {expr} # {comment}")

    def emit_bind_word(self, dest, expr):
        self.emitter(f"{dest} = {expr}")

    def emit_assign(self, dest, expr):
        self.emitter(f"{dest} = {expr}")

    def emit_memory_write(self, memory, enable, addr, data):
        self.emitter(f"if {enable}:")
        with self.emitter.indent():
            self.emitter(f"{memory}[{addr}] = {data}")

    @contextmanager
    def loop(self):
        self.emitter("while True:")
        with self.emitter.indent():
            yield

    def emit_exit(self, cond, value):
        self.emitter(f"if {cond}:")
        with self.emitter.indent():
            self.emitter(f"return {value}")

    def op_eq(self, a, b):
        return f"int({a} == {b})"

    def op_mux(self, sel, a, b):
        return f"{a} if {sel} else {b}"


def convert(netlist, name="top", *, done="done"):
    """Convert ``netlist`` to the source code of a Python function named ``name``.

    The generated function has the same structure and semantics as the one produced by
    :func:`netcomp.back.c.convert`.
    """
    return _PythonCompiler(netlist, name, done=done)()


def compile_netlist(netlist, name="top", *, done="done"):
    """Compile ``netlist`` into a Python function.

    The function takes the external inputs as arguments (``0`` or ``1``) and returns the named
    outputs packed into an integer once the ``done`` output is set.
    """
    code = convert(netlist, name, done=done)
    # There shouldn't be any exceptions raised by the generated code, but if there are
    # (almost certainly due to a bug in the code generator), use this environment variable
    # to make backtraces useful.
    if os.getenv("NETCOMP_pysim_dump"):
        file = tempfile.NamedTemporaryFile("w", prefix="netcomp_pysim_", suffix=".py",
                                           delete=False)
        with file:
            file.write(code)
        filename = file.name
    else:
        filename = "<string>"

    exec_locals = {}
    exec(compile(code, filename, "exec"), exec_locals)
    return exec_locals[name]


def simulate(netlist, inputs=None, *, done="done"):
    """Run ``netlist`` until its ``done`` output is set and return the named output values.

    ``inputs`` maps each external input name to ``0`` or ``1``. It is a mapping rather than
    keyword arguments because an input may be named ``done`` or ``netlist``.

    Returns a dict from output name to ``0`` or ``1``, in output table order.
    """
    function = compile_netlist(netlist, "top", done=done)
    names = [name for name, _ in netlist.outputs]
    return decode_outputs(function(**(inputs or {})), names)
