from contextlib import contextmanager

from ._proc import ProcedureCompiler


__all__ = ["convert"]


_c_keywords = frozenset({
    "auto", "break", "case", "char", "const", "continue", "default", "do", "double", "else",
    "enum", "extern", "float", "for", "goto", "if", "inline", "int", "long", "register",
    "restrict", "return", "short", "signed", "sizeof", "static", "struct", "switch", "typedef",
    "union", "unsigned", "void", "volatile", "while", "_Alignas", "_Alignof", "_Atomic",
    "_Bool", "_Complex", "_Generic", "_Imaginary", "_Noreturn", "_Static_assert",
    "_Thread_local",
    # Names used by the generated code itself.
    "bit", "main",
})


class _CCompiler(ProcedureCompiler):
    reserved = _c_keywords
    indent = "  "

    def emit_comment(self, text):
        self.emitter(f"// {text}")

    def emit_header(self, inputs, outputs):
        if len(outputs) > 64:
            raise ValueError(f"The C back-end can encode at most 64 outputs, not {len(outputs)}")
        self.result_type = "unsigned" if len(outputs) <= 32 else "unsigned long long"
        params = ", ".join(f"bit {name}" for name in inputs) or "void"
        # Constants and inputs may have no readers; keep GCC and Clang quiet about them.
        self.emitter("#if defined(__GNUC__)")
        self.emitter("typedef int bit __attribute__((unused));")
        self.emitter("#else")
        self.emitter("typedef int bit;")
        self.emitter("#endif")
        self.emitter("/* C simulation function, generated by netcomp */")
        self.emitter(f"{self.result_type} {self.name}({params}) {{")
        with self.emitter.indent():
            self.emitter(f"/* Inputs : {', '.join(inputs)} */")
            self.emitter(f"/* Outputs: {', '.join(outputs)} */")

    def emit_footer(self):
        self.emitter("}")

    def emit_cells(self, cells):
        self.emitter("bit " + ", ".join(f"{name} = {value}" for name, value in cells) + ";")

    def emit_memory(self, name, params):
        init = ", ".join(f"{value:#x}" for value in params.init) or "0"
        self.emitter(f"unsigned long long {name}[{params.depth}] = {{{init}}};")

    def emit_bind(self, dest, expr, comment=None):
        if comment is None:
            self.emitter(f"bit {dest} = {expr};")
        else:
            self.emitter(f"bit {dest} = {expr}; // {comment}")

    def emit_bind_word(self, dest, expr):
        self.emitter(f"unsigned long long {dest} = {expr};")

    def emit_assign(self, dest, expr):
        self.emitter(f"{dest} = {expr};")

    def emit_memory_write(self, memory, enable, addr, data):
        self.emitter(f"if ({enable}) {memory}[{addr}] = {data};")

    @contextmanager
    def loop(self):
        self.emitter("for (;;) {")
        with self.emitter.indent():
            yield
        self.emitter("}")

    def emit_exit(self, cond, value):
        self.emitter(f"if ({cond})")
        with self.emitter.indent():
            self.emitter(f"return {value};")

    def op_eq(self, a, b):
        return f"{a} == {b}"

    def op_mux(self, sel, a, b):
        return f"{sel} ? {a} : {b}"

    def op_scale(self, weight, name):
        if weight >= 1 << 31:
            return f"{weight}ULL*{name}"
        return f"{weight}*{name}"

    def op_word(self, bits):
        # `bit` is an `int`; widen before shifting past its width.
        return super().op_word([f"(unsigned long long){bit}" if index >= 31 else bit
                                for index, bit in enumerate(bits)])


def convert(netlist, name="top", *, done="done"):
    """Convert ``netlist`` to a C function named ``name``.

    The function takes one ``bit`` argument per external input, runs the circuit one clock
    cycle per loop iteration until the output named ``done`` is set, and returns all named
    outputs packed into an unsigned integer, the first output being the least significant bit.
    """
    return _CCompiler(netlist, name, done=done)()
