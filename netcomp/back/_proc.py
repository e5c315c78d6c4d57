from contextlib import contextmanager
import re

from ..hdl._nir import Wire, MalformedInstance, ReservedIdentifier
from ..hdl._prim import Primitive, MemoryParams
from ..hdl._sched import schedule


__all__ = ["Emitter", "ProcedureCompiler", "wire_name", "encode_outputs", "decode_outputs"]


_identifier = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
# Names the compiler generates for wires, register next values and memories.
_generated  = re.compile(r"[wm][0-9]+(_[A-Za-z0-9_]*)?")


class Emitter:
    def __init__(self, indent="  "):
        self._unit = indent
        self._indent = ""
        self._lines = []

    def __call__(self, line=None):
        if line is not None:
            self._lines.append(f"{self._indent}{line}\n")
        else:
            self._lines.append("\n")

    @contextmanager
    def indent(self):
        orig = self._indent
        self._indent += self._unit
        yield
        self._indent = orig

    def __str__(self):
        return "".join(self._lines)


def wire_name(wire):
    if wire.port == 0:
        return f"w{wire.instance}"
    return f"w{wire.instance}_{wire.port}"


def encode_outputs(names, *, scale=None):
    """Build an expression packing single-bit values into one integer.

    The first name has weight 1, the second weight 2, and so on; the first output is therefore
    the least significant bit of the result.
    """
    if scale is None:
        scale = lambda weight, name: f"{weight}*{name}"
    terms = []
    for index, name in enumerate(names):
        if index == 0:
            terms.append(name)
        else:
            terms.append(scale(1 << index, name))
    if not terms:
        return "0"
    return " + ".join(terms)


def decode_outputs(value, names):
    """Split an integer produced by :func:`encode_outputs` back into named bits."""
    return {name: (value >> index) & 1 for index, name in enumerate(names)}


class ProcedureCompiler:
    """Lowers a netlist to one procedure that simulates it one clock cycle per loop iteration.

    Each iteration evaluates every combinational instance in dependency order, returns the
    encoded outputs if the exit flag is set, computes the next value of every register and
    memory into separate cells, and only then commits all of them at once.

    Subclasses provide the syntax of a particular language.
    """

    #: Words that cannot be used as circuit or input names.
    reserved = frozenset()
    #: Indentation unit of the emitted code.
    indent = "  "

    _binary = {
        Primitive.AND2:  "&",
        Primitive.OR2:   "|",
        Primitive.XOR2:  "^",
        # Carry-chain XOR is simulated as plain XOR.
        Primitive.XORCY: "^",
    }

    def __init__(self, netlist, name, *, done="done"):
        self.netlist = netlist
        self.name = name
        self.done = done
        self.emitter = Emitter(self.indent)

    def check_identifier(self, name, *, instance_id=None):
        if not _identifier.fullmatch(name):
            if instance_id is None:
                raise ValueError(f"{name!r} is not a valid identifier")
            raise MalformedInstance(f"Input name {name!r} of instance {instance_id} is not "
                                    f"a valid identifier",
                                    instance_id=instance_id, name=name)
        if name in self.reserved:
            raise ReservedIdentifier(f"'{name}' is a reserved keyword",
                                     instance_id=instance_id, name=name)
        if _generated.fullmatch(name):
            raise ReservedIdentifier(f"'{name}' collides with a generated name",
                                     instance_id=instance_id, name=name)

    # Syntax hooks.

    def emit_comment(self, text):
        raise NotImplementedError # :nocov:

    def emit_header(self, inputs, outputs):
        raise NotImplementedError # :nocov:

    def emit_bind(self, dest, expr, comment=None):
        raise NotImplementedError # :nocov:

    def emit_bind_word(self, dest, expr):
        raise NotImplementedError # :nocov:

    def emit_assign(self, dest, expr):
        raise NotImplementedError # :nocov:

    def emit_cells(self, cells):
        raise NotImplementedError # :nocov:

    def emit_memory(self, name, params):
        raise NotImplementedError # :nocov:

    def emit_memory_write(self, memory, enable, addr, data):
        raise NotImplementedError # :nocov:

    def loop(self):
        raise NotImplementedError # :nocov:

    def emit_exit(self, cond, value):
        raise NotImplementedError # :nocov:

    def emit_footer(self):
        pass

    def op_input(self, name):
        return f"1 & {name}"

    def op_not(self, a):
        return f"1 ^ {a}"

    def op_eq(self, a, b):
        raise NotImplementedError # :nocov:

    def op_mux(self, sel, a, b):
        raise NotImplementedError # :nocov:

    def op_scale(self, weight, name):
        return f"{weight}*{name}"

    def op_word(self, bits):
        terms = []
        for index, bit in enumerate(bits):
            if index == 0:
                terms.append(bit)
            else:
                terms.append(f"({bit} << {index})")
        if not terms:
            return "0"
        return " | ".join(terms)

    def op_bit(self, word, index):
        if index == 0:
            return f"{word} & 1"
        return f"({word} >> {index}) & 1"

    # Primitive instantiators.

    def on_instance(self, instance, kind):
        dest = wire_name(Wire(instance.id))
        args = [wire_name(wire) for wire in instance.inputs]
        if kind is Primitive.LOW:
            self.emit_bind(dest, "0", "constant")
        elif kind is Primitive.HIGH:
            self.emit_bind(dest, "1", "constant")
        elif kind is Primitive.INV:
            self.emit_bind(dest, self.op_not(*args), "unary")
        elif kind in self._binary:
            self.emit_bind(dest, f"{args[0]} {self._binary[kind]} {args[1]}")
        elif kind is Primitive.EQ2:
            self.emit_bind(dest, self.op_eq(*args))
        elif kind is Primitive.MUXCY:
            ci, di, sel = args
            self.emit_bind(dest, self.op_mux(sel, ci, di), "muxcy")
        elif kind is Primitive.NAME:
            self.emit_bind(dest, self.op_input(instance.param("name")), "name")
        else:
            assert False, f"{kind} is not combinational"

    def on_register_next(self, instance, kind):
        current = wire_name(Wire(instance.id))
        if kind is Primitive.DELAY:
            _, data = instance.inputs
            expr = wire_name(data)
        elif kind is Primitive.DELAY_EN:
            _, enable, data = instance.inputs
            expr = self.op_mux(wire_name(enable), wire_name(data), current)
        else:
            assert False, f"{kind} is not a register"
        self.emit_bind(f"{current}_", expr)

    def on_register_commit(self, instance):
        current = wire_name(Wire(instance.id))
        self.emit_assign(current, f"{current}_")

    def on_memory_next(self, instance):
        params = MemoryParams.from_instance(instance)
        ports = params.ports(instance)
        memory = f"m{instance.id}"
        for index, port in enumerate(ports):
            self.emit_bind_word(f"{memory}_a{index}",
                                self.op_word([wire_name(wire) for wire in port.addr]))
            self.emit_bind_word(f"{memory}_d{index}",
                                self.op_word([wire_name(wire) for wire in port.data]))
        # All writes land before any read, so a port reads the data written in the same cycle.
        for index, port in enumerate(ports):
            self.emit_memory_write(memory, wire_name(port.we),
                                   f"{memory}_a{index}", f"{memory}_d{index}")
        for index, port in enumerate(ports):
            self.emit_bind_word(f"{memory}_q{index}", f"{memory}[{memory}_a{index}]")

    def on_memory_commit(self, instance):
        params = MemoryParams.from_instance(instance)
        memory = f"m{instance.id}"
        for index, port in enumerate(params.ports(instance)):
            for bit, wire in enumerate(port.q):
                self.emit_assign(wire_name(wire), self.op_bit(f"{memory}_q{index}", bit))

    def __call__(self):
        plan = schedule(self.netlist)
        done = self.netlist.output(self.done)

        self.check_identifier(self.name)
        inputs = []
        for instance in self.netlist:
            if plan.kinds[instance.id] is Primitive.NAME:
                name = instance.param("name")
                self.check_identifier(name, instance_id=instance.id)
                if name not in inputs:
                    inputs.append(name)
        outputs = [name for name, _ in self.netlist.outputs]

        self.emit_header(inputs, outputs)
        with self.emitter.indent():
            for instance in plan.registers:
                self.emit_cells([(wire_name(Wire(instance.id)), instance.param_int("init"))])
            for instance in plan.memories:
                self.emit_cells([(wire_name(wire), 0) for wire in instance.output_wires()])
                self.emit_memory(f"m{instance.id}", MemoryParams.from_instance(instance))

            with self.loop():
                self.emit_comment("Calculate the current value of wires, in dependency order")
                for instance in plan.combinational:
                    self.on_instance(instance, plan.kinds[instance.id])

                result = encode_outputs([wire_name(wire) for _, wire in self.netlist.outputs],
                                        scale=self.op_scale)
                self.emit_exit(wire_name(done), result)

                self.emit_comment("Calculate the next values of registers")
                for instance in plan.registers:
                    self.on_register_next(instance, plan.kinds[instance.id])
                for instance in plan.memories:
                    self.on_memory_next(instance)

                self.emit_comment("Update the registers")
                for instance in plan.registers:
                    self.on_register_commit(instance)
                for instance in plan.memories:
                    self.on_memory_commit(instance)
        self.emit_footer()
        return str(self.emitter)
