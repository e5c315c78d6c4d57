from collections.abc import Iterable, Mapping
import re


__all__ = [
    # Errors
    "CompileError", "CyclicNetlist", "UnknownPrimitive", "MalformedInstance",
    "MissingParameter", "ReservedIdentifier", "MissingOutput",
    # Netlist core
    "Wire", "Instance", "Netlist",
]


class CompileError(Exception):
    """Base class for all errors detected while compiling a netlist.

    Attributes
    ----------

    instance_id : int or None
        Id of the offending instance, if the error concerns a single instance.
    name : str or None
        The offending identifier or output name, if the error concerns a name.
    """
    def __init__(self, message, *, instance_id=None, name=None):
        super().__init__(message)
        self.instance_id = instance_id
        self.name = name


class CyclicNetlist(CompileError):
    """Raised when a dependency cycle does not pass through any register or memory.

    ``cycle`` lists the ids of the instances on the cycle, each one consuming the output of the
    one before it.
    """
    def __init__(self, cycle):
        path = " -> ".join(str(instance_id) for instance_id in cycle)
        super().__init__(f"Combinational cycle detected through instances {path}",
                         instance_id=cycle[0])
        self.cycle = tuple(cycle)


class UnknownPrimitive(CompileError):
    pass


class MalformedInstance(CompileError):
    pass


class MissingParameter(CompileError):
    pass


class ReservedIdentifier(CompileError):
    pass


class MissingOutput(CompileError):
    pass


class Wire(tuple):
    """A single bit, identified by the instance that drives it and the output port index."""
    __slots__ = ()

    def __new__(cls, instance: int, port: int = 0):
        if not isinstance(instance, int) or instance < 0:
            raise TypeError(f"Instance id must be a non-negative integer, not {instance!r}")
        if not isinstance(port, int) or port < 0:
            raise TypeError(f"Port index must be a non-negative integer, not {port!r}")
        return super().__new__(cls, (instance, port))

    @classmethod
    def cast(cls, value):
        if isinstance(value, cls):
            return value
        instance, port = value
        return cls(instance, port)

    @property
    def instance(self):
        return self[0]

    @property
    def port(self):
        return self[1]

    def __repr__(self):
        return f"{self.instance}.{self.port}"

    __str__ = __repr__


class Instance:
    """One occurrence of a primitive.

    ``kind`` is the primitive name exactly as produced by the front-end; it is only resolved
    against the primitive set when the netlist is compiled.

    Attributes
    ----------

    id: int
    kind: str
    params: tuple of (str, str)
    inputs: tuple of ``Wire``
    num_outputs: int
    """
    def __init__(self, id, kind, params=(), inputs=(), num_outputs=1):
        if not isinstance(id, int) or id < 0:
            raise TypeError(f"Instance id must be a non-negative integer, not {id!r}")
        if not isinstance(kind, str):
            raise TypeError(f"Instance kind must be a string, not {kind!r}")
        if not isinstance(num_outputs, int) or num_outputs < 0:
            raise TypeError(f"Output count must be a non-negative integer, not {num_outputs!r}")
        if isinstance(params, Mapping):
            params = params.items()
        self.id = id
        self.kind = kind
        self.params = tuple((str(key), str(value)) for key, value in params)
        self.inputs = tuple(Wire.cast(wire) for wire in inputs)
        self.num_outputs = num_outputs

    def has_param(self, key):
        return any(name == key for name, _ in self.params)

    def param(self, key):
        for name, value in self.params:
            if name == key:
                return value
        raise MissingParameter(f"Instance {self.id} ({self.kind}) has no parameter {key!r}",
                               instance_id=self.id, name=key)

    def param_int(self, key):
        value = self.param(key)
        try:
            return int(value.strip())
        except ValueError:
            raise MalformedInstance(f"Parameter {key!r} of instance {self.id} ({self.kind}) "
                                    f"must be an integer, not {value!r}",
                                    instance_id=self.id, name=key) from None

    def param_ints(self, key):
        value = self.param(key)
        text = value.strip()
        if not (text.startswith("[") and text.endswith("]")):
            raise MalformedInstance(f"Parameter {key!r} of instance {self.id} ({self.kind}) "
                                    f"must be a list of integers, not {value!r}",
                                    instance_id=self.id, name=key)
        text = text[1:-1].strip()
        if not text:
            return []
        try:
            return [int(item) for item in text.split(",")]
        except ValueError:
            raise MalformedInstance(f"Parameter {key!r} of instance {self.id} ({self.kind}) "
                                    f"must be a list of integers, not {value!r}",
                                    instance_id=self.id, name=key) from None

    def output_wires(self):
        return tuple(Wire(self.id, port) for port in range(self.num_outputs))

    def __repr__(self):
        params = "".join(f" (param {key} {value!r})" for key, value in self.params)
        inputs = " ".join(str(wire) for wire in self.inputs)
        return f"({self.kind} {self.id} {self.num_outputs} ({inputs}){params})"


class Netlist:
    """A flat netlist: instances keyed by id and an ordered table of named outputs.

    The netlist is built once by a front-end, then handed to the compiler which only reads it.
    Register feedback needs wires that refer to instances not added yet; reserve their ids
    with :meth:`alloc_id` first and pass the id to :meth:`add_instance` later.

    Attributes
    ----------

    instances : dict of int to ``Instance``
    outputs : list of (str, ``Wire``)
    """
    def __init__(self):
        self.instances = {}
        self.outputs = []
        self._next_id = 0
        self._reserved = set()

    def alloc_id(self):
        while self._next_id in self.instances or self._next_id in self._reserved:
            self._next_id += 1
        instance_id = self._next_id
        self._reserved.add(instance_id)
        return instance_id

    def add_instance(self, kind, *, params=(), inputs=(), num_outputs=1, id=None):
        if id is None:
            id = self.alloc_id()
        if id in self.instances:
            raise MalformedInstance(f"Instance id {id} is used more than once", instance_id=id)
        self._reserved.discard(id)
        self.instances[id] = instance = Instance(id, kind, params, inputs, num_outputs)
        return instance

    def add(self, kind, *inputs, params=(), num_outputs=1, id=None):
        """Add an instance and return its output wire, or a tuple of wires if it has more than
        one output."""
        instance = self.add_instance(kind, params=params, inputs=inputs,
                                     num_outputs=num_outputs, id=id)
        wires = instance.output_wires()
        if num_outputs == 1:
            return wires[0]
        return wires

    def add_output(self, name, wire):
        if not isinstance(name, str) or not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
            raise ValueError(f"Output name must be an identifier, not {name!r}")
        if any(name == existing for existing, _ in self.outputs):
            raise ValueError(f"Output {name!r} is already defined")
        self.outputs.append((name, Wire.cast(wire)))

    def output(self, name):
        for existing, wire in self.outputs:
            if existing == name:
                return wire
        raise MissingOutput(f"Netlist has no output named {name!r}", name=name)

    def instance(self, instance_id):
        return self.instances[instance_id]

    def __iter__(self):
        for instance_id in sorted(self.instances):
            yield self.instances[instance_id]

    def __len__(self):
        return len(self.instances)

    @property
    def inputs(self):
        """Names of the external inputs, in order of first appearance."""
        names = []
        for instance in self:
            if instance.kind == "name" and instance.has_param("name"):
                name = instance.param("name")
                if name not in names:
                    names.append(name)
        return names

    def _check_wire(self, wire, what, *, instance_id=None, name=None):
        driver = self.instances.get(wire.instance)
        if driver is None:
            raise MalformedInstance(f"{what} refers to instance {wire.instance}, which does not "
                                    f"exist", instance_id=instance_id, name=name)
        if wire.port >= driver.num_outputs:
            raise MalformedInstance(f"{what} refers to output {wire.port} of instance "
                                    f"{driver.id} ({driver.kind}), which has only "
                                    f"{driver.num_outputs} outputs",
                                    instance_id=instance_id, name=name)

    def check(self):
        """Verify that every wire refers to an existing instance output."""
        for instance in self:
            for index, wire in enumerate(instance.inputs):
                self._check_wire(wire, f"Input {index} of instance {instance.id} "
                                       f"({instance.kind})",
                                 instance_id=instance.id)
        for name, wire in self.outputs:
            self._check_wire(wire, f"Output {name!r}", name=name)

    def __repr__(self):
        result = ["("]
        for instance in self:
            result.append(f"(instance {instance!r})")
        for name, wire in self.outputs:
            result.append(f"(output {name!r} {wire})")
        result.append(")")
        return "\n".join(result)
