import enum

from ._nir import UnknownPrimitive, MalformedInstance, Wire


__all__ = ["Primitive", "MemoryParams", "MemoryPort", "check_instance"]


class Primitive(enum.Enum):
    """The closed set of primitives a netlist may contain.

    The simulation semantics of every primitive is written out by hand in the back-ends; there
    is no way to register additional kinds.
    """
    LOW      = "low"
    HIGH     = "high"
    INV      = "inv"
    AND2     = "and2"
    OR2      = "or2"
    XOR2     = "xor2"
    EQ2      = "eq2"
    XORCY    = "xorcy"
    MUXCY    = "muxcy"
    NAME     = "name"
    DELAY    = "delay"
    DELAY_EN = "delayEn"
    RAM      = "ram"
    DUAL_RAM = "dualRam"

    @classmethod
    def cast(cls, kind, *, instance_id=None):
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            if instance_id is None:
                message = f"Unknown primitive {kind!r}"
            else:
                message = f"Instance {instance_id} has unknown primitive {kind!r}"
            raise UnknownPrimitive(message, instance_id=instance_id, name=kind) from None

    @property
    def is_register(self):
        return self in (Primitive.DELAY, Primitive.DELAY_EN)

    @property
    def is_memory(self):
        return self in (Primitive.RAM, Primitive.DUAL_RAM)

    @property
    def is_sequential(self):
        """Whether the outputs of this primitive hold state from the previous cycle."""
        return self.is_register or self.is_memory

    @property
    def arity(self):
        """Number of inputs, or ``None`` if it depends on parameters."""
        return _ARITY[self]


_ARITY = {
    Primitive.LOW:      0,
    Primitive.HIGH:     0,
    Primitive.INV:      1,
    Primitive.AND2:     2,
    Primitive.OR2:      2,
    Primitive.XOR2:     2,
    Primitive.EQ2:      2,
    Primitive.XORCY:    2,
    Primitive.MUXCY:    3,
    Primitive.NAME:     0,
    Primitive.DELAY:    2,
    Primitive.DELAY_EN: 3,
    Primitive.RAM:      None,
    Primitive.DUAL_RAM: None,
}


class MemoryPort:
    """One read/write port of a memory, split out of the flat input list.

    Attributes
    ----------

    we: Wire
    data: tuple of Wire, least significant bit first
    addr: tuple of Wire, least significant bit first
    q: tuple of Wire, outputs of the memory driven by this port
    """
    def __init__(self, *, we, data, addr, q):
        self.we = we
        self.data = tuple(data)
        self.addr = tuple(addr)
        self.q = tuple(q)

    def __repr__(self):
        data = " ".join(map(str, self.data))
        addr = " ".join(map(str, self.addr))
        q = " ".join(map(str, self.q))
        return f"(port {self.we} (data {data}) (addr {addr}) (q {q}))"


class MemoryParams:
    """Shape of a ``ram`` or ``dualRam`` instance.

    Attributes
    ----------

    dwidth: int
    awidth: int
    init: tuple of int
    num_ports: int
    """
    def __init__(self, *, dwidth, awidth, init=(), num_ports=1):
        self.dwidth = dwidth
        self.awidth = awidth
        self.init = tuple(init)
        self.num_ports = num_ports

    @property
    def depth(self):
        return 1 << self.awidth

    @property
    def num_inputs(self):
        return self.num_ports * (1 + self.dwidth + self.awidth)

    @property
    def num_outputs(self):
        return self.num_ports * self.dwidth

    def contents(self):
        """Initial value of every location, padded with zeroes up to the depth."""
        return self.init + (0,) * (self.depth - len(self.init))

    @classmethod
    def from_instance(cls, instance):
        kind = Primitive.cast(instance.kind, instance_id=instance.id)
        if not kind.is_memory:
            raise TypeError(f"Instance {instance.id} is a {kind.value}, not a memory")
        dwidth = instance.param_int("dwidth")
        awidth = instance.param_int("awidth")
        if instance.has_param("init"):
            init = instance.param_ints("init")
        else:
            init = []
        if dwidth <= 0:
            raise MalformedInstance(f"Memory instance {instance.id} has data width {dwidth}; "
                                    f"it must be positive",
                                    instance_id=instance.id, name="dwidth")
        if awidth < 0:
            raise MalformedInstance(f"Memory instance {instance.id} has address width {awidth}; "
                                    f"it must not be negative",
                                    instance_id=instance.id, name="awidth")
        params = cls(dwidth=dwidth, awidth=awidth, init=init,
                     num_ports=2 if kind is Primitive.DUAL_RAM else 1)
        if len(params.init) > params.depth:
            raise MalformedInstance(f"Memory instance {instance.id} has {len(params.init)} "
                                    f"initial values, but only {params.depth} locations",
                                    instance_id=instance.id, name="init")
        for address, value in enumerate(params.init):
            if value not in range(1 << dwidth):
                raise MalformedInstance(f"Initial value {value} at address {address} of memory "
                                        f"instance {instance.id} does not fit in {dwidth} bits",
                                        instance_id=instance.id, name="init")
        return params

    def ports(self, instance):
        """Split the inputs of ``instance`` into one :class:`MemoryPort` per port.

        The inputs are ordered as write enables (one per port), then data buses (one per port),
        then address buses (one per port).
        """
        if len(instance.inputs) != self.num_inputs:
            raise MalformedInstance(f"Memory instance {instance.id} with data width "
                                    f"{self.dwidth} and address width {self.awidth} needs "
                                    f"{self.num_inputs} inputs, not {len(instance.inputs)}",
                                    instance_id=instance.id)
        enables = instance.inputs[:self.num_ports]
        signals = instance.inputs[self.num_ports:]
        data_end = self.num_ports * self.dwidth
        data, addr = signals[:data_end], signals[data_end:]
        ports = []
        for index in range(self.num_ports):
            ports.append(MemoryPort(
                we=enables[index],
                data=data[index * self.dwidth:(index + 1) * self.dwidth],
                addr=addr[index * self.awidth:(index + 1) * self.awidth],
                q=[Wire(instance.id, bit)
                   for bit in range(index * self.dwidth, (index + 1) * self.dwidth)],
            ))
        return ports


def check_instance(instance):
    """Check ``instance`` against what its primitive requires, and return the primitive.

    Raises
    ------
    :exc:`UnknownPrimitive`
        If the kind is not one of :class:`Primitive`.
    :exc:`MalformedInstance`
        If the input count, output count or parameter shape is wrong.
    :exc:`MissingParameter`
        If a required parameter is absent.
    """
    kind = Primitive.cast(instance.kind, instance_id=instance.id)

    if kind.is_memory:
        params = MemoryParams.from_instance(instance)
        params.ports(instance)
        num_outputs = params.num_outputs
    else:
        if len(instance.inputs) != kind.arity:
            raise MalformedInstance(f"Instance {instance.id} ({kind.value}) needs {kind.arity} "
                                    f"inputs, not {len(instance.inputs)}",
                                    instance_id=instance.id)
        num_outputs = 1

    if instance.num_outputs != num_outputs:
        raise MalformedInstance(f"Instance {instance.id} ({kind.value}) must have "
                                f"{num_outputs} outputs, not {instance.num_outputs}",
                                instance_id=instance.id)

    if kind.is_register:
        init = instance.param_int("init")
        if init not in (0, 1):
            raise MalformedInstance(f"Register instance {instance.id} has initial value {init}; "
                                    f"it must be 0 or 1",
                                    instance_id=instance.id, name="init")
    elif kind is Primitive.NAME:
        instance.param("name")

    return kind
