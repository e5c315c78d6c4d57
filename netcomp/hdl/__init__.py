from ._nir import CompileError, CyclicNetlist, UnknownPrimitive, MalformedInstance
from ._nir import MissingParameter, ReservedIdentifier, MissingOutput
from ._nir import Wire, Instance, Netlist
from ._prim import Primitive, MemoryParams, MemoryPort, check_instance
from ._sched import Schedule, schedule


__all__ = [
    # _nir
    "CompileError", "CyclicNetlist", "UnknownPrimitive", "MalformedInstance",
    "MissingParameter", "ReservedIdentifier", "MissingOutput",
    "Wire", "Instance", "Netlist",
    # _prim
    "Primitive", "MemoryParams", "MemoryPort", "check_instance",
    # _sched
    "Schedule", "schedule",
]
