# Extract version for this package from the environment package metadata.
import importlib.metadata
try:
    __version__ = importlib.metadata.version(__package__)
except importlib.metadata.PackageNotFoundError:
    # No importlib metadata for this package. This shouldn't normally happen, but some people
    # prefer not installing packages via pip at all.
    __version__ = "unknown" # :nocov:
del importlib


from .hdl import *

__all__ = [
    "Wire", "Instance", "Netlist",
    "Primitive",
    "CompileError", "CyclicNetlist", "UnknownPrimitive", "MalformedInstance",
    "MissingParameter", "ReservedIdentifier", "MissingOutput",
]
