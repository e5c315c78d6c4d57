from .pysim import convert, compile_netlist, simulate


__all__ = ["convert", "compile_netlist", "simulate"]
