from .._utils import render
from ..hdl._prim import Primitive, MemoryParams


__all__ = ["mif_filename", "convert", "convert_netlist"]


_mif_template = r"""
    -- Generated by netcomp
    WIDTH={{width}};
    DEPTH={{depth}};
    ADDRESS_RADIX=HEX;
    DATA_RADIX=HEX;
    CONTENT BEGIN
    {% for value in contents %}
    {{loop.index0|hex}}:{{value|hex}};
    {% endfor %}
    END;
"""


def mif_filename(instance):
    return f"ram_c{instance.id}.mif"


def convert(instance):
    """Generate the memory initialization file of a ``ram`` or ``dualRam`` instance.

    Every location gets a line, initial values are taken in order, and locations past the end
    of the initial values are zero.
    """
    params = MemoryParams.from_instance(instance)
    return render(_mif_template, mif_filename(instance),
                  width=params.dwidth, depth=params.depth, contents=params.contents())


def convert_netlist(netlist):
    """Generate initialization files for every memory in ``netlist`` that has initial contents.

    Returns a dict from file name to file contents, in ascending instance id order.
    """
    files = {}
    for instance in netlist:
        kind = Primitive.cast(instance.kind, instance_id=instance.id)
        if not kind.is_memory:
            continue
        if MemoryParams.from_instance(instance).init:
            files[mif_filename(instance)] = convert(instance)
    return files
