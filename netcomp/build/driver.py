import logging
import os
import re

from .. import __version__
from ..back import c, mif
from ..sim import pysim
from ..vendor import altera
from .plan import BuildPlan


__all__ = ["prepare", "build"]


logger = logging.getLogger(__name__)


# Retrieve an override specified in the environment, falling back to the keyword argument.
def _extract_override(var, value):
    var_env = f"NETCOMP_{var}"
    if var_env in os.environ:
        # On Windows, there is no way to define an "empty but set" variable; treat `set VAR=""`
        # the same way `export VAR=` is treated on Linux.
        return re.sub(r'^\"\"$', "", os.environ[var_env])
    return value


def _get_override_flag(var, value):
    value = _extract_override(var, value)
    if isinstance(value, str):
        value = value.lower()
        if value in ("0", "no", "n", "false", ""):
            return False
        if value in ("1", "yes", "y", "true"):
            return True
        else:
            raise ValueError("Override '{}' must be one of "
                             "(\"0\", \"n\", \"no\", \"false\", \"\") "
                             "or "
                             "(\"1\", \"y\", \"yes\", \"true\"), not {!r}"
                             .format(var, value))
    return value


def prepare(netlist, name="top", *, done="done", vendor=True, python=False):
    """Compile ``netlist`` into a :class:`BuildPlan` holding every artifact.

    The plan contains ``{name}.c``, one ``ram_c{id}.mif`` file per memory with initial
    contents, ``{name}_altsyncram.v`` if ``vendor`` is set and the netlist has memories, and
    ``{name}.py`` if ``python`` is set. Nothing is written to disk; if compilation fails, the
    error propagates before any file exists.

    The ``done`` and ``vendor`` arguments can be overridden with the ``NETCOMP_done`` and
    ``NETCOMP_vendor`` environment variables.
    """
    done = _extract_override("done", done)
    vendor = _get_override_flag("vendor", vendor)
    logger.debug(f"Compiling '{name}': {len(netlist)} instances, exit flag {done!r}")

    plan = BuildPlan(name)
    plan.add_file(f"{name}.c", c.convert(netlist, name, done=done))
    for filename, content in mif.convert_netlist(netlist).items():
        plan.add_file(filename, content)
    if vendor:
        instantiations = altera.convert(netlist)
        if instantiations:
            plan.add_file(f"{name}_altsyncram.v",
                          f"// Generated by netcomp {__version__}. Do not edit.\n" +
                          instantiations)
    if python:
        plan.add_file(f"{name}.py", pysim.convert(netlist, name, done=done))
    return plan


def build(netlist, name="top", root=".", **kwargs):
    """Compile ``netlist`` and write the artifacts into the directory ``{root}/{name}``.

    Returns the :class:`pathlib.Path` of that directory.
    """
    plan = prepare(netlist, name, **kwargs)
    build_dir = plan.extract(os.path.join(root, name))
    logger.info("Done.")
    return build_dir
