from ._nir import CyclicNetlist
from ._prim import check_instance


__all__ = ["Schedule", "schedule"]


class Schedule:
    """Evaluation order of a netlist.

    Attributes
    ----------

    combinational: tuple of ``Instance``, each one after every instance it reads from
    registers: tuple of ``Instance``, in ascending id order
    memories: tuple of ``Instance``, in ascending id order
    kinds: dict of int to ``Primitive``
    """
    def __init__(self, *, combinational, registers, memories, kinds):
        self.combinational = tuple(combinational)
        self.registers = tuple(registers)
        self.memories = tuple(memories)
        self.kinds = kinds

    @property
    def sequential(self):
        return self.registers + self.memories

    def __repr__(self):
        comb = " ".join(str(instance.id) for instance in self.combinational)
        regs = " ".join(str(instance.id) for instance in self.registers)
        mems = " ".join(str(instance.id) for instance in self.memories)
        return f"(schedule (comb {comb}) (reg {regs}) (mem {mems}))"


def schedule(netlist):
    """Order the combinational instances of ``netlist`` so that producers precede consumers.

    The outputs of registers and memories hold the value latched at the previous clock edge,
    so no ordering edge is created towards them; this is what makes feedback through state
    legal. The traversal visits instances in ascending id order and inputs in declared order,
    which makes the result a function of the netlist alone.

    Raises
    ------
    :exc:`CyclicNetlist`
        If there is a cycle that does not pass through a register or memory.
    """
    netlist.check()
    kinds = {instance.id: check_instance(instance) for instance in netlist}

    order = []
    checked = set()
    busy = []
    busy_set = set()

    def producers(instance):
        for wire in instance.inputs:
            if not kinds[wire.instance].is_sequential:
                yield wire.instance

    for root in netlist:
        if kinds[root.id].is_sequential or root.id in checked:
            continue
        # Iterative depth-first traversal; the stack holds (instance id, pending producers).
        stack = [(root.id, producers(root))]
        busy.append(root.id)
        busy_set.add(root.id)
        while stack:
            instance_id, pending = stack[-1]
            for producer_id in pending:
                if producer_id in checked:
                    continue
                if producer_id in busy_set:
                    cycle = busy[busy.index(producer_id):]
                    raise CyclicNetlist(list(reversed(cycle)))
                stack.append((producer_id, producers(netlist.instance(producer_id))))
                busy.append(producer_id)
                busy_set.add(producer_id)
                break
            else:
                stack.pop()
                busy.pop()
                busy_set.remove(instance_id)
                checked.add(instance_id)
                order.append(netlist.instance(instance_id))

    registers = [instance for instance in netlist if kinds[instance.id].is_register]
    memories  = [instance for instance in netlist if kinds[instance.id].is_memory]
    return Schedule(combinational=order, registers=registers, memories=memories, kinds=kinds)
