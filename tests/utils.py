import re
import unittest

from netcomp.hdl import *


__all__ = ["NetlistTestCase"]


class NetlistTestCase(unittest.TestCase):
    maxDiff = None

    def assertSource(self, source, gold):
        def normalize(s):
            s = s.strip()
            s = re.sub(r" +", " ", s)
            s = re.sub(r"\n ", "\n", s)
            s = re.sub(r"\n+", "\n", s)
            return s + "\n"
        self.assertEqual(normalize(source), normalize(gold))

    def assertOrdered(self, netlist, order):
        """Check that every instance in ``order`` comes after the combinational instances it
        reads from."""
        position = {instance.id: index for index, instance in enumerate(order)}
        for instance in order:
            for wire in instance.inputs:
                driver = netlist.instance(wire.instance)
                if Primitive(driver.kind).is_sequential:
                    continue
                self.assertLess(position[wire.instance], position[instance.id],
                                f"instance {instance.id} is scheduled before {wire.instance}")

    @staticmethod
    def half_adder():
        netlist = Netlist()
        a = netlist.add("name", params={"name": "a"})
        b = netlist.add("name", params={"name": "b"})
        netlist.add_output("sum", netlist.add("xor2", a, b))
        netlist.add_output("carry", netlist.add("and2", a, b))
        netlist.add_output("done", netlist.add("high"))
        return netlist

    @staticmethod
    def after_one_cycle(netlist, low, high):
        """Add a ``done`` output that becomes set after the first clock edge."""
        netlist.add_output("done", netlist.add("delay", low, high, params={"init": "0"}))
