from netcomp.hdl import *
from netcomp.back import mif

from .utils import *


class MIFTestCase(NetlistTestCase):
    def test_convert(self):
        instance = Instance(3, "ram", params={"dwidth": "8", "awidth": "2", "init": "[3,5]"},
                            inputs=[(0, 0)] * 11, num_outputs=8)
        self.assertEqual(mif.mif_filename(instance), "ram_c3.mif")
        self.assertEqual(mif.convert(instance),
            "-- Generated by netcomp\n"
            "WIDTH=8;\n"
            "DEPTH=4;\n"
            "ADDRESS_RADIX=HEX;\n"
            "DATA_RADIX=HEX;\n"
            "CONTENT BEGIN\n"
            "0:3;\n"
            "1:5;\n"
            "2:0;\n"
            "3:0;\n"
            "END;\n")

    def test_hex(self):
        instance = Instance(0, "dualRam", params={"dwidth": "8", "awidth": "4",
                                                  "init": "[255, 16]"},
                            inputs=[(0, 0)] * 26, num_outputs=16)
        content = mif.convert(instance)
        self.assertIn("DEPTH=16;\n", content)
        self.assertIn("0:ff;\n1:10;\n2:0;\n", content)
        self.assertIn("f:0;\nEND;\n", content)

    def test_convert_netlist(self):
        netlist = Netlist()
        low = netlist.add("low")
        netlist.add("ram", low, low, low, params={"dwidth": "1", "awidth": "1", "init": "[1]"},
                    id=7)
        netlist.add("ram", low, low, low, params={"dwidth": "1", "awidth": "1", "init": "[]"},
                    id=4)
        netlist.add("ram", low, low, low, params={"dwidth": "1", "awidth": "1"}, id=5)
        netlist.add("ram", low, low, low, params={"dwidth": "1", "awidth": "1", "init": "[0]"},
                    id=2)
        files = mif.convert_netlist(netlist)
        self.assertEqual(list(files), ["ram_c2.mif", "ram_c7.mif"])
        self.assertIn("0:1;\n1:0;\n", files["ram_c7.mif"])

    def test_no_memories(self):
        self.assertEqual(mif.convert_netlist(self.half_adder()), {})

    def test_too_much_init(self):
        instance = Instance(3, "ram", params={"dwidth": "1", "awidth": "0", "init": "[0,1]"},
                            inputs=[(0, 0)] * 2)
        with self.assertRaises(MalformedInstance):
            mif.convert(instance)
