from netcomp.hdl import *
from netcomp.vendor import altera

from .utils import *


class AltsyncramTestCase(NetlistTestCase):
    def test_single_port(self):
        instance = Instance(3, "ram", params={"dwidth": "2", "awidth": "1", "init": "[1]"},
                            inputs=[(0, 0), (1, 0), (0, 0), (2, 0)], num_outputs=2)
        self.assertEqual(altera.instantiate(instance), r"""// ram instance 3
altsyncram c3 (
  .clock0 (clock),
  .address_a ({w2}),
  .wren_a (w0),
  .data_a ({w0,w1}),
  .q_a ({w3_1,w3}),
  .address_b (1'b1),
  .wren_b (1'b0),
  .data_b (1'b1),
  .q_b (),
  .aclr0 (1'b0),
  .aclr1 (1'b0),
  .addressstall_a (1'b0),
  .addressstall_b (1'b0),
  .byteena_a (1'b1),
  .byteena_b (1'b1),
  .clock1 (1'b1),
  .clocken0 (1'b1),
  .clocken1 (1'b1),
  .clocken2 (1'b1),
  .clocken3 (1'b1),
  .eccstatus (),
  .rden_a (1'b1),
  .rden_b (1'b1));
defparam
  c3.clock_enable_input_a = "BYPASS",
  c3.clock_enable_output_a = "BYPASS",
  c3.init_file = "ram_c3.mif",
  c3.lpm_type = "altsyncram",
  c3.numwords_a = 2,
  c3.operation_mode = "SINGLE_PORT",
  c3.outdata_aclr_a = "NONE",
  c3.outdata_reg_a = "UNREGISTERED",
  c3.power_up_uninitialized = "FALSE",
  c3.read_during_write_mode_port_a = "NEW_DATA_NO_NBE_READ",
  c3.widthad_a = 1,
  c3.width_a = 2,
  c3.width_byteena_a = 1,
  c3.width_byteena_b = 1;
""")

    def test_dual_port(self):
        # we_a, we_b, data_a, data_b, addr_a[0..1], addr_b[0..1]
        instance = Instance(9, "dualRam", params={"dwidth": "1", "awidth": "2"},
                            inputs=[(1, 0), (2, 0), (3, 0), (4, 0),
                                    (5, 0), (6, 0), (7, 0), (8, 0)],
                            num_outputs=2)
        text = altera.instantiate(instance)
        self.assertTrue(text.startswith("// dualRam instance 9\naltsyncram c9 (\n"))
        self.assertIn("  .address_a ({w6,w5}),\n", text)
        self.assertIn("  .wren_a (w1),\n", text)
        self.assertIn("  .data_a ({w3}),\n", text)
        self.assertIn("  .q_a ({w9}),\n", text)
        self.assertIn("  .address_b ({w8,w7}),\n", text)
        self.assertIn("  .wren_b (w2),\n", text)
        self.assertIn("  .data_b ({w4}),\n", text)
        self.assertIn("  .q_b ({w9_1}),\n", text)
        self.assertEqual(text.count(".address_b"), 1)
        self.assertIn("  c9.address_reg_b = \"CLOCK0\",\n", text)
        self.assertIn("  c9.operation_mode = \"BIDIR_DUAL_PORT\",\n", text)
        self.assertIn("  c9.numwords_a = 4,\n  c9.numwords_b = 4,\n", text)
        self.assertIn("  c9.read_during_write_mode_mixed_ports = \"DONT_CARE\",\n", text)
        self.assertIn("  c9.wrcontrol_wraddress_reg_b = \"CLOCK0\";\n", text)
        self.assertNotIn("init_file", text)

    def test_not_memory(self):
        with self.assertRaisesRegex(TypeError, r"^Instance 0 is a and2, not a memory$"):
            altera.instantiate(Instance(0, "and2", inputs=[(1, 0), (2, 0)]))

    def test_wrong_inputs(self):
        instance = Instance(3, "ram", params={"dwidth": "2", "awidth": "1"},
                            inputs=[(0, 0)] * 3, num_outputs=2)
        with self.assertRaises(MalformedInstance):
            altera.instantiate(instance)

    def test_convert(self):
        netlist = Netlist()
        low = netlist.add("low")
        netlist.add("ram", low, low, low, params={"dwidth": "1", "awidth": "1"}, id=5)
        netlist.add("ram", low, low, low, params={"dwidth": "1", "awidth": "1"}, id=2)
        text = altera.convert(netlist)
        self.assertLess(text.index("altsyncram c2"), text.index("altsyncram c5"))
        self.assertIn("  c2.width_byteena_b = 1;\n\n// ram instance 5\n", text)

    def test_convert_no_memories(self):
        self.assertEqual(altera.convert(self.half_adder()), "")
