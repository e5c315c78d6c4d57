import io
import json

from netcomp.hdl import *
from netcomp.hdl._json import InvalidNetlist, validate, from_json, to_json, load, dump

from .utils import *


HALF_ADDER = {
    "instances": [
        {"id": 0, "kind": "name", "params": [["name", "a"]]},
        {"id": 1, "kind": "name", "params": [["name", "b"]]},
        {"id": 2, "kind": "xor2", "inputs": [[0, 0], [1, 0]]},
        {"id": 3, "kind": "and2", "inputs": [[0, 0], [1, 0]]},
        {"id": 4, "kind": "high"},
    ],
    "outputs": [
        ["sum", [2, 0]],
        ["carry", [3, 0]],
        ["done", [4, 0]],
    ],
}


class JSONNetlistTestCase(NetlistTestCase):
    def test_from_json(self):
        netlist = from_json(HALF_ADDER)
        self.assertEqual(repr(netlist), repr(self.half_adder()))

    def test_to_json(self):
        obj = to_json(self.half_adder())
        self.assertEqual(obj["instances"][0],
                         {"id": 0, "kind": "name", "params": [["name", "a"]], "inputs": [],
                          "outputs": 1})
        self.assertEqual(obj["instances"][2]["inputs"], [[0, 0], [1, 0]])
        self.assertEqual(obj["outputs"], HALF_ADDER["outputs"])
        validate(obj)

    def test_load_dump(self):
        file = io.StringIO()
        dump(self.half_adder(), file)
        self.assertTrue(file.getvalue().endswith("}\n"))
        file.seek(0)
        self.assertEqual(repr(load(file)), repr(self.half_adder()))

    def test_memory(self):
        netlist = from_json({
            "instances": [
                {"id": 0, "kind": "low"},
                {"id": 1, "kind": "dualRam",
                 "params": [["dwidth", "1"], ["awidth", "1"], ["init", "[1,0]"]],
                 "inputs": [[0, 0]] * 6, "outputs": 2},
            ],
            "outputs": [["q", [1, 1]], ["done", [1, 0]]],
        })
        self.assertEqual(netlist.instance(1).num_outputs, 2)
        self.assertEqual(netlist.instance(1).param_ints("init"), [1, 0])
        self.assertEqual(netlist.output("q"), Wire(1, 1))

    def test_missing_outputs(self):
        with self.assertRaisesRegex(InvalidNetlist, r"^Invalid netlist:\n"):
            from_json({"instances": []})

    def test_unknown_property(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["instances"][0]["width"] = 1
        with self.assertRaises(InvalidNetlist):
            from_json(obj)

    def test_wrong_wire(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["instances"][2]["inputs"][0] = [0, -1]
        with self.assertRaises(InvalidNetlist):
            from_json(obj)
        obj["instances"][2]["inputs"][0] = [0]
        with self.assertRaises(InvalidNetlist):
            from_json(obj)

    def test_wrong_param(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["instances"][0]["params"] = [["name", 1]]
        with self.assertRaises(InvalidNetlist):
            from_json(obj)

    def test_wrong_output_name(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["outputs"][0][0] = "1sum"
        with self.assertRaises(InvalidNetlist):
            from_json(obj)

    def test_duplicate_id(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["instances"][1]["id"] = 0
        with self.assertRaisesRegex(InvalidNetlist,
                r"^Invalid netlist: Instance id 0 is used more than once$"):
            from_json(obj)

    def test_duplicate_output(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["outputs"].append(["done", [3, 0]])
        with self.assertRaisesRegex(InvalidNetlist,
                r"^Invalid netlist: Output 'done' is already defined$"):
            from_json(obj)

    def test_load_malformed(self):
        with self.assertRaisesRegex(InvalidNetlist, r"^Invalid netlist: Expecting ',' delimiter"):
            load(io.StringIO('{"instances": [] "outputs": []}'))

    def test_unknown_kind_is_loaded(self):
        obj = json.loads(json.dumps(HALF_ADDER))
        obj["instances"][4]["kind"] = "vcc"
        netlist = from_json(obj)
        with self.assertRaises(UnknownPrimitive):
            schedule(netlist)
