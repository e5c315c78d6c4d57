import json
import pprint
import warnings

import jschon

from ._nir import MalformedInstance, Netlist


__all__ = ["InvalidNetlist", "SCHEMA", "validate", "from_json", "to_json", "load", "dump"]


class InvalidNetlist(Exception):
    """Exception raised when a JSON netlist does not conform to :data:`SCHEMA`."""


_wire_schema = {
    "type": "array",
    "prefixItems": [
        {"type": "integer", "minimum": 0},
        {"type": "integer", "minimum": 0},
    ],
    "minItems": 2,
    "maxItems": 2,
}


#: JSON Schema of the serialized netlist, expressed in the `2020-12` draft.
SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://netcomp.invalid/schema/0.1/netlist.json",
    "type": "object",
    "properties": {
        "instances": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "minimum": 0},
                    "kind": {"type": "string"},
                    "params": {
                        "type": "array",
                        "items": {
                            "type": "array",
                            "prefixItems": [{"type": "string"}, {"type": "string"}],
                            "minItems": 2,
                            "maxItems": 2,
                        },
                    },
                    "inputs": {"type": "array", "items": _wire_schema},
                    "outputs": {"type": "integer", "minimum": 0},
                },
                "required": ["id", "kind"],
                "additionalProperties": False,
            },
        },
        "outputs": {
            "type": "array",
            "items": {
                "type": "array",
                "prefixItems": [
                    {"type": "string", "pattern": "^[A-Za-z_][A-Za-z0-9_]*$"},
                    _wire_schema,
                ],
                "minItems": 2,
                "maxItems": 2,
            },
        },
    },
    "required": ["instances", "outputs"],
    "additionalProperties": False,
}


def _jschon_schema():
    catalog = jschon.create_catalog("2020-12")
    return jschon.JSONSchema(SCHEMA, catalog=catalog)


def validate(obj):
    """Validate the JSON representation of a netlist against :data:`SCHEMA`.

    Raises
    ------
    :exc:`InvalidNetlist`
        If ``obj`` doesn't conform to the schema.
    """
    # TODO: Remove this. Ignore a deprecation warning from jschon's rfc3986 dependency.
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=DeprecationWarning)
        result = _jschon_schema().evaluate(jschon.JSON(obj))

    if not result.valid:
        raise InvalidNetlist("Invalid netlist:\n" +
                             pprint.pformat(result.output("basic")["errors"],
                                            sort_dicts=False))


def from_json(obj):
    """Build a :class:`Netlist` from its JSON representation (already parsed).

    Raises
    ------
    :exc:`InvalidNetlist`
        If ``obj`` doesn't conform to :data:`SCHEMA`, or reuses an instance id or output name.
    """
    validate(obj)
    netlist = Netlist()
    try:
        for item in obj["instances"]:
            netlist.add_instance(item["kind"],
                params=[tuple(param) for param in item.get("params", [])],
                inputs=[tuple(wire) for wire in item.get("inputs", [])],
                num_outputs=item.get("outputs", 1),
                id=item["id"])
        for name, wire in obj["outputs"]:
            netlist.add_output(name, tuple(wire))
    except (MalformedInstance, ValueError) as e:
        raise InvalidNetlist(f"Invalid netlist: {e}") from e
    return netlist


def to_json(netlist):
    """Convert ``netlist`` to its JSON representation, in Python primitive types."""
    return {
        "instances": [
            {
                "id": instance.id,
                "kind": instance.kind,
                "params": [list(param) for param in instance.params],
                "inputs": [list(wire) for wire in instance.inputs],
                "outputs": instance.num_outputs,
            }
            for instance in netlist
        ],
        "outputs": [[name, list(wire)] for name, wire in netlist.outputs],
    }


def load(file):
    """Read a JSON netlist from a file-like object."""
    try:
        obj = json.load(file)
    except json.JSONDecodeError as e:
        raise InvalidNetlist(f"Invalid netlist: {e}") from e
    return from_json(obj)


def dump(netlist, file):
    json.dump(to_json(netlist), file, indent=2)
    file.write("\n")
