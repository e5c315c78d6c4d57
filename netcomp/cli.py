import argparse
import logging
import os
import sys

from .hdl import CompileError
from .hdl._json import InvalidNetlist, load
from .build import prepare
from .sim import simulate


__all__ = ["main"]


def _input_assignment(text):
    name, sep, value = text.partition("=")
    if not sep or value not in ("0", "1"):
        raise argparse.ArgumentTypeError(f"{text!r} is not an input assignment, expecting "
                                         f"NAME=0 or NAME=1")
    return name, int(value)


def main_parser(parser=None):
    if parser is None:
        parser = argparse.ArgumentParser("netcomp", description="""
            Compile a netlist into a cycle-accurate simulation procedure.
            """)

    parser.add_argument("-v", "--verbose", dest="verbose", default=False, action="store_true",
        help="log every file written")

    p_action = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    p_generate = p_action.add_parser("generate",
        help="generate the C simulation and memory files from a netlist")
    p_generate.add_argument("netlist_file",
        metavar="NETLIST", type=argparse.FileType("r"),
        help="read the netlist from the JSON file NETLIST")
    p_generate.add_argument("-n", "--name", dest="name",
        metavar="NAME", default=None,
        help="name of the C function and of the output directory (default: NETLIST file stem)")
    p_generate.add_argument("-o", "--output-dir", dest="root",
        metavar="DIR", default=".",
        help="create the output directory under DIR (default: %(default)s)")
    p_generate.add_argument("--done", dest="done",
        metavar="OUTPUT", default="done",
        help="stop the simulation when OUTPUT is set (default: %(default)s)")
    p_generate.add_argument("--no-vendor", dest="vendor", default=True, action="store_false",
        help="do not generate altsyncram instantiations for memories")
    p_generate.add_argument("--python", dest="python", default=False, action="store_true",
        help="also generate a Python version of the simulation")
    p_generate.add_argument("--archive", dest="archive_file",
        metavar="ZIP-FILE", type=argparse.FileType("wb"), default=None,
        help="write the generated files into ZIP-FILE instead of a directory")

    p_simulate = p_action.add_parser("simulate",
        help="run the netlist until it signals completion and print its outputs")
    p_simulate.add_argument("netlist_file",
        metavar="NETLIST", type=argparse.FileType("r"),
        help="read the netlist from the JSON file NETLIST")
    p_simulate.add_argument("-i", "--input", dest="inputs",
        metavar="NAME=VALUE", type=_input_assignment, action="append", default=[],
        help="set the input NAME to VALUE (0 or 1)")
    p_simulate.add_argument("--done", dest="done",
        metavar="OUTPUT", default="done",
        help="stop the simulation when OUTPUT is set (default: %(default)s)")

    return parser


def main_runner(parser, args):
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(message)s")

    try:
        with args.netlist_file:
            netlist = load(args.netlist_file)

        if args.action == "generate":
            name = args.name
            if name is None:
                name = os.path.splitext(os.path.basename(args.netlist_file.name))[0]
            plan = prepare(netlist, name, done=args.done, vendor=args.vendor,
                           python=args.python)
            if args.archive_file:
                with args.archive_file:
                    plan.archive(args.archive_file)
            else:
                plan.extract(os.path.join(args.root, name))

        if args.action == "simulate":
            inputs = dict(args.inputs)
            for name in inputs:
                if name not in netlist.inputs:
                    parser.error(f"netlist has no input named {name!r}")
            for name in netlist.inputs:
                if name not in inputs:
                    parser.error(f"input {name!r} must be given a value with -i {name}=VALUE")
            outputs = simulate(netlist, inputs, done=args.done)
            for name, value in outputs.items():
                print(f"{name}={value}")
            print(sum(value << index for index, value in enumerate(outputs.values())))
    except (CompileError, InvalidNetlist, ValueError) as e:
        # Bad circuit names and bad environment overrides surface as `ValueError`.
        parser.exit(1, f"{parser.prog}: error: {e}\n")


def main(args=None):
    parser = main_parser()
    main_runner(parser, parser.parse_args(args))


if __name__ == "__main__":
    main(sys.argv[1:])
