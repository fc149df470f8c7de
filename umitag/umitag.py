import argparse
import importlib
import sys
import zlib

from umitag.__init__ import __VERSION__, STEPS
from umitag.tools.fastq import UmiTagError


class ArgFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawTextHelpFormatter
):
    pass


def find_step_module(step):
    return importlib.import_module(f"umitag.tools.{step}")


def get_parser():
    parser = argparse.ArgumentParser(
        description="Tag paired-end FASTQ read names with UMIs from read 1.",
        formatter_class=ArgFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=__VERSION__)
    subparsers = parser.add_subparsers(dest="subparser_step")

    for step in STEPS:
        # import function and opts
        step_module = find_step_module(step)
        func = getattr(step_module, step)
        func_opts = getattr(step_module, f"get_opts_{step}")
        parser_step = subparsers.add_parser(
            step, formatter_class=ArgFormatter, description=step_module.__doc__
        )
        func_opts(parser_step, sub_program=True)
        parser_step.set_defaults(func=func)

    return parser


def main(argv=None):
    """umitag cli"""
    parser = get_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        # No subcommand was given.
        parser.print_help()
        parser.exit(1)

    try:
        args.func(args)
    except (UmiTagError, OSError, EOFError, zlib.error) as e:
        sys.exit(f"Error: {e}")


if __name__ == "__main__":
    main()
