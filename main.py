"""
Main entry point for the Assembler application.
Assembles the files named on the command line, or starts the GUI when
none are given.
"""

import argparse
import logging
import sys
from pathlib import Path

from assembler import OPTAB, assemble_files, load_optab
from report import format_result


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Two-pass SIC/XE assembler")
    parser.add_argument("files", nargs="*", help="assembly source files, assembled in order")
    parser.add_argument("-o", "--output-dir", help="directory for .obj files (default: beside each source)")
    parser.add_argument("--optab", help="opcode table CSV (name,opcode,format)")
    parser.add_argument("--no-report", action="store_true", help="do not print symbol/location tables")
    parser.add_argument("--gui", action="store_true", help="start the GUI even when files are given")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def run_batch(files, output_dir=None, optab=None, show_report=True):
    """Assemble files in sequence and print their reports. Returns exit status."""
    results = assemble_files(files, output_dir, optab)
    for result in results:
        if show_report or result.error_kind is not None:
            print(format_result(result, optab))
    return 1 if any(r.error_kind is not None for r in results) else 0


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(name)s: %(message)s")
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    optab = load_optab(Path(args.optab).resolve()) if args.optab else OPTAB

    if args.files and not args.gui:
        return run_batch(args.files, args.output_dir, optab, not args.no_report)

    try:
        from controller import AssemblerController
        from model import AssemblerModel

        app_controller = AssemblerController(AssemblerModel(args.output_dir, optab))
        if args.files:
            app_controller.model.set_files(args.files)
            app_controller.view.set_button_state("assemble", "normal")
            app_controller.update_view()
        app_controller.run()
    except Exception as e:
        print(f"Error starting application: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
