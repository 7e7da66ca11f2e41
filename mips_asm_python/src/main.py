# main.py

import sys
import argparse
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parent))

import common
import state as st
import assembler

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_FATAL = 2

def process_arguments(args):
    """Return (filename, debug) from the positional arguments
    [filename] [0|1], which may come in either order. debug is None
    when no choice was given."""
    debug = None
    rest = []
    for x in args:
        if x in ("0", "1") and debug is None:
            debug = x == "1"
        else:
            rest.append(x)
    if len(rest) > 1:
        raise ValueError("Usage: [filename] [0|1]")
    return (rest[0] if rest else None), debug

def open_input(filename):
    if filename is None:
        return sys.stdin
    return open(filename, 'r', encoding='utf-8')

def cannot_open(filename, e):
    common.mode.errlog(f"Error: Cannot open file {filename}: {e.strerror}")
    return EXIT_FATAL

def cannot_read(filename, e):
    common.mode.errlog(f"Error: Cannot read file {filename or '<stdin>'}: {e}")
    return EXIT_FATAL

def report(ai):
    for err in ai.diagnostics:
        common.mode.errlog(str(err))
    if ai.fatal is not None:
        common.indicate_error(str(ai.fatal))
    if ai.n_asm_errors > 0:
        common.mode.errlog(f"Assembly completed with {ai.n_asm_errors} errors.")

def exit_status(ai):
    if ai.fatal is not None:
        return EXIT_FATAL
    elif ai.n_asm_errors > 0:
        return EXIT_ERRORS
    return EXIT_OK

def assemble_file(filename, out_path=None, show_labels=False, listing_path=None):
    try:
        fp = open_input(filename)
    except OSError as e:
        return cannot_open(filename, e)
    out = sys.stdout
    try:
        if out_path:
            try:
                out = open(out_path, 'w')
            except OSError as e:
                return cannot_open(out_path, e)
        ai = assembler.assemble_stream(fp, out)
    except (OSError, UnicodeDecodeError) as e:
        return cannot_read(filename, e)
    finally:
        if fp is not sys.stdin:
            fp.close()
        if out is not sys.stdout:
            out.close()

    report(ai)
    if show_labels:
        st.display_label_table(ai.label_table, file=sys.stderr)
    if listing_path:
        try:
            with open(listing_path, 'w') as f:
                f.write("\n".join(ai.listing) + "\n")
        except OSError as e:
            return cannot_open(listing_path, e)
    return exit_status(ai)

def show_labels(filename):
    try:
        fp = open_input(filename)
    except OSError as e:
        return cannot_open(filename, e)
    ai = st.AsmInfo()
    try:
        assembler.asm_pass1(ai, fp)
    except st.FatalAsmError as e:
        ai.fatal = e
    except (OSError, UnicodeDecodeError) as e:
        return cannot_read(filename, e)
    finally:
        if fp is not sys.stdin:
            fp.close()
    report(ai)
    st.display_label_table(ai.label_table)
    return exit_status(ai)

def main(argv=None):
    parser = argparse.ArgumentParser(description="MIPS assembler")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Assemble command
    assemble_parser = subparsers.add_parser("assemble", help="Assemble a MIPS assembly file")
    assemble_parser.add_argument("args", nargs="*", metavar="[file] [0|1]",
                                 help="Input file (default stdin) and debugging choice")
    assemble_parser.add_argument("-o", "--output", help="Write binary words to this file")
    assemble_parser.add_argument("--labels", action="store_true", help="Print the label table to stderr")
    assemble_parser.add_argument("--listing", help="Write an assembly listing to this file")

    # Labels command
    labels_parser = subparsers.add_parser("labels", help="Run pass 1 and print the label table")
    labels_parser.add_argument("args", nargs="*", metavar="[file] [0|1]",
                               help="Input file (default stdin) and debugging choice")

    # GUI command
    subparsers.add_parser("gui", help="Start the graphical assembler")

    args = parser.parse_args(argv)

    if args.command in ("assemble", "labels"):
        try:
            filename, debug = process_arguments(args.args)
        except ValueError as e:
            parser.error(str(e))
        if debug is not None:
            common.mode.override_trace(debug)
        try:
            if args.command == "assemble":
                return assemble_file(filename, args.output, args.labels, args.listing)
            else:
                return show_labels(filename)
        finally:
            common.mode.release_override()
            common.mode.clear_trace()
    elif args.command == "gui":
        import gui
        return gui.start_gui()
    else:
        parser.print_help()
        return EXIT_OK

if __name__ == "__main__":
    sys.exit(main())
