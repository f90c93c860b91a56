import sys
import traceback

import colorama

from errors import ParseError, WhitespaceError
from parser import parse
from vm import VM

COMMANDS = ("run", "build")

USAGE = [
    "Usage:",
    "  wspace run <file.ws> [--trace] [--max-steps N]",
    "  wspace build <file.ws>",
    "  wspace <file.ws>              (same as run)",
    "  (optional) --color to colour diagnostics",
    "  (optional) --debug to show Python traceback",
]


def print_usage():
    for line in USAGE:
        print(line)


def report(err, color: bool = False, debug: bool = False):
    if debug:
        traceback.print_exc()

    text = err.format() if hasattr(err, "format") else str(err)
    if color:
        colorama.just_fix_windows_console()
        text = f"{colorama.Fore.RED}{text}{colorama.Style.RESET_ALL}"
    print(text)


def read_source(path):
    try:
        f = open(path, "rb")
    except OSError:
        print(f"Could not open '{path}'")
        return None

    with f:
        try:
            data = f.read()
        except OSError:
            print("Error reading file")
            return None
    return data.decode("utf-8", errors="replace")


def run_source(source, stdin=None, stdout=None, trace: bool = False, max_steps=None,
               color: bool = False, debug: bool = False) -> bool:
    """Parse and run a Whitespace program.

    Diagnostics are printed, never raised. Returns True when the program
    ran to completion, False on a parse error or a runtime error.
    """
    try:
        program = parse(source)
    except ParseError as e:
        report(e, color=color, debug=debug)
        return False

    vm = VM(program, stdin=stdin, stdout=stdout, max_steps=max_steps)
    vm.trace_enabled = trace
    try:
        vm.run()
    except WhitespaceError as e:
        report(e, color=color, debug=debug)
        return False
    return True


def run_file(path, **options) -> bool:
    source = read_source(path)
    if source is None:
        return False
    return run_source(source, **options)


def cmd_build(path, color: bool = False, debug: bool = False) -> bool:
    source = read_source(path)
    if source is None:
        return False

    try:
        bc = parse(source)
    except ParseError as e:
        report(e, color=color, debug=debug)
        return False

    print("CONSTS:")
    for i, c in enumerate(bc.consts):
        print(f"  [{i}] {c}")

    if bc.sub_labels:
        print("\nSUBROUTINES:")
        for pc, label in sorted(bc.sub_labels.items()):
            print(f"  #{label}  entry={pc}")

    print("\nINSTRUCTIONS:")
    for i, ins in enumerate(bc.instructions):
        print(f"  {i:04d}  {ins}  ; line {bc.line_at(i)}")
    return True


def pop_flag(args, name) -> bool:
    if name in args:
        args.remove(name)
        return True
    return False


def pop_option(args, name):
    if name not in args:
        return None
    i = args.index(name)
    if i + 1 >= len(args):
        raise ValueError(f"{name} expects a value")
    value = args[i + 1]
    del args[i:i + 2]
    return value


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    debug = pop_flag(args, "--debug")
    trace = pop_flag(args, "--trace")
    color = pop_flag(args, "--color")
    try:
        max_steps = pop_option(args, "--max-steps")
        if max_steps is not None:
            max_steps = int(max_steps)
            if max_steps <= 0:
                raise ValueError("--max-steps must be positive")
    except ValueError as e:
        print(str(e))
        print_usage()
        return 1

    if not args:
        print_usage()
        return 1

    if args[0] not in COMMANDS:
        args.insert(0, "run")

    cmd = args[0]
    if len(args) != 2:
        print_usage()
        return 1
    path = args[1]

    if cmd == "build":
        if trace or max_steps is not None:
            print("Build does not accept --trace or --max-steps.")
            return 1
        ok = cmd_build(path, color=color, debug=debug)
    else:
        ok = run_file(path, trace=trace, max_steps=max_steps, color=color, debug=debug)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
