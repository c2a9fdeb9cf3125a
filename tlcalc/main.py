"""Uses the simply-typed lambda calculus core to interpret a term file or run in command-line mode. Also uses the error
handling context manager. Called from the tlcalc console script and from `python -m tlcalc`.

In file mode the term is type checked, beta-reduced and printed as '(term):type'. The output is itself a valid term,
so computations can be chained together: the output of one run can be passed to the next with --arg.
"""

import argparse
import sys

from tlcalc.lang.error import ErrorHandler
from tlcalc.lang.session import Session
from tlcalc.lang.shell import Shell
from tlcalc.pure.reduction import NormalOrderReducer


def build_parser():
    parser = argparse.ArgumentParser(prog="tlcalc", description="Simply-typed lambda calculus interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-a", "--arg", help="file holding a term to apply the term of FILE to")
    parser.add_argument("-s", "--steps", type=int, default=NormalOrderReducer.STEP_LIMIT,
                        help=f"maximum number of beta reductions (default: {NormalOrderReducer.STEP_LIMIT})")
    parser.add_argument("-d", "--debug", action="store_true", help="print the syntax tree instead of the term")
    parser.add_argument("-t", "--trace", action="store_true", help="print every intermediate term")
    parser.add_argument("--ascii", action="store_true", help="print '\\' and '->' instead of 'λ' and '→'")
    return parser


def main(argv=None):
    """Runs tlcalc interpreter. Called from tlcalc executable script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.steps < 0:
            error_handler.warn("step limit {} is negative, using 0", str(args.steps), diagnosis=False)
            args.steps = 0

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, step_limit=args.steps, arg_path=args.arg)
            sess.run()

            for result in sess.results:
                if args.trace:
                    for step in result.steps:
                        print(f"  β  {step.pretty(args.ascii)}")
                print(result.display() if args.debug else result.pretty(args.ascii))

        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, step_limit=args.steps)
            Shell(sess, ascii_only=args.ascii, trace=args.trace).cmdloop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
