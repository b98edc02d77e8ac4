"""Runs files of encoded λ-terms, or an interactive shell, through the stlc typechecker and evaluator. Also uses the
error handling context manager. Called from the stlc console script.
"""

import argparse

from stlc.lang.error import ErrorHandler
from stlc.lang.session import Session
from stlc.lang.shell import Shell


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="stlc", description="Simply-typed lambda calculus interpreter.")
    parser.add_argument("file", help="file of encoded terms to run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--annotate", action="store_true", help="print abstraction parameter types")
    parser.add_argument("--no-check", dest="check", action="store_false", help="evaluate without typechecking")
    parser.add_argument("--max-steps", type=int, default=None, help="give up on terms taking more reduction steps")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs stlc interpreter. Called from stlc console script."""
    with ErrorHandler() as error_handler:
        args = parse_args(argv)
        options = {"annotate": args.annotate, "check": args.check, "max_steps": args.max_steps}

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, **options)
            sess.run()

            for result in sess.results:
                print(sess.describe(result))

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()


if __name__ == "__main__":
    main()
