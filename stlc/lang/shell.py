"""Handles interactive/command-line mode for the stlc interpreter. Uses cmd as backend."""

import cmd

from stlc.lang.session import Session
from stlc.pure.printer import pprint_type
from stlc.pure.typechecker import typecheck


class Shell(cmd.Cmd):
    """Simply-typed lambda calculus interpreter shell."""
    intro = "Simply-typed lambda calculus interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def default(self, line):
        """Typechecks and evaluates an encoded term."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.add(line, self.line_num)
            self.sess.run()

            if self.sess.results:
                print(self.sess.pop())

    def do_type(self, arg):
        """Prints the type of an encoded term without evaluating it."""
        with self.sess.error_handler:
            print(pprint_type(typecheck(Session.load(arg))))

    def do_tree(self, arg):
        """Displays the syntax tree of an encoded term."""
        with self.sess.error_handler:
            print(Session.load(arg).display())

    def do_annotate(self, arg):
        """Toggles printing of abstraction parameter types."""
        self.sess.annotate = not self.sess.annotate
        print(f"annotations {'on' if self.sess.annotate else 'off'}")

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the stlc interpreter!\n\n"
              "Terms are typed as JSON tagged records, one per line. For example, the identity\n"
              "function on booleans applied to True is\n\n"
              '  {"tag": "TmApp", "contents": [{"tag": "TmFun", "contents": ["x", {"tag": "TyBool"},\n'
              '   {"tag": "TmVar", "contents": "x"}]}, {"tag": "TmTrue"}]}\n\n'
              "Each term is typechecked, then evaluated call-by-name. 'type TERM' only checks,\n"
              "'tree TERM' shows the syntax tree and 'annotate' toggles parameter types.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
