#!/usr/bin/python
# C macro expander command line.
#   Reads C source text, expands the macros given with -D, and writes the
#   resulting text.  Directives in the input are not processed.

from __future__ import annotations

import argparse
import os
import sys
from typing import IO

from ppmacro.debug_log import DebugLog
from ppmacro.errors import MacroDefinitionError
from ppmacro.expander import MacroExpander
from ppmacro.lexer import tokenize
from ppmacro.macros import Macros
from ppmacro.source import Error, IterSource
from ppmacro.tokens import Newline, Tokens

version = '0.1'

__all__ = 'CmdExpander', 'main'


class CmdExpander:
    """
    Macro expander for use as a command-line tool.  It is constructed from
    an argv list, such as found in sys.argv[1:].  run() does the work.
    """

    args: argparse.Namespace
    return_code: int = 0            # Number of errors reported.

    def __init__(self, argv: list[str]):
        args, unknowns = self.make_args(argv)
        for arg in unknowns:
            print(f"NOTE: Argument '{arg}' not known, ignoring!",
                  file=sys.stderr)
        self.args = args
        self.verbose: int = args.v
        self.diag: IO[str] = args.diag or sys.stderr
        self.log = DebugLog(args.debug)
        self.macros = Macros()

        # `defines` includes -U names with a trailing '-' and no '='.
        for d in args.defines or ():
            if '=' not in d:
                # Could be an undefine.
                if d.endswith('-'):
                    self.macros.undef(d[:-1])
                    continue
                d += '=1'
            self.define(d.replace('=', ' ', 1))

    def define(self, text: str) -> None:
        """ Define a macro from command line text. """
        try:
            m = self.macros.define_text(text)
        except MacroDefinitionError as e:
            self.on_error('<command line>', e)
        else:
            self.log.msg(f"Define {m!r}")

    def run(self) -> int:
        """ Expand all the inputs.  Returns the number of errors. """
        args = self.args
        out = args.output
        if self.verbose:
            print(f"Expanding "
                  f"{' + '.join(repr(f.name) for f in args.inputs)}",
                  file=self.diag)
            if out is not sys.stdout:
                print(f"Output file {os.path.abspath(out.name)!r}",
                      file=self.diag)
            if self.log.enable:
                print(f"Debug log written to {self.log.enable!r}.",
                      file=self.diag)
        try:
            for file in args.inputs:
                self.expand_file(file, out)
        finally:
            for file in args.inputs:
                if file is not sys.stdin:
                    file.close()
            if out is not sys.stdout:
                out.close()
            if self.diag is not sys.stderr:
                self.diag.close()
            self.log.writelog()
        return self.return_code

    def expand_file(self, file: IO[str], out: IO[str]) -> None:
        """
        Expand the text of one file and write it.  An error is reported,
        and expansion goes on with whatever follows it.
        """
        self.log.msg(f"File {file.name!r}")
        exp = MacroExpander(self.macros, IterSource(tokenize(file.read())),
                            log=self.log)
        toks = Tokens()
        for atom in exp:
            if isinstance(atom, Error):
                self.on_error(file.name, atom.error)
            else:
                toks.append(atom.datum)
        if toks and not toks[-1].nl:
            toks.append(Newline())
        out.write(str(toks))

    def on_error(self, file: str, msg: object, warn: bool = False) -> None:
        """ Prints error or warning message to diagnostic output
        and increments the return code.
        """
        if self.verbose < 2:
            file = os.path.basename(file)
        type = warn and 'warning' or 'ERROR'
        self.log.write(f"{type}: {msg}", left=file)
        print(f"{file} {type}: {msg}", file=self.diag)
        if not warn:
            self.return_code += 1

    def make_args(self, argv: list[str]
                  ) -> tuple[argparse.Namespace, list[str]]:
        """
        Read the command line arguments with the argparse module.  Return a
        Namespace object from the known args, and a list of unknown items in
        argv.
        """
        argp = argparse.ArgumentParser(prog='ppmacro',
            description=
    '''Expands C preprocessor macros in C source text.  Macros are defined
    with -D options.  Directives in the source are not processed.''',
            epilog=
    '''Note that ppmacro ignores any arguments it does not understand.''')
        add = argp.add_argument
        add('inputs', metavar='input', default=[sys.stdin], nargs='*',
            type=argparse.FileType('rt', encoding='utf-8-sig'),
            help='Files to expand (use \'-\' for stdin)'
            )
        add('-o', dest='output', metavar='path', default="-",
            type=argparse.FileType('wt'),
            help='Output to a file instead of stdout',
            )
        add('-D', dest='defines', metavar='MACRO[=VAL]',
            action='append',
            help='''Predefine MACRO as a macro with value VAL.
                      If just MACRO is given, VAL is taken to be 1.
                      MACRO may have a parameter list, as in -D "F(x)=x+1".''',
            )
        add('-U', dest='defines', metavar='macro',
            action=UndefAction,
            help='''Undefine name as a macro.  Overrides any earlier -D of
                 the name.''',
            )
        add('--debug', dest='debug', metavar='path', type=str,
            const="ppmacro_debug.log", nargs='?',
            help='''
                Generate a log file for logging execution.
                Default = ppmacro_debug.log.
                ''',
            )
        add('--diag', dest='diag', metavar='path',
            type=argparse.FileType('wt'),
            help='Write diagnostics to a file instead of stderr.',
            )
        add('-v', dest='v', action='count', default=0,
            help='Verbose.  Repeat for more detail.',
            )
        add('--version', action='version', version=f'%(prog)s {version}')
        return argp.parse_known_args(argv)


class UndefAction(argparse.Action):
    """
    An action which stores its argument followed by a "-" to distinguish it
    from a define. """
    def __call__(self, parser, namespace, values, option_string=None) -> None:
        items = getattr(namespace, self.dest) or []
        items.append(values + "-")
        setattr(namespace, self.dest, items)


def main(argv: list[str] = None, exit: bool = True) -> int:
    if argv is None:
        argv = sys.argv[1:]
    p = CmdExpander(argv)
    return_code = p.run()
    if exit:
        sys.exit(return_code)
    return return_code


if __name__ == "__main__":
    main()
