"""cexpr - command-line front end

Usage examples:
  cexpr 'a = b ? c : (int)d'
  cexpr -t size_t --format source '(size_t)n * 2'
  echo '"ab" "cd"' | cexpr --format dot
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from cexpr.ast_nodes import dump_ast
from cexpr.dot import render_dot
from cexpr.frontend import ExpressionFrontend
from cexpr.printer import to_source

logger = logging.getLogger(__name__)

FORMATS = {
    "tree": dump_ast,
    "source": lambda expr: to_source(expr) + "\n",
    "dot": render_dot,
}


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(prog="cexpr", description="Parse a C expression and print its syntax tree")
    ap.add_argument("expression", nargs="*", help="Expression text; read from stdin when omitted")
    ap.add_argument("-t", "--typedef", dest="typedefs", action="append", default=[],
                    metavar="NAME", help="Treat NAME as a type name (repeatable)")
    ap.add_argument("--format", choices=sorted(FORMATS), default="tree", help="Output format")
    ap.add_argument("--max-depth", type=int, default=None, help="Nesting limit for the parser")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug)")
    args = ap.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    source = " ".join(args.expression) if args.expression else sys.stdin.read()
    logger.info("parsing %d characters", len(source))

    frontend = ExpressionFrontend(typedefs=args.typedefs, max_depth=args.max_depth)
    result = frontend.parse_source(source)
    if not result.success:
        for e in result.errors:
            print("Error:", e)
        return 1

    sys.stdout.write(FORMATS[args.format](result.expression))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
