import sys

from .reloader import main

raise SystemExit(main(sys.argv[1:]))
