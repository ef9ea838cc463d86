import sys

from bf_eval.cli import main

sys.exit(main())
