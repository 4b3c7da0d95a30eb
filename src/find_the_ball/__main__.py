"""Allow ``python -m find_the_ball``."""

import sys

from .cli import main

sys.exit(main())
