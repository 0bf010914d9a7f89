"""Allow ``python -m reverlib``."""

import sys

from reverlib.cli import main

sys.exit(main())
