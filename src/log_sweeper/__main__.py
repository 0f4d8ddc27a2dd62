"""Allow ``python -m log_sweeper``."""

import sys

from .main import main

sys.exit(main())
