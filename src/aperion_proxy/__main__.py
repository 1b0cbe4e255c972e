"""Allow ``python -m aperion_proxy``."""

import sys

from aperion_proxy.cli import main

sys.exit(main())
