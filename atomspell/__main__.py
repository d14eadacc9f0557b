"""Allow ``python -m atomspell``."""

import sys

from atomspell.cli import main

sys.exit(main())
