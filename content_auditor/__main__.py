"""Allow ``python -m content_auditor``."""

import sys

from content_auditor.ui.cli import main

sys.exit(main())
