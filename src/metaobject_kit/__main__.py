"""Allow ``python -m metaobject_kit plan|push``."""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
