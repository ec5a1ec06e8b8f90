"""Package entry point for ``python -m unitypackage_util``.

WHY: Users run the tool as ``python -m unitypackage_util PACKAGE COMMAND``
when the console script is not on PATH.

HOW: Delegates straight to the CLI's main() and exits with its code.
"""

import sys

from unitypackage_util.cli import main

if __name__ == "__main__":
    sys.exit(main())
