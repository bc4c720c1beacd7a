import sys

from .codegen.cli_integration import main

sys.exit(main())
