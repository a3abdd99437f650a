import sys

from flatten.cli import main

sys.exit(main())
