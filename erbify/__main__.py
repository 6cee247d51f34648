import sys

from erbify.cli import main

sys.exit(main())
