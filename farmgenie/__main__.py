import sys

from farmgenie.cli import main

sys.exit(main())
