import sys

from regtree.cli import main

sys.exit(main())
