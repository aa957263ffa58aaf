import sys

from jtoolkit.cli import main

sys.exit(main())
