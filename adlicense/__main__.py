import sys

from adlicense.cli import main

sys.exit(main())
