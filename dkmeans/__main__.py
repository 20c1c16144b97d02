import sys

from dkmeans.main import main

sys.exit(main())
