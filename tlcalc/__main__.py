import sys

from tlcalc.main import main

sys.exit(main())
