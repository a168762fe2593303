import sys

from maternity_readmission.main import main

sys.exit(main())
