import sys

from PV_Libs.cli import main


if __name__ == "__main__":
    sys.exit(main())
