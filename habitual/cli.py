import sys
from pathlib import Path

import fncli

from . import db
from .core.errors import HabitualError
from .lib.log import setup_logging


def main():
    db.init()
    setup_logging()
    fncli.autodiscover(Path(__file__).parent, "habitual")

    argv = ["habitual", *sys.argv[1:]]
    try:
        code = fncli.dispatch(argv)
    except HabitualError as e:
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
