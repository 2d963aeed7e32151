import sys

from dotenv import load_dotenv

from deathmountain.bootstrap import create_game_state_service
from deathmountain.presentation.cli import run


def main(argv=None) -> int:
    load_dotenv()
    try:
        return run(argv, lambda args: create_game_state_service(args.fixture))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
