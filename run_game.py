"""Play Beggar Thy Neighbour in the terminal."""
import sys

from src.console.app import main

if __name__ == '__main__':
    sys.exit(main())
