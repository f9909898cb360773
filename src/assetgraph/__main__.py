"""Main entry point for the assetgraph command line tool."""

import sys

from assetgraph.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
