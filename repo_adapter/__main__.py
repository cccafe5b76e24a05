import sys

from repo_adapter.main import main

if __name__ == "__main__":
    sys.exit(main())
