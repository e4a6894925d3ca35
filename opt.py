# usage: python opt.py 0.001 1 0.01 ./all %
from hypersearch.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
