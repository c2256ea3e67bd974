import sys

from framestosvg.main import main

if __name__ == '__main__':
    sys.exit(main())
