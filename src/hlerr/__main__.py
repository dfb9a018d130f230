"""hlerr 入口点。

支持: python -m hlerr <command> [arguments...]
"""

from .app import main

if __name__ == "__main__":
    main()
