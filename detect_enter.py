#!/usr/bin/env python3
"""
Companion cancel watcher.

Blocks on the terminal until enter is pressed, then exits 0. The console
kills it when the operation it guards finishes first.
"""
import sys


def main() -> int:
    try:
        line = sys.stdin.readline()
    except KeyboardInterrupt:
        return 1
    # empty read means stdin was closed, not that enter was hit
    return 0 if line else 1


if __name__ == "__main__":
    sys.exit(main())
