"""Package entry point for ``python -m transcript_player``.

WHY: Users run the player as ``python -m transcript_player <command>``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package.

HOW: Delegates to the CLI's main() function.
"""

from transcript_player.cli import main

if __name__ == "__main__":
    main()
