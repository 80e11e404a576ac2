"""
Allow running BlockCred as a module: ``python -m blockcred``.

This delegates to the CLI entry point so that both
``blockcred`` (console script) and ``python -m blockcred``
behave identically.
"""

from blockcred.cli import main

if __name__ == "__main__":
    main()
