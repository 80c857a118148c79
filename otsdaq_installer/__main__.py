"""
Module entry-point that makes the package runnable with

    python -m otsdaq_installer

The behaviour is identical to the *otsdaq-install* console script because
both call :func:`otsdaq_installer.cli.main`.
"""

from otsdaq_installer.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
