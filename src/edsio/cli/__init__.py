"""Command-line interface modules for edsio.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from edsio.cli.run_inspect import inspect_files, main

__all__ = ['inspect_files', 'main']
