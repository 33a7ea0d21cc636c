"""
drng.utils
----------

Light helpers shared across the package: fixed-width integer encodings, hex
I/O, XOR folding, and hash-function selection.

This package file deliberately avoids eager imports to keep dependency order
simple.
"""

__all__: list[str] = []
