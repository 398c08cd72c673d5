"""Financial event pipeline package initializer.

Ensures the local ``finpipe`` package is resolved as a regular package
instead of a namespace package.
"""
