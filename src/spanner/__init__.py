"""
spanner - declarative component lifecycle manager

Declare components by source URL, pin them to a branch, tag or commit, and
let spanner install, lock, restore and activate them reproducibly.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
