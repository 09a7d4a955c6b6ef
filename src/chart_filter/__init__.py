"""chart-filter core package.

This package builds an index of the charts found in a repository checkout and
narrows it to the charts a subscription's package filter selects. It is
callable from the ``chart-filter`` CLI and from a controller.
"""

__all__ = [
    "core",
]
