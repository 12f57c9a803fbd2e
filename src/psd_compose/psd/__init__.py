"""
Low-level API that translates binary data to Python structure.

All the data structure in this subpackage inherits from one of the object
defined in :py:mod:`psd_compose.psd.base` module.
"""

from psd_compose.psd.document import PSD

__all__ = ["PSD"]
