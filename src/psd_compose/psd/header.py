"""
File header section, the first 26 bytes of every PSD and PSB file.
"""

import logging
from typing import Any, BinaryIO

from attrs import define, field

from psd_compose.constants import ColorMode
from psd_compose.psd.base import BaseElement
from psd_compose.psd.bin_utils import read_fmt
from psd_compose.validators import in_, range_

logger = logging.getLogger(__name__)

_MAX_SIZE = 300000


def _check_signature(instance: Any, attribute: Any, value: bytes) -> None:
    if value != b"8BPS":
        raise ValueError("Not a PSD or PSB file, signature %r" % value)


@define(repr=True)
class FileHeader(BaseElement):
    """
    File header.

    .. py:attribute:: version

        1 for PSD, 2 for PSB.

    .. py:attribute:: channels

        Channel count of the composite preview, alpha channels included.

    .. py:attribute:: height
    .. py:attribute:: width
    .. py:attribute:: depth

        Bits per channel.

    .. py:attribute:: color_mode

        :py:class:`~psd_compose.constants.ColorMode`.
    """

    signature: bytes = field(default=b"8BPS", repr=False, validator=_check_signature)
    version: int = field(default=1, validator=in_((1, 2)))
    channels: int = field(default=4, validator=range_(1, 56))
    height: int = field(default=64, validator=range_(1, _MAX_SIZE))
    width: int = field(default=64, validator=range_(1, _MAX_SIZE))
    depth: int = field(default=8, validator=in_((1, 8, 16, 32)))
    color_mode: ColorMode = field(
        default=ColorMode.RGB, converter=ColorMode, validator=in_(ColorMode)
    )

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "FileHeader":
        # 6 reserved bytes follow the version.
        return cls(*read_fmt("4sH6xHIIHH", fp))
