"""
Exceptions raised by psd_compose.

Every error surfaced to callers derives from :py:class:`PSDComposeError`, and
also from the closest built-in exception so that generic handlers keep working::

    from psd_compose import render_to_buffer
    from psd_compose.errors import PSDComposeError

    try:
        png = render_to_buffer('card.psd', 'card.png', {'USERNAME': 'Jordan'})
    except PSDComposeError as e:
        print('%s: %s' % (e.kind, e))
"""


class PSDComposeError(Exception):
    """Base class of all psd_compose errors."""

    kind = "error"


class NotFoundError(PSDComposeError, FileNotFoundError):
    """A referenced document, background or template does not exist."""

    kind = "not_found"


class ParseError(PSDComposeError, ValueError):
    """Bytes do not conform to the expected container structure."""

    kind = "parse_error"


class EncodingError(PSDComposeError, ValueError):
    """A raster cannot be decoded, resized or encoded."""

    kind = "encoding_error"


class OutputError(PSDComposeError, OSError):
    """The output artifact cannot be created or written."""

    kind = "io_error"
