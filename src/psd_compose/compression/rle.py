"""
PackBits run-length decoding, used by RLE compressed rows.

Each packet starts with a header byte ``n``:

- ``n < 128``: ``n + 1`` literal bytes follow
- ``n > 128``: the next byte repeats ``257 - n`` times
- ``n == 128``: skipped
"""


def decode(data: bytes, size: int) -> bytes:
    """
    Decode one PackBits row.

    :param data: packed bytes.
    :param size: expected row size in bytes, ``0`` to accept any size.
    :raise ValueError: a packet runs past the input or the row size.
    """
    src = memoryview(data)
    out = bytearray()
    pos = 0
    while pos < len(src):
        header = src[pos]
        pos += 1
        if header == 128:
            continue
        if header > 128:
            count = 257 - header
            chunk = bytes(src[pos : pos + 1]) * count
            pos += 1
        else:
            count = header + 1
            chunk = bytes(src[pos : pos + count])
            pos += count
        if len(chunk) != count or (size and len(out) + count > size):
            raise ValueError("Invalid RLE compression")
        out += chunk

    if size and len(out) != size:
        raise ValueError("Expected %d bytes but decoded %d bytes" % (size, len(out)))
    return bytes(out)
