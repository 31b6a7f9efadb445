import enum
import time
import logging
import numpy as np

from io import BytesIO
from collections import namedtuple
from construct import ConstError, StreamError
from PIL import Image

from wdftool import wdf
from wdftool.errors import WdfError, ReadError, BadMagic, DecodeError
from .wasstructs import WASHead, FrameHead, int16ul, int32ul, PALETTE_SIZE

logger = logging.getLogger(__name__)

# Frame and scanline offsets count from the end of magic + header_len
SKIP_OFFSET = 4
MAX_ALPHA = 0x1F

class Opcode(enum.IntEnum):
    ALPHA  = 0x00
    PIXELS = 0x40
    REPEAT = 0x80
    SKIP   = 0xC0

WASHeader = namedtuple("WASHeader", "directions frames width height x y header_len extra")
Frame = namedtuple("Frame", "x y width height offset line_offsets")

def _base(header):
    return header.header_len + SKIP_OFFSET

def _read(fd, size):
    pos = fd.tell()
    data = fd.read(size)
    if len(data) != size:
        raise ReadError("wanted %d bytes, got %d" % (size, len(data)), offset=pos)
    return data

def _byte(fd):
    return _read(fd, 1)[0]

def read_header(fd):
    fd.seek(0)
    try:
        head = WASHead.parse_stream(fd)
    except ConstError:
        raise BadMagic("not a WAS sprite, expected magic 'SP'", offset=0) from None
    except StreamError as e:
        raise ReadError("sprite header truncated or shorter than 12 bytes", offset=2) from e

    h = head.header
    return WASHeader(h.directions, h.frames, h.width, h.height, h.x, h.y,
                     head.header_len, h.extra)

def read_palette(fd, header):
    fd.seek(_base(header))
    return np.frombuffer(_read(fd, PALETTE_SIZE * int16ul.itemsize), dtype=int16ul)

def read_header_and_palette(data):
    fd = BytesIO(data)
    header = read_header(fd)
    return header, read_palette(fd, header)

def read_frame_offsets(fd, header):
    count = header.directions * header.frames
    fd.seek(_base(header) + PALETTE_SIZE * int16ul.itemsize)
    return np.frombuffer(_read(fd, count * int32ul.itemsize), dtype=int32ul)

def read_frame(fd, raw_offset, header):
    raw_offset = int(raw_offset)
    pos = raw_offset + _base(header)
    fd.seek(pos)
    try:
        head = FrameHead.parse_stream(fd)
    except StreamError as e:
        raise ReadError("truncated frame header", offset=pos) from e

    line_offsets = np.frombuffer(_read(fd, head.height * int32ul.itemsize), dtype=int32ul)
    return Frame(head.x, head.y, head.width, head.height, raw_offset, line_offsets)

def read_frames(fd, offsets, header):
    return [read_frame(fd, offset, header) for offset in offsets.tolist()]

def _colour(fd, palette):
    pos = fd.tell()
    index = _byte(fd)
    if index >= len(palette):
        raise DecodeError("palette index %d out of range" % index, offset=pos)
    return int(palette[index])

def _check_run(x, count, width, pos):
    if x + count > width:
        raise DecodeError("run of %d at column %d overruns row of width %d"
                          % (count, x, width), offset=pos)

def decode_scanline(fd, palette, width):
    row = np.zeros(width, dtype=np.uint32)
    x = 0
    # every pass consumes at least one byte, a short read ends it
    while x < width:
        pos = fd.tell()
        b = _byte(fd)
        op = Opcode(b & 0xC0)

        if op is Opcode.ALPHA:
            if b & 0x20:
                count, alpha = 1, b & 0x1F
            elif b:
                count = b & 0x1F
                alpha = _byte(fd) & 0x1F
            elif x == 0:
                continue
            else:
                break # end of row, the rest stays transparent
            _check_run(x, count, width, pos)
            row[x:x + count] = _colour(fd, palette) | (alpha << 16)

        elif op is Opcode.PIXELS:
            count = b & 0x3F
            _check_run(x, count, width, pos)
            for i in range(x, x + count):
                row[i] = _colour(fd, palette) | (MAX_ALPHA << 16)

        elif op is Opcode.REPEAT:
            count = b & 0x3F
            _check_run(x, count, width, pos)
            row[x:x + count] = _colour(fd, palette) | (MAX_ALPHA << 16)

        else:
            count = b & 0x3F
            _check_run(x, count, width, pos)

        x += count
    return row

def decode_frame(fd, frame, header, palette):
    pixels = np.zeros((frame.height, frame.width), dtype=np.uint32)
    base = frame.offset + _base(header)
    for y, line_offset in enumerate(frame.line_offsets.tolist()):
        fd.seek(line_offset + base)
        pixels[y] = decode_scanline(fd, palette, frame.width)
    return pixels

def to_rgba(packed, width, height):
    packed = np.asarray(packed, dtype=np.uint32)
    if packed.size != width * height:
        raise DecodeError("%d packed pixels for a %dx%d frame" % (packed.size, width, height))
    if not width or not height:
        return Image.new("RGBA", (width, height))

    packed = packed.reshape(height, width)
    rgba = np.stack((
        ((packed >> 11) & 0x1F) << 3, # r
        ((packed >>  5) & 0x3F) << 2, # g
        ( packed        & 0x1F) << 3, # b
        ((packed >> 16) & 0x1F) << 3, # a, 0x1F gives 0xF8 not 0xFF
    ), axis=-1).astype(np.uint8)
    return Image.frombytes("RGBA", (width, height), rgba.tobytes())

def get_images(data):
    """Decode every frame of a WAS sprite held in memory

    Returns the header, the frames in direction-major order and one RGBA
    image per frame.
    """
    fd = BytesIO(data)
    header = read_header(fd)
    palette = read_palette(fd, header)
    frames = read_frames(fd, read_frame_offsets(fd, header), header)

    images = []
    for frame in frames:
        pixels = decode_frame(fd, frame, header, palette)
        images.append(to_rgba(pixels, frame.width, frame.height))

    return header, frames, images

def load_sprite(archive_path, uid):
    start = time.perf_counter()
    try:
        data = wdf.read_archive(archive_path)
        entry = wdf.lookup(wdf.parse(data), uid)
        result = get_images(wdf.extract(data, entry))
    except WdfError as e:
        e.uid = uid
        raise

    logger.debug("0x%08x: %d frames in %dms", uid, len(result[1]),
                 (time.perf_counter() - start) * 1000)
    return result

__all__ = [
    "Opcode", "WASHeader", "Frame",
    "read_header", "read_palette", "read_header_and_palette", "read_frame_offsets",
    "read_frame", "read_frames", "decode_scanline", "decode_frame", "to_rgba",
    "get_images", "load_sprite",
]
