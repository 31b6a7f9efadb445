import struct
import pytest

def build_archive(blobs, flag=0):
    """blobs is a list of (uid, data), stored back to back after the header"""
    records = []
    body = b""
    pos = 12
    for uid, blob in blobs:
        records.append(struct.pack("<4I", uid, pos, len(blob), 0))
        body += blob
        pos += len(blob)
    return struct.pack("<3I", flag, len(records), pos) + body + b"".join(records)

def build_sprite(frames, palette=None, directions=1, size=(0, 0), key=(0, 0), extra=b""):
    """frames is a list of (x, y, width, rows) with rows the raw opcode bytes"""
    header = struct.pack("<6H", directions, len(frames) // directions, *size, *key) + extra

    colours = [0] * 256
    for index, colour in (palette or {}).items():
        colours[index] = colour

    offsets = []
    blocks = b""
    pos = 512 + 4 * len(frames)
    for x, y, width, rows in frames:
        lines = []
        line = 16 + 4 * len(rows)
        for row in rows:
            lines.append(line)
            line += len(row)
        block = struct.pack("<4I", x, y, width, len(rows))
        block += struct.pack("<%dI" % len(lines), *lines) + b"".join(rows)
        offsets.append(pos)
        pos += len(block)
        blocks += block

    return (b"SP" + struct.pack("<H", len(header)) + header
            + struct.pack("<256H", *colours)
            + struct.pack("<%dI" % len(offsets), *offsets)
            + blocks)

@pytest.fixture
def make_archive():
    return build_archive

@pytest.fixture
def make_sprite():
    return build_sprite

RED = 0xF800

@pytest.fixture
def red_sprite():
    # 2x1 frame: one literal pixel then a repeat of one
    return build_sprite([(0, 0, 2, [bytes([0x41, 0x00, 0x81, 0x00])])],
                        palette={0: RED}, size=(2, 1))
