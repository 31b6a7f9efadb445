import enum
import logging
import numpy as np

from collections import Counter, namedtuple
from .errors import ReadError, FormatError, NotFoundError
from .wdfstructs import WDFHeader, WDFEntry

logger = logging.getLogger(__name__)

class AssetType(enum.IntEnum):
    # values are the tags the original tools used
    UNKNOWN = 0
    WAS     = 1
    MP3     = 2
    JPG     = 3
    TGA     = 4
    WAV     = 5
    BMP     = 6
    LUA     = 7

    @property
    def extension(self):
        if self is AssetType.UNKNOWN:
            return "bin"
        return self.name.lower()

ArchiveEntry = namedtuple("ArchiveEntry", "uid offset size spare kind")

def _peek(data, pos, size):
    # Short reads are zero filled, sniffing must never fail
    if pos < 0 or pos >= len(data):
        return bytes(size)
    chunk = bytes(data[pos:pos + size])
    return chunk + bytes(size - len(chunk))

def _u16(data, pos):
    return int.from_bytes(_peek(data, pos, 2), "little")

def _u32(data, pos):
    return int.from_bytes(_peek(data, pos, 4), "little")

def classify(data, entry):
    """Guess what an entry holds from a few signature bytes at either end"""
    start = entry.offset
    end = entry.offset + entry.size

    hdw = _u16(data, start)
    sst = _u32(data, start + 6)
    nst = _u32(data, start + 8)
    dss = _u32(data, end - 6)
    dsg = _peek(data, end - 3, 3)
    sss = _u16(data, start + 4)

    if hdw == 0x5053:   # "SP"
        return AssetType.WAS
    elif hdw == 0x4D42: # "BM"
        return AssetType.BMP
    elif sst == 0x49464A10:
        return AssetType.JPG
    elif dss == 0x454C4946: # "FILE" of the TRUEVISION-XFILE footer
        return AssetType.TGA
    elif hdw == 0x4952 and nst == 0x45564157: # "RI", "WAVE"
        return AssetType.WAV
    elif hdw == 0x00FF:
        return AssetType.MP3
    # sss == 0x0F00 on its own is enough, the engine groups it this way
    elif (dsg == b"\x11\x00\x00" and sss == 0x1000) or sss == 0x0F00:
        return AssetType.LUA
    return AssetType.UNKNOWN

def parse(data):
    if len(data) < WDFHeader.sizeof():
        raise ReadError("truncated archive header (%d bytes)" % len(data), offset=0)

    hdr = WDFHeader.parse(data)
    end = hdr.offset + hdr.count * WDFEntry.itemsize
    if end > len(data):
        raise FormatError("entry table of %d records runs past end of archive (%d bytes)"
                          % (hdr.count, len(data)), offset=hdr.offset)

    entries = {}
    if hdr.count:
        table = np.frombuffer(data, dtype=WDFEntry, count=hdr.count, offset=hdr.offset)
        # duplicate uids: the last record wins
        for uid, offset, size, spare in table.tolist():
            entries[uid] = ArchiveEntry(uid, offset, size, spare, AssetType.UNKNOWN)

    for uid, entry in entries.items():
        entries[uid] = entry._replace(kind=classify(data, entry))

    tally = Counter(entry.kind for entry in entries.values())
    logger.debug("%d records, %d unique entries: %s", hdr.count, len(entries),
                 ", ".join("%s=%d" % (kind.name, n) for kind, n in sorted(tally.items())))
    return entries

def read_archive(path):
    try:
        with open(path, "rb") as fd:
            return fd.read()
    except OSError as e:
        raise ReadError("cannot read %s: %s" % (path, e.strerror or e)) from e

def decode(path):
    return parse(read_archive(path))

def lookup(entries, uid):
    try:
        return entries[uid]
    except KeyError:
        raise NotFoundError("no such entry in archive", uid=uid) from None

def extract(data, entry):
    end = entry.offset + entry.size
    if end > len(data):
        raise ReadError("entry data runs past end of archive (%d bytes)" % len(data),
                        offset=entry.offset, uid=entry.uid)
    return bytes(data[entry.offset:end])

__all__ = ["AssetType", "ArchiveEntry", "classify", "parse", "read_archive", "decode", "lookup", "extract"]
