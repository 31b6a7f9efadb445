import numpy as np

from construct import Struct, Int32ul

WDFHeader = Struct(
    "flag"   / Int32ul, # ignored by the engine
    "count"  / Int32ul,
    "offset" / Int32ul, # absolute offset of the entry table
)

WDFEntry = np.dtype([
    ("uid",    "<u4"),
    ("offset", "<u4"),
    ("size",   "<u4"),
    ("spare",  "<u4"),
])

__all__ = ["WDFHeader", "WDFEntry"]
