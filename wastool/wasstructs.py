import numpy as np

from construct import Struct, Const, Int16ul, Int32ul, FixedSized, GreedyBytes, this

int32ul = np.dtype("<u4")
int16ul = np.dtype("<u2")

PALETTE_SIZE = 256

WASHead = Struct(
    "magic"      / Const(b"SP"),
    "header_len" / Int16ul,
    "header"     / FixedSized(this.header_len, Struct(
        "directions" / Int16ul,
        "frames"     / Int16ul, # per direction
        "width"      / Int16ul,
        "height"     / Int16ul,
        "x"          / Int16ul, # key point
        "y"          / Int16ul,
        "extra"      / GreedyBytes, # unused, newer files store delays here
    )),
)

FrameHead = Struct(
    "x"      / Int32ul,
    "y"      / Int32ul,
    "width"  / Int32ul,
    "height" / Int32ul,
)

__all__ = ["WASHead", "FrameHead", "int32ul", "int16ul", "PALETTE_SIZE"]
