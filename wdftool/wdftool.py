#!/usr/bin/env python3
import sys
import logging

from pathlib import Path
from argparse import ArgumentParser
from .wdf import read_archive, parse, lookup, extract
from .errors import WdfError

logger = logging.getLogger(__name__)

def uid_arg(text):
    # 0x prefix for hex, as printed by the listing
    return int(text, 0)

argparser = ArgumentParser(description="List or extract the entries of a WDF archive")
argparser.add_argument("archive", type=Path)
argparser.add_argument("out", type=Path, nargs="?")
argparser.add_argument("--uid", type=uid_arg, action="append", dest="uids")
argparser.add_argument("-v", "--verbose", action="store_true")

def setup_logging(verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")

def main(argv=None):
    args = argparser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        data = read_archive(args.archive)
        entries = parse(data)
        if args.uids:
            selected = [lookup(entries, uid) for uid in args.uids]
        else:
            selected = sorted(entries.values(), key=lambda entry: entry.offset)

        if args.out is None:
            print("Uid", "Offset", "Size", "Type", sep='\t')
            for entry in selected:
                print("0x%08x" % entry.uid, hex(entry.offset), entry.size, entry.kind.name, sep='\t')
            return 0

        args.out.mkdir(parents=True, exist_ok=True)
        for entry in selected:
            path = args.out / ("%08x.%s" % (entry.uid, entry.kind.extension))
            path.write_bytes(extract(data, entry))
            logger.debug("%s: %d bytes", path.name, entry.size)
    except WdfError as e:
        logger.error("%s: %s", args.archive, e)
        return 1

    logger.info("extracted %d entries to %s", len(selected), args.out)
    return 0

if __name__ == "__main__":
    sys.exit(main())
