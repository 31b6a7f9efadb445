#!/usr/bin/env python3
import sys
import logging

from pathlib import Path
from argparse import ArgumentParser
from PIL import Image

from wdftool.errors import WdfError
from wdftool.wdf import read_archive
from wdftool.wdftool import uid_arg, setup_logging
from .was import get_images, load_sprite

logger = logging.getLogger(__name__)

argparser = ArgumentParser(description="Render the frames of a WAS sprite to PNG")
argparser.add_argument("file", type=Path, help="WDF archive with --uid, a bare WAS file without")
argparser.add_argument("out", type=Path)
argparser.add_argument("--uid", type=uid_arg)
argparser.add_argument("--canvas", action="store_true",
                       help="place frames on the sprite canvas at their key point")
argparser.add_argument("-v", "--verbose", action="store_true")

def place(header, frame, img):
    canvas = Image.new("RGBA", (header.width, header.height))
    canvas.paste(img, (header.x - frame.x, header.y - frame.y))
    return canvas

def main(argv=None):
    args = argparser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.uid is not None:
            header, frames, images = load_sprite(args.file, args.uid)
        else:
            header, frames, images = get_images(read_archive(args.file))
    except WdfError as e:
        logger.error("%s: %s", args.file, e)
        return 1

    print("Directions", "Frames", "Width", "Height", "X", "Y", sep='\t')
    print(header.directions, header.frames, header.width, header.height, header.x, header.y, sep='\t')

    args.out.mkdir(parents=True, exist_ok=True)
    for idx, (frame, img) in enumerate(zip(frames, images)):
        direction, number = divmod(idx, header.frames)
        if args.canvas:
            img = place(header, frame, img)
        if 0 in img.size:
            logger.warning("%d_%d: empty frame, skipped", direction, number)
            continue
        img.save(args.out / ("%d_%d.png" % (direction, number)))

    logger.info("wrote %d frames to %s", len(images), args.out)
    return 0

if __name__ == "__main__":
    sys.exit(main())
