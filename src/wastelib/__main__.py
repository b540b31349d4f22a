import argparse
import base64
import json
import logging
import os
import sys
from typing import Optional

from wastelib.lib.exceptions import WastelibError
from wastelib.lib.resources import (
    Cursors,
    Ending,
    ExeImage,
    ExeLayout,
    Font,
    GameFile,
    Portraits,
    Sprites,
    Tilesets,
    read_title,
)

KINDS = ("cursors", "font", "sprites", "tilesets", "title", "ending", "portraits", "exe", "game")


class BytesEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, bytes):
            return base64.b64encode(obj).decode("ascii")
        return json.JSONEncoder.default(self, obj)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def load_layout(args) -> Optional[ExeLayout]:
    if not args.layout:
        return None
    with open(args.layout, "r", encoding="utf-8") as f:
        return ExeLayout.model_validate_json(f.read())


def decode(args, files):
    """Decodes the requested resource and returns a JSON serializable value."""
    kind = args.kind
    if kind == "cursors":
        return Cursors(files[0]).model_dump()
    if kind == "font":
        return Font(files[0]).model_dump()
    if kind == "sprites":
        if len(files) < 2:
            raise ValueError("sprites needs the image file and the mask file")
        return Sprites(files[0], files[1]).model_dump()
    if kind == "tilesets":
        return Tilesets(*files).model_dump()
    if kind == "title":
        return read_title(files[0]).model_dump()
    if kind == "ending":
        return Ending(files[0]).model_dump()
    if kind == "portraits":
        return Portraits(*files).model_dump()
    if kind == "exe":
        exe = ExeImage(files[0], layout=load_layout(args))
        return {name: exe.get_strings(name) for name in exe.string_table_names}
    game = GameFile(files[0])
    result = game.model_dump()
    if args.exe:
        exe = ExeImage(read_file(args.exe), layout=load_layout(args))
        if args.map is not None:
            maps = [game.read_map(args.map, exe)]
        else:
            maps = game.read_maps(exe)
        result["maps"] = [game_map.model_dump() for game_map in maps]
    return result


def main():
    parser = argparse.ArgumentParser(description="Dump Wasteland resource files to JSON.")
    parser.add_argument("kind", choices=KINDS, help="Kind of resource to decode.")
    parser.add_argument("files", nargs="+", help="Path(s) to the resource file(s).")
    parser.add_argument("--exe", help="Path to WL.EXE, needed to decode game maps.")
    parser.add_argument("--layout", help="JSON file with the executable table layout.")
    parser.add_argument("--map", type=int, help="Only decode the map with this index.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    setup_logging(args.verbose)

    for path in args.files + [p for p in (args.exe, args.layout) if p]:
        if not os.path.exists(path):
            logging.error(f"File not found at {path}")
            return 1

    try:
        files = [read_file(path) for path in args.files]
        result = decode(args, files)
    except (WastelibError, ValueError) as e:
        logging.error(f"Error decoding {args.kind}: {e}")
        return 1

    print(json.dumps(result, indent=2, cls=BytesEncoder))
    return 0


if __name__ == "__main__":
    sys.exit(main())
