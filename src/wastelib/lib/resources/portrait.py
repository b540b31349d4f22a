"""Parser and animation for the ALLPICS1 and ALLPICS2 portrait files."""

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..animation import AnimationFrame, AnimationPlayer, AnimationSequence
from ..exceptions import FormatError
from ..huffman import decode_huffman
from ..image import PicImage
from ..msq import read_sized_msq_header
from ..reader import BitReader
from ..vxor import decode_vxor_inplace
from .base import Resource, get_item

logger = logging.getLogger(__name__)

PORTRAIT_WIDTH = 96
PORTRAIT_HEIGHT = 84
END_MARKER = 0xFFFF
SCRIPT_END = 0xFF


class PortraitPatch(BaseModel):
    """
    XOR values applied to the frame at ``offset``. The raw word holds the
    payload size minus one in the top nibble and the offset in the lower
    twelve bits.
    """

    model_config = ConfigDict(frozen=True)

    offset: int
    data: bytes

    @property
    def x(self) -> int:
        return self.offset % (PORTRAIT_WIDTH // 2)

    @property
    def y(self) -> int:
        return self.offset // (PORTRAIT_WIDTH // 2)

    def apply(self, frame: AnimationFrame) -> None:
        frame.xor(self.offset, self.data)


def read_portrait_patch(reader: BitReader) -> Optional[PortraitPatch]:
    size_and_offset = reader.read_uint16()
    if size_and_offset == END_MARKER:
        return None
    size = (size_and_offset >> 12) + 1
    return PortraitPatch(offset=size_and_offset & 0x0FFF, data=reader.read_uint8s(size))


class PortraitUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    patches: List[PortraitPatch]

    def apply(self, frame: AnimationFrame) -> None:
        for patch in self.patches:
            patch.apply(frame)


def read_portrait_update(reader: BitReader) -> PortraitUpdate:
    patches = []
    while True:
        patch = read_portrait_patch(reader)
        if patch is None:
            return PortraitUpdate(patches=patches)
        patches.append(patch)


class PortraitScriptLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    delay: int
    update: int


class PortraitScript(BaseModel):
    """A looping list of (delay, update index) lines."""

    model_config = ConfigDict(frozen=True)

    lines: List[PortraitScriptLine]

    def get_line(self, index: int) -> PortraitScriptLine:
        return get_item(self.lines, index, "Script line")


def read_portrait_script(reader: BitReader) -> PortraitScript:
    lines = []
    while True:
        delay = reader.read_uint8()
        if delay == SCRIPT_END:
            return PortraitScript(lines=lines)
        lines.append(PortraitScriptLine(delay=delay, update=reader.read_uint8()))


class Portrait(BaseModel):
    """
    A 96x84 portrait: the base frame plus the scripts and updates which
    animate parts of it independently.
    """

    model_config = ConfigDict(frozen=True)

    image: PicImage
    scripts: List[PortraitScript]
    updates: List[PortraitUpdate]

    @property
    def width(self) -> int:
        return PORTRAIT_WIDTH

    @property
    def height(self) -> int:
        return PORTRAIT_HEIGHT

    def color_at(self, x: int, y: int) -> int:
        return self.image.color_at(x, y)

    def get_script(self, index: int) -> PortraitScript:
        return get_item(self.scripts, index, "Script")

    def get_update(self, index: int) -> PortraitUpdate:
        return get_item(self.updates, index, "Update")

    def create_sequence(self) -> "PortraitSequence":
        return PortraitSequence(self)

    def create_player(self, on_draw, **kwargs) -> AnimationPlayer:
        return AnimationPlayer(self.create_sequence(), on_draw, **kwargs)


def read_portrait(reader: BitReader) -> Portrait:
    """Reads the base frame block and the animation block of one portrait."""
    image_size, _ = read_sized_msq_header(reader)
    if image_size != PORTRAIT_WIDTH * PORTRAIT_HEIGHT // 2:
        raise FormatError(
            f"Portrait picture has {image_size} bytes, expected {PORTRAIT_WIDTH * PORTRAIT_HEIGHT // 2}"
        )
    pixels = bytearray(decode_huffman(reader, image_size))
    decode_vxor_inplace(pixels, PORTRAIT_WIDTH // 2)
    image = PicImage(width=PORTRAIT_WIDTH, height=PORTRAIT_HEIGHT, data=bytes(pixels))

    anim_size, _ = read_sized_msq_header(reader, disks=(0,))
    anim_reader = BitReader(decode_huffman(reader, anim_size))

    scripts_size = anim_reader.read_uint16()
    scripts = []
    while anim_reader.byte_index - 2 < scripts_size:
        scripts.append(read_portrait_script(anim_reader))

    updates_size = anim_reader.read_uint16()
    start = anim_reader.byte_index
    updates = []
    while anim_reader.byte_index - start < updates_size:
        updates.append(read_portrait_update(anim_reader))

    return Portrait(image=image, scripts=scripts, updates=updates)


class Portraits(Resource):
    portraits: List[Portrait] = []

    def __init__(self, *files: bytes, **kwargs):
        super().__init__(**kwargs)
        for data in files:
            self._parse(data)

    def _parse(self, data: bytes):
        reader = BitReader(data)
        portraits = []
        while reader.has_data():
            portraits.append(read_portrait(reader))
        logger.debug(f"Read {len(portraits)} portraits")
        self.portraits.extend(portraits)

    @classmethod
    def from_files(cls, *files: bytes) -> "Portraits":
        return cls(*files)

    def get_portrait(self, index: int) -> Portrait:
        return get_item(self.portraits, index, "Portrait")


class PortraitSequence(AnimationSequence):
    """
    Runs all scripts of a portrait side by side. Every advance jumps ahead
    by the smallest remaining delay and fires each script whose delay ran
    out.
    """

    def __init__(self, portrait: Portrait):
        self.portrait = portrait
        self.reset()

    def reset(self) -> AnimationFrame:
        self.pointers = [0] * len(self.portrait.scripts)
        self.delays = [
            script.lines[0].delay if script.lines else None for script in self.portrait.scripts
        ]
        self.frame = AnimationFrame(self.portrait.image)
        return self.frame

    @property
    def delay(self) -> int:
        active = [delay for delay in self.delays if delay is not None]
        return min(active) if active else 0

    def advance(self) -> int:
        elapsed = self.delay
        for i, script in enumerate(self.portrait.scripts):
            if self.delays[i] is None:
                continue
            self.delays[i] -= elapsed
            if self.delays[i] <= 0:
                line = script.lines[self.pointers[i]]
                self.portrait.get_update(line.update).apply(self.frame)
                self.pointers[i] = (self.pointers[i] + 1) % len(script.lines)
                self.delays[i] = script.lines[self.pointers[i]].delay
        return self.delay
