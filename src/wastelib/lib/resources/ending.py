"""Parser and animation for the END.CPA ending cinematic."""

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

ENDING_WIDTH = 288
ENDING_HEIGHT = 128
PATCH_SIZE = 4
END_MARKER = 0xFFFF
# Magic bytes in place of "msq" in the animation block header
ANIMATION_MAGIC = b"\x08\x67\x01"
# After the last frame playback continues with this frame
LOOP_FIRST = 11
LOOP_END = 15
# Raw patch offsets count 8 pixel steps on a 320 pixel wide screen
SCREEN_WIDTH = 320


class EndingPatch(BaseModel):
    """Four bytes replacing the frame data at ``offset``."""

    model_config = ConfigDict(frozen=True)

    raw_offset: int
    data: bytes

    @property
    def offset(self) -> int:
        x = self.raw_offset * 8 % SCREEN_WIDTH
        y = self.raw_offset * 8 // SCREEN_WIDTH
        return y * (ENDING_WIDTH // 2) + (x >> 1)

    def apply(self, frame: AnimationFrame) -> None:
        frame.replace(self.offset, self.data)


class EndingUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    delay: int
    patches: List[EndingPatch]

    def apply(self, frame: AnimationFrame) -> None:
        for patch in self.patches:
            patch.apply(frame)


def read_ending_update(reader: BitReader) -> Optional[EndingUpdate]:
    """Reads one update or returns None at the end marker."""
    delay = reader.read_uint16()
    if delay == END_MARKER:
        return None
    patches = []
    while True:
        raw_offset = reader.read_uint16()
        if raw_offset == END_MARKER:
            break
        patches.append(EndingPatch(raw_offset=raw_offset, data=reader.read_uint8s(PATCH_SIZE)))
    return EndingUpdate(delay=delay, patches=patches)


class Ending(Resource):
    """
    The ending cinematic: a compressed 288x128 base image followed by a
    compressed list of timed updates.
    """

    image: Optional[PicImage] = None
    updates: List[EndingUpdate] = []

    def __init__(self, data: bytes, **kwargs):
        super().__init__(**kwargs)
        self._parse(data)

    def _parse(self, data: bytes):
        reader = BitReader(data)
        self.image = self._parse_image(reader)
        self.updates = self._parse_updates(reader)
        logger.debug(f"Read ending with {len(self.updates)} updates")

    def _parse_image(self, reader: BitReader) -> PicImage:
        size, _ = read_sized_msq_header(reader, disks=(0,))
        if size != ENDING_WIDTH * ENDING_HEIGHT // 2:
            raise FormatError(
                f"Ending picture has {size} bytes, expected {ENDING_WIDTH * ENDING_HEIGHT // 2}"
            )
        pixels = bytearray(decode_huffman(reader, size))
        decode_vxor_inplace(pixels, ENDING_WIDTH // 2)
        return PicImage(width=ENDING_WIDTH, height=ENDING_HEIGHT, data=bytes(pixels))

    def _parse_updates(self, reader: BitReader) -> List[EndingUpdate]:
        size = reader.read_uint32()
        magic = reader.read_uint8s(3)
        disk = reader.read_uint8()
        if magic != ANIMATION_MAGIC or disk != 0:
            raise FormatError("Invalid animation data block")
        data = decode_huffman(reader, size)
        updates_reader = BitReader(data)
        inner_size = updates_reader.read_uint16()
        if inner_size != size - 4:
            raise FormatError(f"Invalid animation data size {inner_size}, expected {size - 4}")
        updates = []
        while True:
            update = read_ending_update(updates_reader)
            if update is None:
                break
            updates.append(update)
        if updates_reader.read_uint16() != 0:
            raise FormatError("Missing animation data terminator")
        return updates

    @property
    def width(self) -> int:
        return ENDING_WIDTH

    @property
    def height(self) -> int:
        return ENDING_HEIGHT

    def color_at(self, x: int, y: int) -> int:
        return self.image.color_at(x, y)

    def get_update(self, index: int) -> EndingUpdate:
        return get_item(self.updates, index, "Update")

    def create_sequence(self) -> "EndingSequence":
        return EndingSequence(self)

    def create_player(self, on_draw, **kwargs) -> AnimationPlayer:
        return AnimationPlayer(self.create_sequence(), on_draw, **kwargs)


class EndingSequence(AnimationSequence):
    """
    Steps through the ending updates. Frame 0 is the base image; after the
    last frame playback loops back to frame 11.
    """

    def __init__(self, ending: Ending):
        self.ending = ending
        self.reset()

    def reset(self) -> AnimationFrame:
        self.frame_index = 0
        self.frame = AnimationFrame(self.ending.image)
        return self.frame

    def advance(self) -> int:
        self.frame_index += 1
        if self.frame_index == LOOP_END:
            self.frame_index = LOOP_FIRST
        self.ending.get_update(self.frame_index).apply(self.frame)
        return self.delay

    @property
    def delay(self) -> int:
        return self.ending.get_update(self.frame_index).delay
