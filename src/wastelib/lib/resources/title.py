"""Parser for the TITLE.PIC title screen."""

from ..exceptions import EndOfDataError
from ..image import PicImage
from ..vxor import decode_vxor

TITLE_WIDTH = 288
TITLE_HEIGHT = 128


def read_title(data: bytes) -> PicImage:
    """Decodes the title picture, a delta encoded 288x128 image."""
    size = TITLE_WIDTH * TITLE_HEIGHT // 2
    if len(data) < size:
        raise EndOfDataError(f"Title picture has {len(data)} bytes, expected {size}")
    return PicImage(
        width=TITLE_WIDTH,
        height=TITLE_HEIGHT,
        data=decode_vxor(data, TITLE_WIDTH // 2, size),
    )
