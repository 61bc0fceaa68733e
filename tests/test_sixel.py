import pytest
from PIL import Image

from misskeyvt import sixel


class TestEncode:
    def test_framing(self) -> None:
        data = sixel.encode(Image.new("RGBA", (16, 16), (255, 0, 0, 255)))

        assert data.startswith(sixel.DCS + b'0;1;0q"1;1;16;16')
        assert data.endswith(sixel.ST)
        assert b";2;100;0;0" in data

    def test_bands(self) -> None:
        data = sixel.encode(Image.new("RGBA", (16, 16), (255, 0, 0, 255)))

        # Three bands of six rows, the last one only four deep.
        assert data.count(b"-") == 2
        assert data.count(b"!16~") == 2
        assert b"!16N" in data

    def test_transparent_pixels_are_skipped(self) -> None:
        data = sixel.encode(Image.new("RGBA", (16, 16), (0, 0, 0, 0)))
        assert data == sixel.DCS + b'0;1;0q"1;1;16;16--' + sixel.ST

    def test_partly_transparent(self) -> None:
        image = Image.new("RGBA", (4, 1), (0, 0, 0, 0))
        image.putpixel((0, 0), (255, 0, 0, 255))
        image.putpixel((1, 0), (255, 0, 0, 255))
        data = sixel.encode(image)

        assert data.count(b";2;") == 1
        assert b";2;100;0;0" in data
        assert data.endswith(b"@@" + sixel.ST)

    def test_pixels_keep_their_place(self) -> None:
        image = Image.new("RGBA", (2, 1), (255, 0, 0, 255))
        image.putpixel((1, 0), (0, 0, 255, 255))
        data = sixel.encode(image)

        assert b";2;100;0;0" in data
        assert b";2;0;0;100" in data
        assert data.count(b"$") == 1
        # Blue only sets the second column, red only the first.
        assert b"?@" in data

    def test_empty_image(self) -> None:
        with pytest.raises(ValueError):
            sixel.encode(Image.new("RGBA", (0, 0)))


class TestRunLength:
    def test_runs(self) -> None:
        assert sixel._runLength([1, 1, 1, 1, 2, 0, 0]) == b"!4@A"
        assert sixel._runLength([3, 3, 3]) == b"BBB"
        assert sixel._runLength([0, 0]) == b""
