import pytest

from pmac0.crypto import WORD_MASK
from pmac0.errors import TagFileError
from pmac0.tagfile import default_tag_path, format_tag, parse_tag, read_tag, write_tag


def test_format_is_decimal_with_newline():
    assert format_tag(483791) == "483791\n"
    assert format_tag(WORD_MASK) == "18446744073709551615\n"


def test_write_and_read(tmp_path):
    path = write_tag(tmp_path / "m.tag", 86665)
    assert path.read_text() == "86665\n"
    assert read_tag(path) == 86665
    assert not (tmp_path / "m.tag.tmp").exists()


def test_write_overwrites(tmp_path):
    path = tmp_path / "m.tag"
    write_tag(path, 1)
    write_tag(path, 2)
    assert read_tag(path) == 2


def test_default_tag_path(tmp_path):
    assert default_tag_path(tmp_path / "report.pdf") == tmp_path / "report.pdf.tag"
    assert str(default_tag_path("data.bin")) == "data.bin.tag"


def test_parse_tolerates_surrounding_whitespace():
    assert parse_tag("  42 \n") == 42


@pytest.mark.parametrize("text", ["", "abc", "-5", "1.5", "12 34", "0x10", "18446744073709551616"])
def test_malformed_tag(text):
    with pytest.raises(TagFileError):
        parse_tag(text)


def test_missing_tag_file(tmp_path):
    with pytest.raises(TagFileError):
        read_tag(tmp_path / "absent.tag")


def test_write_into_missing_directory(tmp_path):
    with pytest.raises(TagFileError):
        write_tag(tmp_path / "no" / "such" / "dir.tag", 1)


def test_out_of_range_tag_not_written(tmp_path):
    with pytest.raises(ValueError):
        write_tag(tmp_path / "x.tag", WORD_MASK + 1)
