from dataclasses import dataclass

from minnownet.parser import Parser, Serializer, parse, serialize


@dataclass
class _Pair:
    number: int = 0
    tail: bytes = b""

    def parse(self, parser):
        self.number = parser.integer(2)
        self.tail = parser.concatenate_all_remaining()

    def serialize(self, serializer):
        serializer.integer(self.number, 2)
        serializer.buffer(self.tail)


@dataclass
class _WithExtra:
    seen: int = 0
    value: int = 0

    def parse(self, parser, extra):
        self.seen = extra
        self.value = parser.integer(1)


def test_integer_crosses_buffer_boundary():
    parser = Parser([b"\x12", b"\x34\x56"])
    assert parser.integer(2) == 0x1234
    assert parser.integer(1) == 0x56
    assert not parser.has_error()


def test_short_input_sets_error():
    parser = Parser([b"\x00\x01"])
    assert parser.integer(4) == 0
    assert parser.has_error()


def test_read_bytes_and_error():
    parser = Parser([b"ab", b"cd"])
    assert parser.read_bytes(3) == b"abc"
    assert parser.read_bytes(2) == b""
    assert parser.has_error()


def test_single_bytes_input_accepted():
    parser = Parser(b"\x00\x07rest")
    assert parser.integer(2) == 7
    assert parser.concatenate_all_remaining() == b"rest"


def test_truncate_across_buffers():
    parser = Parser([b"abc", b"def"])
    parser.truncate(4)
    assert len(parser) == 4
    assert parser.concatenate_all_remaining() == b"abcd"


def test_truncate_after_partial_consumption():
    parser = Parser([b"abcdef"])
    parser.remove_prefix(2)
    parser.truncate(2)
    assert parser.all_remaining() == [b"cd"]


def test_truncate_longer_than_input_is_noop():
    parser = Parser([b"ab"])
    parser.truncate(10)
    assert parser.concatenate_all_remaining() == b"ab"


def test_buffer_does_not_consume():
    parser = Parser([b"xyz", b"w"])
    parser.remove_prefix(1)
    assert parser.buffer() == [b"yz", b"w"]
    assert parser.all_remaining() == [b"yz", b"w"]
    assert parser.all_remaining() == []


def test_serializer_chunks():
    serializer = Serializer()
    serializer.integer(1, 2)
    serializer.buffer(b"abc")
    serializer.buffer(b"")
    serializer.integer(2, 1)
    assert serializer.finish() == [b"\x00\x01", b"abc", b"\x02"]
    assert serializer.finish() == []


def test_serializer_masks_to_width():
    serializer = Serializer()
    serializer.integer(0x1FF, 1)
    assert serializer.finish() == [b"\xff"]


def test_serializer_buffer_list():
    serializer = Serializer()
    serializer.buffer([b"a", b"", b"b"])
    assert serializer.finish() == [b"a", b"b"]


def test_round_trip_with_helpers():
    original = _Pair(513, b"xy")
    back = _Pair()
    assert parse(back, serialize(original))
    assert back == original


def test_parse_passes_extra_arguments():
    obj = _WithExtra()
    assert parse(obj, [b"\x09"], 42)
    assert obj == _WithExtra(42, 9)


def test_parse_reports_failure():
    assert not parse(_Pair(), [b"\x01"])