import os

import pytest

from minnownet.errors import UnixError
from minnownet.file_descriptor import READ_BUFFER_SIZE, FileDescriptor


@pytest.fixture
def pipe():
    r_num, w_num = os.pipe()
    reader = FileDescriptor(r_num)
    writer = FileDescriptor(w_num)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed:
            fd.close()


def test_write_then_read_round_trip(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == 5
    assert reader.read() == b"hello"
    assert writer.write_count == 1
    assert reader.read_count == 1
    assert not reader.eof


def test_read_respects_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(2) == b"ab"
    assert reader.read(0) == b"cdef"


def test_gathered_write_returns_total(pipe):
    reader, writer = pipe
    assert writer.write([b"ab", b"", b"cde"]) == 5
    assert reader.read() == b"abcde"


def test_eof_after_writer_closed(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read() == b""
    assert reader.eof
    assert reader.read_count == 1


def test_nonblocking_read_with_nothing_available(pipe):
    reader, _writer = pipe
    reader.set_blocking(False)
    assert os.get_blocking(reader.fd_num) is False
    assert reader.read() == b""
    assert reader.eof is False
    assert reader.read_count == 0


def test_set_blocking_round_trip(pipe):
    reader, _writer = pipe
    reader.set_blocking(False)
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num) is True


def test_read_multiple_splits_data(pipe):
    reader, writer = pipe
    writer.write(b"abcdefgh")
    assert reader.read_multiple([3, 2, 1]) == [b"abc", b"de", b"fgh"]
    assert reader.read_count == 1


def test_read_multiple_short_data_leaves_empty_buffers(pipe):
    reader, writer = pipe
    writer.write(b"ab")
    assert reader.read_multiple([3, 2, 1]) == [b"ab", b"", b""]


def test_read_multiple_empty_sizes(pipe):
    reader, _writer = pipe
    assert reader.read_multiple([]) == []
    assert reader.read_count == 0


def test_last_buffer_holds_read_buffer_size(pipe):
    reader, writer = pipe
    data = b"x" * (READ_BUFFER_SIZE + 10)
    writer.set_blocking(False)
    written = writer.write(data)
    chunks = reader.read_multiple([10, 1])
    assert sum(len(c) for c in chunks) == min(written, 10 + READ_BUFFER_SIZE)
    assert len(chunks[1]) <= READ_BUFFER_SIZE


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    dup = writer.duplicate()
    assert dup.fd_num == writer.fd_num
    dup.write(b"x")
    assert writer.write_count == 1
    dup.close()
    assert writer.closed
    assert writer.eof


def test_context_manager_closes(pipe):
    reader, _writer = pipe
    with reader as handle:
        assert handle is reader
    assert reader.closed


def test_negative_fd_rejected():
    with pytest.raises(ValueError, match="invalid fd number:-1"):
        FileDescriptor(-1)


def test_closed_fd_number_rejected():
    r_num, w_num = os.pipe()
    os.close(r_num)
    os.close(w_num)
    with pytest.raises(UnixError) as info:
        FileDescriptor(r_num)
    assert info.value.attempt == "fcntl"


def test_write_after_close_raises(pipe):
    _reader, writer = pipe
    num = writer.fd_num
    writer.close()
    assert writer.closed
    with pytest.raises(UnixError) as info:
        writer.write(b"x")
    assert info.value.attempt == "writev"
    assert num >= 0