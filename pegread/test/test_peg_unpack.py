import struct

import numpy as np
import pytest

from pegread.errors import ShapeMismatchError, TruncatedFileError
from pegread.tracefile.peg_container import Generation, PegContainer
from pegread.tracefile.peg_unpack import unpack


def test_unpack():
    raw = np.arange(12, dtype='<u2')
    m = unpack(raw, (3, 4))
    assert m.shape == (3, 4)
    assert m[2].tolist() == [8, 9, 10, 11]


def test_unpack_threads():
    raw = np.arange(1000, dtype='<u2')
    assert np.array_equal(unpack(raw, (100, 10), workers=3),
                          unpack(raw, (100, 10)))


def test_unpack_wrong_size():
    with pytest.raises(ShapeMismatchError):
        unpack(np.arange(11, dtype='<u2'), (3, 4))


def test_container_truncated(tmp_path):
    path = tmp_path / 'short.peg'
    path.write_bytes(struct.pack('<i2i', Generation.GEN_B.value, 28, 64))
    with PegContainer(str(path)) as c:
        assert c.read_magic() is Generation.GEN_B
        with pytest.raises(TruncatedFileError) as e:
            c.read_offsets()
    assert e.value.filename == str(path)
    assert c.handle.closed


def test_container_sections(write_peg):
    with PegContainer(write_peg()) as c:
        c.validate()
        assert c.section('header') == 64
        assert c.read_named('num_scans') == 4
        assert c.section_length('header') == c.offsets[2] - c.offsets[1]
