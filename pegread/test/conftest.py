import struct

import numpy as np
import pytest


GEN_A_MAGIC = 1395028807
GEN_B_MAGIC = 1395028808
MOD_PATTERN = b'\x00\x00\x00\x00\x01\x00\x64\x00'


def build_header(start_mass=35, mass_range=5, data_rate=100.0,
                 version=b'4.51.6.0', ms_values=(250., 70., 1500., 1., 225.),
                 modulation=((4.0, 600.0),), sentinel=True,
                 filament=(0.0, 0, -1.0), itr=True, extra=b''):
    """
    Lays out a header block with the segment markers in the order
    ChromaTOF writes them.
    """
    h = bytearray(b'\x01' * 16)
    if version is not None:
        h += b'ChromaTOF Version ' + version + b' (build 1)' + b'\x02' * 64

    if ms_values is not None:
        h += b'FIELD SERVICE'
        blk = bytearray(720)
        pos = 331
        for skip, v in zip((0, 196, 80, 64, 8), ms_values):
            pos += skip
            struct.pack_into('<d', blk, pos, v)
            pos += 8
        h += blk

    if itr:
        h += b'CItrSegment' + b'\x03' * 18
        h += struct.pack('<HHd', start_mass, mass_range, data_rate)
        h += b'\x03' * 16

    if modulation is not None:
        h += b'CRampStepd' + b'\xff' * 6 + MOD_PATTERN
        for i, (period, dur) in enumerate(modulation):
            if i > 0:
                h += b'\x04' * 34
            h += struct.pack('<dd', period, dur)
        if sentinel:
            h += b'\x04' * 34 + struct.pack('<dd', 0.0, -1.0)

    if filament is not None:
        first_delay, fil_off, next_delay = filament
        h += b'CFilamentOffTimesStepd' + b'\x05'
        h += struct.pack('<dB', first_delay, fil_off)
        h += b'\x05' * 5 + struct.pack('<d', next_delay)

    h += extra
    # enough slack that no marker lands in the excluded margin
    h += b'\x06' * 64
    return bytes(h)


def build_peg(magic=GEN_B_MAGIC, num_scans=4, spectra=None, date=43831.5,
              **header_kw):
    header_kw.setdefault('mass_range', 5)
    mass_range = header_kw['mass_range']
    if spectra is None:
        spectra = np.arange(num_scans * mass_range).reshape(num_scans,
                                                            mass_range)
    raw_spectra = np.asarray(spectra, dtype='<u2').tobytes()
    header = build_header(**header_kw)

    offsets = [0] * 6
    offsets[0] = 4 + 6 * 4
    offsets[1] = 64
    offsets[2] = offsets[1] + len(header)
    offsets[3] = offsets[2] + 4 + len(raw_spectra)
    offsets[4] = offsets[3] + 8198 + 8
    offsets[5] = offsets[4] + 32

    d = bytearray(offsets[5])
    struct.pack_into('<i6i', d, 0, magic, *offsets)
    d[offsets[1]:offsets[2]] = header
    d[offsets[2] + 4:offsets[3]] = raw_spectra
    struct.pack_into('<i', d, offsets[3] + 8198, num_scans)
    struct.pack_into('<d', d, offsets[5] - 8, date)
    return bytes(d)


@pytest.fixture
def write_peg(tmp_path):
    def _write(name='run.peg', **kwargs):
        path = tmp_path / name
        path.write_bytes(build_peg(**kwargs))
        return str(path)
    return _write
