'''
Low-level access to the .peg container: magic number, section offset
table and typed reads at positions given relative to those sections.
'''
import enum
import logging
import os
import struct

from pegread.errors import (CorruptHeaderError, PegNotFoundError,
                            TruncatedFileError, UnrecognizedFormatError)

logger = logging.getLogger(__name__)


class Generation(enum.Enum):
    """
    Known .peg header generations, keyed by their magic number.
    """
    GEN_A = 1395028807  # b'Gs&S', ChromaTOF before 4.x
    GEN_B = 1395028808  # b'Hs&S', ChromaTOF 4.x


# both generations currently share one layout; fields are
# (section, offset relative to that section's start, struct format)
LAYOUT = {
    'sections': {
        'header': 1,
        'spectra': 2,
        'statistics': 3,
        'trailer': 5,
    },
    'fields': {
        'acq_date': ('trailer', -8, '<d'),
        'num_scans': ('statistics', 8198, '<i'),
        'spectra': ('spectra', 4, None),
    },
}

GENERATION_LAYOUTS = {
    Generation.GEN_A: LAYOUT,
    Generation.GEN_B: LAYOUT,
}

N_OFFSETS = 6


class PegContainer(object):
    """
    An open .peg file. Use as a context manager so the handle is
    released on every exit path::

        with PegContainer(filename) as c:
            c.validate()
            nscans = c.read_named('num_scans')
    """

    def __init__(self, filename):
        self.filename = filename
        self.generation = None
        self.offsets = None
        if not os.path.isfile(filename):
            raise PegNotFoundError(filename, 'not found, check input path '
                                   'and name')
        try:
            self._f = open(filename, mode='rb')
        except OSError as e:
            raise PegNotFoundError(filename, 'could not be opened '
                                   '({})'.format(e.strerror))
        self.size = os.fstat(self._f.fileno()).st_size

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        if not self._f.closed:
            self._f.close()

    @property
    def layout(self):
        return GENERATION_LAYOUTS[self.generation]

    def validate(self):
        self.read_magic()
        self.read_offsets()
        return self

    def read_magic(self):
        magic = self.read_field(0, '<i')
        if magic == 0:
            raise CorruptHeaderError(self.filename, 'corrupt - header data '
                                     'contains bad values')
        try:
            self.generation = Generation(magic)
        except ValueError:
            raise UnrecognizedFormatError(
                self.filename, 'does not appear to contain LECO .peg file '
                'data (magic number {})'.format(magic))
        logger.debug('%s: generation %s', self.filename, self.generation.name)
        return self.generation

    def read_offsets(self):
        self.offsets = self.read_field(4, '<' + N_OFFSETS * 'i')
        logger.debug('%s: section offsets %s', self.filename, self.offsets)
        return self.offsets

    def section(self, name):
        """
        Absolute file position of the start of a named section.
        """
        return self.offsets[self.layout['sections'][name]]

    def section_length(self, name):
        idx = self.layout['sections'][name]
        return self.offsets[idx + 1] - self.offsets[idx]

    def position(self, section, rel=0):
        return self.section(section) + rel

    def read_at(self, section, rel, fmt):
        return self.read_field(self.position(section, rel), fmt)

    def read_named(self, name):
        section, rel, fmt = self.layout['fields'][name]
        return self.read_at(section, rel, fmt)

    def read_field(self, offset, fmt, skip_before=0, skip_after=0):
        """
        Decodes one struct-formatted value at an absolute offset.

        skip_before is added to offset before reading and skip_after
        advances the file position after the read, so several calls
        with offset=None can walk a record.
        """
        if offset is None:
            offset = self._f.tell()
        self._f.seek(offset + skip_before)
        val = self.read_struct(fmt)
        if skip_after:
            self._f.seek(self._f.tell() + skip_after)
        return val

    def read_struct(self, fmt):
        sz = struct.calcsize(fmt)
        pos = self._f.tell()
        d = self._f.read(sz)
        if len(d) < sz:
            raise TruncatedFileError(
                self.filename, 'needed {} bytes at offset {}, file ends at '
                '{}'.format(sz, pos, self.size))
        val = struct.unpack(fmt, d)
        if len(val) == 1:
            return val[0]
        return val

    def read_bytes(self, offset, length):
        if offset < 0 or length < 0:
            raise TruncatedFileError(
                self.filename, 'section offsets out of order ({} bytes at '
                '{})'.format(length, offset))
        self._f.seek(offset)
        d = self._f.read(length)
        if len(d) < length:
            raise TruncatedFileError(
                self.filename, 'needed {} bytes at offset {}, file ends at '
                '{}'.format(length, offset, self.size))
        return d

    def seek(self, offset):
        self._f.seek(offset)

    def tell(self):
        return self._f.tell()

    @property
    def handle(self):
        return self._f
