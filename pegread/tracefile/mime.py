import binascii
from functools import lru_cache
from glob import glob
import inspect
from importlib import import_module
import mimetypes
import os
import os.path as op


# ChromaTOF writes 'Gs&S' (before 4.x) or 'Hs&S' (4.x) as the first
# four bytes of every .peg file
mimes = """
application/vnd-leco-peg    peg     47732653,48732653
"""


def get_mimetype(filename, magic_all):
    ft_magic = {}
    ft_ext = {}
    for line in mimes.strip('\n').split('\n'):
        mime, ext, magic = line.split()
        if magic != '*':
            for m in magic.split(','):
                ft_magic[m] = mime

        if ext != '*':
            for e in ext.split(','):
                ft_ext[e] = mime

    for i in [4, 2, 1]:
        magic = binascii.b2a_hex(magic_all[:i]).decode('ascii').upper()
        if magic in ft_magic:
            return ft_magic[magic]

    if filename is not None:
        ext = os.path.splitext(filename)[1].lower()[1:]
        if ext in ft_ext:
            return ft_ext[ext]

        return mimetypes.guess_type(filename)[0]
    return None


@lru_cache(maxsize=1)
def tfclasses():
    """
    A mapping of mimetypes to every class for reading data files.
    """
    from pegread.tracefile import TraceFile

    # automatically find any subclasses of TraceFile in the same
    # directory as me
    classes = {}
    mydir = op.dirname(op.abspath(inspect.getfile(get_mimetype)))
    for filename in glob(op.join(mydir, '*.py')):
        name = op.splitext(op.basename(filename))[0]
        if name.startswith('_'):
            continue
        module = import_module('pegread.tracefile.' + name)
        for clsname in dir(module):
            cls = getattr(module, clsname)
            if inspect.isclass(cls) and issubclass(cls, TraceFile) and \
               cls is not TraceFile and cls.mime:
                classes[cls.mime] = cls
    return classes
