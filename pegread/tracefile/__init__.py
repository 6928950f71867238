'''
Classes that can open chromatographic files and return
info from them or Traces/Chromatograms.
'''

import os.path as op

import numpy as np

from pegread import _attach_handler
from pegread.errors import PegNotFoundError
from pegread.trace import Chromatogram, Trace
from pegread.tracefile.mime import get_mimetype, tfclasses


class TraceFile(object):
    mime = ''  # mimetype to associate file with (in tracefile.mime)

    # traces is a list of possible traces:
    # a # indicates a 2d trace, anything else a single named trace
    traces = []

    def __init__(self, filename=None, ftype=None, data=None, **kwargs):
        _attach_handler()
        self.filename = filename
        self.ftype = ''
        self._data = None

        # try to automatically change my class to reflect
        # whatever type of file I'm pointing at if not provided
        if type(self) is TraceFile:
            if data is not None:
                self._data = data

            if filename is None:
                return

            if ftype is None:
                if not op.isfile(filename):
                    raise PegNotFoundError(filename, 'not found, check input '
                                           'path and name')
                with open(filename, mode='rb') as f:
                    magic = f.read(4)
                ftype = get_mimetype(filename, magic)

            if ftype is not None and ftype in tfclasses():
                self.__class__ = tfclasses()[ftype]
                self.__init__(filename, **kwargs)
        else:
            self.ftype = self.mime

    @property
    def data(self):
        if self._data is not None:
            return self._data
        else:
            return Chromatogram()

    def total_trace(self, twin=None):
        return self.data.trace(twin=twin)

    def _trace(self, name, twin=None):
        return Trace([], [], name=name)

    def trace(self, name='', tol=0.5, twin=None):
        if isinstance(name, (int, float, np.floating, np.integer)):
            name = str(name)
        else:
            name = name.lower()

        # name of the 2d trace, if it exists
        if any(t.startswith('#') for t in self.traces):
            t2d = [t[1:] for t in self.traces if t.startswith('#')][0]

            # clip out the starting 'MS' if present
            if name.startswith(t2d):
                name = name[len(t2d):]
        else:
            t2d = ''

        # this is the only string we handle; all others handled in subclasses
        if name in ['tic', 'x', '']:
            return self.total_trace(twin)
        elif name in self.traces:
            return self._trace(name, twin)
        elif t2d != '':
            # this file contains 2d data; find the trace in that
            return self.data.trace(name, tol, twin)
        else:
            return Trace([], [], name=name)

    def scan(self, t, dt=None, aggfunc=None):
        """
        Returns the spectrum from a specific time or range of times.
        """
        return self.data.scan(t, dt, aggfunc)

    @property
    def info(self):
        return {'filename': self.filename,
                'filetype': self.ftype}
