# -*- coding: utf-8 -*-
'''
LECO ChromaTOF .peg files (up to the final 4.x releases).

Decoding runs as a fixed pipeline over one open file: validate the
container, pull the header block into memory, locate the segment markers,
read the fields that hang off them, build the scan time vector, then
(optionally) load the scan x mass block.
'''
import logging
import os.path as op
from collections import namedtuple
from datetime import datetime, timedelta

import numpy as np

from pegread.errors import InvalidAcquisitionRateError, ShapeMismatchError
from pegread.trace import Chromatogram, Trace
from pegread.trace.math_chromatograms import base_peak_chromatogram
from pegread.tracefile import TraceFile
from pegread.tracefile.peg_container import PegContainer
from pegread.tracefile.peg_header import (
    locate_markers, read_filament, read_modulation, read_ms_params,
    read_scan_params, read_version)
from pegread.tracefile.peg_unpack import unpack

logger = logging.getLogger(__name__)

# day 0 of the serial date stored at the end of the file
DATE_EPOCH = datetime(1899, 12, 30)


PegDataset = namedtuple('PegDataset', [
    'filename',
    'generation',
    'acq_date_raw',  # days since DATE_EPOCH
    'acq_date',
    'acq_version',
    'start_mass',
    'mass_range',
    'masses',
    'data_rate',  # scans per second
    'num_scans',
    'acq_delay',  # seconds before the first scan
    'timing_mode',
    'modulation',  # tuple of ModulationSegment
    'time',  # scan-centred, milliseconds
    'time_1d',  # seconds
    'specdata',  # scans x masses, None if spectra weren't processed
    'tic',
    'bpc',
    'ms_params',  # MsParameters (unverified) or None
])


class _DecodeContext(object):
    """
    Everything worked out so far while decoding one file.
    """
    def __init__(self, container):
        self.c = container
        self.filename = container.filename
        self.header = None
        self.header_start = None
        self.header_end = None
        self.markers = {}


def _frozen(arr):
    arr = np.asarray(arr)
    arr.flags.writeable = False
    return arr


def serial_date(raw, filename=None):
    """
    Converts the trailing date double into a datetime, or None if it
    can't possibly be a date.
    """
    try:
        return DATE_EPOCH + timedelta(days=raw)
    except (OverflowError, ValueError):
        logger.warning('%s: acquisition date %r out of range', filename, raw)
        return None


def scan_times(num_scans, data_rate, acq_delay=0.0, filename=None):
    """
    Scan-centred timestamps, in milliseconds.

    Parameters
    ----------
    num_scans : int
    data_rate : float
        Scans per second.
    acq_delay : float
        Seconds between injection and the first scan.

    Returns
    -------
    np.ndarray
    """
    if not np.isfinite(data_rate) or data_rate <= 0:
        raise InvalidAcquisitionRateError(
            filename, 'data rate {!r} is not a positive number of scans per '
            'second'.format(data_rate))
    tme = 500. / data_rate + (1000. / data_rate) * np.arange(num_scans)
    if acq_delay:
        tme = tme + acq_delay * 1000.
    return tme


def load_spectra(c, num_scans, mass_range, unpacker=None, workers=None):
    """
    Reads the raw scan x mass block and hands it to the unpacker.

    Returns
    -------
    (specdata, tic, bpc)
    """
    if unpacker is None:
        unpacker = unpack
    section, rel, _ = c.layout['fields']['spectra']
    c.seek(c.position(section, rel))
    count = num_scans * mass_range
    d = c.handle.read(2 * count)
    raw = np.frombuffer(d, dtype='<u2', count=len(d) // 2)
    logger.debug('%s: read %d of %d spectral values', c.filename, raw.size,
                 count)

    try:
        specdata = np.asarray(unpacker(raw, (num_scans, mass_range),
                                       workers=workers))
    except ShapeMismatchError as e:
        raise ShapeMismatchError(c.filename, e.reason)
    if specdata.shape != (num_scans, mass_range):
        raise ShapeMismatchError(
            c.filename, 'unpacker returned shape {}, expected {}'.format(
                specdata.shape, (num_scans, mass_range)))

    tic = specdata.sum(axis=1)
    bpc = specdata.max(axis=1, initial=0)
    return specdata, tic, bpc


def decode(filename, process_spectra=True, unpacker=None, workers=None):
    """
    Reads a .peg file into a PegDataset.
    """
    with PegContainer(filename) as c:
        ctx = _DecodeContext(c)
        c.validate()

        acq_date_raw = c.read_named('acq_date')

        # the header is small, so search it in memory
        ctx.header_start = c.section('header')
        ctx.header_end = ctx.header_start + c.section_length('header')
        ctx.header = c.read_bytes(ctx.header_start,
                                  c.section_length('header'))
        ctx.markers = locate_markers(ctx.header, ctx.header_start, filename)

        acq_version = read_version(c, ctx.markers['version'])
        ms_params = read_ms_params(c, ctx.markers['field_service'])
        start_mass, mass_range, data_rate = read_scan_params(
            c, ctx.markers['itr_segment'])
        num_scans = c.read_named('num_scans')
        if num_scans < 0:
            raise ShapeMismatchError(filename, 'negative scan count '
                                     '{}'.format(num_scans))
        logger.debug('%s: %d scans, masses %d-%d at %g Hz', filename,
                     num_scans, start_mass, start_mass + mass_range - 1,
                     data_rate)

        if process_spectra:
            specdata, tic, bpc = load_spectra(c, num_scans, mass_range,
                                              unpacker, workers)
        else:
            specdata, tic, bpc = None, None, None

        tme = scan_times(num_scans, data_rate, filename=filename)
        run_time = tme[-1] / 1000. if num_scans > 0 else 0.
        modulation = read_modulation(c, ctx.markers['modulation'],
                                     ctx.header_end, run_time)

        timing = read_filament(c, ctx.markers['filament'])
        if timing.acq_delay:
            tme = tme + timing.acq_delay * 1000.

    masses = np.arange(start_mass, start_mass + mass_range)
    return PegDataset(
        filename=filename,
        generation=c.generation,
        acq_date_raw=acq_date_raw,
        acq_date=serial_date(acq_date_raw, filename),
        acq_version=acq_version,
        start_mass=start_mass,
        mass_range=mass_range,
        masses=_frozen(masses),
        data_rate=data_rate,
        num_scans=num_scans,
        acq_delay=timing.acq_delay,
        timing_mode=timing.mode,
        modulation=modulation,
        time=_frozen(tme),
        time_1d=_frozen(tme / 1000.),
        specdata=None if specdata is None else _frozen(specdata),
        tic=None if tic is None else _frozen(tic),
        bpc=None if bpc is None else _frozen(bpc),
        ms_params=ms_params,
    )


def modulation_period(dataset):
    """
    Modulation period in seconds, or 0 for a one-dimensional run.
    """
    for seg in dataset.modulation:
        if seg.period:
            return seg.period
    return 0.


class LecoPeg(TraceFile):
    mime = 'application/vnd-leco-peg'
    traces = ['#ms', 'bpc']

    def __init__(self, filename=None, ftype=None, data=None,
                 process_spectra=True, unpacker=None, workers=None):
        super(LecoPeg, self).__init__(filename, ftype, data)
        self.process_spectra = process_spectra
        self.unpacker = unpacker
        self.workers = workers
        self._dataset = None

    @property
    def dataset(self):
        if self._dataset is None:
            self._dataset = decode(self.filename, self.process_spectra,
                                   self.unpacker, self.workers)
        return self._dataset

    @property
    def data(self):
        ds = self.dataset
        if ds.specdata is None:
            return Chromatogram()
        # times in minutes like every other tracefile
        return Chromatogram(ds.specdata, ds.time / 60000.,
                            ds.masses.tolist())

    def total_trace(self, twin=None):
        ds = self.dataset
        if ds.tic is None:
            return Trace([], [], name='tic')
        return Trace(ds.tic, ds.time / 60000., name='tic').twin(twin)

    def _trace(self, name, twin=None):
        ds = self.dataset
        if name != 'bpc' or ds.bpc is None:
            return super(LecoPeg, self)._trace(name, twin)
        return Trace(ds.bpc, ds.time / 60000., name='bpc').twin(twin)

    def eic_bpc(self, eic_grid, twin=None):
        """
        Base peak chromatogram over a set of extracted ion
        chromatograms, one per row of eic_grid.
        """
        ds = self.dataset
        if ds.specdata is None:
            return Trace([], [], name='bpc')
        d = base_peak_chromatogram(ds.specdata, ds.masses, eic_grid)
        return Trace(d, ds.time / 60000., name='bpc').twin(twin)

    @property
    def info(self):
        d = super(LecoPeg, self).info
        ds = self.dataset
        d['name'] = op.splitext(op.basename(ds.filename))[0]
        if ds.acq_date is not None:
            d['r-date'] = ds.acq_date.isoformat(' ')
        if ds.acq_version is not None:
            d['acq-version'] = ds.acq_version
        d['data-rate'] = str(ds.data_rate)
        d['mod-period'] = str(modulation_period(ds))
        return d
