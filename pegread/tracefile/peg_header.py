'''
Segment markers and the fields anchored to them in the .peg header block.

The header has no published layout, so every field is found by searching
the raw block for a byte pattern (a "segment marker") and then reading at
fixed distances past the end of that pattern.
'''
import enum
import logging
import math
import re
from collections import namedtuple

from pegread.errors import (MalformedModulationTableError, MissingSegmentError,
                            TruncatedFileError)

logger = logging.getLogger(__name__)


# after: name of a marker the search starts from (None = header start)
Marker = namedtuple('Marker', ['name', 'pattern', 'required', 'after'])

MARKERS = (
    Marker('version', b'Version', False, None),
    Marker('field_service', b'FIELD SERVICE', False, None),
    Marker('itr_segment', b'CItrSegment', True, None),
    Marker('ramp_step', b'CRampStepd', False, None),
    Marker('modulation', b'\x00\x00\x00\x00\x01\x00\x64\x00', False,
           'ramp_step'),
    Marker('filament', b'CFilamentOffTimesStepd', False, None),
)

# keep searches this far away from the end of the section
WINDOW_MARGIN = 11

# distance between consecutive (period, duration) pairs
MOD_RECORD_SKIP = 34
MOD_SENTINEL = -1


class MsParameters(namedtuple('MsParameters', [
    'source_temperature', 'ionization_voltage', 'acceleration_voltage',
    'tune_voltage', 'transfer_line_temperature'
])):
    """
    Mass spectrometer settings from the FIELD SERVICE segment.

    The offsets these are read from have never been checked against
    instrument documentation; treat the values as best-effort.
    """
    __slots__ = ()
    verified = False
    provenance = ('FIELD SERVICE marker +331, +196, +80, +64, +8; '
                  'offsets unconfirmed')


ModulationSegment = namedtuple('ModulationSegment', ['period', 'duration'])


class TimingMode(enum.Enum):
    NONE = 'none'
    FIXED_DELAY = 'fixed-delay'
    # filament on/off table; not decoded
    FILAMENT_SCHEDULE = 'filament-schedule'


FilamentTiming = namedtuple('FilamentTiming', [
    'first_delay', 'fil_off', 'next_delay', 'mode', 'acq_delay'
])

NO_FILAMENT_TIMING = FilamentTiming(None, None, None, TimingMode.NONE, 0.0)


def marker_window(section_length, pattern):
    return section_length - (len(pattern) + WINDOW_MARGIN)


def find_marker(buf, pattern, window_end, start=0):
    """
    Returns the index just past the first occurrence of pattern that
    lies entirely inside buf[start:window_end], or None.
    """
    if window_end <= start:
        return None
    idx = buf.find(pattern, start, window_end)
    if idx < 0:
        return None
    return idx + len(pattern)


def locate_markers(header, base, filename=None, markers=MARKERS):
    """
    Searches the in-memory header block for every marker.

    Parameters
    ----------
    header : bytes
        The header section, [offsets[1], offsets[2]).
    base : int
        Absolute file position of header[0].

    Returns
    -------
    dict
        marker name -> absolute file offset just past the marker, or None
    """
    rel_hits = {}
    found = {}
    for m in markers:
        start = 0
        if m.after is not None:
            start = rel_hits.get(m.after)
        if start is None:
            hit = None
        else:
            hit = find_marker(header, m.pattern,
                              marker_window(len(header), m.pattern), start)
        rel_hits[m.name] = hit
        found[m.name] = None if hit is None else base + hit

        if hit is None:
            if m.required:
                raise MissingSegmentError(
                    filename, 'header segment {!r} not found; scan '
                    'parameters cannot be resolved'.format(m.pattern))
            logger.warning('%s: no %s segment in header', filename, m.name)
        else:
            logger.debug('%s: %s segment ends at %d', filename, m.name,
                         found[m.name])
    return found


def read_version(c, offset):
    """
    Pulls the dotted ChromaTOF version number out of the text that
    surrounds the Version marker.
    """
    if offset is None:
        return None
    # read & overshoot the version text
    raw = c.read_field(offset - 8, '64s')
    srch = re.search(br' ([0-9.]+) ', raw)
    if srch is None:
        return None
    return srch.group(1).decode('ascii')


def read_ms_params(c, offset):
    if offset is None:
        return None
    try:
        vals = [c.read_field(offset, '<d', skip_before=331)]
        for skip in (196, 80, 64, 8):
            vals.append(c.read_field(None, '<d', skip_before=skip))
    except TruncatedFileError as e:
        logger.warning('%s: field service block cut short, skipping MS '
                       'parameters (%s)', c.filename, e.reason)
        return None
    return MsParameters(*vals)


def read_scan_params(c, offset):
    """
    start mass, number of masses and data rate from the CItrSegment.
    """
    start_mass = c.read_field(offset, '<H', skip_before=18)
    mass_range = c.read_field(None, '<H')
    data_rate = c.read_field(None, '<d')
    return start_mass, mass_range, data_rate


def round_half_away(x):
    # instrument software rounds halves away from zero
    return math.copysign(math.floor(abs(x) + 0.5), x)


def reconcile_durations(durations, total_run_time):
    """
    The last recorded duration is not trustworthy, so replace it with
    whatever run time is left after all of the preceding periods.
    """
    durations = list(durations)
    if len(durations) <= 1:
        return [round_half_away(total_run_time)]
    rest = total_run_time - sum(durations[:-1])
    durations[-1] = round_half_away(rest)
    return durations


def read_modulation(c, offset, end, total_run_time):
    """
    Reads the (period, duration) table of a modulated acquisition.

    Parameters
    ----------
    c : PegContainer
    offset : int or None
        Position just past the modulation marker; None for a
        one-dimensional run.
    end : int
        First byte past the header section; reads may not cross it.
    total_run_time : float
        Seconds, used to fix up the final duration.

    Returns
    -------
    tuple of ModulationSegment
    """
    if offset is None:
        return (ModulationSegment(0.0, round_half_away(total_run_time)),)

    periods, durations = [], []
    if offset + 16 > end:
        raise MalformedModulationTableError(
            c.filename, 'modulation table starts past end of header')
    period, duration = c.read_field(offset, '<dd')
    periods.append(period)
    durations.append(duration)
    while duration != MOD_SENTINEL:
        if c.tell() + MOD_RECORD_SKIP + 16 > end:
            raise MalformedModulationTableError(
                c.filename, 'modulation table has no -1 terminator before '
                'the end of the header at {}'.format(end))
        period, duration = c.read_field(None, '<dd',
                                        skip_before=MOD_RECORD_SKIP)
        if duration == MOD_SENTINEL:
            break
        periods.append(period)
        durations.append(duration)

    durations = reconcile_durations(durations, total_run_time)
    logger.debug('%s: %d modulation segment(s)', c.filename, len(periods))
    return tuple(ModulationSegment(p, d) for p, d in zip(periods, durations))


def resolve_timing(first_delay, fil_off):
    """
    Decide how acquisition was delayed.

    Returns
    -------
    (TimingMode, float)
        the mode and the delay before the first scan, in seconds
    """
    if fil_off:
        # filament on/off table; we don't know how to read that yet
        return TimingMode.FILAMENT_SCHEDULE, 0.0
    if first_delay > 0:
        return TimingMode.FIXED_DELAY, first_delay
    return TimingMode.NONE, 0.0


def read_filament(c, offset):
    if offset is None:
        return NO_FILAMENT_TIMING
    first_delay = c.read_field(offset, '<d', skip_before=1)
    # the double leaves us right on the flag
    fil_off = c.read_field(None, '<B')
    next_delay = c.read_field(None, '<d', skip_before=5)
    mode, acq_delay = resolve_timing(first_delay, fil_off)
    if mode is TimingMode.FILAMENT_SCHEDULE:
        logger.warning('%s: filament on/off schedule present; timing mode '
                       'unsupported, no acquisition delay applied',
                       c.filename)
    return FilamentTiming(first_delay, fil_off, next_delay, mode, acq_delay)
