from pegread.trace.trace import Trace, Chromatogram  # noqa
