"""
Scale profile I/O.

    serialize.py  versioned blob encode/decode (to_bytes / from_bytes)
    writer.py     parquet writes
    reader.py     parquet reads
"""

from scaleprofile.io.serialize import to_bytes, from_bytes, FORMAT_VERSION
from scaleprofile.io.writer import write_profile, write_report
from scaleprofile.io.reader import read_profile, read_samples
