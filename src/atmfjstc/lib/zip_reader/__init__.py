"""
A read-only decoder for ZIP archives held in memory.

The main class of interest is `ZipReader`, in the module of the same name::

    from atmfjstc.lib.zip_reader.ZipReader import ZipReader

    reader = ZipReader(data)

    for entry in reader:
        if entry.is_file():
            print(entry.name, len(entry.data()))

Entry contents are only decompressed on request. Only the Store and Deflate compression methods are supported, and
ZIP64, encryption and multi-disk archives are not handled.

The lower level building blocks (`ByteWindow`, `ByteCursor`, the record parsers in `records` and the end of central
directory search in `locate`) can also be used directly, e.g. for forensic inspection of damaged archives.
"""


__version__ = '1.0.0'
