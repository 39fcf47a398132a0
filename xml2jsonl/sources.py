# -*- coding: utf-8 -*-
from contextlib import contextmanager
import bz2
import gzip
import logging
import lzma
import sys

logger = logging.getLogger(__name__)

# file suffix => opener returning a binary stream of the decompressed data
OPENERS = {
    '.gz': gzip.open,
    '.bz2': bz2.open,
    '.xz': lzma.open,
}


@contextmanager
def open_source(path=None):
    '''Open the XML input as a binary stream.

    None or '-' stands for standard input, which is left open on exit. Files
    ending in .gz, .bz2 or .xz are decompressed while they are read.
    '''
    if path is None or path == '-':
        logger.debug('reading from standard input')
        yield sys.stdin.buffer
        return

    path = str(path)
    opener = open
    for suffix, decompress in OPENERS.items():
        if path.lower().endswith(suffix):
            logger.debug('reading %s compressed input', suffix)
            opener = decompress
            break

    stream = opener(path, 'rb')
    try:
        yield stream
    finally:
        stream.close()
