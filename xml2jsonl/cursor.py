# -*- coding: utf-8 -*-
from codecs import BOM_UTF8
from collections import deque
import logging
import os
import re

import lxml.etree as ET

from .errors import MalformedDocument

logger = logging.getLogger(__name__)

# Event kinds reported by EventCursor.next()
START = 'start'
END = 'end'
CHARACTERS = 'characters'
END_DOCUMENT = 'end-document'

# libxml2/lxml report these when the input holds no element at all,
# but also when it holds text that is not XML
_EMPTY_DOCUMENT_ERRORS = frozenset([
    ET.ErrorTypes.ERR_INTERNAL_ERROR,   # lxml: "no element found" on empty input
    ET.ErrorTypes.ERR_DOCUMENT_EMPTY,
    ET.ErrorTypes.ERR_DOCUMENT_END,
])

# whitespace, XML declaration, processing instructions, comments and doctype
_IGNORABLE = re.compile(br'\s+|<\?.*?\?>|<!--.*?-->|<!DOCTYPE[^\[>]*(?:\[.*?\])?\s*>', re.S)


def _holds_no_content(data):
    '''True if data is empty apart from what may precede the root element'''
    if data.startswith(BOM_UTF8):
        data = data[len(BOM_UTF8):]
    return not _IGNORABLE.sub(b'', bytes(data))


class _PrologReader(object):
    '''Passes reads through to the source and keeps the bytes read until the root element shows up'''

    def __init__(self, source):
        self.source = source
        self.prolog = bytearray()
        self.tracking = True

    def read(self, size=-1):
        data = self.source.read(size)
        if self.tracking:
            self.prolog += data
        return data


class EventCursor(object):
    '''Forward-only cursor over the parse events of one XML document.

    lxml's iterparse only reports start and end events, text lives on the
    elements (``text`` up to the first child, ``tail`` after each child).
    The cursor turns it back into a flat event stream where character data
    sits between the start/end events it occurs between, and detaches every
    finished element from its parent so the tree built by lxml never grows
    beyond the path of currently open elements.

    Namespaces are not resolved, tags and attributes are reported by local name.
    '''

    def __init__(self, source, huge_tree=False):
        # source is a filename or a binary file-like object, files opened here are closed here
        self._own_source = isinstance(source, (str, bytes, os.PathLike))
        if self._own_source:
            source = open(source, 'rb')
        self._source = source
        self._reader = _PrologReader(source)
        self._events = ET.iterparse(self._reader, events=('start', 'end'), remove_comments=True,
                                    remove_pis=True, huge_tree=huge_tree)
        # events decoded from lxml but not handed out yet
        self._pending = deque()
        # last lxml event whose trailing text has not been reported yet
        self._last = None
        self._seen_element = False
        self._done = False

        self.event = None
        self._element = None
        self.text = None

    @property
    def local_name(self):
        '''Local name of the element at the current START event'''
        return ET.QName(self._element).localname

    @property
    def attributes(self):
        '''(local name, value) pairs of the element at the current START event, in document order'''
        return [(ET.QName(name).localname, value) for name, value in self._element.attrib.items()]

    def next(self):
        '''Advance to the next event and return its kind'''
        if not self._pending:
            self._read_event()
        self.event, payload = self._pending.popleft()
        if self.event == CHARACTERS:
            self.text, self._element = payload, None
        else:
            self.text, self._element = None, payload
        return self.event

    def _read_event(self):
        if self._done:
            self._pending.append((END_DOCUMENT, None))
            return
        try:
            event, element = next(self._events)
        except StopIteration:
            self._finish()
            return
        except ET.XMLSyntaxError as error:
            if (not self._seen_element and error.code in _EMPTY_DOCUMENT_ERRORS
                    and _holds_no_content(self._reader.prolog)):
                logger.debug('no element in document: %s', error)
                self._finish()
                return
            self._done = True
            self.close()
            line, column = error.position if error.position else (None, None)
            raise MalformedDocument(str(error), line=line, column=column) from error

        if not self._seen_element:
            self._seen_element = True
            self._reader.tracking = False
            self._reader.prolog = bytearray()
        self._flush_text()
        self._pending.append((event, element))
        self._last = (event, element)

    def _flush_text(self):
        # The text that follows the previous event is complete once lxml has moved past it
        if self._last is None:
            return
        event, element = self._last
        self._last = None
        if event == START:
            text = element.text
        else:
            text = element.tail
            parent = element.getparent()
            if parent is not None:
                parent.remove(element)
        if text:
            self._pending.append((CHARACTERS, text))

    def _finish(self):
        self._done = True
        self._last = None
        self.close()
        self._pending.append((END_DOCUMENT, None))

    def close(self):
        '''Release the input if the cursor opened it from a filename'''
        if self._own_source:
            self._source.close()
