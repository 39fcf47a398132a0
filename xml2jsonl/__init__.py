# -*- coding: utf-8 -*-
from collections import OrderedDict
import logging

from .cursor import EventCursor, START, END, CHARACTERS, END_DOCUMENT
from .errors import Xml2JsonlError, MalformedDocument, MalformedTree

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

# Reserved keys of an element record. XML names cannot start with ':',
# so these never collide with tag or attribute names.
TAG = ':t'
ATTRIBUTES = ':a'
CHILDREN = ':c'
TEXT = ':x'


class XmlJsonl(object):
    '''Reads an XML document and converts selected elements into records, one at a time.

    A record is a mapping holding the tag name under ':t', the attributes under ':a',
    the converted child elements under ':c' and the trimmed text content under ':x'.
    The reader is an iterator: every step advances the parser just far enough to
    complete the next record, so only one selected subtree is held in memory.

    Example::

        >>> reader = XmlJsonl(BytesIO(b'<root><a x="1">Hi</a></root>'), dict_type=dict)
        >>> next(reader)
        {':t': 'a', ':a': {'x': '1'}, ':c': [], ':x': 'Hi'}
    '''

    def __init__(self, source, include_all_children=True, include_root=False, selected_tags=None,
                 dict_type=None, list_type=None, huge_tree=False):
        # filename or binary file-like object, consumed by a single forward-only cursor
        self.cursor = EventCursor(source, huge_tree=huge_tree)
        # include_all_children == True => every child of the root element is a record
        self.include_all_children = include_all_children
        # include_root == True => the root element is emitted first, without its children
        self.include_root = include_root
        # tag names selected anywhere in the document (used besides include_all_children)
        self.selected_tags = frozenset(selected_tags or ())
        # dict constructor (e.g. OrderedDict, dict)
        self.dict = OrderedDict if dict_type is None else dict_type
        # list constructor (e.g. UserList)
        self.list = list if list_type is None else list_type

        # True until the root element has been reached
        self.at_root = True
        # number of records produced so far
        self.count = 0

    def __iter__(self):
        return self

    def __next__(self):
        value = self.next_unit()
        if value is None:
            raise StopIteration
        return value

    def next_unit(self):
        '''Return the next record, or None once the document is exhausted'''
        if self.at_root:
            self.at_root = False
            if self._scan_to_element() != START:
                return self._exhausted()
            if self.include_root:
                return self._emit(self.root_data())

        while self._scan_to_element() == START:
            if self._qualifies(self.cursor.local_name):
                return self._emit(self.data())
        return self._exhausted()

    def data(self):
        '''Convert the element at the cursor, with all of its descendants, into a record'''
        return self._convert_element()

    def root_data(self):
        '''Convert only the tag name and attributes of the element at the cursor.
        The children are left to the following calls of next_unit().'''
        value = self.dict()
        value[TAG] = self.cursor.local_name
        self._add_attributes(value)
        return value

    def _qualifies(self, tag):
        return self.include_all_children or tag in self.selected_tags

    def _scan_to_element(self):
        # skip events until the cursor is on a start tag or at the end of the document
        event = self.cursor.next()
        while event not in (START, END_DOCUMENT):
            event = self.cursor.next()
        return event

    def _convert_element(self):
        cursor = self.cursor
        value = self.dict()
        value[TAG] = cursor.local_name
        self._add_attributes(value)
        children = value[CHILDREN] = self.list()

        text = []
        while True:
            event = cursor.next()
            if event == START:
                children.append(self._convert_element())
            elif event == CHARACTERS:
                text.append(cursor.text)
            elif event == END:
                break
            elif event == END_DOCUMENT:
                # the parser reports unclosed elements itself, this is a safety net
                raise MalformedDocument('document ended inside <%s>' % value[TAG])

        # all text fragments of the element, including those between child elements
        content = ''.join(text).strip()
        if content:
            value[TEXT] = content
        return value

    def _add_attributes(self, value):
        attributes = self.cursor.attributes
        if attributes:
            value[ATTRIBUTES] = self.dict(attributes)

    def _emit(self, value):
        self.count += 1
        logger.debug('record %d: <%s>', self.count, value[TAG])
        return value

    def _exhausted(self):
        logger.debug('end of document after %d records', self.count)
        return None


class Simplifier(object):
    '''Rewrites a record produced by XmlJsonl into plain named properties.

    Child elements become properties named after their tag, attributes are merged
    into the same properties, elements that only hold text become strings and
    names that occur more than once collect their values in a list:

        <p id="1"><c>a</c><c>b</c><d/></p>  =>  {':t': 'p', 'c': ['a', 'b'], 'd': {}, 'id': '1'}

    The record is changed in place.
    '''

    def __init__(self, dict_type=None, list_type=None):
        self.dict = OrderedDict if dict_type is None else dict_type
        self.list = list if list_type is None else list_type

    def simplify(self, value):
        '''Simplify one record (and its children) and return it'''
        children = value.get(CHILDREN) if isinstance(value, (self.dict, dict)) else None
        if not isinstance(children, (self.list, list)):
            raise MalformedTree('record %r has no list of child elements under %r'
                                % (self._tag_of(value), CHILDREN))

        # children first, each one loses its tag and becomes a property named after it
        for child in children:
            if not isinstance(child, (self.dict, dict)) or TAG not in child:
                raise MalformedTree('child of %r is not an element record' % self._tag_of(value))
            self.simplify(child)
            self._merge(value, child.pop(TAG), child)
        del value[CHILDREN]
        if TEXT in value and not value[TEXT]:
            del value[TEXT]

        # elements holding nothing but text become strings
        for name, prop in list(value.items()):
            if name in (TAG, ATTRIBUTES, TEXT):
                continue
            if isinstance(prop, (self.list, list)):
                value[name] = self.list(self._collapse(item) for item in prop)
            else:
                value[name] = self._collapse(prop)

        # attributes last, they share the property names with the child elements
        attributes = value.pop(ATTRIBUTES, None)
        if attributes:
            for name, attrval in attributes.items():
                self._merge(value, name, attrval)
        return value

    def _merge(self, value, name, item):
        # single occurrence => plain value, repeated name => list of values
        if name not in value:
            value[name] = item
            return
        existing = value[name]
        if not isinstance(existing, (self.list, list)):
            existing = value[name] = self.list([existing])
        existing.append(item)

    def _collapse(self, item):
        if isinstance(item, (self.dict, dict)) and len(item) == 1 and TEXT in item:
            return item[TEXT]
        return item

    @staticmethod
    def _tag_of(value):
        try:
            return value.get(TAG)
        except AttributeError:
            return None


def simplify(value):
    '''Simplify a record with the default Simplifier'''
    return Simplifier().simplify(value)


class Simplified(XmlJsonl):
    '''XmlJsonl reader that simplifies every record before returning it'''

    def __init__(self, source, **kwargs):
        super(Simplified, self).__init__(source, **kwargs)
        self.simplifier = Simplifier(dict_type=self.dict, list_type=self.list)

    def data(self):
        return self.simplifier.simplify(super(Simplified, self).data())

    def root_data(self):
        value = super(Simplified, self).root_data()
        # the root record is converted without its children
        value[CHILDREN] = self.list()
        return self.simplifier.simplify(value)
