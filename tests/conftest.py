from io import BytesIO

import pytest

import xml2jsonl

DOC1 = b'''<?xml version='1.0'?>
<root len='2'>
    <a><b></b></a>
    <b attr='b'><c>Hi!</c><a></a></b>
</root>'''


@pytest.fixture
def doc1():
    return DOC1


@pytest.fixture
def convert():
    '''Run a reader over an XML byte string and return all records as plain dicts'''
    def run(xml, reader_class=xml2jsonl.XmlJsonl, **kwargs):
        kwargs.setdefault('dict_type', dict)
        return list(reader_class(BytesIO(xml), **kwargs))
    return run
