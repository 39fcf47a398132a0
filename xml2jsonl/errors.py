# -*- coding: utf-8 -*-


class Xml2JsonlError(Exception):
    '''Base class for errors raised while converting XML to JSON lines.'''


class MalformedDocument(Xml2JsonlError):
    '''The XML input could not be parsed. Conversion stops at this point,
    units produced before the error remain valid.'''

    def __init__(self, message, line=None, column=None):
        super(MalformedDocument, self).__init__(message)
        # position reported by the parser, None if unknown
        self.line = line
        self.column = column


class MalformedTree(Xml2JsonlError):
    '''A record handed to the simplifier does not have the shape produced by the reader.'''
