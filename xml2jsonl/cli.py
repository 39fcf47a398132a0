# -*- coding: utf-8 -*-
'''Command line interface: converts an XML document into JSON lines.'''
import json
import logging
import sys

import click

from . import XmlJsonl, Simplified, Xml2JsonlError, __version__
from .sources import open_source

logger = logging.getLogger(__name__)

_LOG_FORMAT = '[%(asctime)s][%(levelname)s] %(message)s'
_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def configure_logging(verbosity):
    '''Log to stderr, WARNING by default, one more level per -v'''
    level = _LOG_LEVELS[min(verbosity, len(_LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr, force=True)


@click.command(context_settings=dict(help_option_names=['-h', '--help']))
@click.option('-a', '--all-top', is_flag=True, default=False,
              help='Include all child elements of the root element.')
@click.option('-r', '--proc-root', is_flag=True, default=False,
              help='Process the root element as well, creating an additional JSON object.')
@click.option('-s', '--simplify', is_flag=True, default=False,
              help='Simplify the JSON objects to make them easier to work with.')
@click.option('-t', '--tags', multiple=True, metavar='TAG',
              help='Tag name of elements to extract, matched anywhere in the document. Repeatable.')
@click.option('-i', '--input', 'input_path', type=click.Path(dir_okay=False, allow_dash=True),
              help='Input file to read from (.gz, .bz2 and .xz are decompressed). Default: standard input.')
@click.option('-o', '--output', 'output_path', type=click.Path(dir_okay=False, allow_dash=True),
              default='-', help='Output file to write to. Default: standard output.')
@click.option('-v', '--verbose', count=True, help='Log more details to stderr (-vv for debug output).')
@click.version_option(version=__version__, prog_name='xml2jsonl')
def cli(all_top, proc_root, simplify, tags, input_path, output_path, verbose):
    '''Convert the elements of an XML document into JSON objects, one per line.'''
    configure_logging(verbose)
    if not all_top and not tags:
        logger.warning('neither --all-top nor --tags given, only the root element can be converted')

    reader_class = Simplified if simplify else XmlJsonl
    count = 0
    try:
        with open_source(input_path) as source, \
                click.open_file(output_path, 'w', encoding='utf-8') as output:
            reader = reader_class(source, include_all_children=all_top, include_root=proc_root,
                                  selected_tags=tags)
            for value in reader:
                output.write(json.dumps(value, ensure_ascii=False) + '\n')
                count += 1
    except (Xml2JsonlError, OSError) as error:
        logger.error('conversion stopped after %d objects: %s', count, error)
        raise click.ClickException(str(error)) from error
    logger.info('wrote %d objects', count)


def main():
    '''Entry point of the xml2jsonl console script'''
    cli(auto_envvar_prefix='XML2JSONL')


if __name__ == '__main__':
    main()
