"""
Shared regex patterns for DBC line tokenizing.

This module centralizes the compiled patterns for every DBC directive the
tokenizer understands, so the parser and its tests use the same grammar.
"""
import re

_NUMBER = r'[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?'

REGEX_VERSION = re.compile(r'^\s*VERSION\s+"(?P<text>[^"]*)"')
REGEX_BUS_CONFIGURATION = re.compile(r'^\s*BS_\s*:\s*(?P<speed>\d+(?:\.\d+)?)?')

REGEX_FRAME_DEFINITION = re.compile(
    r'^\s*BO_ (?P<id>\d+) (?P<name>[^\s:]+) ?: ?(?P<length>\d+)(?:\s+(?P<sender>\S+))?'
)
REGEX_FRAME_DESCRIPTION = re.compile(r'^\s*CM_ BO_ (?P<id>\d+) "(?P<text>.*)";')
REGEX_FRAME_ATTRIBUTE = re.compile(
    r'^\s*BA_ "(?P<key>\w+)" BO_ (?P<id>\d+) (?P<value>"[^"]*"|[^\s;]*);'
)

REGEX_SIGNAL_DEFINITION = re.compile(
    r'^\s*SG_ (?P<name>[^\s:]+)[ \t]*(?:(?P<multiplexed>m\d+)|(?P<multiplexor>M))? ?: ?'
    r'(?P<start_bit>\d+)\|(?P<bit_length>\d+)@(?P<endian>[01])(?P<sign>[+-]) ?'
    r'\((?P<scale>' + _NUMBER + r'),(?P<offset>' + _NUMBER + r')\) ?'
    r'\[(?P<min>' + _NUMBER + r')\|(?P<max>' + _NUMBER + r')\] ?'
    r'"(?P<unit>[^"]*)"\s*(?P<receivers>.*?)\s*$'
)
REGEX_SIGNAL_DESCRIPTION = re.compile(
    r'^\s*CM_ SG_ (?P<id>\d+) (?P<name>\w+)[ \t]+"(?P<text>.*)";'
)
REGEX_SIGNAL_ATTRIBUTE = re.compile(
    r'^\s*BA_ "(?P<key>\w+)" SG_ (?P<id>\d+) (?P<name>\w+)[ \t]+(?P<value>"[^"]*"|[^\s;]+);'
)

REGEX_VALUE_TABLE = re.compile(
    r'^\s*VAL_ (?P<id>\d+) (?P<name>\w+)(?P<pairs>(?:\s+-?\d+\s+"[^"]*")*)\s*;'
)
REGEX_VALUE_PAIR = re.compile(r'(?P<ordinal>-?\d+)\s+"(?P<label>[^"]*)"')
