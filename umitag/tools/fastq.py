"""
FASTQ records, header parsing and the four-line framing used by every step.
"""

import re
from collections import namedtuple

# record outcome
MATCHED = "matched"
UNMATCHED = "unmatched"
MALFORMED = "malformed"

# line position in a record
HEADER = 1
SEQUENCE = 2
PLUS = 3
QUALITY = 4

WHITESPACE = re.compile(r"\s+")


class UmiTagError(Exception):
    pass


class FastqFormatError(UmiTagError):
    def __init__(self, file_name, line_number, message):
        self.file_name = file_name
        self.line_number = line_number
        super().__init__(f"{file_name} line {line_number}: {message}")


class SeparatorCollisionError(UmiTagError):
    pass


class FastqRecord(namedtuple("FastqRecord", ["header", "sequence", "plus", "quality"])):
    """
    One read. Lines are stored without the trailing newline; header keeps the leading '@'.
    """

    __slots__ = ()

    def to_text(self):
        return f"{self.header}\n{self.sequence}\n{self.plus}\n{self.quality}\n"


def read_fastq(handle, file_name=None):
    """
    Yield FastqRecord from an open text handle.

    The position in the current record is tracked explicitly and reset after every quality line.
    Raises FastqFormatError if the input ends inside a record, a header does not start with '@'
    or a separator line does not start with '+'.
    """
    if file_name is None:
        file_name = getattr(handle, "name", "<fastq>")

    position = HEADER
    lines = []
    line_number = 0
    for line_number, line in enumerate(handle, start=1):
        line = line.rstrip("\n")
        if position == HEADER:
            if not line:
                # blank line after a complete record, only allowed at the end of file
                lines.append(line)
                continue
            if lines:
                raise FastqFormatError(file_name, line_number - 1, "blank line inside fastq")
            if not line.startswith("@"):
                raise FastqFormatError(
                    file_name, line_number, f"header line does not start with '@': {line[:50]}"
                )
            lines.append(line)
            position = SEQUENCE
        elif position == SEQUENCE:
            lines.append(line)
            position = PLUS
        elif position == PLUS:
            if not line.startswith("+"):
                raise FastqFormatError(
                    file_name, line_number, f"separator line does not start with '+': {line[:50]}"
                )
            lines.append(line)
            position = QUALITY
        else:
            lines.append(line)
            yield FastqRecord(*lines)
            lines = []
            position = HEADER

    if position != HEADER:
        raise FastqFormatError(
            file_name,
            line_number,
            f"truncated record, {len(lines)} of 4 lines found at end of file",
        )


def split_header(header):
    """
    '@r1 1:N:0:1 extra' -> ('r1', '1:N:0:1 extra')
    A header without whitespace gives an empty description.
    Leading whitespace is not skipped: '@ desc' -> ('', 'desc')
    """
    fields = WHITESPACE.split(header[1:], maxsplit=1)
    if len(fields) == 1:
        return fields[0], ""
    return fields[0], fields[1]


def format_header(identifier, umi, separator, description):
    """The space before description is written even if description is empty."""
    return f"@{identifier}{separator}{umi} {description}"


def tag_header(record, umi, separator):
    """
    Returns:
        (tagged record, identifier, outcome). outcome is MALFORMED if the header has no description.
    """
    identifier, description = split_header(record.header)
    outcome = MATCHED if description else MALFORMED
    header = format_header(identifier, umi, separator, description)
    return record._replace(header=header), identifier, outcome
