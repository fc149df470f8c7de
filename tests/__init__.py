import gzip
import os

from umitag.umitag import get_parser

TEST_DIR_ROOT = os.path.dirname(__file__)


def fastq_text(records):
    """records: list of (header, sequence, plus, quality)"""
    return "".join(f"{h}\n{s}\n{p}\n{q}\n" for h, s, p, q in records)


def write_fastq_gz(path, records):
    with gzip.open(path, "wt") as f:
        f.write(fastq_text(records))
    return path


def write_text_gz(path, text):
    with gzip.open(path, "wt") as f:
        f.write(text)
    return path


def read_lines_gz(path):
    with gzip.open(path, "rt") as f:
        return f.read().splitlines()


def parse_args(argv):
    return get_parser().parse_args(argv)


def list_hidden_files(dir_name):
    return [f for f in os.listdir(dir_name) if f.startswith(".") and not f.endswith(".data.json")]
