import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import timedelta
from functools import wraps

import pandas as pd
from xopen import xopen

from umitag.tools.__init__ import (
    FASTQ_SUFFIXES,
    OUTPUT_FASTQ_EXT,
    PROCESSED_SUFFIX,
)


def add_log(func):
    """
    logging start and done.
    """
    logFormatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    module = func.__module__
    name = func.__name__
    logger_name = f"{module}.{name}"
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)

    consoleHandler = logging.StreamHandler(sys.stderr)
    consoleHandler.setFormatter(logFormatter)
    logger.addHandler(consoleHandler)

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger.info("start...")
        start = time.time()
        result = func(*args, **kwargs)
        end = time.time()
        used = timedelta(seconds=end - start)
        logger.info("done. time used: %s", used)
        return result

    wrapper.logger = logger
    return wrapper


def generic_open(file_name, mode="rt", threads=0, **kwargs):
    """
    open plain or compressed file with xopen.
    threads=0 keeps (de)compression in this process, so a corrupt input raises here instead of in a pigz pipe.
    """
    return xopen(file_name, mode, threads=threads, **kwargs)


def check_mkdir(dir_name):
    """if dir_name is not exist, make one"""
    if dir_name:
        os.makedirs(dir_name, exist_ok=True)


def check_file_exists(file_name):
    if not os.path.isfile(file_name):
        raise FileNotFoundError(f"{file_name} not found")


def format_number(number: int) -> str:
    return format(number, ",")


def strip_fastq_suffix(file_name: str) -> str:
    """
    >>> strip_fastq_suffix("sample_R1.fq.gz")
    'sample_R1'
    >>> strip_fastq_suffix("sample_R1.txt")
    'sample_R1.txt'
    """
    for suffix in FASTQ_SUFFIXES:
        if file_name.endswith(suffix):
            return file_name[: -len(suffix)]
    return file_name


def get_processed_path(fq, outdir=None, suffix=PROCESSED_SUFFIX):
    """
    Returns:
        output fastq path. `{outdir}/{fq name without fastq suffix}{suffix}.fastq.gz`
        If outdir is None, the output is written beside the input.
    """
    if outdir is None:
        outdir = os.path.dirname(fq)
    name = strip_fastq_suffix(os.path.basename(fq))
    return os.path.join(outdir, f"{name}{suffix}{OUTPUT_FASTQ_EXT}")


def get_sample_name(fq):
    return strip_fastq_suffix(os.path.basename(fq))


def get_run_token():
    """short random token that keeps file names of concurrent runs apart"""
    return uuid.uuid4().hex[:8]


def two_col_to_dict(file):
    """
    Read file with two columns. All values are read as str.
    Returns dict. If a key occurs more than once, the last value is kept.
    """
    if os.path.getsize(file) == 0:
        return {}
    df = pd.read_csv(
        file, header=None, sep="\t", dtype=str, keep_default_na=False
    )
    return dict(zip(df[0], df[1]))


@add_log
def dict_to_two_col(d, file):
    df = pd.DataFrame(list(d.items()))
    if df.empty:
        open(file, "w").close()
        return
    df.to_csv(file, sep="\t", header=False, index=False)


def remove_files(file_list):
    """remove files that exist, ignore the others"""
    for f in file_list:
        if os.path.exists(f):
            os.remove(f)


def get_staging_path(final_path, token):
    """hidden file beside final_path. The extension is kept so xopen picks the same compression."""
    dir_name, base_name = os.path.split(final_path)
    return os.path.join(dir_name, f".{token}.{base_name}")


@contextmanager
def staged_output(final_path, token):
    """
    Yield a staging path. It is renamed to final_path when the block succeeds and removed when it raises.
    """
    staging_path = get_staging_path(final_path, token)
    try:
        yield staging_path
        os.replace(staging_path, final_path)
    except BaseException:
        remove_files([staging_path])
        raise
