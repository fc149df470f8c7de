import os

__VERSION__ = "0.2.0"
__version__ = __VERSION__

ROOT_PATH = os.path.dirname(__file__)

STEPS = [
    "tag",
    "extract",
    "propagate",
    "run",
]

# argument help
HELP_DICT = {
    'fq1': 'Required. Read 1 gzip fastq file. The UMI is taken from the start of each read 1 sequence.',
    'fq2': 'Required. Read 2 gzip fastq file. Reads are tagged with the UMI of the read 1 mate with the same read name.',
    'outdir': 'Output directory. Default is the directory of the input fastq file.',
    'sample': 'Prefix of stat, metrics and report files. Default is derived from the input fastq file name.',
    'umi_length': 'Number of bases at the start of read 1 used as UMI. Shorter reads use the whole sequence.',
    'umi_separator': 'Character placed between read name and UMI. Must not occur in read names, see `--strict_separator`.',
    'suffix': 'Suffix added to output fastq file names, before `.fastq.gz`.',
    'strict_separator': 'Exit with an error if the UMI separator already occurs in a read name. By default these reads are tagged and counted.',
    'thread': 'Threads used to compress output fastq files.',
    'debug': 'If this argument is used, umitag keeps the read name to UMI table as a tsv file.',
    'umi_table': 'Required. Tab-delimited file with read name in the 1st column and UMI in the 2nd column, as written by `umitag tag` or `umitag extract`.',
}
