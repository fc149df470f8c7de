# umi
UMI_LENGTH = 10
UMI_SEPARATOR = "_"

# file names
FASTQ_SUFFIXES = (".fastq.gz", ".fq.gz", ".fastq", ".fq")
PROCESSED_SUFFIX = "_processed"
OUTPUT_FASTQ_EXT = ".fastq.gz"
UMI_TABLE_SUFFIX = "umis"

# log
LOG_READ_INTERVAL = 1000000
