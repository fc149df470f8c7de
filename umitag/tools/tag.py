"""Take the UMI from the start of read 1 sequence and append it to the read name with umi_separator underscore '_'"""

import argparse
from collections import Counter

from umitag.__init__ import HELP_DICT
from umitag.tools import fastq, utils
from umitag.tools.__init__ import (
    LOG_READ_INTERVAL,
    PROCESSED_SUFFIX,
    UMI_LENGTH,
    UMI_SEPARATOR,
    UMI_TABLE_SUFFIX,
)
from umitag.tools.step import Step, s_common


def tag_record(record, umi_length=UMI_LENGTH, separator=UMI_SEPARATOR):
    """
    Returns:
        tagged record, read name, UMI, outcome
    """
    umi = record.sequence[:umi_length]
    tagged, identifier, outcome = fastq.tag_header(record, umi, separator)
    return tagged, identifier, umi, outcome


class Tag(Step):
    """
    Features
    - The first `--umi_length` bases of each read 1 sequence are appended to the read name: `@{read_name}_{UMI} {description}`.
    - Sequence, separator and quality lines are not changed.
    - The read name to UMI dict is kept in `umi_dict` for the read 2 step.

    Output
    - `{fq1 name}_processed.fastq.gz` Read 1 with UMI in read names.
    - `{sample}_umis.tsv` Read name and UMI. Only written by `umitag tag`.
    """

    def __init__(self, args, display_title=None):
        super().__init__(args, display_title=display_title)
        self.fq1 = args.fq1
        utils.check_file_exists(self.fq1)
        self.umi_length = args.umi_length
        self.separator = args.umi_separator
        self.strict_separator = args.strict_separator

        self.umi_dict = {}
        self.outcome_counter = Counter()
        self.raw_reads = 0
        self.short_umi_reads = 0
        self.collision_reads = 0

        # out
        self.out_fq1 = utils.get_processed_path(self.fq1, args.outdir, args.suffix)
        self.umi_table = f"{self.out_prefix}_{UMI_TABLE_SUFFIX}.tsv"
        if self.out_fq1 == self.fq1:
            raise fastq.UmiTagError(f"Output file is the same as input file: {self.fq1}")

    def check_separator(self, identifier):
        if self.separator not in identifier:
            return
        self.collision_reads += 1
        message = (
            f"UMI separator '{self.separator}' already in read name {identifier}. "
            "The read name can not be recovered from the tagged read name."
        )
        if self.strict_separator:
            raise fastq.SeparatorCollisionError(message)
        if self.collision_reads == 1:
            self.tag_fastq.logger.warning(message + " Only the first read is reported.")

    @utils.add_log
    def tag_fastq(self, out_fq):
        with utils.generic_open(self.fq1) as fh, utils.generic_open(
            out_fq, "wt", threads=self.thread, compresslevel=1
        ) as out_fh:
            for record in fastq.read_fastq(fh, self.fq1):
                self.raw_reads += 1
                tagged, identifier, umi, outcome = tag_record(
                    record, self.umi_length, self.separator
                )
                self.check_separator(identifier)
                if len(umi) < self.umi_length:
                    self.short_umi_reads += 1
                self.outcome_counter[outcome] += 1
                self.umi_dict[identifier] = umi
                out_fh.write(tagged.to_text())
                if self.raw_reads % LOG_READ_INTERVAL == 0:
                    self.tag_fastq.logger.info(f"{utils.format_number(self.raw_reads)} reads done.")

    def add_tag_metrics(self):
        self.add_metric(
            name="Read 1 Reads",
            value=self.raw_reads,
            help_info="total reads in read 1 fastq file",
        )
        self.add_metric(
            name="Read 1 Unique Read Names",
            value=len(self.umi_dict),
            help_info="read names in the read name to UMI table. Duplicated read names keep the UMI of the last read",
        )
        self.add_metric(
            name="Read 1 Malformed Headers",
            value=self.outcome_counter[fastq.MALFORMED],
            total=self.raw_reads,
            help_info="reads whose header has no description after the read name. These reads are still tagged",
        )
        self.add_metric(
            name="Read 1 Short UMIs",
            value=self.short_umi_reads,
            total=self.raw_reads,
            help_info=f"reads shorter than {self.umi_length} bases. The whole sequence is used as UMI",
        )
        self.add_metric(
            name="Read Names Containing Separator",
            value=self.collision_reads,
            total=self.raw_reads,
            help_info="read names that already contain the UMI separator",
        )
        if self.collision_reads:
            self.add_comments(
                f"Some read names contain the UMI separator '{self.separator}'. "
                "Splitting tagged read names on the separator will not give the original read name."
            )

    @utils.add_log
    def run(self):
        with utils.staged_output(self.out_fq1, self.run_token) as staging_fq1:
            self.tag_fastq(staging_fq1)
        self.add_tag_metrics()


@utils.add_log
def tag(args):
    with Tag(args, display_title="Read 1 UMI") as runner:
        runner.run()
        try:
            with utils.staged_output(runner.umi_table, runner.run_token) as staging_table:
                utils.dict_to_two_col(runner.umi_dict, staging_table)
        except BaseException:
            # no processed fastq without its table
            utils.remove_files([runner.out_fq1])
            raise


def get_opts_umi(parser):
    """options shared by read 1 and read 2"""
    parser.add_argument(
        "--umi_separator", help=HELP_DICT["umi_separator"], type=check_umi_separator, default=UMI_SEPARATOR
    )
    parser.add_argument("--suffix", help=HELP_DICT["suffix"], default=PROCESSED_SUFFIX)
    return parser


def check_umi_length(value):
    length = int(value)
    if length < 1:
        raise argparse.ArgumentTypeError(f"UMI length must be >= 1, got {value}")
    return length


def check_umi_separator(value):
    if len(value) != 1 or value.isspace():
        raise argparse.ArgumentTypeError(
            f"UMI separator must be one non-whitespace character, got '{value}'"
        )
    return value


def get_opts_tag(parser, sub_program=True):
    get_opts_umi(parser)
    parser.add_argument(
        "--umi_length", help=HELP_DICT["umi_length"], type=check_umi_length, default=UMI_LENGTH
    )
    parser.add_argument(
        "--strict_separator", help=HELP_DICT["strict_separator"], action="store_true"
    )
    if sub_program:
        parser.add_argument("--fq1", help=HELP_DICT["fq1"], required=True)
        parser = s_common(parser)
    return parser
