"""Append the read 1 UMI to read 2 read names. Read 2 reads without a read 1 mate are dropped."""

from collections import Counter

from umitag.__init__ import HELP_DICT
from umitag.tools import fastq, utils
from umitag.tools.__init__ import LOG_READ_INTERVAL, UMI_SEPARATOR
from umitag.tools.step import Step, s_common
from umitag.tools.tag import get_opts_umi


def propagate_record(record, umi_dict, separator=UMI_SEPARATOR):
    """
    Returns:
        (tagged record, outcome). tagged record is None if the read name is not in umi_dict.
    """
    identifier, _ = fastq.split_header(record.header)
    if identifier not in umi_dict:
        return None, fastq.UNMATCHED
    tagged, _, outcome = fastq.tag_header(record, umi_dict[identifier], separator)
    return tagged, outcome


class Propagate(Step):
    """
    Features
    - Read 2 reads are tagged with the UMI of the read 1 read with the same read name.
    - Read 2 reads whose read name is not in read 1 are dropped.

    Output
    - `{fq2 name}_processed.fastq.gz` Read 2 with UMI in read names.
    """

    def __init__(self, args, umi_dict=None, display_title=None):
        """
        umi_dict: {read_name: UMI}. If None, it is read from `args.umi_table`.
        """
        super().__init__(args, display_title=display_title)
        self.fq2 = args.fq2
        utils.check_file_exists(self.fq2)
        self.separator = args.umi_separator
        if umi_dict is None:
            utils.check_file_exists(args.umi_table)
            umi_dict = utils.two_col_to_dict(args.umi_table)
        self.umi_dict = umi_dict

        self.outcome_counter = Counter()
        self.raw_reads = 0

        # out
        self.out_fq2 = utils.get_processed_path(self.fq2, args.outdir, args.suffix)
        if self.out_fq2 == self.fq2:
            raise fastq.UmiTagError(f"Output file is the same as input file: {self.fq2}")

    @utils.add_log
    def propagate_fastq(self, out_fq):
        if not self.umi_dict:
            self.propagate_fastq.logger.warning("Read name to UMI table is empty. All read 2 reads will be dropped.")

        with utils.generic_open(self.fq2) as fh, utils.generic_open(
            out_fq, "wt", threads=self.thread, compresslevel=1
        ) as out_fh:
            for record in fastq.read_fastq(fh, self.fq2):
                self.raw_reads += 1
                tagged, outcome = propagate_record(record, self.umi_dict, self.separator)
                self.outcome_counter[outcome] += 1
                if tagged is not None:
                    out_fh.write(tagged.to_text())
                if self.raw_reads % LOG_READ_INTERVAL == 0:
                    self.propagate_fastq.logger.info(f"{utils.format_number(self.raw_reads)} reads done.")

        dropped = self.outcome_counter[fastq.UNMATCHED]
        if dropped:
            self.propagate_fastq.logger.warning(
                f"{utils.format_number(dropped)} read 2 reads have no read 1 mate and are dropped."
            )

    def add_propagate_metrics(self):
        unmatched = self.outcome_counter[fastq.UNMATCHED]
        malformed = self.outcome_counter[fastq.MALFORMED]
        self.add_metric(
            name="Read 2 Reads",
            value=self.raw_reads,
            help_info="total reads in read 2 fastq file",
        )
        self.add_metric(
            name="Read 2 Tagged Reads",
            value=self.raw_reads - unmatched,
            total=self.raw_reads,
            help_info="read 2 reads whose read name is found in read 1 and are written with UMI",
        )
        self.add_metric(
            name="Read 2 Dropped Reads",
            value=unmatched,
            total=self.raw_reads,
            help_info="read 2 reads whose read name is not found in read 1. These reads are not written",
        )
        self.add_metric(
            name="Read 2 Malformed Headers",
            value=malformed,
            total=self.raw_reads,
            help_info="tagged read 2 reads whose header has no description after the read name",
        )
        if unmatched:
            self.add_comments(
                "Read 2 reads without a read 1 mate are not written, so read 2 output has fewer reads than read 2 input."
            )

    @utils.add_log
    def run(self):
        with utils.staged_output(self.out_fq2, self.run_token) as staging_fq2:
            self.propagate_fastq(staging_fq2)
        self.add_propagate_metrics()


@utils.add_log
def propagate(args):
    with Propagate(args, display_title="Read 2 UMI") as runner:
        runner.run()


def get_opts_propagate(parser, sub_program=True):
    if sub_program:
        get_opts_umi(parser)
        parser.add_argument("--fq2", help=HELP_DICT["fq2"], required=True)
        parser.add_argument("--umi_table", help=HELP_DICT["umi_table"], required=True)
        parser = s_common(parser)
    return parser
