"""Rebuild the read name to UMI table from a fastq file tagged by `umitag tag`."""

from umitag.__init__ import HELP_DICT
from umitag.tools import fastq, utils
from umitag.tools.__init__ import UMI_SEPARATOR, UMI_TABLE_SUFFIX
from umitag.tools.step import Step, s_common
from umitag.tools.tag import check_umi_separator


def parse_tagged_identifier(identifier, separator=UMI_SEPARATOR):
    """
    Split on the first separator. The read name is everything before it and the UMI everything after it.
    A read name that already contained the separator is truncated, and the UMI keeps the rest of it:
    'a_b_UMI' -> ('a', 'b_UMI'). No part of the tagged read name is dropped.
    `umitag run` keys the table by the untagged read name and is not affected.

    >>> parse_tagged_identifier("r1_ACGTACGTAC")
    ('r1', 'ACGTACGTAC')
    """
    read_name, _, umi = identifier.partition(separator)
    return read_name, umi


@utils.add_log
def extract_umi_dict(tagged_fq, separator=UMI_SEPARATOR):
    """
    Returns:
        {read_name: UMI} dict
    """
    umi_dict = {}
    with utils.generic_open(tagged_fq) as fh:
        for record in fastq.read_fastq(fh, tagged_fq):
            identifier, _ = fastq.split_header(record.header)
            read_name, umi = parse_tagged_identifier(identifier, separator)
            umi_dict[read_name] = umi
    return umi_dict


class Extract(Step):
    """
    Features
    - Read the UMI back from tagged read names.

    Output
    - `{sample}_umis.tsv` Read name and UMI.
    """

    def __init__(self, args, display_title=None):
        super().__init__(args, display_title=display_title)
        self.tagged_fq = args.tagged_fq
        utils.check_file_exists(self.tagged_fq)
        self.separator = args.umi_separator
        self.umi_dict = {}

        # out
        self.umi_table = f"{self.out_prefix}_{UMI_TABLE_SUFFIX}.tsv"

    @utils.add_log
    def run(self):
        self.umi_dict = extract_umi_dict(self.tagged_fq, self.separator)
        with utils.staged_output(self.umi_table, self.run_token) as staging_table:
            utils.dict_to_two_col(self.umi_dict, staging_table)
        self.add_metric(
            name="UMIs Extracted",
            value=len(self.umi_dict),
            help_info="read names with UMI found in the tagged fastq file",
        )


@utils.add_log
def extract(args):
    with Extract(args, display_title="UMI Table") as runner:
        runner.run()


def get_opts_extract(parser, sub_program=True):
    if sub_program:
        parser.add_argument(
            "--tagged_fq",
            help="Required. Fastq file written by `umitag tag`.",
            required=True,
        )
        parser.add_argument(
            "--umi_separator", help=HELP_DICT["umi_separator"], type=check_umi_separator, default=UMI_SEPARATOR
        )
        parser = s_common(parser)
    return parser
