import os

from umitag.__init__ import HELP_DICT
from umitag.tools import utils
from umitag.tools.__init__ import UMI_TABLE_SUFFIX
from umitag.tools.fastq import UmiTagError
from umitag.tools.propagate import Propagate
from umitag.tools.step import s_common
from umitag.tools.tag import Tag, get_opts_tag


def check_paths(args):
    """
    All input and output paths are checked before any file is written.
    """
    for fq in (args.fq1, args.fq2):
        utils.check_file_exists(fq)
    if os.path.abspath(args.fq1) == os.path.abspath(args.fq2):
        raise UmiTagError(f"--fq1 and --fq2 are the same file: {args.fq1}")

    out_fq1 = utils.get_processed_path(args.fq1, args.outdir, args.suffix)
    out_fq2 = utils.get_processed_path(args.fq2, args.outdir, args.suffix)
    if os.path.abspath(out_fq1) == os.path.abspath(out_fq2):
        raise UmiTagError(
            f"Read 1 and read 2 would be written to the same file: {out_fq1}. Rename one of the input files."
        )
    for in_fq, out_fq in ((args.fq1, out_fq1), (args.fq2, out_fq2)):
        if os.path.abspath(in_fq) == os.path.abspath(out_fq):
            raise UmiTagError(f"Output file is the same as input file: {in_fq}")


@utils.add_log
def run(args):
    """
    Tag read 1, then read 2 with the read name to UMI dict captured while tagging read 1.
    If any step fails, fastq files already written by this run are removed.
    """
    check_paths(args)
    written = []
    try:
        with Tag(args, display_title="Read 1 UMI") as tag_runner:
            tag_runner.run()
            written.append(tag_runner.out_fq1)
            if tag_runner.debug:
                umi_table = f"{tag_runner.out_prefix}_{UMI_TABLE_SUFFIX}.{tag_runner.run_token}.tsv"
                written.append(umi_table)
                utils.dict_to_two_col(tag_runner.umi_dict, umi_table)

        with Propagate(args, umi_dict=tag_runner.umi_dict, display_title="Read 2 UMI") as propagate_runner:
            propagate_runner.run()
            written.append(propagate_runner.out_fq2)
    except BaseException:
        if written:
            run.logger.error(f"Run failed. Removing {written}")
        utils.remove_files(written)
        raise

    return tag_runner, propagate_runner


def get_opts_run(parser, sub_program=True):
    get_opts_tag(parser, sub_program=False)
    if sub_program:
        parser.add_argument("--fq1", help=HELP_DICT["fq1"], required=True)
        parser.add_argument("--fq2", help=HELP_DICT["fq2"], required=True)
        parser = s_common(parser)
    return parser
