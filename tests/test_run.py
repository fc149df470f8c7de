import glob
import json
import os
import tempfile
import unittest

from tests.__init__ import (
    fastq_text,
    list_hidden_files,
    parse_args,
    read_lines_gz,
    write_fastq_gz,
    write_text_gz,
)
from umitag.tools import fastq, utils
from umitag.tools.run import run


class Test_run(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.outdir = self.tmp.name
        self.fq1 = f"{self.outdir}/s_R1.fastq.gz"
        self.fq2 = f"{self.outdir}/s_R2.fastq.gz"
        self.out_fq1 = f"{self.outdir}/s_R1_processed.fastq.gz"
        self.out_fq2 = f"{self.outdir}/s_R2_processed.fastq.gz"

    def tearDown(self):
        self.tmp.cleanup()

    def get_args(self, *extra):
        return parse_args(["run", "--fq1", self.fq1, "--fq2", self.fq2, *extra])

    def test_scenario(self):
        write_fastq_gz(self.fq1, [("@r1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        write_fastq_gz(
            self.fq2,
            [("@r1 desc2", "GGCCGGCC", "+", "IIIIIIII"), ("@r2 desc2", "TTTTTTTT", "+", "IIIIIIII")],
        )
        tag_runner, propagate_runner = run(self.get_args())

        self.assertEqual(
            read_lines_gz(self.out_fq1),
            ["@r1_ACGTACGTAC desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII"],
        )
        # r2 has no read 1 mate
        self.assertEqual(
            read_lines_gz(self.out_fq2),
            ["@r1_ACGTACGTAC desc2", "GGCCGGCC", "+", "IIIIIIII"],
        )
        self.assertEqual(tag_runner.get_metric_value("Read 1 Reads"), 1)
        self.assertEqual(propagate_runner.get_metric_value("Read 2 Dropped Reads"), 1)

        # both steps in one report
        with open(f"{self.outdir}/s_R1.metrics.json") as f:
            metrics = json.load(f)
        self.assertEqual(metrics["tag_summary"]["Read 1 Reads"], 1)
        self.assertEqual(metrics["propagate_summary"]["Read 2 Tagged Reads"], 1)
        self.assertEqual(metrics["propagate_summary"]["Read 2 Dropped Reads Fraction"], 50.0)
        with open(f"{self.outdir}/s_R1_stat.txt") as f:
            stat = f.read()
        self.assertIn("Read 1 Reads: 1\n", stat)
        self.assertIn("Read 2 Dropped Reads: 1(50.0%)\n", stat)
        # no table is written without --debug
        self.assertEqual(glob.glob(f"{self.outdir}/*umis*"), [])

    def test_every_mate_tagged_once(self):
        read1 = [(f"@r{i} 1:N:0:1", f"{'ACGT'[i % 4] * 12}", "+", "I" * 12) for i in range(20)]
        read2 = [(f"@r{i} 2:N:0:1", "GGGGCCCC", "+", "F" * 8) for i in range(0, 40, 2)]
        write_fastq_gz(self.fq1, read1)
        write_fastq_gz(self.fq2, read2)
        run(self.get_args())

        lines = read_lines_gz(self.out_fq2)
        headers = lines[0::4]
        self.assertEqual(len(headers), 10)
        for i, header in zip(range(0, 20, 2), headers):
            self.assertEqual(header, f"@r{i}_{'ACGT'[i % 4] * 10} 2:N:0:1")
        self.assertEqual(lines[1::4], ["GGGGCCCC"] * 10)
        self.assertEqual(lines[3::4], ["F" * 8] * 10)

    def test_recover_read_name_and_umi(self):
        write_fastq_gz(self.fq1, [("@r1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        write_fastq_gz(self.fq2, [])
        run(self.get_args())
        identifier, _ = fastq.split_header(read_lines_gz(self.out_fq1)[0])
        read_name, _, umi = identifier.rpartition("_")
        self.assertEqual((read_name, umi), ("r1", "ACGTACGTAC"))

    def test_empty_read1(self):
        write_fastq_gz(self.fq1, [])
        write_fastq_gz(self.fq2, [("@r1 desc2", "GGCCGGCC", "+", "IIIIIIII")])
        _, propagate_runner = run(self.get_args())
        self.assertEqual(read_lines_gz(self.out_fq1), [])
        self.assertEqual(read_lines_gz(self.out_fq2), [])
        self.assertEqual(propagate_runner.get_metric_value("Read 2 Dropped Reads"), 1)

    def test_truncated_read1(self):
        write_text_gz(self.fq1, "@r1 desc\nACGTACGTAC\n+\n")
        write_fastq_gz(self.fq2, [("@r1 desc2", "GGCCGGCC", "+", "IIIIIIII")])
        with self.assertRaises(fastq.FastqFormatError):
            run(self.get_args())
        self.assertFalse(os.path.exists(self.out_fq1))
        self.assertFalse(os.path.exists(self.out_fq2))
        self.assertEqual(list_hidden_files(self.outdir), [])

    def test_truncated_read2_removes_read1_output(self):
        write_fastq_gz(self.fq1, [("@r1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        write_text_gz(self.fq2, fastq_text([("@r1 desc2", "GGCCGGCC", "+", "IIIIIIII")]) + "@r2 desc2\n")
        with self.assertRaises(fastq.FastqFormatError):
            run(self.get_args("--debug"))
        self.assertFalse(os.path.exists(self.out_fq1))
        self.assertFalse(os.path.exists(self.out_fq2))
        self.assertEqual(glob.glob(f"{self.outdir}/*umis*"), [])
        self.assertEqual(list_hidden_files(self.outdir), [])

    def test_missing_read2_writes_nothing(self):
        write_fastq_gz(self.fq1, [("@r1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        with self.assertRaises(FileNotFoundError):
            run(self.get_args())
        self.assertFalse(os.path.exists(self.out_fq1))

    def test_corrupt_gzip(self):
        read1 = [(f"@r{i} desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII") for i in range(1000)]
        write_fastq_gz(self.fq1, read1)
        with open(self.fq1, "rb") as f:
            data = f.read()
        # cut the gzip stream in the middle
        with open(self.fq1, "wb") as f:
            f.write(data[: len(data) // 2])
        write_fastq_gz(self.fq2, [("@r1 desc2", "GGCCGGCC", "+", "IIIIIIII")])
        with self.assertRaises((OSError, EOFError)):
            run(self.get_args())
        self.assertFalse(os.path.exists(self.out_fq1))
        self.assertFalse(os.path.exists(self.out_fq2))

    def test_debug_table(self):
        write_fastq_gz(self.fq1, [("@r1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        write_fastq_gz(self.fq2, [("@r1 desc2", "GGCCGGCC", "+", "IIIIIIII")])
        tag_runner, _ = run(self.get_args("--debug"))
        tables = glob.glob(f"{self.outdir}/s_R1_umis.*.tsv")
        self.assertEqual(tables, [f"{self.outdir}/s_R1_umis.{tag_runner.run_token}.tsv"])
        self.assertEqual(utils.two_col_to_dict(tables[0]), {"r1": "ACGTACGTAC"})

    def test_outdir_and_options(self):
        write_fastq_gz(self.fq1, [("@r_1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        write_fastq_gz(self.fq2, [("@r_1 desc2", "GGCCGGCC", "+", "IIIIIIII")])
        outdir = f"{self.outdir}/out"
        run(
            self.get_args(
                "--outdir", outdir, "--sample", "test", "--umi_length", "6",
                "--umi_separator", ":", "--suffix", "_umi",
            )
        )
        self.assertEqual(read_lines_gz(f"{outdir}/s_R1_umi.fastq.gz")[0], "@r_1:ACGTAC desc")
        self.assertEqual(read_lines_gz(f"{outdir}/s_R2_umi.fastq.gz")[0], "@r_1:ACGTAC desc2")
        self.assertTrue(os.path.exists(f"{outdir}/test_report.html"))

    def test_separator_collision_in_memory_table(self):
        # the in-memory table is keyed by the original read name, so read 2 is still joined
        write_fastq_gz(self.fq1, [("@r_1 desc", "ACGTACGTACNNNN", "+", "IIIIIIIIIIIIII")])
        write_fastq_gz(self.fq2, [("@r_1 desc2", "GGCCGGCC", "+", "IIIIIIII")])
        tag_runner, _ = run(self.get_args())
        self.assertEqual(read_lines_gz(self.out_fq2)[0], "@r_1_ACGTACGTAC desc2")
        self.assertEqual(tag_runner.get_metric_value("Read Names Containing Separator"), 1)

    def test_same_output_path(self):
        os.makedirs(f"{self.outdir}/a")
        os.makedirs(f"{self.outdir}/b")
        self.fq1 = write_fastq_gz(f"{self.outdir}/a/s.fastq.gz", [])
        self.fq2 = write_fastq_gz(f"{self.outdir}/b/s.fastq.gz", [])
        with self.assertRaises(fastq.UmiTagError):
            run(self.get_args("--outdir", self.outdir))

    def test_same_input(self):
        write_fastq_gz(self.fq1, [])
        self.fq2 = self.fq1
        with self.assertRaises(fastq.UmiTagError):
            run(self.get_args())


if __name__ == "__main__":
    unittest.main()
