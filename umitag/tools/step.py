import abc
import io
import json
import numbers
import os
import sys

from jinja2 import Environment, FileSystemLoader, select_autoescape

from umitag.tools import utils
from umitag.__init__ import HELP_DICT, ROOT_PATH, __version__

INPUT_ARGS = ("fq1", "fq2", "tagged_fq")


def cap_str_except_preposition(my_string):
    prepositions = {
        "and",
        "or",
        "the",
        "a",
        "of",
        "in",
        "per",
        "after",
        "with",
        "by",
        "at",
    }
    lowercase_words = my_string.split(" ")

    final_words = [
        word if word in prepositions else word[0].upper() + word[1:]
        for word in lowercase_words
    ]
    final_words = " ".join(final_words)
    return final_words


def get_first_input(args):
    for arg in INPUT_ARGS:
        value = getattr(args, arg, None)
        if value:
            return value
    raise ValueError(f"None of {INPUT_ARGS} is set in args")


def s_common(parser):
    """subparser common arguments"""
    parser.add_argument("--outdir", help=HELP_DICT["outdir"])
    parser.add_argument("--sample", help=HELP_DICT["sample"])
    parser.add_argument("--thread", help=HELP_DICT["thread"], type=int, default=1)
    parser.add_argument("--debug", help=HELP_DICT["debug"], action="store_true")
    return parser


class Step:
    """
    Step class
    """

    def __init__(self, args, display_title=None):
        """
        display_title controls the section title in HTML report
        force thread <=20
        """
        sys.stderr.write(f"umitag version: {__version__} ")
        sys.stderr.write(f"Args: {args}\n")
        self.args = args
        first_input = get_first_input(args)
        self.outdir = args.outdir
        if not self.outdir:
            self.outdir = os.path.dirname(first_input) or "."
        self.sample = args.sample
        if not self.sample:
            self.sample = utils.get_sample_name(first_input)
        self.thread = int(args.thread)
        self.thread = max(min(self.thread, 20), 1)
        self.debug = args.debug
        self.out_prefix = f"{self.outdir}/{self.sample}"
        # unique per invocation, used in staging and debug file names
        self.run_token = utils.get_run_token()
        self.display_title = display_title

        utils.check_mkdir(self.outdir)

        # set
        class_name = self.__class__.__name__
        if not display_title:
            self._display_title = class_name
        else:
            self._display_title = display_title
        self._step_name = class_name[0].lower() + class_name[1:]
        self._step_summary_name = f"{self._step_name}_summary"

        self.__metric_list = []
        self.__comments = []
        self._path_dict = {
            "data": f"{self.outdir}/.{self.sample}.data.json",
            "metrics": f"{self.out_prefix}.metrics.json",
        }

        # steps of one sample share the json files, so the report shows all of them
        self.__content_dict = {}
        for slot, path in self._path_dict.items():
            if not os.path.exists(path):
                self.__content_dict[slot] = {}
            else:
                with open(path) as f:
                    try:
                        self.__content_dict[slot] = json.load(f)
                    except ValueError:
                        sys.stderr.write(
                            f'WARNING: Decoding "{path}" as json has failed. Will create empty json file.\n'
                        )
                        self.__content_dict[slot] = {}
            self.__content_dict[slot][self._step_summary_name] = {}
        self.__content_dict["data"].setdefault("parameters", {})

        # jinja env
        self.env = Environment(
            loader=FileSystemLoader(f"{ROOT_PATH}/templates/"),
            autoescape=select_autoescape(["html", "xml"]),
        )

        # out file
        self.__stat_file = f"{self.out_prefix}_stat.txt"
        self.report_html = f"{self.out_prefix}_report.html"

    def add_metric(
        self,
        name,
        value,
        total=None,
        help_info=None,
        display=None,
        show=True,
        print_log=True,
    ):
        """
        add metric to metric_list

        Args
            total: int or float, used to calculate fraction
            help_info: str, help info for metric in html report
            display: str, controls how to display the metric in HTML report.
            show: bool, whether to add to `stat.txt` and the HTML report.
            print_log: bool, whether to print metric to stderr
        """

        name = cap_str_except_preposition(name)
        if help_info:
            help_info = help_info[0].upper() + help_info[1:]
            if help_info[-1] != ".":
                help_info += "."
        if not display:
            if isinstance(value, numbers.Number):
                display = utils.format_number(value)
            else:
                display = str(value)
        fraction = None
        if total:
            fraction = round(value / total * 100, 2)
            display += f"({fraction}%)"
        self.__metric_list.append(
            {
                "name": name,
                "value": value,
                "total": total,
                "fraction": fraction,
                "display": display,
                "help_info": help_info,
                "show": show,
            }
        )

        if print_log:
            sys.stderr.write(f"{name}: {display}\n")

    def add_comments(self, content):
        self.__comments.append(content)

    def get_metric_value(self, name):
        name = cap_str_except_preposition(name)
        for metric in self.__metric_list:
            if metric["name"] == name:
                return metric["value"]
        raise KeyError(f"metric {name} not found in {self._step_name}")

    def _write_stat(self):
        """metrics of every step of this sample, in the order the steps ran"""
        with open(self.__stat_file, "w") as writer:
            for key, step_summary in self.__content_dict["data"].items():
                if not key.endswith("_summary"):
                    continue
                for metric in step_summary.get("metric_list", []):
                    name = metric["name"]
                    display = metric["display"]

                    line = f"{name}: {display}"
                    writer.write(line + "\n")

    def _dump_content(self):
        """dump content to json file"""
        for slot, path in self._path_dict.items():
            if self.__content_dict[slot]:
                with open(path, "w") as f:
                    json.dump(self.__content_dict[slot], f, indent=4)

    @utils.add_log
    def _render_html(self):
        template = self.env.get_template("html/umi_tag/base.html")
        with io.open(self.report_html, "w", encoding="utf8") as f:
            html = template.render(data=self.__content_dict["data"], version=__version__)
            f.write(html)

    def _add_content_data(self):
        step_summary = {}
        step_summary["display_title"] = self._display_title
        step_summary["metric_list"] = [
            metric for metric in self.__metric_list if metric["show"]
        ]
        step_summary["comments"] = self.__comments
        self.__content_dict["data"][self._step_summary_name].update(step_summary)

    def _add_content_metric(self):
        metric_dict = dict()
        for metric in self.__metric_list:
            name = metric["name"]
            metric_dict[name] = metric["value"]
            if metric["fraction"] is not None:
                metric_dict[f"{name} Fraction"] = metric["fraction"]

        self.__content_dict["metrics"][self._step_summary_name].update(metric_dict)

    def _add_parameters(self):
        for key, value in vars(self.args).items():
            if key not in {
                "func",
                "thread",
                "outdir",
                "sample",
                "debug",
                "subparser_step",
            }:
                self.__content_dict["data"]["parameters"][key] = value

    @utils.add_log
    def _clean_up(self):
        self._add_content_data()
        self._add_content_metric()
        self._add_parameters()
        self._write_stat()
        self._dump_content()
        self._render_html()

    @abc.abstractmethod
    def run(self):
        sys.exit("Please implement run() method.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._clean_up()
