# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from qdispatch_lib.core.error import QDConfigError
from qdispatch_lib.options.queue_config import QueueConfig

CONFIG = """
# default queue configuration
command qsub -v PATH -cwd -S /bin/bash -j y -l arch=*64*
standard_opts -l arch=*64*
option mem=* -l mem_free=$0,ram_free=$0
"""

KALDI_STYLE = """
standard_opts -l arch=*64*   # applied to every job
default gpu=0
gpu=0 -q all.q
gpu=* -l gpu=$0 -q g.q
mem=* -l mem_free=$0,ram_free=$0
mem=4G -l mem_free=4G,ram_free=4G
num_threads=* -pe smp $0
max_jobs_run=* -tc $0
"""


def test_queue_config_from_text():
    config = QueueConfig.fromText(KALDI_STYLE, "conf/queue.conf")

    assert config.source == "conf/queue.conf"
    assert config.standard_opts == ("-l arch=*64*",)
    assert dict(config.defaults) == {"gpu": "0"}
    assert dict(config.exact_rules) == {
        ("gpu", "0"): "-q all.q",
        ("mem", "4G"): "-l mem_free=4G,ram_free=4G",
    }
    assert dict(config.wildcard_rules) == {
        "gpu": "-l gpu=$0 -q g.q",
        "mem": "-l mem_free=$0,ram_free=$0",
        "num_threads": "-pe smp $0",
        "max_jobs_run": "-tc $0",
    }


def test_queue_config_rejects_unrecognized_line():
    with pytest.raises(QDConfigError, match=r"line 3 of queue config 'conf/queue.conf'"):
        QueueConfig.fromText(CONFIG, "conf/queue.conf")


def test_queue_config_rejects_line_without_template():
    with pytest.raises(QDConfigError, match="line 10"):
        QueueConfig.fromText(KALDI_STYLE + "num_threads=1\n", "conf/queue.conf")


def test_queue_config_wildcard_requires_placeholder():
    with pytest.raises(QDConfigError, match=r"must use '\$0'"):
        QueueConfig.fromText("mem=* -l mem_free=4G\n")


def test_queue_config_ignores_comments_and_blank_lines():
    config = QueueConfig.fromText("# only a comment\n\n   \nmem=* -l h_vmem=$0  # trailing\n")

    assert config.standard_opts == ()
    assert dict(config.wildcard_rules) == {"mem": "-l h_vmem=$0"}


def test_queue_config_translate_prefers_exact_rule():
    config = QueueConfig.fromText("gpu=0 -q all.q\ngpu=* -l gpu=$0 -q g.q\n")

    assert config.translate("gpu", "0") == "-q all.q"
    assert config.translate("gpu", "2") == "-l gpu=2 -q g.q"


def test_queue_config_translate_substitutes_every_placeholder():
    config = QueueConfig.fromText("mem=* -l mem_free=$0,ram_free=$0\n")

    assert config.translate("mem", "8G") == "-l mem_free=8G,ram_free=8G"


def test_queue_config_translate_unknown_option_raises():
    config = QueueConfig.fromText("mem=4G -l mem_free=4G\n", "conf/queue.conf")

    with pytest.raises(QDConfigError, match="'--mem 8G' is not described in queue config"):
        config.translate("mem", "8G")

    with pytest.raises(QDConfigError, match="'--max-jobs-run 3' is not described"):
        config.translate("max_jobs_run", "3")


def test_queue_config_from_file(tmp_path):
    file = tmp_path / "queue.conf"
    file.write_text("standard_opts -V\nmem=* -l mem_free=$0\n")

    config = QueueConfig.fromFile(file)

    assert config.source == str(file)
    assert config.standard_opts == ("-V",)


def test_queue_config_from_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        QueueConfig.fromFile(tmp_path / "missing.conf")
