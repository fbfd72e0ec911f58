# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from qdispatch_lib.properties.options import SubmissionOptions


def test_submission_options_defaults():
    options = SubmissionOptions()

    assert options.flags == ()
    assert dict(options.bindings) == {}
    assert options.num_threads == 1
    assert not options.sync
    assert options.max_concurrent is None
    assert options.toArgs() == []
    assert str(options) == ""


def test_submission_options_to_args_splits_fragments():
    options = SubmissionOptions(
        flags=["-q all.q", "-l mem_free=4G,ram_free=4G", "-pe smp 4", "-N 'my job'"]
    )

    assert options.toArgs() == [
        "-q",
        "all.q",
        "-l",
        "mem_free=4G,ram_free=4G",
        "-pe",
        "smp",
        "4",
        "-N",
        "my job",
    ]


def test_submission_options_str_joins_flags():
    options = SubmissionOptions(flags=("-q all.q", "-V"))

    assert str(options) == "-q all.q -V"


def test_submission_options_are_immutable():
    bindings = {"mem": "-l mem_free=4G"}
    options = SubmissionOptions(flags=["-V"], bindings=bindings)

    assert isinstance(options.flags, tuple)

    with pytest.raises(AttributeError):
        options.num_threads = 4  # ty: ignore[invalid-assignment]

    with pytest.raises(TypeError):
        options.bindings["gpu"] = "-q gpu.q"  # ty: ignore[invalid-assignment]

    # later changes of the source mapping do not leak into the options
    bindings["gpu"] = "-q gpu.q"
    assert "gpu" not in options.bindings
