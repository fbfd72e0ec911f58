# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from unittest.mock import patch

import pytest

from qdispatch_lib.batch.sge import SGE
from qdispatch_lib.batch.slurm import Slurm
from qdispatch_lib.core.error import QDSubmissionError
from qdispatch_lib.submit.submitter import Submitter

ACK = 'Your job 4242 ("a.sh") has been submitted\n'


def _completed(returncode: int, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def transcript(tmp_path):
    return tmp_path / "q" / "a.log"


@pytest.fixture(autouse=True)
def queue_dir(transcript):
    transcript.parent.mkdir()


def test_submit_returns_job_id(transcript):
    submitter = Submitter(SGE, ["qsub", "a.sh"], transcript)

    with patch("subprocess.run", return_value=_completed(0, ACK)) as mock_run:
        assert submitter.submit() == "4242"

    mock_run.assert_called_once()
    assert mock_run.call_args[0][0] == ["qsub", "a.sh"]
    assert transcript.read_text() == ACK


def test_submit_appends_to_existing_transcript(transcript):
    transcript.write_text("earlier output\n")

    with patch("subprocess.run", return_value=_completed(0, ACK, "warning: x\n")):
        Submitter(SGE, ["qsub", "a.sh"], transcript).submit()

    assert transcript.read_text() == "earlier output\n" + ACK + "warning: x\n"


def test_submit_slurm(transcript):
    with patch(
        "subprocess.run", return_value=_completed(0, "Submitted batch job 77\n")
    ):
        assert Submitter(Slurm, ["sbatch", "a.sh"], transcript).submit() == "77"


def test_submit_failure_raises_with_transcript_tail(transcript):
    submitter = Submitter(SGE, ["qsub", "-q", "nope.q", "a.sh"], transcript)

    with (
        patch(
            "subprocess.run",
            return_value=_completed(1, stderr="Unable to run job: queue 'nope.q' unknown\n"),
        ),
        pytest.raises(QDSubmissionError) as exc_info,
    ):
        submitter.submit()

    message = str(exc_info.value)
    assert "return status was 1" in message
    assert "qsub -q nope.q a.sh" in message
    assert "queue 'nope.q' unknown" in message
    assert exc_info.value.transcript == transcript


def test_submit_missing_job_id_raises(transcript):
    with (
        patch("subprocess.run", return_value=_completed(0, "all fine\n")),
        pytest.raises(QDSubmissionError, match="does not specify the job id"),
    ):
        Submitter(SGE, ["qsub", "a.sh"], transcript).submit()


def test_submit_multiple_job_ids_raises(transcript):
    output = 'Your job 1 ("a.sh") has been submitted\n' + ACK

    with (
        patch("subprocess.run", return_value=_completed(0, output)),
        pytest.raises(QDSubmissionError, match="submitted more than once"),
    ):
        Submitter(SGE, ["qsub", "a.sh"], transcript).submit()


def test_submit_missing_command_raises(transcript):
    with (
        patch("subprocess.run", side_effect=FileNotFoundError("qsub")),
        pytest.raises(QDSubmissionError, match="Could not execute 'qsub'"),
    ):
        Submitter(SGE, ["qsub", "a.sh"], transcript).submit()


def test_submit_sync_failed_job_is_not_a_submission_error(transcript):
    output = ACK + 'Job 4242 exited with exit code 1.\n'

    with patch("subprocess.run", return_value=_completed(1, output)):
        job_id = Submitter(SGE, ["qsub", "-sync", "y", "a.sh"], transcript, sync=True).submit()

    assert job_id == "4242"


def test_submit_sync_failure_without_acknowledgment_raises(transcript):
    with (
        patch("subprocess.run", return_value=_completed(2, stderr="denied\n")),
        pytest.raises(QDSubmissionError, match="return status was 2"),
    ):
        Submitter(SGE, ["qsub", "a.sh"], transcript, sync=True).submit()


def test_submit_sync_tolerates_missing_job_id(transcript):
    with patch("subprocess.run", return_value=_completed(0, "")):
        assert Submitter(SGE, ["qsub", "a.sh"], transcript, sync=True).submit() is None


def test_submit_ignores_acknowledgments_already_in_transcript(transcript):
    transcript.write_text('Your job 1 ("a.sh") has been submitted\n')

    with patch("subprocess.run", return_value=_completed(0, ACK)):
        assert Submitter(SGE, ["qsub", "a.sh"], transcript).submit() == "4242"

    assert transcript.read_text().endswith(ACK)


def test_submit_job_id_survives_truncated_transcript(transcript):
    # the job shares the transcript and may rewrite it right after submission
    def truncate(self, output):
        self._transcript.write_text("job started\n")

    with (
        patch.object(Submitter, "_record", truncate),
        patch(
            "subprocess.run", return_value=_completed(0, "Submitted batch job 77\n")
        ),
    ):
        assert Submitter(Slurm, ["sbatch", "a.sh"], transcript).submit() == "77"
