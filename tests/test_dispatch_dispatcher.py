# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from qdispatch_lib.batch.sge import SGE
from qdispatch_lib.core.error import QDLostJobError, QDSubmissionError
from qdispatch_lib.dispatch.dispatcher import Dispatcher
from qdispatch_lib.info.info import DispatchInfo
from qdispatch_lib.properties.array import ArrayRange
from qdispatch_lib.properties.job_spec import JobSpec
from qdispatch_lib.properties.options import SubmissionOptions
from qdispatch_lib.properties.states import DispatchState, JobPresence

ACK = 'Your job 4242 ("a.sh") has been submitted\n'


def _finished(status: int) -> str:
    return (
        "# Running on node1\n"
        "# Accounting: time=1 threads=1\n"
        f"# Finished at Mon Jan 5 10:00:00 UTC 2026 with status {status}\n"
    )


def _dispatcher(tmp_path, job, options=None):
    return Dispatcher(
        SGE,
        job,
        options or SubmissionOptions(flags=("-V", "-q all.q")),
        cwd=tmp_path,
        pid=77,
        sleep=MagicMock(),
    )


def _fake_batch_system(dispatcher, statuses, touch_markers=True, returncode=0, stdout=ACK):
    """
    Return a replacement for subprocess.run that plays the role of the batch system:
    it writes the logs (and markers) of all tasks and acknowledges the submission.
    """

    def run(command, **kwargs):
        for index, status in statuses.items():
            log = dispatcher.layout.log_dir / (
                "a.log" if index is None else f"a.{index}.log"
            )
            if status is None:
                log.write_text("# Running on node1\nprocessing\n")
            else:
                log.write_text(_finished(status))
            if touch_markers:
                dispatcher.layout.markerPath(index).touch()

        return subprocess.CompletedProcess(
            args=command, returncode=returncode, stdout=stdout, stderr=""
        )

    return run


@pytest.fixture(autouse=True)
def fake_identity():
    with (
        patch("getpass.getuser", return_value="fake_user"),
        patch("socket.getfqdn", return_value="login1.cluster"),
    ):
        yield


def test_dispatch_single_job_success(tmp_path, monkeypatch):
    # the job runs in the dispatch directory, not in the directory of the process
    (tmp_path / "elsewhere").mkdir()
    monkeypatch.chdir(tmp_path / "elsewhere")
    job = JobSpec.fromTokens("exp/log/a.log", ["run.sh"], None)
    dispatcher = _dispatcher(tmp_path, job)

    with patch(
        "subprocess.run", side_effect=_fake_batch_system(dispatcher, {None: 0})
    ) as mock_run:
        result = dispatcher.dispatch()

    command = mock_run.call_args[0][0]
    assert command[0] == "qsub"
    assert command[-1] == str(dispatcher.layout.script)
    assert "-q" in command
    assert command[command.index("-wd") + 1] == str(tmp_path)

    assert result.succeeded
    assert result.describe() == "Job finished successfully."
    assert dispatcher.layout.script.is_file()
    assert not dispatcher.layout.markerPath(None).exists()

    info = DispatchInfo.fromFile(dispatcher.layout.info_file)
    assert info.state == DispatchState.SUCCEEDED
    assert info.job_id == "4242"
    assert info.username == "fake_user"
    assert info.completion_time is not None


def test_dispatch_array_job_with_failed_task(tmp_path):
    job = JobSpec.fromTokens(
        "exp/log/a.JOB.log", ["run.sh", "JOB"], ArrayRange("JOB", 1, 3)
    )
    dispatcher = _dispatcher(tmp_path, job)

    with patch(
        "subprocess.run",
        side_effect=_fake_batch_system(dispatcher, {1: 0, 2: 1, 3: 0}),
    ) as mock_run:
        result = dispatcher.dispatch()

    command = mock_run.call_args[0][0]
    assert command[command.index("-t") + 1] == "1:3"

    assert not result.succeeded
    assert [t.index for t in result.failedTasks()] == [2]
    assert result.describe() == (
        f"1 / 3 failed, log is in '{tmp_path / 'exp/log/a.*.log'}'."
    )
    assert not any(dispatcher.layout.markerPath(i).exists() for i in (1, 2, 3))

    info = DispatchInfo.fromFile(dispatcher.layout.info_file)
    assert info.state == DispatchState.FAILED
    assert info.failed_tasks == [2]
    assert info.num_tasks == 3
    assert info.array == "JOB=1:3"


def test_dispatch_lost_job(tmp_path):
    job = JobSpec.fromTokens("exp/log/a.log", ["run.sh"], None)
    dispatcher = _dispatcher(tmp_path, job)

    with (
        patch(
            "subprocess.run",
            side_effect=_fake_batch_system(dispatcher, {None: None}, touch_markers=False),
        ),
        patch.object(SGE, "getJobPresence", return_value=JobPresence.ABSENT),
        pytest.raises(QDLostJobError, match="no longer exists"),
    ):
        dispatcher.dispatch()

    info = DispatchInfo.fromFile(dispatcher.layout.info_file)
    assert info.state == DispatchState.LOST


def test_dispatch_vanished_job_with_finished_log(tmp_path):
    job = JobSpec.fromTokens("exp/log/a.log", ["run.sh"], None)
    dispatcher = _dispatcher(tmp_path, job)

    with (
        patch(
            "subprocess.run",
            side_effect=_fake_batch_system(dispatcher, {None: 0}, touch_markers=False),
        ),
        patch.object(SGE, "getJobPresence", return_value=JobPresence.ABSENT),
        patch("qdispatch_lib.monitor.monitor.logger") as mock_logger,
    ):
        result = dispatcher.dispatch()

    assert result.succeeded
    mock_logger.warning.assert_called_once()


def test_dispatch_sync_skips_monitoring(tmp_path):
    job = JobSpec.fromTokens("exp/log/a.log", ["run.sh"], None)
    dispatcher = _dispatcher(
        tmp_path, job, SubmissionOptions(flags=("-sync y",), sync=True)
    )
    output = ACK + "Job 4242 exited with exit code 1.\n"

    with (
        patch(
            "subprocess.run",
            side_effect=_fake_batch_system(dispatcher, {None: 1}, returncode=1, stdout=output),
        ),
        patch.object(SGE, "getJobPresence") as mock_presence,
    ):
        result = dispatcher.dispatch()

    mock_presence.assert_not_called()
    assert not result.succeeded
    assert result.describe() == (
        f"Job failed with status 1, log is in '{tmp_path / 'exp/log/a.log'}'."
    )
    assert not dispatcher.layout.markerPath(None).exists()


def test_dispatch_submission_failure(tmp_path):
    job = JobSpec.fromTokens("exp/log/a.log", ["run.sh"], None)
    dispatcher = _dispatcher(tmp_path, job)

    with (
        patch(
            "subprocess.run",
            return_value=subprocess.CompletedProcess(
                args=[], returncode=1, stdout="", stderr="denied\n"
            ),
        ),
        pytest.raises(QDSubmissionError, match="return status was 1"),
    ):
        dispatcher.dispatch()

    assert dispatcher.layout.script.is_file()
    assert not dispatcher.layout.info_file.exists()


def test_dispatch_removes_stale_markers_and_logs(tmp_path):
    job = JobSpec.fromTokens("exp/log/a.log", ["run.sh"], None)
    dispatcher = _dispatcher(tmp_path, job)
    dispatcher.layout.queue_dir.mkdir(parents=True)
    dispatcher.layout.log_dir.mkdir(parents=True)
    dispatcher.layout.markerPath(None).touch()
    (tmp_path / "exp/log/a.log").write_text(_finished(0))

    def run(command, **kwargs):
        # the stale files must be gone by the time the job is submitted
        assert not dispatcher.layout.markerPath(None).exists()
        assert not (tmp_path / "exp/log/a.log").exists()
        return _fake_batch_system(dispatcher, {None: 0})(command, **kwargs)

    with patch("subprocess.run", side_effect=run):
        assert dispatcher.dispatch().succeeded
