# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Structured storage and serialization of dispatch metadata.

This module defines the `DispatchInfo` dataclass describing one dispatch:
what was submitted where, with which options, when, and how it ended.
The record is written into the queue directory right after submission
and updated once the result of the job is known, so that an interrupted
or failed dispatch can be inspected afterwards.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Self

import yaml

from qdispatch_lib.batch.interface import BatchInterface, BatchMeta
from qdispatch_lib.core.common import load_yaml_dumper, load_yaml_loader
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.states import DispatchState

logger = get_logger(__name__)

SafeLoader: type[yaml.SafeLoader] = load_yaml_loader()
Dumper: type[yaml.Dumper] = load_yaml_dumper()


@dataclass
class DispatchInfo:
    """
    Dataclass storing information about a single dispatch.
    """

    # The batch system class used
    batch_system: type[BatchInterface]

    # Version of qdispatch that submitted the job
    qdispatch_version: str

    # Name of the user who submitted the job
    username: str

    # Command executed by every task
    command: str

    # Resolved scheduler options
    options: str

    # Log path template
    log_template: str

    # Host from which the job was submitted
    host: str

    # Directory from which the job was submitted
    cwd: Path

    # Path to the generated wrapper script
    script: Path

    # State of the dispatch
    state: DispatchState

    # Submission timestamp
    submission_time: datetime

    # Job identifier inside the batch system
    job_id: str | None = None

    # Array range, e.g. 'JOB=1:10'
    array: str | None = None

    # Number of tasks
    num_tasks: int = 1

    # Time the result of the job was determined
    completion_time: datetime | None = None

    # Indices of the tasks that finished with a non-zero status
    failed_tasks: list[int] = field(default_factory=list)

    @classmethod
    def fromFile(cls, file: Path) -> Self:
        """
        Load a DispatchInfo instance from a YAML file.

        This is the loader of the post-mortem record: qdispatch itself only
        writes the file, which is read back by tools inspecting an interrupted
        or failed dispatch (`q/<name>.qdinfo` next to the logs of the job).

        Raises:
            QDError: If the file does not exist, cannot be parsed,
                    or does not contain all mandatory information.
        """
        logger.debug(f"Loading dispatch info from '{file}'.")
        if not file.exists():
            raise QDError(f"Dispatch info file '{file}' does not exist.")

        try:
            with file.open("r") as input:
                data: dict[str, object] = yaml.load(input, Loader=SafeLoader)

            return cls._fromDict(data)
        except yaml.YAMLError as e:
            raise QDError(f"Could not parse the dispatch info file '{file}': {e}.") from e
        except TypeError as e:
            raise QDError(f"Invalid dispatch info file '{file}': {e}.") from e

    def toFile(self, file: Path) -> None:
        """
        Export this DispatchInfo instance to a YAML file.

        Raises:
            QDError: If the file cannot be created or written to.
        """
        try:
            content = "# qdispatch info file\n" + self._toYaml() + "\n"
            logger.debug(f"Exporting dispatch info into '{file}'.")
            with file.open("w") as output:
                output.write(content)
        except OSError as e:
            raise QDError(f"Cannot create or write to file '{file}': {e}") from e

    def _toYaml(self) -> str:
        return yaml.dump(
            self._toDict(), default_flow_style=False, sort_keys=False, Dumper=Dumper
        )

    def _toDict(self) -> dict[str, object]:
        """
        Convert the DispatchInfo instance into a dictionary of string-object pairs.
        Fields that are None and empty lists are ignored.
        """
        result: dict[str, object] = {}

        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue

            if isinstance(value, list) and not value:
                continue

            # convert the state, the batch system and paths
            if f.type == DispatchState or f.type == type[BatchInterface] or f.type == Path:
                result[f.name] = str(value)
            # convert timestamps
            elif f.type == datetime or f.type == datetime | None:
                result[f.name] = value.strftime(CFG.date_formats.standard)
            else:
                result[f.name] = value

        return result

    @classmethod
    def _fromDict(cls, data: dict[str, object]) -> Self:
        """
        Construct a DispatchInfo instance from a dictionary.

        Raises:
            TypeError: If required fields are missing.
        """
        init_kwargs = {}
        for f in fields(cls):
            name = f.name
            if name not in data:
                continue

            value = data[name]

            if f.type == type[BatchInterface] and isinstance(value, str):
                init_kwargs[name] = BatchMeta.fromStr(value)
            elif f.type == DispatchState and isinstance(value, str):
                init_kwargs[name] = DispatchState.fromStr(value)
            elif f.type == Path:
                init_kwargs[name] = Path(value)
            elif (f.type == datetime or f.type == datetime | None) and isinstance(
                value, str
            ):
                init_kwargs[name] = datetime.strptime(value, CFG.date_formats.standard)
            elif f.type == str | None and value is not None:
                # job ids may be parsed as integers
                init_kwargs[name] = str(value)
            else:
                init_kwargs[name] = value

        return cls(**init_kwargs)
