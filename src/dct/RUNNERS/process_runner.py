# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Execution of external commands such as docker and docker-compose.
"""
import logging
import shlex
import subprocess
from typing import List

from ..errors import CommandError

logger = logging.getLogger(__name__)


class ProcessRunner:
    """
    Runs external commands one at a time and waits for them to finish.
    """

    def call(self, command: List[str], quiet: bool = False) -> int:
        """
        Runs a command with its output going to this process's stdout and stderr.

        Args:
            command (List[str]): Command and arguments to execute.
            quiet (bool): Discard the command's output instead.

        Returns:
            int: Exit code of the command.
        """
        logger.debug("Running: %s", _pretty(command))
        output = subprocess.DEVNULL if quiet else None
        try:
            result = subprocess.run(
                command,
                stdout=output,
                stderr=output,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False
            )
        except OSError as e:
            raise CommandError(command[0], e.strerror or str(e)) from e
        return result.returncode

    def capture(self, command: List[str]) -> str:
        """
        Runs a command and returns what it wrote to stdout.

        Args:
            command (List[str]): Command and arguments to execute.

        Returns:
            str: Captured stdout of the command.
        """
        logger.debug("Running: %s", _pretty(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                shell=False
            )
        except OSError as e:
            raise CommandError(command[0], e.strerror or str(e)) from e
        if result.stderr:
            logger.debug("%s stderr: %s", command[0], result.stderr.strip())
        return result.stdout


def _pretty(command: List[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)
