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
Exceptions raised while preparing or running an integration test composition.
"""
from typing import Optional


class ComposeTestError(Exception):
    """
    Base class for every error reported to the user as a single line.
    """


class DocumentReadError(ComposeTestError):
    """
    A compose file could not be read from disk.
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"failed to read file {path}: {reason}")


class DocumentParseError(ComposeTestError):
    """
    A compose file is not valid YAML.
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"failed to parse file {path}: {reason}")


class MalformedDocumentError(ComposeTestError):
    """
    A compose file is valid YAML but its services section has the wrong shape.
    """
    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"failed to parse file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OverlayWriteError(ComposeTestError):
    """
    The temporary overlay file could not be created or written.
    """
    def __init__(self, reason: str):
        super().__init__(f"failed to write service overlay: {reason}")


class CommandError(ComposeTestError):
    """
    An external executable could not be started.
    """
    def __init__(self, executable: str, reason: str):
        self.executable = executable
        super().__init__(f"failed to run {executable}: {reason}")


class WaitStatusError(ComposeTestError):
    """
    The container runtime returned something other than an exit code.
    """
    def __init__(self, container: str, output: str):
        self.container = container
        self.output = output
        super().__init__(f"invalid exit code {output!r} while waiting for {container}")


class ProjectNameError(ComposeTestError):
    """
    No project name was given and none can be derived from the current directory.
    """
    def __init__(self):
        super().__init__("failed to get file name on current dir")
