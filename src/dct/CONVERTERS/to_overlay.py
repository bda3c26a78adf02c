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
Converters for generating a compose overlay that disables unselected services.
"""
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Sequence, Set

import yaml

from ..MODELS.service_table import ServiceTable
from ..errors import OverlayWriteError

logger = logging.getLogger(__name__)

STR_TAG = "tag:yaml.org,2002:str"
MAP_TAG = "tag:yaml.org,2002:map"
DISABLED_COMMAND = 'echo "disabled {name}"'


class OverlayConverter:
    """
    Builds the compose file that is appended after the user's files when only
    some test services are requested. Selected services keep their definition,
    every other test service is replaced by a command that exits 0 at once.
    """

    def synthesize(self,
                   requested: Sequence[str],
                   test_services: ServiceTable,
                   other_services: Set[str]) -> yaml.MappingNode:
        """
        Builds the overlay document.

        Disabled services are removed from other_services since their logs
        are no longer of interest.

        :param requested: Service names selected on the command line.
        :param test_services: Services declared in the test file.
        :param other_services: Names of services declared in the other files.
        :return: Root node of the overlay document.
        """
        entries = []
        for entry in test_services:
            if entry.name in requested:
                definition = entry.definition
            else:
                other_services.discard(entry.name)
                definition = _mapping([
                    (_scalar("command"), _scalar(DISABLED_COMMAND.format(name=entry.name), style='"')),
                ])
            entries.append((_scalar(entry.name), definition))
        return _mapping([(_scalar("services"), _mapping(entries))])

    def render(self, document: yaml.Node) -> str:
        """
        Serializes an overlay document, keeping each scalar's original style.
        """
        return yaml.serialize(document, Dumper=yaml.SafeDumper)

    @contextmanager
    def write(self,
              requested: Sequence[str],
              test_services: ServiceTable,
              other_services: Set[str]) -> Iterator[str]:
        """
        Writes the overlay to a temporary file for the duration of the block.

        The file is removed when the block exits, whether or not it raised.

        :param requested: Service names selected on the command line.
        :param test_services: Services declared in the test file.
        :param other_services: Names of services declared in the other files.
        :return: Path of the temporary overlay file.
        :raises OverlayWriteError: If the file cannot be created or written.
        """
        content = self.render(self.synthesize(requested, test_services, other_services))
        path = self._write_temporary(content)
        logger.debug("Wrote service overlay to %s:\n%s", path, content)
        try:
            yield path
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass

    def _write_temporary(self, content: str) -> str:
        try:
            handle = tempfile.NamedTemporaryFile(
                'w', prefix="dct-overlay-", suffix=".yml", delete=False
            )
        except OSError as e:
            raise OverlayWriteError(e.strerror or str(e)) from e
        try:
            with handle:
                handle.write(content)
        except OSError as e:
            os.unlink(handle.name)
            raise OverlayWriteError(e.strerror or str(e)) from e
        return handle.name


def _scalar(value: str, style=None) -> yaml.ScalarNode:
    return yaml.ScalarNode(STR_TAG, value, style=style)


def _mapping(entries) -> yaml.MappingNode:
    return yaml.MappingNode(MAP_TAG, entries, flow_style=False)
