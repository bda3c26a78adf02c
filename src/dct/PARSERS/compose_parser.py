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
Parsers for the services section of Docker Compose YAML files.
"""
import logging
from typing import Optional

import yaml

from ..MODELS.service_table import ServiceEntry, ServiceTable
from ..errors import DocumentParseError, DocumentReadError, MalformedDocumentError

logger = logging.getLogger(__name__)

SERVICES_KEY = "services"


class ComposeParser:
    """
    Extracts the top-level services mapping from compose files.

    Documents are composed, not constructed: each service definition is kept
    as the YAML node graph PyYAML builds, which preserves scalar text and
    quoting so the definition can be serialized again without changing meaning.
    """

    def read(self, compose_path: str) -> ServiceTable:
        """
        Reads a compose file and extracts its services.

        :param compose_path: Path to the compose file.
        :return: The services declared in the file.
        :raises DocumentReadError: If the file cannot be read.
        """
        logger.debug("Reading services from %s", compose_path)
        try:
            with open(compose_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise DocumentReadError(compose_path, f"not valid UTF-8: {e.reason}") from e
        except OSError as e:
            raise DocumentReadError(compose_path, e.strerror or str(e)) from e
        return self.parse_from_string(compose_path, content)

    def parse_from_string(self, name: str, content: str) -> ServiceTable:
        """
        Parses YAML text and extracts its services.

        :param name: File name used in error messages.
        :param content: YAML content of the compose file.
        :return: The services declared in the content.
        :raises DocumentParseError: If the content is not a single YAML document.
        """
        try:
            document = yaml.compose(content, Loader=yaml.SafeLoader)
        except yaml.YAMLError as e:
            raise DocumentParseError(name, _one_line(e)) from e
        return self.extract(name, document)

    def extract(self, name: str, document: Optional[yaml.Node]) -> ServiceTable:
        """
        Extracts the services mapping from a composed document.

        A document without a services key declares no services. An empty
        document is treated the same way.

        :param name: File name used in error messages.
        :param document: Root node of the document, or None for an empty file.
        :return: The services in declaration order.
        :raises MalformedDocumentError: If the document or its services entry
            is not a mapping, or a service name is not a scalar.
        """
        if document is None:
            return ServiceTable()
        if not isinstance(document, yaml.MappingNode):
            raise MalformedDocumentError(name, "top level is not a mapping")

        services = self._find_services(document)
        if services is None:
            return ServiceTable()
        if not isinstance(services, yaml.MappingNode):
            raise MalformedDocumentError(name, f"'{SERVICES_KEY}' is not a mapping")

        entries = []
        for key, value in services.value:
            if not isinstance(key, yaml.ScalarNode):
                raise MalformedDocumentError(name, "service name is not a scalar")
            entries.append(ServiceEntry(name=key.value, definition=value))
        return ServiceTable(entries)

    def _find_services(self, document: yaml.MappingNode) -> Optional[yaml.Node]:
        for key, value in document.value:
            if isinstance(key, yaml.ScalarNode) and key.value == SERVICES_KEY:
                return value
        return None


def _one_line(error: Exception) -> str:
    text = " ".join(line.strip() for line in str(error).splitlines() if line.strip())
    return text or type(error).__name__
