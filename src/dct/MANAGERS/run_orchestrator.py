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
Orchestration of an integration test run against docker-compose.
"""
import logging
from contextlib import ExitStack
from typing import List, Optional, Set

from ..MODELS.run_config import RunConfig
from ..CONVERTERS.to_overlay import OverlayConverter
from ..PARSERS.compose_parser import ComposeParser
from ..RUNNERS.process_runner import ProcessRunner
from ..RUNNERS.selection_resolver import collect_other_services, resolve_wait_set
from ..errors import ComposeTestError, WaitStatusError
from .log_aggregator import LogAggregator

logger = logging.getLogger(__name__)


class RunOrchestrator:
    """
    Brings a composition up, waits for its test services, shows their logs
    and tears the composition down again.
    """
    def __init__(self,
                 config: RunConfig,
                 parser: Optional[ComposeParser] = None,
                 runner: Optional[ProcessRunner] = None,
                 converter: Optional[OverlayConverter] = None):
        """
        Initializes the orchestrator.

        :param config: Configuration for the run.
        :param parser: Parser for the compose files.
        :param runner: Runner for docker and docker-compose commands.
        :param converter: Converter producing the service overlay.
        """
        self.config = config
        self.parser = parser or ComposeParser()
        self.runner = runner or ProcessRunner()
        self.converter = converter or OverlayConverter()

    def run(self) -> int:
        """
        Runs the integration tests.

        When services are requested, an overlay disabling the other test
        services is appended to the compose files for the duration of the run.

        :return: The last non-zero exit code of the waited services, or 0.
        """
        config = self.config
        other_services = collect_other_services(
            self.parser.read(path) for path in config.other_files
        )
        test_services = self.parser.read(config.test_file)
        wait_services = resolve_wait_set(config.service_names, test_services)
        logger.debug("Waiting on services: %s", ", ".join(wait_services))

        with ExitStack() as stack:
            if config.service_names:
                overlay = stack.enter_context(
                    self.converter.write(config.service_names, test_services, other_services)
                )
                config = config.with_overlay(overlay)
            return self._run_composition(config, wait_services, other_services)

    def _run_composition(self,
                         config: RunConfig,
                         wait_services: List[str],
                         other_services: Set[str]) -> int:
        self.up(config)
        try:
            status = self.wait_and_log(config, wait_services, other_services)
        except (ComposeTestError, KeyboardInterrupt):
            # Containers were started, stop them before reporting the failure.
            self._down_after_failure(config)
            raise
        self.down(config)
        return status

    def up(self, config: RunConfig):
        """
        Starts every service of the composition in the background.
        """
        self._compose(config, ["up", "-d"])

    def down(self, config: RunConfig):
        """
        Stops and removes the composition without a grace period.
        """
        self._compose(config, ["down", "-t", "0"])

    def wait_and_log(self,
                     config: RunConfig,
                     wait_services: List[str],
                     other_services: Set[str]) -> int:
        """
        Waits for each test service to exit, then shows logs.

        Other services' logs are only shown in verbose mode, test services'
        logs always are.

        :param config: Configuration for the run.
        :param wait_services: Services to wait on, in order.
        :param other_services: Services declared outside the test file.
        :return: The exit code of the last failing service, or 0.
        """
        status = 0
        for service in wait_services:
            code = self.wait(config, service)
            if code != 0:
                status = code

        logs = LogAggregator(config, self.runner)
        if config.verbose:
            logs.show_logs(sorted(s for s in other_services if s not in wait_services))
        logs.show_logs(wait_services)
        return status

    def wait(self, config: RunConfig, service: str) -> int:
        """
        Blocks until the service's container exits.

        :return: The container's exit code.
        :raises WaitStatusError: If docker does not print an exit code.
        """
        container = config.container_name(service)
        output = self.runner.capture([config.docker, "wait", container])
        try:
            code = int(output.strip())
        except ValueError:
            raise WaitStatusError(container, output.strip()) from None
        logger.debug("%s exited with %d", container, code)
        return code

    def _down_after_failure(self, config: RunConfig):
        try:
            self.down(config)
        except ComposeTestError as e:
            logger.error("Failed to tear down project %s: %s", config.project_name, e)

    def _compose(self, config: RunConfig, action: List[str]):
        command = [config.docker_compose, *config.compose_args(), *action]
        code = self.runner.call(command, quiet=not config.verbose)
        if code != 0:
            logger.warning("%s %s exited with %d", config.docker_compose, action[0], code)
