"""
Streaming of container logs to stdout.
"""
import logging
from typing import Iterable

from ..MODELS.run_config import RunConfig
from ..RUNNERS.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class LogAggregator:
    """
    Prints the captured output of service containers, one container after another.
    """
    def __init__(self, config: RunConfig, runner: ProcessRunner):
        """
        Initializes the log aggregator.

        :param config: Run configuration naming the docker executable and project.
        :param runner: Runner used to call docker.
        """
        self.config = config
        self.runner = runner

    def show_logs(self, service_names: Iterable[str]):
        """
        Streams the logs of each service's container, in the given order.

        :param service_names: Names of the services to show.
        """
        for name in service_names:
            container = self.config.container_name(name)
            code = self.runner.call([self.config.docker, "logs", container])
            if code != 0:
                logger.debug("docker logs %s exited with %d", container, code)
