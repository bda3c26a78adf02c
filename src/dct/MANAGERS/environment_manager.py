"""
Managers for resolving executables and defaults from the process environment.
"""
import os
from typing import Mapping, Optional

from ..errors import ProjectNameError

DEFAULT_DOCKER = "docker"
DEFAULT_DOCKER_COMPOSE = "docker-compose"


class EnvironmentManager:
    """
    Reads the settings that come from the environment rather than the command line.
    """
    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initializes the environment manager.

        :param environ: Variables to read from. Defaults to os.environ.
        """
        self.environ = os.environ if environ is None else environ

    def docker(self) -> str:
        """
        Container runtime executable, from DOCKER.
        """
        return self.environ.get("DOCKER") or DEFAULT_DOCKER

    def docker_compose(self) -> str:
        """
        Compose executable, from DOCKER_COMPOSE.
        """
        return self.environ.get("DOCKER_COMPOSE") or DEFAULT_DOCKER_COMPOSE

    def project_name(self, cwd: Optional[str] = None) -> str:
        """
        Default project name: the base name of the working directory,
        as docker-compose itself would pick it.

        :param cwd: Directory to name the project after. Defaults to os.getcwd().
        :return: The project name.
        :raises ProjectNameError: If the directory has no base name.
        """
        try:
            directory = cwd if cwd is not None else os.getcwd()
        except OSError as e:
            raise ProjectNameError() from e
        name = os.path.basename(os.path.normpath(directory))
        if not name or name in (os.curdir, os.pardir):
            raise ProjectNameError()
        return name
