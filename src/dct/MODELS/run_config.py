"""
Models for the resolved configuration of a single test run.
"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FILES = ("docker-compose.yml", "docker-compose.integration-tests.yml")


class RunConfig(BaseModel):
    """
    Everything one run needs: where the compose files are, which services to
    test and which executables to call. The last file declares the test services.
    """
    model_config = ConfigDict(frozen=True)

    project_name: str
    verbose: bool = False
    files: List[str] = Field(default_factory=lambda: list(DEFAULT_FILES))
    service_names: List[str] = []
    docker: str = "docker"
    docker_compose: str = "docker-compose"

    @field_validator("files")
    @classmethod
    def _require_files(cls, files: List[str]) -> List[str]:
        if not files:
            raise ValueError("at least one compose file is required")
        return files

    @property
    def test_file(self) -> str:
        return self.files[-1]

    @property
    def other_files(self) -> List[str]:
        return self.files[:-1]

    def with_overlay(self, overlay_path: str) -> "RunConfig":
        """
        Returns a copy with the overlay appended after every user supplied file,
        so its definitions win when docker-compose merges them.

        :param overlay_path: Path of the synthesized overlay file.
        :return: The new configuration.
        """
        return self.model_copy(update={"files": [*self.files, overlay_path]})

    def compose_args(self) -> List[str]:
        """
        Project and file arguments shared by every docker-compose invocation.
        """
        args = ["-p", self.project_name]
        for compose_file in self.files:
            args.extend(["-f", compose_file])
        return args

    def container_name(self, service: str) -> str:
        """
        Name docker-compose gives the single detached container of a service.
        """
        return f"{self.project_name}_{service}_1"
