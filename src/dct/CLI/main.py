"""
Command Line Interface for docker-compose-test.
"""
import click
from ..MODELS.run_config import DEFAULT_FILES, RunConfig
from ..MANAGERS.environment_manager import EnvironmentManager
from ..MANAGERS.run_orchestrator import RunOrchestrator
from ..UTILS.logging_setup import configure_logging
from ..errors import ComposeTestError

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


class SetupErrorCommand(click.Command):
    """
    Command that reports invalid arguments with exit status 1, like every
    other error that stops a run before it starts.
    """
    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.command(cls=SetupErrorCommand, context_settings=CONTEXT_SETTINGS)
@click.option('--file', '-f', 'files', multiple=True, metavar='FILE',
              help='Specify an alternate compose file (default: docker-compose.yml & '
                   'docker-compose.integration-tests.yml). '
                   "It's expected your tests services are declared in the last file.")
@click.option('--project-name', '-p', metavar='PROJECT_NAME',
              help='Specify an alternate project name (default: directory name)')
@click.option('--verbose', '-v', is_flag=True,
              help='Show all output (default: only shows test output)')
@click.argument('services', nargs=-1)
@click.pass_context
def cli(ctx, files, project_name, verbose, services):
    """
    Helper to run docker-compose for integration tests.

    Starts the composition, waits for the test services (all services of the
    last compose file, or only SERVICES when given), prints their logs and
    tears everything down. Exits with the status of the failing test service.

    The docker and docker-compose executables can be overridden with the
    DOCKER and DOCKER_COMPOSE environment variables.
    """
    configure_logging(verbose=verbose)
    environment = EnvironmentManager()
    try:
        config = RunConfig(
            project_name=project_name if project_name is not None else environment.project_name(),
            verbose=verbose,
            files=list(files) or list(DEFAULT_FILES),
            service_names=list(services),
            docker=environment.docker(),
            docker_compose=environment.docker_compose(),
        )
        status = RunOrchestrator(config).run()
    except ComposeTestError as e:
        raise click.ClickException(str(e))
    ctx.exit(status)


def main():
    """
    Main entry point for the CLI.
    """
    cli(prog_name='docker-compose-test')


if __name__ == '__main__':
    main()
