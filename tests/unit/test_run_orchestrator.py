"""
Unit tests for the run orchestrator, with docker replaced by a recording runner.
"""
import os
import pytest
import yaml
from dct.MANAGERS.run_orchestrator import RunOrchestrator
from dct.MODELS.run_config import RunConfig
from dct.errors import CommandError, MalformedDocumentError, WaitStatusError

BASE = """
services:
  db:
    image: docker.io/alpine:3.13.2
    command: sleep 10000
  hello_1:
    image: docker.io/alpine:3.13.2
  hello_2:
    image: docker.io/alpine:3.13.2
  hello_3:
    image: docker.io/alpine:3.13.2
    command: echo "hello 3"
"""

TESTS = """
services:
  hello_1:
    command: echo "hello 1"
  hello_2:
    command: echo "hello 2"
"""


class FakeRunner:
    """
    Records commands instead of running them. docker wait answers with the
    exit code configured for the container.
    """

    def __init__(self, exit_codes=None, wait_output=None, fail_on=None):
        self.exit_codes = exit_codes or {}
        self.wait_output = wait_output
        self.fail_on = fail_on
        self.commands = []
        self.quiet = []
        self.overlays = []

    def call(self, command, quiet=False):
        self.commands.append(list(command))
        self.quiet.append(quiet)
        if 'up' in command:
            self._record_overlay(command)
        if self.fail_on and self.fail_on in command:
            raise CommandError(command[0], "failed on purpose")
        return 0

    def capture(self, command):
        self.commands.append(list(command))
        if self.wait_output is not None:
            return self.wait_output
        return f"{self.exit_codes.get(command[-1], 0)}\n"

    def _record_overlay(self, command):
        last_file = command[command.index('up') - 1]
        if os.path.basename(last_file).startswith('dct-overlay-'):
            with open(last_file) as f:
                self.overlays.append(yaml.safe_load(f))

    def docker_calls(self):
        return [(c[1], c[2]) for c in self.commands if c[0] == 'docker']


@pytest.fixture
def compose_files(tmp_path):
    base = tmp_path / "docker-compose.yml"
    base.write_text(BASE)
    tests = tmp_path / "docker-compose.integration-tests.yml"
    tests.write_text(TESTS)
    return [str(base), str(tests)]


def _config(files, **kwargs):
    return RunConfig(project_name="proj", files=files, **kwargs)


class TestRunOrchestrator:
    """Tests for RunOrchestrator."""

    def test_runs_every_test_service(self, compose_files):
        """Test the full up, wait, log, down sequence without a selection."""
        runner = FakeRunner()
        status = RunOrchestrator(_config(compose_files), runner=runner).run()

        assert status == 0
        compose_args = ['-p', 'proj', '-f', compose_files[0], '-f', compose_files[1]]
        assert runner.commands == [
            ['docker-compose', *compose_args, 'up', '-d'],
            ['docker', 'wait', 'proj_hello_1_1'],
            ['docker', 'wait', 'proj_hello_2_1'],
            ['docker', 'logs', 'proj_hello_1_1'],
            ['docker', 'logs', 'proj_hello_2_1'],
            ['docker-compose', *compose_args, 'down', '-t', '0'],
        ]
        assert runner.overlays == []

    def test_compose_output_is_hidden_unless_verbose(self, compose_files):
        """Test that up and down are quiet by default and logs never are."""
        runner = FakeRunner()
        RunOrchestrator(_config(compose_files), runner=runner).run()
        assert runner.quiet == [True, False, False, True]

        runner = FakeRunner()
        RunOrchestrator(_config(compose_files, verbose=True), runner=runner).run()
        assert not any(runner.quiet)

    def test_selected_service_only(self, compose_files):
        """Test that a selection appends an overlay disabling the other tests."""
        runner = FakeRunner()
        status = RunOrchestrator(_config(compose_files, service_names=['hello_1']), runner=runner).run()

        assert status == 0
        assert runner.docker_calls() == [
            ('wait', 'proj_hello_1_1'),
            ('logs', 'proj_hello_1_1'),
        ]
        up, down = runner.commands[0], runner.commands[-1]
        assert up[:-2] == down[:-3]
        overlay_path = up[-3]
        assert up[:7] == ['docker-compose', '-p', 'proj', '-f', compose_files[0], '-f', compose_files[1]]
        assert up[7] == '-f'
        assert not os.path.exists(overlay_path)

        overlay, = runner.overlays
        assert overlay['services']['hello_1'] == {'command': 'echo "hello 1"'}
        assert overlay['services']['hello_2'] == {'command': 'echo "disabled hello_2"'}

    def test_original_files_are_untouched(self, compose_files):
        """Test that the overlay never modifies user files."""
        before = [open(path).read() for path in compose_files]
        RunOrchestrator(_config(compose_files, service_names=['hello_2']), runner=FakeRunner()).run()
        assert [open(path).read() for path in compose_files] == before

    def test_verbose_shows_other_services_first(self, compose_files):
        """Test that verbose mode logs non-test services before the tests."""
        runner = FakeRunner()
        RunOrchestrator(_config(compose_files, verbose=True), runner=runner).run()

        logs = [name for action, name in runner.docker_calls() if action == 'logs']
        assert logs == ['proj_db_1', 'proj_hello_3_1', 'proj_hello_1_1', 'proj_hello_2_1']

    def test_verbose_skips_disabled_services(self, compose_files):
        """Test that a disabled test service's logs are not shown."""
        runner = FakeRunner()
        RunOrchestrator(_config(compose_files, verbose=True, service_names=['hello_1']), runner=runner).run()

        logs = [name for action, name in runner.docker_calls() if action == 'logs']
        assert logs == ['proj_db_1', 'proj_hello_3_1', 'proj_hello_1_1']

    def test_non_verbose_shows_only_tests(self, compose_files):
        runner = FakeRunner()
        RunOrchestrator(_config(compose_files), runner=runner).run()
        logs = [name for action, name in runner.docker_calls() if action == 'logs']
        assert logs == ['proj_hello_1_1', 'proj_hello_2_1']

    @pytest.mark.parametrize("exit_codes, expected", [
        ({}, 0),
        ({'proj_hello_1_1': 1}, 1),
        ({'proj_hello_2_1': 137}, 137),
        # The last failing service wins, not the largest code.
        ({'proj_hello_1_1': 3, 'proj_hello_2_1': 2}, 2),
        ({'proj_hello_1_1': 2, 'proj_hello_2_1': 3}, 3),
        ({'proj_hello_1_1': 5, 'proj_hello_2_1': 0}, 5),
    ])
    def test_status_is_last_failure(self, compose_files, exit_codes, expected):
        """Test how exit codes of the waited services are aggregated."""
        runner = FakeRunner(exit_codes=exit_codes)
        assert RunOrchestrator(_config(compose_files), runner=runner).run() == expected

    def test_failing_service_still_logs_everything(self, compose_files):
        runner = FakeRunner(exit_codes={'proj_hello_1_1': 1})
        RunOrchestrator(_config(compose_files), runner=runner).run()
        assert ('logs', 'proj_hello_2_1') in runner.docker_calls()
        assert runner.commands[-1][-3:] == ['down', '-t', '0']

    def test_invalid_wait_output(self, compose_files):
        """Test that an unparsable exit code fails the run and still tears down."""
        runner = FakeRunner(wait_output="Error: No such container: proj_hello_1_1\n")
        with pytest.raises(WaitStatusError) as excinfo:
            RunOrchestrator(_config(compose_files), runner=runner).run()

        assert 'proj_hello_1_1' in str(excinfo.value)
        assert runner.commands[-1][-3:] == ['down', '-t', '0']
        assert not any(c[1] == 'logs' for c in runner.commands if c[0] == 'docker')

    def test_failed_teardown_does_not_hide_error(self, compose_files):
        runner = FakeRunner(wait_output="", fail_on='down')
        with pytest.raises(WaitStatusError):
            RunOrchestrator(_config(compose_files), runner=runner).run()

    def test_overlay_removed_on_failure(self, compose_files):
        runner = FakeRunner(wait_output="garbage")
        with pytest.raises(WaitStatusError):
            RunOrchestrator(_config(compose_files, service_names=['hello_1']), runner=runner).run()
        overlay_path = runner.commands[0][-3]
        assert not os.path.exists(overlay_path)

    def test_malformed_file_runs_nothing(self, tmp_path, compose_files):
        broken = tmp_path / "broken.yml"
        broken.write_text("services:\n  - hello_1\n")
        runner = FakeRunner()
        with pytest.raises(MalformedDocumentError) as excinfo:
            RunOrchestrator(_config([compose_files[0], str(broken)]), runner=runner).run()
        assert str(broken) in str(excinfo.value)
        assert runner.commands == []

    def test_single_file_has_no_other_services(self, compose_files):
        runner = FakeRunner()
        RunOrchestrator(_config([compose_files[1]], verbose=True), runner=runner).run()
        logs = [name for action, name in runner.docker_calls() if action == 'logs']
        assert logs == ['proj_hello_1_1', 'proj_hello_2_1']

    def test_custom_executables(self, compose_files):
        runner = FakeRunner()
        config = _config(compose_files, docker='podman', docker_compose='podman-compose')
        RunOrchestrator(config, runner=runner).run()
        assert {c[0] for c in runner.commands} == {'podman', 'podman-compose'}
