from datetime import datetime

import pytest
from dependency_injector import providers

from nmt_leak_probe import cli
from nmt_leak_probe.errors import SamplerError
from nmt_leak_probe.models.probe_models import ProbeOutcome, ProbeResult


class StubProbe:
    def __init__(self, outcome=None, error=None):
        self.outcome = outcome
        self.error = error

    def run(self):
        if self.error:
            raise self.error
        return ProbeResult(
            outcome=self.outcome,
            message="stub",
            start_time=datetime.now().isoformat(),
        )


@pytest.fixture
def stub_probe(monkeypatch):
    def _install(probe):
        def make_container(config):
            container = cli.Container()
            container.config.override(config)
            container.leak_probe.override(providers.Object(probe))
            made.append(container)
            return container

        made = []
        monkeypatch.setattr(cli, "make_container", make_container)
        return made

    return _install


def parse(argv):
    return cli.build_config(cli.build_parser().parse_args(argv))


def test_build_config_from_arguments():
    config = parse([
        "--cycles", "4", "--java-home", "/opt/jdk", "--strict", "-o", "out",
        "--", "java", "-agentlib:SimpleAgent", "LeakDriver",
    ])

    assert config.cycles == 4
    assert config.jcmd_path == "/opt/jdk/bin/jcmd"
    assert config.allow_missing_sample is False
    assert config.output_dir == "out"
    assert config.target_command == ["java", "-agentlib:SimpleAgent", "LeakDriver"]


def test_build_config_defaults():
    config = parse(["--", "java", "LeakDriver"])

    assert config.cycles == 10
    assert config.allow_missing_sample is True
    assert config.marker == "Method::ensure_jmethod_ids"


@pytest.mark.parametrize(
    "outcome, code",
    [(ProbeOutcome.PASSED, 0), (ProbeOutcome.FAILED, 1), (ProbeOutcome.SKIPPED, 77)],
)
def test_exit_code_follows_outcome(stub_probe, outcome, code):
    stub_probe(StubProbe(outcome=outcome))
    assert cli.main(["--", "java", "LeakDriver"]) == code


def test_probe_error_exits_with_error_code(stub_probe):
    stub_probe(StubProbe(error=SamplerError("jcmd exited with code 1")))
    assert cli.main(["--", "java", "LeakDriver"]) == cli.EXIT_ERROR


def test_missing_tool_exits_with_error_code(stub_probe):
    stub_probe(StubProbe(error=FileNotFoundError("jcmd")))
    assert cli.main(["--", "java", "LeakDriver"]) == cli.EXIT_ERROR


def test_invalid_configuration(stub_probe):
    made = stub_probe(StubProbe(outcome=ProbeOutcome.PASSED))
    assert cli.main(["--cycles", "0", "--", "java"]) == cli.EXIT_ERROR
    assert made == []


def test_missing_target_command(stub_probe):
    assert cli.main([]) == cli.EXIT_ERROR
