import pytest
from pydantic import ValidationError

from nmt_leak_probe.config import DEFAULT_CYCLES, DEFAULT_TARGET_JVM_OPTIONS, Config


def test_defaults():
    config = Config(target_command=["java", "LeakDriver"])

    assert config.cycles == DEFAULT_CYCLES == 10
    assert config.marker == "Method::ensure_jmethod_ids"
    assert config.allow_missing_sample is True
    assert config.target_jvm_options == DEFAULT_TARGET_JVM_OPTIONS
    assert "-XX:NativeMemoryTracking=detail" in config.target_jvm_options
    assert config.java_path == "java"
    assert config.jcmd_path == "jcmd"
    assert config.output_dir is None


def test_java_home_resolves_tools():
    config = Config(target_command=["java"], java_home="/opt/jdk")
    assert config.java_path == "/opt/jdk/bin/java"
    assert config.jcmd_path == "/opt/jdk/bin/jcmd"


def test_explicit_binaries_win_over_java_home():
    config = Config(
        target_command=["java"], java_home="/opt/jdk", jcmd_binary="/usr/bin/jcmd"
    )
    assert config.jcmd_path == "/usr/bin/jcmd"
    assert config.java_path == "/opt/jdk/bin/java"


@pytest.mark.parametrize("cycles", [0, -3])
def test_cycles_must_be_positive(cycles):
    with pytest.raises(ValidationError):
        Config(target_command=["java"], cycles=cycles)


def test_target_command_required():
    with pytest.raises(ValidationError):
        Config(target_command=[])


def test_scale_is_not_configurable():
    with pytest.raises(ValidationError):
        Config(target_command=["java"], scale="MB")


def test_blank_marker_rejected():
    with pytest.raises(ValidationError):
        Config(target_command=["java"], marker="  ")


def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        Config(target_command=["java"], rounds=3)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("LEAK_PROBE_CYCLES", "25")
    monkeypatch.setenv("LEAK_PROBE_ALLOW_MISSING_SAMPLE", "false")

    config = Config(target_command=["java"])

    assert config.cycles == 25
    assert config.allow_missing_sample is False


def test_tools_default_to_target_launcher_directory():
    config = Config(target_command=["/opt/fastdebug-jdk/bin/java", "-cp", "classes", "LeakDriver"])

    assert config.java_path == "/opt/fastdebug-jdk/bin/java"
    assert config.jcmd_path == "/opt/fastdebug-jdk/bin/jcmd"


def test_java_home_wins_over_target_launcher():
    config = Config(target_command=["/usr/bin/java"], java_home="/opt/jdk")

    assert config.java_path == "/opt/jdk/bin/java"
    assert config.jcmd_path == "/opt/jdk/bin/jcmd"


def test_target_vm_flags_collects_xx_options():
    config = Config(
        target_command=["java", "-XX:-ClassUnloading", "-Xmx64m", "LeakDriver"],
        target_jvm_options=["-Xmn8m", "-XX:NativeMemoryTracking=detail"],
    )

    assert config.target_vm_flags == ["-XX:NativeMemoryTracking=detail", "-XX:-ClassUnloading"]
