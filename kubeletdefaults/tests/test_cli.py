import subprocess
import sys

import yaml

CLUSTER_YAML = """
orchestratorVersion: "1.14.1"
kubernetesConfig:
  networkPlugin: kubenet
masterProfile: {}
agentPoolProfiles:
  - name: winpool
    osType: Windows
"""


def run_cli_command(*args):
    return subprocess.run(
        [sys.executable, "-m", "kubeletdefaults.cli", *args],
        capture_output=True,
        text=True,
    )


def test_help():
    result = run_cli_command("--help")
    assert "Usage" in result.stdout
    assert "apply" in result.stdout
    assert "validate" in result.stdout


def test_apply_cluster(tmp_path):
    cluster_yaml = tmp_path / "cluster.yaml"
    cluster_yaml.write_text(CLUSTER_YAML)

    result = run_cli_command("apply", "cluster", "--file", str(cluster_yaml))
    assert result.returncode == 0, result.stderr
    data = yaml.safe_load(result.stdout)
    assert data["cluster"]["--network-plugin"] == "kubenet"
    assert data["master"]["--feature-gates"] == "PodPriority=true,RotateKubeletServerCertificate=true"
    assert "--pod-manifest-path" not in data["agentPools"]["winpool"]


def test_apply_cluster_to_file(tmp_path):
    cluster_yaml = tmp_path / "cluster.yaml"
    cluster_yaml.write_text(CLUSTER_YAML)
    output = tmp_path / "flags.yaml"

    result = run_cli_command("apply", "cluster", "--file", str(cluster_yaml), "--output", str(output))
    assert result.returncode == 0, result.stderr
    assert "✅" in result.stdout
    assert yaml.safe_load(output.read_text())["cluster"]["--max-pods"] == "110"


def test_apply_cluster_with_config(tmp_path):
    cluster_yaml = tmp_path / "cluster.yaml"
    cluster_yaml.write_text(CLUSTER_YAML)
    config_yaml = tmp_path / "config.yaml"
    config_yaml.write_text("image_base: my.registry/\ndns_service_ip: 10.9.0.10\n")

    result = run_cli_command("apply", "cluster", "--file", str(cluster_yaml), "--config", str(config_yaml))
    assert result.returncode == 0, result.stderr
    data = yaml.safe_load(result.stdout)
    assert data["cluster"]["--pod-infra-container-image"] == "my.registry/pause-amd64:3.1"
    assert data["cluster"]["--cluster-dns"] == "10.9.0.10"


def test_apply_cluster_unwritable_output(tmp_path):
    cluster_yaml = tmp_path / "cluster.yaml"
    cluster_yaml.write_text(CLUSTER_YAML)
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    result = run_cli_command("apply", "cluster", "--file", str(cluster_yaml), "--output", str(blocker / "flags.yaml"))
    assert result.returncode == 1
    assert " - kubelet - ERROR - Error: " in result.stderr


def test_apply_invalid_cluster(tmp_path):
    cluster_yaml = tmp_path / "cluster.yaml"
    cluster_yaml.write_text("kubernetesConfig: {}\n")

    result = run_cli_command("apply", "cluster", "--file", str(cluster_yaml))
    assert result.returncode == 1
    assert "orchestratorVersion" in result.stderr


def test_validate_cluster(tmp_path):
    cluster_yaml = tmp_path / "cluster.yaml"
    cluster_yaml.write_text(CLUSTER_YAML)
    result = run_cli_command("validate", "cluster", "--file", str(cluster_yaml))
    assert result.returncode == 0
    assert "valid" in result.stdout

    cluster_yaml.write_text("orchestratorVersion: 1.14\n")
    result = run_cli_command("validate", "cluster", "--file", str(cluster_yaml))
    assert result.returncode == 1
    assert "❌" in result.stdout
