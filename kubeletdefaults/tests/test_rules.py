from kubeletdefaults.models import ClusterSpec, Distro, KubernetesConfig, OSType, ProfileKind
from kubeletdefaults.modules.kubelet.rules import (
    CLEANUP_RULES,
    CLUSTER_RULES,
    KubeletRule,
    RuleContext,
    Strategy,
    apply_rules,
    hardened_linux,
)


def make_ctx(version="1.14.1", **kwargs):
    return RuleContext(spec=ClusterSpec(orchestrator_version=version, kubernetes_config=KubernetesConfig()), **kwargs)


def test_default_rule_only_fills_absent_keys():
    rule = KubeletRule("--x", "1")
    flags = {}
    assert rule.apply(flags, make_ctx())
    assert not rule.apply(flags, make_ctx())
    flags = {"--x": "user"}
    assert not rule.apply(flags, make_ctx())
    assert flags["--x"] == "user"


def test_rule_predicate_and_callable_value():
    rule = KubeletRule("--x", lambda ctx: ctx.version, when=lambda ctx: ctx.is_windows)
    flags = {}
    assert not rule.apply(flags, make_ctx())
    assert rule.apply(flags, make_ctx(os_type=OSType.WINDOWS))
    assert flags == {"--x": "1.14.1"}


def test_callable_returning_none_injects_nothing():
    flags = {}
    assert not KubeletRule("--x", lambda ctx: None).apply(flags, make_ctx())
    assert flags == {}


def test_merge_and_delete_rules():
    flags = {"--gates": "B=true"}
    assert KubeletRule("--gates", "A=true", strategy=Strategy.MERGE).apply(flags, make_ctx())
    assert flags["--gates"] == "A=true,B=true"
    assert not KubeletRule("--gates", "A=true", strategy=Strategy.MERGE).apply(flags, make_ctx())

    assert KubeletRule("--gates", strategy=Strategy.DELETE).apply(flags, make_ctx())
    assert "--gates" not in flags


def test_rule_tables_have_unique_default_keys():
    keys = [rule.key for rule in CLUSTER_RULES if rule.strategy == Strategy.DEFAULT]
    assert len(keys) == len(set(keys))


def test_cleanup_rules_for_windows():
    flags = {"--pod-manifest-path": "/etc/kubernetes/manifests", "--protect-kernel-defaults": "true"}
    removed = apply_rules(flags, CLEANUP_RULES, make_ctx(kind=ProfileKind.AGENT, os_type=OSType.WINDOWS))
    assert set(removed) >= {"--pod-manifest-path", "--protect-kernel-defaults"}
    assert flags == {}


def test_hardened_linux_predicate():
    assert hardened_linux(make_ctx(distro=Distro.AKS_UBUNTU_1604))
    assert hardened_linux(make_ctx(distro="aks-ubuntu-18.04"))
    assert not hardened_linux(make_ctx(distro=Distro.UBUNTU))
    assert not hardened_linux(make_ctx(distro=Distro.AKS_UBUNTU_1604, os_type=OSType.WINDOWS))
