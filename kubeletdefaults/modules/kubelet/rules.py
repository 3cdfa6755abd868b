"""Declarative kubelet flag rules.

Each rule names one flag, the value it contributes, the condition under
which it fires and how it lands in the flag map:

- ``DEFAULT``: set the value only if the key is absent
- ``MERGE``: union comma-joined tokens into the existing value
- ``DELETE``: remove the key

Tables are evaluated top to bottom by ``apply_rules``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from ...models import (
    ClusterSpec,
    Distro,
    KubernetesConfig,
    NetworkPlugin,
    NetworkPolicy,
    OSType,
    ProfileKind,
)
from .flags import FEATURE_GATES, merge_token_flag
from .versions import is_version_ge, pause_image_tag, version_in_range

# Linux paths
AZURE_JSON_PATH = '/etc/kubernetes/azure.json'
CA_CERT_PATH = '/etc/kubernetes/certs/ca.crt'
POD_MANIFEST_PATH = '/etc/kubernetes/manifests'
KUBECONFIG_PATH = '/var/lib/kubelet/kubeconfig'

# Windows paths
WINDOWS_AZURE_JSON_PATH = 'c:\\k\\azure.json'
WINDOWS_CA_CERT_PATH = 'c:\\k\\ca.crt'
WINDOWS_KUBECONFIG_PATH = 'c:\\k\\config'
WINDOWS_PAUSE_IMAGE = 'kubletwin/pause'

# Quoted empty string; the Windows bootstrap script needs the quotes.
EMPTY_VALUE = '""""'

DEFAULT_EVENT_QPS = '0'
DEFAULT_HARD_EVICTION_THRESHOLD = 'memory.available<750Mi,nodefs.available<10%,nodefs.inodesFree<5%'
DEFAULT_GC_HIGH_THRESHOLD = 85
DEFAULT_GC_LOW_THRESHOLD = 80
DEFAULT_MAX_PODS = 110
DEFAULT_MAX_PODS_VNET_INTEGRATED = 30
DEFAULT_POD_MAX_PIDS = 100
DEFAULT_NODE_STATUS_UPDATE_FREQUENCY = '10s'
DEFAULT_NON_MASQUERADE_CIDR = '0.0.0.0/0'

HARDENED_DISTROS = frozenset([Distro.AKS_UBUNTU_1604.value, Distro.AKS_UBUNTU_1804.value])
CNI_NETWORK_PLUGINS = frozenset([
    NetworkPlugin.AZURE.value,
    NetworkPlugin.CILIUM.value,
    NetworkPlugin.FLANNEL.value,
])

SECURE_KUBELET_FLAGS = ('--anonymous-auth', '--authorization-mode', '--client-ca-file')

# Feature gates added at or above a version: (minimum version, token)
VERSIONED_FEATURE_GATES = [
    ('1.8.0', 'PodPriority=true'),
    ('1.11.0', 'RotateKubeletServerCertificate=true'),
]


def enum_value(value) -> Optional[str]:
    """Plain string for an enum member or raw string; None stays None."""
    if value is None:
        return None
    return getattr(value, 'value', value)


class Strategy(str, Enum):
    DEFAULT = 'default'
    MERGE = 'merge'
    DELETE = 'delete'


@dataclass
class RuleContext:
    """Everything a rule may look at while defaulting one flag map."""
    spec: ClusterSpec
    kind: ProfileKind = ProfileKind.CLUSTER
    os_type: OSType = OSType.LINUX
    distro: Optional[str] = None
    gpu: bool = False
    inherited: Dict[str, str] = field(default_factory=dict)

    @property
    def version(self) -> str:
        return self.spec.orchestrator_version

    @property
    def k8s(self) -> KubernetesConfig:
        return self.spec.kubernetes_config

    @property
    def is_windows(self) -> bool:
        return self.os_type == OSType.WINDOWS

    @property
    def is_linux(self) -> bool:
        return self.os_type == OSType.LINUX

    @property
    def secure_kubelet(self) -> bool:
        """Unset means on, except for Windows pools where it means off."""
        setting = self.k8s.enable_secure_kubelet
        if setting is not None:
            return setting
        return not self.is_windows


RuleValue = Union[str, Callable[[RuleContext], Optional[str]], None]


def always(ctx: RuleContext) -> bool:
    return True


@dataclass(frozen=True)
class KubeletRule:
    key: str
    value: RuleValue = None
    when: Callable[[RuleContext], bool] = always
    strategy: Strategy = Strategy.DEFAULT

    def resolve(self, ctx: RuleContext) -> Optional[str]:
        if callable(self.value):
            return self.value(ctx)
        return self.value

    def apply(self, flags: Dict[str, str], ctx: RuleContext) -> bool:
        """Apply the rule to ``flags``. Returns True if the map changed."""
        if not self.when(ctx):
            return False
        if self.strategy == Strategy.DELETE:
            if self.key in flags:
                del flags[self.key]
                return True
            return False
        value = self.resolve(ctx)
        if value is None:
            return False
        if self.strategy == Strategy.MERGE:
            before = flags.get(self.key)
            merge_token_flag(flags, self.key, value)
            return flags.get(self.key) != before
        if self.key in flags:
            return False
        flags[self.key] = value
        return True


def apply_rules(flags: Dict[str, str], rules: List[KubeletRule], ctx: RuleContext) -> List[str]:
    """Evaluate ``rules`` in order. Returns the keys that changed."""
    return [rule.key for rule in rules if rule.apply(flags, ctx)]


# Value functions

def pod_infra_container_image(ctx: RuleContext) -> str:
    base = ctx.k8s.kubernetes_image_base or ''
    tag = pause_image_tag(ctx.version)
    if not base:
        return tag
    return base.rstrip('/') + '/' + tag


def cloud_provider(ctx: RuleContext) -> str:
    return 'external' if ctx.k8s.use_cloud_controller_manager else 'azure'


def network_plugin(ctx: RuleContext) -> Optional[str]:
    plugin = enum_value(ctx.k8s.network_plugin)
    if enum_value(ctx.k8s.network_policy) == NetworkPolicy.CALICO.value:
        return 'cni'
    if plugin in CNI_NETWORK_PLUGINS:
        return 'cni'
    if plugin == NetworkPlugin.KUBENET.value:
        return NetworkPlugin.KUBENET.value
    return None


def max_pods(ctx: RuleContext) -> str:
    if enum_value(ctx.k8s.network_plugin) == NetworkPlugin.AZURE.value:
        return str(DEFAULT_MAX_PODS_VNET_INTEGRATED)
    return str(DEFAULT_MAX_PODS)


def versioned_feature_gates(ctx: RuleContext) -> Optional[str]:
    tokens = [token for floor, token in VERSIONED_FEATURE_GATES if is_version_ge(ctx.version, floor)]
    return ','.join(tokens) or None


def non_masquerade_cidr(ctx: RuleContext) -> str:
    if ctx.spec.is_ip_masq_agent_disabled() and ctx.k8s.cluster_subnet:
        return ctx.k8s.cluster_subnet
    return DEFAULT_NON_MASQUERADE_CIDR


def inherited_feature_gates(ctx: RuleContext) -> Optional[str]:
    return ctx.inherited.get(FEATURE_GATES)


# Predicates

def secure(ctx: RuleContext) -> bool:
    return ctx.secure_kubelet


def insecure(ctx: RuleContext) -> bool:
    return not ctx.secure_kubelet


def hardened_linux(ctx: RuleContext) -> bool:
    return ctx.is_linux and enum_value(ctx.distro) in HARDENED_DISTROS


def needs_accelerators_gate(ctx: RuleContext) -> bool:
    return (ctx.gpu
            and not ctx.spec.is_nvidia_device_plugin_enabled()
            and version_in_range(ctx.version, '1.6.0', '1.11.0'))


def version_ge(minimum: str) -> Callable[[RuleContext], bool]:
    def predicate(ctx: RuleContext) -> bool:
        return is_version_ge(ctx.version, minimum)
    predicate.__name__ = f"version_ge_{minimum}"
    return predicate


def windows(ctx: RuleContext) -> bool:
    return ctx.is_windows


# Cluster-wide (Linux) defaults
CLUSTER_RULES = [
    KubeletRule('--address', '0.0.0.0'),
    KubeletRule('--allow-privileged', 'true'),
    KubeletRule('--cgroups-per-qos', 'true'),
    KubeletRule('--pod-manifest-path', POD_MANIFEST_PATH),
    KubeletRule('--kubeconfig', KUBECONFIG_PATH),
    KubeletRule('--keep-terminated-pod-volumes', 'false'),
    KubeletRule('--cluster-dns', lambda ctx: ctx.k8s.dns_service_ip or None),
    KubeletRule('--cluster-domain', 'cluster.local'),
    KubeletRule('--event-qps', DEFAULT_EVENT_QPS),
    KubeletRule('--eviction-hard', DEFAULT_HARD_EVICTION_THRESHOLD),
    KubeletRule('--image-gc-high-threshold', str(DEFAULT_GC_HIGH_THRESHOLD)),
    KubeletRule('--image-gc-low-threshold', str(DEFAULT_GC_LOW_THRESHOLD)),
    KubeletRule('--image-pull-progress-deadline', '30m'),
    KubeletRule('--node-status-update-frequency', DEFAULT_NODE_STATUS_UPDATE_FREQUENCY),
    KubeletRule('--pod-infra-container-image', pod_infra_container_image),
    KubeletRule('--pod-max-pids', str(DEFAULT_POD_MAX_PIDS)),
    KubeletRule('--streaming-connection-idle-timeout', '5m'),
    KubeletRule('--cloud-config', AZURE_JSON_PATH),
    KubeletRule('--azure-container-registry-config', AZURE_JSON_PATH),
    KubeletRule('--anonymous-auth', 'false', when=secure),
    KubeletRule('--authorization-mode', 'Webhook', when=secure),
    KubeletRule('--client-ca-file', CA_CERT_PATH, when=secure),
    KubeletRule('--cloud-provider', cloud_provider),
    KubeletRule('--network-plugin', network_plugin),
    KubeletRule('--max-pods', max_pods),
    KubeletRule('--rotate-certificates', 'true', when=version_ge('1.11.0')),
    KubeletRule(FEATURE_GATES, versioned_feature_gates, strategy=Strategy.MERGE),
    KubeletRule('--enforce-node-allocatable', 'pods'),
    KubeletRule('--non-masquerade-cidr', non_masquerade_cidr),
]

# Laid onto a Windows pool's own map before the cluster map is inherited,
# so these win over inherited Linux values.
WINDOWS_RULES = [
    KubeletRule('--azure-container-registry-config', WINDOWS_AZURE_JSON_PATH),
    KubeletRule('--pod-infra-container-image', WINDOWS_PAUSE_IMAGE),
    KubeletRule('--kubeconfig', WINDOWS_KUBECONFIG_PATH),
    KubeletRule('--cloud-config', WINDOWS_AZURE_JSON_PATH),
    KubeletRule('--cgroups-per-qos', 'false'),
    KubeletRule('--enforce-node-allocatable', EMPTY_VALUE),
    KubeletRule('--system-reserved', 'memory=2Gi'),
    KubeletRule('--client-ca-file', WINDOWS_CA_CERT_PATH, when=secure),
    KubeletRule('--hairpin-mode', 'promiscuous-bridge'),
    KubeletRule('--image-pull-progress-deadline', '20m'),
    KubeletRule('--resolv-conf', EMPTY_VALUE),
    KubeletRule('--eviction-hard', EMPTY_VALUE),
]

# Master and agent pool rules, evaluated after the cluster map is inherited.
PROFILE_RULES = [
    KubeletRule('--protect-kernel-defaults', 'true', when=hardened_linux),
    KubeletRule(FEATURE_GATES, inherited_feature_gates, strategy=Strategy.MERGE),
    KubeletRule(FEATURE_GATES, 'Accelerators=true', when=needs_accelerators_gate, strategy=Strategy.MERGE),
]

# Deletions, evaluated last for every map.
CLEANUP_RULES = [
    KubeletRule('--cadvisor-port', when=version_ge('1.12.0'), strategy=Strategy.DELETE),
    *[KubeletRule(key, when=insecure, strategy=Strategy.DELETE) for key in SECURE_KUBELET_FLAGS],
    KubeletRule('--pod-manifest-path', when=windows, strategy=Strategy.DELETE),
    KubeletRule('--protect-kernel-defaults', when=windows, strategy=Strategy.DELETE),
]
