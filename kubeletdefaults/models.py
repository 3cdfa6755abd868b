"""Data models for kubelet configuration defaulting."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


class OSType(str, Enum):
    """Operating system of an agent pool."""
    LINUX = 'Linux'
    WINDOWS = 'Windows'


class Distro(str, Enum):
    """Supported Linux distributions."""
    UBUNTU = 'ubuntu'
    UBUNTU_1804 = 'ubuntu-18.04'
    AKS_UBUNTU_1604 = 'aks-ubuntu-16.04'
    AKS_UBUNTU_1804 = 'aks-ubuntu-18.04'
    ACC_1604 = 'acc-16.04'
    COREOS = 'coreos'
    RHEL = 'rhel'


class NetworkPlugin(str, Enum):
    """Network plugins known to the defaulter."""
    KUBENET = 'kubenet'
    AZURE = 'azure'
    CILIUM = 'cilium'
    FLANNEL = 'flannel'


class NetworkPolicy(str, Enum):
    """Network policies known to the defaulter."""
    CALICO = 'calico'
    AZURE = 'azure'
    CILIUM = 'cilium'


class ProfileKind(str, Enum):
    """Which flag map is being defaulted."""
    CLUSTER = 'cluster'
    MASTER = 'master'
    AGENT = 'agent'


IP_MASQ_AGENT_ADDON_NAME = 'ip-masq-agent'
NVIDIA_DEVICE_PLUGIN_ADDON_NAME = 'nvidia-device-plugin'

DEFAULT_DNS_SERVICE_IP = '10.0.0.10'
DEFAULT_CLUSTER_SUBNET = '10.244.0.0/16'
DEFAULT_IMAGE_BASE = 'k8s.gcr.io/'

# Enum fields also accept plain strings so unknown values survive loading
# and simply match no rule.
PluginValue = Union[NetworkPlugin, str, None]
PolicyValue = Union[NetworkPolicy, str, None]
DistroValue = Union[Distro, str, None]


@dataclass
class KubernetesAddon:
    """An optional cluster feature with a tri-state enabled flag."""
    name: str
    enabled: Optional[bool] = None

    def is_enabled(self, default: bool = False) -> bool:
        return default if self.enabled is None else self.enabled


@dataclass
class KubernetesConfig:
    """Cluster-wide orchestrator settings plus the cluster kubelet flag map."""
    network_plugin: PluginValue = NetworkPlugin.KUBENET
    network_policy: PolicyValue = None
    use_cloud_controller_manager: Optional[bool] = None
    enable_secure_kubelet: Optional[bool] = None
    cluster_subnet: str = DEFAULT_CLUSTER_SUBNET
    dns_service_ip: str = DEFAULT_DNS_SERVICE_IP
    kubernetes_image_base: str = DEFAULT_IMAGE_BASE
    addons: List[KubernetesAddon] = field(default_factory=list)
    kubelet_config: Dict[str, str] = field(default_factory=dict)

    def get_addon(self, name: str) -> Optional[KubernetesAddon]:
        """Return the declared add-on called ``name``, if any."""
        for addon in self.addons:
            if addon.name == name:
                return addon
        return None


@dataclass
class HostedMasterProfile:
    """Alternate, externally hosted control plane."""
    ip_masq_agent: bool = False


@dataclass
class MasterProfile:
    """Control plane nodes. Masters always run Linux."""
    distro: DistroValue = None
    kubelet_config: Dict[str, str] = field(default_factory=dict)

    @property
    def os_type(self) -> OSType:
        return OSType.LINUX

    kind = ProfileKind.MASTER


@dataclass
class AgentPoolProfile:
    """A pool of worker nodes."""
    name: str
    os_type: OSType = OSType.LINUX
    distro: DistroValue = None
    vm_size: str = ''
    kubelet_config: Dict[str, str] = field(default_factory=dict)

    kind = ProfileKind.AGENT

    @property
    def is_windows(self) -> bool:
        return self.os_type == OSType.WINDOWS

    @property
    def is_gpu(self) -> bool:
        return 'Standard_N' in (self.vm_size or '')


@dataclass
class ClusterSpec:
    """Declarative cluster specification consumed by the defaulter."""
    orchestrator_version: str
    kubernetes_config: KubernetesConfig = field(default_factory=KubernetesConfig)
    master_profile: Optional[MasterProfile] = None
    agent_pool_profiles: List[AgentPoolProfile] = field(default_factory=list)
    hosted_master_profile: Optional[HostedMasterProfile] = None

    def is_ip_masq_agent_disabled(self) -> bool:
        """Resolve the masquerade agent state.

        A hosted master profile decides on its own, and its
        ``ip_masq_agent`` is off unless set. Otherwise a declared
        ``ip-masq-agent`` add-on decides, and without one the agent is enabled.
        """
        if self.hosted_master_profile is not None:
            return not self.hosted_master_profile.ip_masq_agent
        addon = self.kubernetes_config.get_addon(IP_MASQ_AGENT_ADDON_NAME)
        if addon is not None:
            return not addon.is_enabled(default=True)
        return False

    def is_nvidia_device_plugin_enabled(self) -> bool:
        addon = self.kubernetes_config.get_addon(NVIDIA_DEVICE_PLUGIN_ADDON_NAME)
        return addon is not None and addon.is_enabled()
