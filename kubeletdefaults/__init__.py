"""
kubeletdefaults

Computes the kubelet command-line flags for every node profile of a
cluster specification.
"""

from .models import (
    AgentPoolProfile,
    ClusterSpec,
    Distro,
    HostedMasterProfile,
    KubernetesAddon,
    KubernetesConfig,
    MasterProfile,
    NetworkPlugin,
    NetworkPolicy,
    OSType,
    ProfileKind,
)
from .modules.kubelet import KubeletConfigDefaulter, apply_defaults, set_kubelet_config

__all__ = [
    'AgentPoolProfile',
    'ClusterSpec',
    'Distro',
    'HostedMasterProfile',
    'KubernetesAddon',
    'KubernetesConfig',
    'MasterProfile',
    'NetworkPlugin',
    'NetworkPolicy',
    'OSType',
    'ProfileKind',
    'KubeletConfigDefaulter',
    'apply_defaults',
    'set_kubelet_config',
]

__version__ = "0.1.0"
