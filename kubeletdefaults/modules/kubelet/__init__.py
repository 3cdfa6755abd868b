"""
Kubelet configuration defaulting.

Fills the kubelet command-line flag maps of a cluster specification:
- Cluster-wide Linux baseline
- Secure kubelet, cloud provider and network plugin selection
- Version-gated flags and feature gates
- Hardened distro and Windows agent pool overrides
- Independent copies per master and agent pool
"""

from .defaults import KubeletConfigDefaulter, apply_defaults, set_kubelet_config
from .flags import combine_values, merge_feature_gates, set_missing_values
from .rules import EMPTY_VALUE, KubeletRule, RuleContext, Strategy
from .versions import is_version_ge, parse_version

__all__ = [
    'KubeletConfigDefaulter',
    'apply_defaults',
    'set_kubelet_config',
    'combine_values',
    'merge_feature_gates',
    'set_missing_values',
    'EMPTY_VALUE',
    'KubeletRule',
    'RuleContext',
    'Strategy',
    'is_version_ge',
    'parse_version',
]
