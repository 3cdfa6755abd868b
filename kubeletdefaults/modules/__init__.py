"""Domain modules for kubelet configuration."""

from .kubelet import KubeletConfigDefaulter, apply_defaults, set_kubelet_config

__all__ = ['KubeletConfigDefaulter', 'apply_defaults', 'set_kubelet_config']
