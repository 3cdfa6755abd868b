"""Kubelet flag defaulting.

The cluster-wide map is defaulted from ``CLUSTER_RULES``. Master and agent
pool maps then start from their own user-supplied flags, pick up the
Windows overrides where they apply, inherit every missing key from a copy
of the defaulted cluster map, and finish with the profile rules and the
cleanup deletions.

Defaulting never fails. Inputs no rule recognises leave fewer keys set.
"""
import logging
from typing import Dict, Optional, Union

from ...models import AgentPoolProfile, ClusterSpec, MasterProfile, OSType, ProfileKind
from .flags import copy_flags, set_missing_values
from .rules import (
    CLEANUP_RULES,
    CLUSTER_RULES,
    PROFILE_RULES,
    WINDOWS_RULES,
    RuleContext,
    apply_rules,
)
from .versions import parse_version

logger = logging.getLogger("kubelet.defaults")

Profile = Union[MasterProfile, AgentPoolProfile, None]


class KubeletConfigDefaulter:
    """Fills kubelet flag maps for one cluster specification."""

    def __init__(self, spec: ClusterSpec):
        self.spec = spec
        if parse_version(spec.orchestrator_version) is None:
            logger.warning(
                f"Unparseable orchestrator version {spec.orchestrator_version!r}; "
                "no version-gated kubelet flags will be applied"
            )

    def context_for(self, profile: Profile = None, inherited: Optional[Dict[str, str]] = None) -> RuleContext:
        if profile is None:
            return RuleContext(spec=self.spec, kind=ProfileKind.CLUSTER, os_type=OSType.LINUX)
        return RuleContext(
            spec=self.spec,
            kind=profile.kind,
            os_type=profile.os_type,
            distro=profile.distro,
            gpu=getattr(profile, 'is_gpu', False),
            inherited=inherited or {},
        )

    def cluster_defaults(self, flags: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Default the cluster-wide map in place and return it."""
        if flags is None:
            flags = self.spec.kubernetes_config.kubelet_config
        ctx = self.context_for(None)
        added = apply_rules(flags, CLUSTER_RULES, ctx)
        removed = apply_rules(flags, CLEANUP_RULES, ctx)
        logger.debug(f"cluster kubelet config: set {added}, removed {removed}")
        return flags

    def apply_defaults(self, profile: Profile = None, flags: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Default one profile's flag map in place and return it.

        ``profile`` is None for the cluster-wide map. ``flags`` defaults to
        the profile's own map. The cluster map a profile inherits from is
        computed on a copy, so the spec's cluster map is left untouched.
        """
        if profile is None:
            return self.cluster_defaults(flags)
        if flags is None:
            flags = profile.kubelet_config

        cluster = self.cluster_defaults(copy_flags(self.spec.kubernetes_config.kubelet_config))
        ctx = self.context_for(profile, inherited=cluster)

        changed = []
        if ctx.is_windows:
            changed += apply_rules(flags, WINDOWS_RULES, ctx)
        changed += set_missing_values(flags, cluster)
        changed += apply_rules(flags, PROFILE_RULES, ctx)
        removed = apply_rules(flags, CLEANUP_RULES, ctx)
        logger.debug(
            f"{ctx.kind.value} kubelet config ({getattr(profile, 'name', 'master')}): "
            f"set {len(changed)} flags, removed {removed}"
        )
        return flags

    def set_kubelet_config(self) -> ClusterSpec:
        """Default every flag map of the spec.

        Each master and agent pool map ends up independent of the cluster
        map and of each other.
        """
        self.cluster_defaults()
        if self.spec.master_profile is not None:
            master = self.spec.master_profile
            master.kubelet_config = self.apply_defaults(master, copy_flags(master.kubelet_config))
        for pool in self.spec.agent_pool_profiles:
            pool.kubelet_config = self.apply_defaults(pool, copy_flags(pool.kubelet_config))
        logger.info(
            f"Applied kubelet defaults for orchestrator {self.spec.orchestrator_version} "
            f"({len(self.spec.agent_pool_profiles)} agent pools)"
        )
        return self.spec


def apply_defaults(spec: ClusterSpec, profile: Profile = None, flags: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Default a single flag map; see ``KubeletConfigDefaulter.apply_defaults``."""
    return KubeletConfigDefaulter(spec).apply_defaults(profile, flags)


def set_kubelet_config(spec: ClusterSpec) -> ClusterSpec:
    """Default the cluster, master and agent pool flag maps of ``spec``."""
    return KubeletConfigDefaulter(spec).set_kubelet_config()
