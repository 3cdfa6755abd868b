"""Load cluster documents into ``ClusterSpec`` objects and dump flag maps."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from jsonschema import ValidationError, validate

from ..config import DefaulterConfig, get_config
from ..models import (
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
)

logger = logging.getLogger("kubelet.loader")

FLAG_MAP_SCHEMA = {
    "type": "object",
    "propertyNames": {"pattern": "^-"},
    "additionalProperties": {"type": ["string", "number", "boolean"]},
}

TRI_STATE = {"type": ["boolean", "null"]}

CLUSTER_SCHEMA = {
    "type": "object",
    "properties": {
        "orchestratorVersion": {"type": "string"},
        "kubernetesConfig": {
            "type": "object",
            "properties": {
                "networkPlugin": {"type": "string"},
                "networkPolicy": {"type": "string"},
                "useCloudControllerManager": TRI_STATE,
                "enableSecureKubelet": TRI_STATE,
                "clusterSubnet": {"type": "string"},
                "dnsServiceIP": {"type": "string"},
                "kubernetesImageBase": {"type": "string"},
                "addons": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "enabled": TRI_STATE,
                        },
                        "required": ["name"],
                    },
                },
                "kubeletConfig": FLAG_MAP_SCHEMA,
            },
        },
        "hostedMasterProfile": {
            "type": "object",
            "properties": {"ipMasqAgent": {"type": "boolean"}},
        },
        "masterProfile": {
            "type": "object",
            "properties": {
                "distro": {"type": "string"},
                "kubeletConfig": FLAG_MAP_SCHEMA,
            },
        },
        "agentPoolProfiles": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "osType": {"type": "string"},
                    "distro": {"type": "string"},
                    "vmSize": {"type": "string"},
                    "kubeletConfig": FLAG_MAP_SCHEMA,
                },
                "required": ["name"],
            },
        },
    },
    "required": ["orchestratorVersion"],
}


class ClusterSpecError(ValueError):
    """Raised when a cluster document cannot be read or is invalid."""
    pass


def _enum_or_raw(enum_cls, value):
    """Map a string onto ``enum_cls``; unknown strings are kept as-is."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug(f"Unknown {enum_cls.__name__} value {value!r}, keeping it verbatim")
        return value


def _flag_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flag_map(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {str(key): _flag_value(value) for key, value in (data or {}).items()}


def validate_cluster_document(data: Any) -> None:
    """Validate a parsed cluster document against ``CLUSTER_SCHEMA``."""
    try:
        validate(instance=data, schema=CLUSTER_SCHEMA)
    except ValidationError as ve:
        raise ClusterSpecError(f"Cluster document validation error: {ve.message}") from ve


def cluster_spec_from_dict(data: Dict[str, Any], config: Optional[DefaulterConfig] = None) -> ClusterSpec:
    """Build a ``ClusterSpec`` from a cluster document."""
    validate_cluster_document(data)
    config = config or get_config()

    k8s = data.get("kubernetesConfig") or {}
    kubernetes_config = KubernetesConfig(
        network_plugin=_enum_or_raw(NetworkPlugin, k8s.get("networkPlugin", NetworkPlugin.KUBENET.value)),
        network_policy=_enum_or_raw(NetworkPolicy, k8s.get("networkPolicy")),
        use_cloud_controller_manager=k8s.get("useCloudControllerManager"),
        enable_secure_kubelet=k8s.get("enableSecureKubelet"),
        cluster_subnet=k8s.get("clusterSubnet") or config.cluster_subnet,
        dns_service_ip=k8s.get("dnsServiceIP") or config.dns_service_ip,
        kubernetes_image_base=k8s.get("kubernetesImageBase") or config.image_base,
        addons=[
            KubernetesAddon(name=addon["name"], enabled=addon.get("enabled"))
            for addon in k8s.get("addons") or []
        ],
        kubelet_config=_flag_map(k8s.get("kubeletConfig")),
    )

    hosted = data.get("hostedMasterProfile")
    hosted_master_profile = None
    if hosted is not None:
        hosted_master_profile = HostedMasterProfile(ip_masq_agent=hosted.get("ipMasqAgent", False))

    master = data.get("masterProfile")
    master_profile = None
    if master is not None:
        master_profile = MasterProfile(
            distro=_enum_or_raw(Distro, master.get("distro")),
            kubelet_config=_flag_map(master.get("kubeletConfig")),
        )

    pools = [
        AgentPoolProfile(
            name=pool["name"],
            os_type=_enum_or_raw(OSType, pool.get("osType", OSType.LINUX.value)),
            distro=_enum_or_raw(Distro, pool.get("distro")),
            vm_size=pool.get("vmSize", ""),
            kubelet_config=_flag_map(pool.get("kubeletConfig")),
        )
        for pool in data.get("agentPoolProfiles") or []
    ]

    return ClusterSpec(
        orchestrator_version=str(data["orchestratorVersion"]),
        kubernetes_config=kubernetes_config,
        master_profile=master_profile,
        agent_pool_profiles=pools,
        hosted_master_profile=hosted_master_profile,
    )


def read_cluster_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a cluster YAML file."""
    path = Path(path).expanduser()
    if not path.exists():
        raise ClusterSpecError(f"Cluster file not found: {path}")
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ClusterSpecError(f"Invalid YAML in {path}: {e}") from e
    logger.debug(f"Loaded cluster document from {path}")
    return data


def load_cluster_spec(path: Union[str, Path], config: Optional[DefaulterConfig] = None) -> ClusterSpec:
    """Load a cluster YAML file into a ``ClusterSpec``."""
    return cluster_spec_from_dict(read_cluster_document(path), config=config)


def kubelet_configs(spec: ClusterSpec) -> Dict[str, Any]:
    """Collect every flag map of ``spec`` keyed by profile."""
    result: Dict[str, Any] = {"cluster": dict(spec.kubernetes_config.kubelet_config)}
    if spec.master_profile is not None:
        result["master"] = dict(spec.master_profile.kubelet_config)
    if spec.agent_pool_profiles:
        result["agentPools"] = {
            pool.name: dict(pool.kubelet_config) for pool in spec.agent_pool_profiles
        }
    return result


def dump_kubelet_configs(spec: ClusterSpec, path: Optional[Union[str, Path]] = None) -> str:
    """Render the flag maps of ``spec`` as YAML, optionally writing them to ``path``."""
    rendered = yaml.safe_dump(kubelet_configs(spec), default_flow_style=False, sort_keys=True)
    if path is not None:
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(rendered)
        logger.debug(f"Wrote kubelet configs to {path}")
    return rendered
