import logging
from pathlib import Path
from typing import Optional

import typer

from kubeletdefaults.config import DefaulterConfig, get_config
from kubeletdefaults.modules import set_kubelet_config
from kubeletdefaults.modules.loader import ClusterSpecError, dump_kubelet_configs, load_cluster_spec

app = typer.Typer()

logger = logging.getLogger("kubelet.commands.apply")


@app.command("cluster")
def apply_cluster_cmd(
    file: Path = typer.Option(..., "--file", "-f", help="Path to the cluster YAML document"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the flag maps to this file"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a kubeletdefaults config file"),
):
    """Fill in kubelet flags for every profile of a cluster document."""
    try:
        defaults = DefaulterConfig.load(config) if config else get_config()
        spec = load_cluster_spec(file, config=defaults)
    except ClusterSpecError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(f"📄 Loaded cluster document from {file}")
    set_kubelet_config(spec)
    rendered = dump_kubelet_configs(spec, output)

    if output:
        typer.echo(f"✅ Kubelet flags written to {output}")
    else:
        typer.echo(rendered, nl=False)
