from pathlib import Path

import typer

from kubeletdefaults.modules.loader import ClusterSpecError, read_cluster_document, validate_cluster_document

app = typer.Typer()


@app.command("cluster")
def validate_cluster(file: Path = typer.Option(..., "--file", "-f", help="Path to the cluster YAML document")):
    """Validate a cluster document against the schema."""
    typer.echo(f"🔍 Validating cluster document: {file}")
    try:
        validate_cluster_document(read_cluster_document(file))
    except ClusterSpecError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)
    typer.echo("✅ Cluster document is valid")
