"""CLI for editing mind maps (create, browse, edit, MCP server)."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from mindmap_editor.config import DEFAULT_NODE_LABEL, DEFAULT_ROOT_LABEL, resolve_data_directory
from mindmap_editor.core.tree.markdown import render_subtree_as_markdown
from mindmap_editor.core.tree.mutation import make_node
from mindmap_editor.core.tree.navigation import collect_ids
from mindmap_editor.core.write import operations
from mindmap_editor.logging_config import configure_logging
from mindmap_editor.store import MapStore

app = typer.Typer(help="Mind map editor: build and reshape topic trees.")
comment_app = typer.Typer(help="Sticky-note comments on topics.")
image_app = typer.Typer(help="The image attached to a topic.")
app.add_typer(comment_app, name="comment")
app.add_typer(image_app, name="image")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Map store directory"),
]

_DIRECTIONS = {"up": "previous", "down": "next", "previous": "previous", "next": "next"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_store(data_dir: Path | None) -> MapStore:
    dst = data_dir or resolve_data_directory()
    dst.mkdir(parents=True, exist_ok=True)
    return MapStore(dst)


def _report(result: dict[str, Any], message: str) -> None:
    """Print ``message`` on success, or log the error and exit non-zero."""
    if not result.get("success"):
        logger.error("{}", result.get("error", "Unknown error"))
        raise typer.Exit(1)
    typer.echo(message.format(**result))


@app.command()
def new(
    name: str = typer.Argument(..., help="Map name"),
    label: str = typer.Option(DEFAULT_ROOT_LABEL, "--label", "-l", help="Root topic label"),
    data_dir: DataDirOption = None,
) -> None:
    """Create a new map with a single root topic."""
    store = _open_store(data_dir)
    mind_map = store.create(name, root=make_node(label))
    typer.echo(f"Created map '{mind_map.name}' [id={mind_map.id}] root={mind_map.root.id}")


@app.command()
def maps(data_dir: DataDirOption = None) -> None:
    """List all stored maps."""
    store = _open_store(data_dir)
    found = store.list_maps()
    typer.echo(f"{len(found)} maps:\n")
    for m in found:
        typer.echo(f"  {m.name} - {len(collect_ids(m.root))} topics  [id={m.id}]")


@app.command()
def show(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: Annotated[
        str | None,
        typer.Option("--node", "-n", help="Start from this topic instead of the root"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Show a map (or a subtree) as markdown or JSON."""
    from mindmap_editor.mcp.server import mindmap_read_node

    store = _open_store(data_dir)
    if output_json:
        result = mindmap_read_node(
            store, map_ref=map_ref, node_id=node_id, max_depth=max_depth, output_format="json"
        )
        if "error" in result:
            typer.echo(result["error"])
            raise typer.Exit(1)
        typer.echo(json.dumps(result["node"], indent=2, ensure_ascii=False))
        return

    map_id = store.resolve(map_ref)
    if not map_id:
        typer.echo(f"Map '{map_ref}' not found.")
        raise typer.Exit(1)
    md = render_subtree_as_markdown(store.load(map_id).root, node_id=node_id, max_depth=max_depth)
    if not md:
        typer.echo(f"Node '{node_id}' not found in map.")
        raise typer.Exit(1)
    typer.echo(md, nl=False)


@app.command()
def add(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    parent_id: str = typer.Argument(..., help="Parent topic id"),
    label: str = typer.Option(DEFAULT_NODE_LABEL, "--label", "-l", help="Label for the new topic"),
    data_dir: DataDirOption = None,
) -> None:
    """Add a child topic."""
    result = operations.add_node(
        _open_store(data_dir), map_ref=map_ref, parent_id=parent_id, label=label
    )
    _report(result, "Added topic {node_id} under {parent_id}")


@app.command()
def rename(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    label: str = typer.Argument(..., help="New label"),
    data_dir: DataDirOption = None,
) -> None:
    """Change a topic's label."""
    result = operations.edit_node(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id, label=label
    )
    _report(result, "Renamed topic {node_id}")


@app.command()
def color(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    value: Annotated[
        str | None,
        typer.Argument(help="Palette name or #hex color; omit to reset to the depth default"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Set or reset a topic's color."""
    result = operations.edit_node(
        _open_store(data_dir),
        map_ref=map_ref,
        node_id=node_id,
        color=value,
        clear_color=value is None,
    )
    _report(result, "Updated color of topic {node_id}")


@app.command()
def delete(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a topic and all of its descendants."""
    if not yes:
        typer.confirm(f"Delete topic {node_id} and everything below it?", abort=True)
    result = operations.delete_node(_open_store(data_dir), map_ref=map_ref, node_id=node_id)
    _report(result, "Deleted topic {node_id}")


@app.command()
def move(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    source_id: str = typer.Argument(..., help="Topic to move"),
    target_id: str = typer.Argument(..., help="New parent topic"),
    data_dir: DataDirOption = None,
) -> None:
    """Move a topic (with its subtree) under another topic."""
    result = operations.move_node(
        _open_store(data_dir), map_ref=map_ref, source_id=source_id, target_id=target_id
    )
    _report(result, "Moved topic {node_id} under {parent_id}")


@app.command()
def reorder(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    direction: str = typer.Argument(..., help="up/previous or down/next"),
    data_dir: DataDirOption = None,
) -> None:
    """Swap a topic with its previous or next sibling."""
    if direction not in _DIRECTIONS:
        typer.echo(f"Unknown direction '{direction}'.")
        raise typer.Exit(1)
    result = operations.reorder_node(
        _open_store(data_dir),
        map_ref=map_ref,
        node_id=node_id,
        direction=_DIRECTIONS[direction],  # type: ignore[arg-type]
    )
    _report(result, "Reordered topic {node_id} (changed: {changed})")


@comment_app.command("add")
def comment_add(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    content: str = typer.Argument(..., help="Comment text"),
    background: Annotated[
        str | None,
        typer.Option("--color", "-c", help="Background color (#hex)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Attach a sticky note to a topic."""
    kwargs: dict[str, Any] = {}
    if background is not None:
        kwargs["background_color"] = background
    result = operations.add_comment(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id, content=content, **kwargs
    )
    _report(result, "Added comment {comment_id} to topic {node_id}")


@comment_app.command("edit")
def comment_edit(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    comment_id: str = typer.Argument(..., help="Comment id"),
    content: Annotated[str | None, typer.Argument(help="New comment text")] = None,
    background: Annotated[
        str | None,
        typer.Option("--color", "-c", help="New background color (#hex)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Change a sticky note's text or color."""
    result = operations.edit_comment(
        _open_store(data_dir),
        map_ref=map_ref,
        node_id=node_id,
        comment_id=comment_id,
        content=content,
        background_color=background,
    )
    _report(result, "Updated comment on topic {node_id}")


@comment_app.command("delete")
def comment_delete(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    comment_id: str = typer.Argument(..., help="Comment id"),
    data_dir: DataDirOption = None,
) -> None:
    """Remove a sticky note."""
    result = operations.delete_comment(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id, comment_id=comment_id
    )
    _report(result, "Deleted comment from topic {node_id}")


@image_app.command("set")
def image_set(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    url: str = typer.Argument(..., help="Image URL"),
    position: str = typer.Option("top", "--position", "-p", help="top, bottom, left or right"),
    scale: float = typer.Option(1.0, "--scale", "-s", help="Size multiplier (0.5 to 2.5)"),
    data_dir: DataDirOption = None,
) -> None:
    """Attach an image by URL, replacing any existing one."""
    result = operations.set_node_image(
        _open_store(data_dir),
        map_ref=map_ref,
        node_id=node_id,
        url=url,
        position=position,  # type: ignore[arg-type]
        scale=scale,
    )
    _report(result, "Set image on topic {node_id}")


@image_app.command("position")
def image_position(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    position: str = typer.Argument(..., help="top, bottom, left or right"),
    data_dir: DataDirOption = None,
) -> None:
    """Move an existing image relative to the label."""
    result = operations.update_node_image(
        _open_store(data_dir),
        map_ref=map_ref,
        node_id=node_id,
        position=position,  # type: ignore[arg-type]
    )
    _report(result, "Moved image on topic {node_id}")


@image_app.command("scale")
def image_scale(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    scale: float = typer.Argument(..., help="Size multiplier (clamped to 0.5 to 2.5)"),
    data_dir: DataDirOption = None,
) -> None:
    """Resize an existing image."""
    result = operations.update_node_image(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id, scale=scale
    )
    _report(result, "Resized image on topic {node_id}")


@image_app.command("grow")
def image_grow(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    steps: int = typer.Option(1, "--steps", "-n", help="Number of 0.1 increments"),
    data_dir: DataDirOption = None,
) -> None:
    """Enlarge an existing image by fixed steps."""
    result = operations.resize_node_image(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id, steps=steps
    )
    _report(result, "Image on topic {node_id} is now at scale {scale}")


@image_app.command("shrink")
def image_shrink(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    steps: int = typer.Option(1, "--steps", "-n", help="Number of 0.1 decrements"),
    data_dir: DataDirOption = None,
) -> None:
    """Reduce an existing image by fixed steps."""
    result = operations.resize_node_image(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id, steps=-steps
    )
    _report(result, "Image on topic {node_id} is now at scale {scale}")


@image_app.command("remove")
def image_remove(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    data_dir: DataDirOption = None,
) -> None:
    """Remove a topic's image."""
    result = operations.remove_node_image(
        _open_store(data_dir), map_ref=map_ref, node_id=node_id
    )
    _report(result, "Removed image from topic {node_id}")


@image_app.command("upload")
def image_upload(
    map_ref: str = typer.Argument(..., help="Map id or name"),
    node_id: str = typer.Argument(..., help="Topic id"),
    file: Path = typer.Argument(..., help="Image file", exists=True, dir_okay=False),
    data_dir: DataDirOption = None,
) -> None:
    """Upload an image to blob storage and attach it to a topic."""
    from mindmap_editor.services.blob_storage import BlobStorage

    result = operations.upload_node_image(
        _open_store(data_dir),
        BlobStorage(),
        map_ref=map_ref,
        node_id=node_id,
        data=file.read_bytes(),
        filename=file.name,
    )
    _report(result, "Uploaded image to {url}")


@app.command()
def generate(
    name: str = typer.Argument(..., help="Name for the new map"),
    files: list[Path] = typer.Argument(..., help="PDF documents", exists=True, dir_okay=False),
    data_dir: DataDirOption = None,
) -> None:
    """Generate a new map from documents with the generative service."""
    from mindmap_editor.services.generation import FilePayload, TreeGenerator

    payloads = [FilePayload(data=f.read_bytes()) for f in files]
    result = operations.generate_map(
        _open_store(data_dir), TreeGenerator(), name=name, files=payloads
    )
    _report(result, "Created map {map_id} (root={root_id})")


@app.command()
def flashcards(
    file: Path = typer.Argument(..., help="PDF document", exists=True, dir_okay=False),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Generate question/answer flashcards from a document."""
    from mindmap_editor.services.generation import FilePayload, TreeGenerator

    result = operations.generate_flashcards(
        TreeGenerator(), file=FilePayload(data=file.read_bytes())
    )
    if not result["success"]:
        logger.error("{}", result["error"])
        raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps(result["flashcards"], indent=2, ensure_ascii=False))
        return
    for i, card in enumerate(result["flashcards"], 1):
        typer.echo(f"{i}. Q: {card['question']}\n   A: {card['answer']}\n")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from mindmap_editor.mcp.server import run_mcp_server

    run_mcp_server()
