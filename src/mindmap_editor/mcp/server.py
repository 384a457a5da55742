"""MCP server exposing mind map reading and editing tools."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from mindmap_editor.config import DEFAULT_NODE_LABEL, resolve_data_directory
from mindmap_editor.core.importer.json_reader import node_to_dict
from mindmap_editor.core.tree.markdown import render_subtree_as_markdown, strip_markup
from mindmap_editor.core.tree.navigation import (
    collect_ids,
    get_breadcrumbs,
    get_siblings,
    iter_nodes,
    locate,
)
from mindmap_editor.core.tree.palette import effective_color
from mindmap_editor.core.write import operations
from mindmap_editor.models.node import Node
from mindmap_editor.store import MapStore


def _breadcrumbs_str(root: Node, node_id: str) -> str:
    crumbs = get_breadcrumbs(root, node_id)
    return " > ".join(strip_markup(c.label)[:40] for c in crumbs) if crumbs else ""


def _summary(node: Node) -> dict[str, Any]:
    return {"id": node.id, "label": strip_markup(node.label)[:80], "child_count": len(node.children)}


# --- Core functions (testable without MCP context) ---


def mindmap_list_maps(store: MapStore) -> dict[str, Any]:
    """List all stored maps with metadata."""
    maps = store.list_maps()
    return {
        "maps": [
            {
                "map_id": m.id,
                "name": m.name,
                "root_id": m.root.id,
                "node_count": len(collect_ids(m.root)),
                "created_at": m.created_at,
            }
            for m in maps
        ],
        "count": len(maps),
    }


def mindmap_read_node(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str | None = None,
    max_depth: int | None = None,
    output_format: str = "markdown",
    include_comments: bool = True,
) -> dict[str, Any]:
    """Read a node and its subtree as markdown or structured JSON.

    Args:
        map_ref: Map id or name.
        node_id: Node ID to read (None = root).
        max_depth: Max depth levels to include (None = unlimited).
        output_format: "markdown" or "json".
        include_comments: Include annotations in output.
    """
    map_id = store.resolve(map_ref)
    if not map_id:
        return {"error": f"Map '{map_ref}' not found."}
    root = store.load(map_id).root
    node = root if node_id is None else locate(root, node_id)
    if node is None:
        return {"error": f"Node '{node_id}' not found."}

    breadcrumbs = _breadcrumbs_str(root, node.id)
    if output_format == "markdown":
        md = render_subtree_as_markdown(
            root, node_id=node.id, max_depth=max_depth, include_comments=include_comments
        )
        return {"content": md, "node_id": node.id, "breadcrumbs": breadcrumbs}

    def _build(n: Node, remaining_depth: int | None) -> dict[str, Any]:
        entry = node_to_dict(n)
        if not include_comments:
            entry.pop("comments", None)
        if remaining_depth is not None and remaining_depth <= 0:
            entry["children"] = []
            entry["child_count"] = len(n.children)
        else:
            next_depth = None if remaining_depth is None else remaining_depth - 1
            entry["children"] = [_build(c, next_depth) for c in n.children]
        return entry

    return {"node": _build(node, max_depth), "breadcrumbs": breadcrumbs}


def mindmap_get_node_context(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    sibling_count: int = 3,
    child_limit: int = 20,
) -> dict[str, Any]:
    """Get a node with breadcrumbs, siblings, and children.

    Args:
        map_ref: Map id or name.
        node_id: Node ID.
        sibling_count: Number of siblings before/after to include.
        child_limit: Max direct children to show.
    """
    map_id = store.resolve(map_ref)
    if not map_id:
        return {"error": f"Map '{map_ref}' not found."}
    root = store.load(map_id).root
    depth = next((d for n, d in iter_nodes(root) if n.id == node_id), None)
    node = locate(root, node_id)
    if node is None or depth is None:
        return {"error": f"Node '{node_id}' not found."}

    before, after = get_siblings(root, node_id, count=sibling_count)
    return {
        "node": {
            "id": node.id,
            "label": node.label,
            "depth": depth,
            "color": effective_color(node.color, depth),
            "comment_count": len(node.comments or ()),
            "has_image": node.image is not None,
            "child_count": len(node.children),
        },
        "breadcrumbs": _breadcrumbs_str(root, node_id),
        "siblings_before": [_summary(s) for s in before],
        "siblings_after": [_summary(s) for s in after],
        "children": [_summary(c) for c in node.children[:child_limit]],
    }


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: MapStore
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open the map store on startup."""
    data_dir = resolve_data_directory()
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Serving maps from {}", data_dir)
    yield ServerContext(store=MapStore(data_dir))


mcp_server = FastMCP(
    "mindmap-editor",
    instructions="""\
Mind maps are trees of topics. Every map has one root topic that can never be
deleted or moved. Topics can carry a color, sticky-note comments and one image.

1. Call mindmap_list_maps_tool to find a map and its root id.
2. Call mindmap_read_node_tool (max_depth=2 for large maps) to see the tree and ids.
3. Edit with the add/edit/move/reorder/delete tools. Moving a topic below one of
   its own descendants is rejected.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def mindmap_list_maps_tool(ctx: Context) -> dict[str, Any]:
    """List all mind maps with their root ids and node counts."""
    return mindmap_list_maps(_ctx(ctx).store)


@mcp_server.tool()
async def mindmap_read_node_tool(
    ctx: Context,
    map_ref: str,
    node_id: str | None = None,
    max_depth: int | None = None,
    output_format: str = "markdown",
    include_comments: bool = True,
) -> dict[str, Any]:
    """Read a topic and its subtree as markdown or structured JSON.

    Args:
        map_ref: Map id or name.
        node_id: Topic id (omit for the root).
        max_depth: Max depth levels (None = unlimited).
        output_format: "markdown" (human-readable) or "json" (structured, with ids).
        include_comments: Include sticky notes in output.
    """
    return mindmap_read_node(
        _ctx(ctx).store,
        map_ref=map_ref,
        node_id=node_id,
        max_depth=max_depth,
        output_format=output_format,
        include_comments=include_comments,
    )


@mcp_server.tool()
async def mindmap_get_node_context_tool(
    ctx: Context,
    map_ref: str,
    node_id: str,
    sibling_count: int = 3,
    child_limit: int = 20,
) -> dict[str, Any]:
    """Get a topic with its ancestors, siblings and children.

    Args:
        map_ref: Map id or name.
        node_id: Topic id.
        sibling_count: Siblings before/after to include.
        child_limit: Max direct children to show.
    """
    return mindmap_get_node_context(
        _ctx(ctx).store,
        map_ref=map_ref,
        node_id=node_id,
        sibling_count=sibling_count,
        child_limit=child_limit,
    )


@mcp_server.tool()
async def mindmap_add_node_tool(
    ctx: Context,
    map_ref: str,
    parent_id: str,
    label: str = DEFAULT_NODE_LABEL,
) -> dict[str, Any]:
    """Add a topic as the last child of a parent topic.

    Args:
        map_ref: Map id or name.
        parent_id: Parent topic id.
        label: Label for the new topic.
    """
    async with _ctx(ctx).write_lock:
        return operations.add_node(
            _ctx(ctx).store, map_ref=map_ref, parent_id=parent_id, label=label
        )


@mcp_server.tool()
async def mindmap_edit_node_tool(
    ctx: Context,
    map_ref: str,
    node_id: str,
    label: str | None = None,
    color: str | None = None,
    clear_color: bool = False,
) -> dict[str, Any]:
    """Change a topic's label and/or color.

    Args:
        map_ref: Map id or name.
        node_id: Topic id.
        label: New label.
        color: Palette name (purple, blue, green, red, yellow, cyan) or #hex.
        clear_color: Reset to the default color for the topic's depth.
    """
    async with _ctx(ctx).write_lock:
        return operations.edit_node(
            _ctx(ctx).store,
            map_ref=map_ref,
            node_id=node_id,
            label=label,
            color=color,
            clear_color=clear_color,
        )


@mcp_server.tool()
async def mindmap_delete_node_tool(ctx: Context, map_ref: str, node_id: str) -> dict[str, Any]:
    """Delete a topic and everything below it. The root cannot be deleted."""
    async with _ctx(ctx).write_lock:
        return operations.delete_node(_ctx(ctx).store, map_ref=map_ref, node_id=node_id)


@mcp_server.tool()
async def mindmap_move_node_tool(
    ctx: Context,
    map_ref: str,
    source_id: str,
    target_id: str,
) -> dict[str, Any]:
    """Move a topic (with its subtree) to become the last child of another topic.

    Args:
        map_ref: Map id or name.
        source_id: Topic to move.
        target_id: New parent topic.
    """
    async with _ctx(ctx).write_lock:
        return operations.move_node(
            _ctx(ctx).store, map_ref=map_ref, source_id=source_id, target_id=target_id
        )


@mcp_server.tool()
async def mindmap_reorder_node_tool(
    ctx: Context,
    map_ref: str,
    node_id: str,
    direction: str,
) -> dict[str, Any]:
    """Swap a topic with its neighbor. direction is "previous" or "next"."""
    async with _ctx(ctx).write_lock:
        return operations.reorder_node(
            _ctx(ctx).store,
            map_ref=map_ref,
            node_id=node_id,
            direction=direction,  # type: ignore[arg-type]
        )


@mcp_server.tool()
async def mindmap_add_comment_tool(
    ctx: Context,
    map_ref: str,
    node_id: str,
    content: str,
) -> dict[str, Any]:
    """Attach a sticky note to a topic."""
    async with _ctx(ctx).write_lock:
        return operations.add_comment(
            _ctx(ctx).store, map_ref=map_ref, node_id=node_id, content=content
        )


@mcp_server.tool()
async def mindmap_edit_comment_tool(
    ctx: Context,
    map_ref: str,
    node_id: str,
    comment_id: str,
    content: str,
) -> dict[str, Any]:
    """Replace the text of a sticky note."""
    async with _ctx(ctx).write_lock:
        return operations.edit_comment(
            _ctx(ctx).store,
            map_ref=map_ref,
            node_id=node_id,
            comment_id=comment_id,
            content=content,
        )


@mcp_server.tool()
async def mindmap_delete_comment_tool(
    ctx: Context,
    map_ref: str,
    node_id: str,
    comment_id: str,
) -> dict[str, Any]:
    """Remove a sticky note from a topic."""
    async with _ctx(ctx).write_lock:
        return operations.delete_comment(
            _ctx(ctx).store, map_ref=map_ref, node_id=node_id, comment_id=comment_id
        )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from mindmap_editor.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
