"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from housectl.output.console import create_console, get_output, style_for_role

if TYPE_CHECKING:
    from rich.console import Console

    from housectl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    if "member" in result.data:
        return "yes" if result.data["member"] else "no"

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    if isinstance(item, dict):
        for key in ("id", "house_id", "user_id"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="house.ok")
    op = Text(f"  {result.op}", style="house.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="house.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="house.id")
    elif key == "name":
        v = Text(str(value), style="house.name")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    if span_data.get("annotations"):
        extras = [f"{ak}={av}" for ak, av in span_data["annotations"].items()]
        line += f"  ({', '.join(extras)})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _ledger_table(entries: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="house.id", no_wrap=True)
    table.add_column("Membership", justify="right")
    table.add_column("Kind")
    table.add_column("Value", justify="right")
    table.add_column("By", justify="right")
    table.add_column("Created", style="dim")
    for e in entries:
        table.add_row(
            str(e.get("id", "")),
            str(e.get("membership_id", "")),
            str(e.get("kind", "")),
            str(e.get("value", "")),
            str(e.get("performed_by_user_id", "")),
            str(e.get("created_at", "")),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="house.error")
    op = Text(f"  {result.op}", style="house.op")
    code = Text(f" [{err.code}]" if err else "", style="dim")
    console.print(label, op, code, Text(" — "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/assign/remove/update/register results."""
    _status_line(console, result)
    d = result.data

    house = d.get("house")
    if house:
        _field(console, "house_id", house["id"])
        _field(console, "name", house["name"])
        if house.get("image"):
            _field(console, "image", house["image"])

    user = d.get("user")
    if user:
        _field(console, "user_id", user["id"])
        _field(console, "name", user["name"])
        _field(console, "email", user["email"])

    membership = d.get("membership")
    if membership:
        if not house:
            _field(console, "house_id", membership["house_id"])
        _field(console, "user_id", membership["user_id"])
        _field(console, "role", membership["role"])
        _field(console, "activation", membership["activation"])

    if d.get("ledger"):
        kinds = ", ".join(f"{e['kind']}={e['value']}" for e in d["ledger"])
        _field(console, "ledger", kinds)
    if "fields_changed" in d:
        _field(console, "fields_changed", ", ".join(d["fields_changed"]))
    if verbose:
        _render_meta(console, result)


# ── Query renderers ───────────────────────────────────────────────────


def _render_house(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a single house as a panel."""
    house = result.data["house"]
    lines = [house["description"], ""]
    lines.append(f"members: {result.data.get('member_count', '?')}")
    if house.get("image"):
        lines.append(f"image: {house['image']}")
    lines.append(f"created: {house['created_at']} by user {house['created_by']}")
    if verbose:
        lines.append(f"updated: {house['updated_at']} by user {house['updated_by']}")

    title = f"{house['id']} — {house['name']}"
    console.print(Panel("\n".join(lines), title=title, border_style="dim", expand=False))


def _render_user(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    user = result.data["user"]
    _field(console, "user_id", user["id"])
    _field(console, "name", user["name"])
    _field(console, "email", user["email"])
    _field(console, "houses", result.data.get("house_count", 0))
    if verbose:
        _field(console, "created_at", user["created_at"])


def _render_house_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_houses and houses_for_user results."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="house.id", no_wrap=True)
    table.add_column("Name", style="house.name")
    mine = result.op == "houses_for_user"
    if mine:
        table.add_column("Role", justify="right")
        table.add_column("Since", style="dim")
    else:
        table.add_column("Description")

    for item in items:
        if mine:
            table.add_row(
                str(item["house_id"]),
                item["name"],
                Text(str(item["role"]), style=style_for_role(item["role"])),
                str(item["since"]),
            )
        else:
            table.add_row(str(item["id"]), item["name"], item["description"])

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} houses")


def _render_members(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    house = result.data["house"]
    items = result.data.get("items", [])
    table = Table(
        title=f"{house['name']} (house {house['id']})",
        show_header=True,
        show_lines=False,
        pad_edge=False,
        expand=False,
    )
    table.add_column("User", style="house.id", no_wrap=True)
    table.add_column("Name", style="house.name")
    table.add_column("Email")
    table.add_column("Role", justify="right")
    if verbose:
        table.add_column("Activation", justify="right")
        table.add_column("Since", style="dim")

    for item in items:
        row: list[Any] = [
            str(item["user_id"]),
            item["name"],
            item["email"],
            Text(str(item["role"]), style=style_for_role(item["role"])),
        ]
        if verbose:
            row.extend([str(item["activation"]), str(item["since"])])
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} members")


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if d["member"]:
        console.print(
            Text("MEMBER", style="house.ok"),
            f"  user {d['user_id']} belongs to house {d['house_id']}",
        )
    else:
        console.print(
            Text("NOT A MEMBER", style="house.warning"),
            f"  user {d['user_id']} does not belong to house {d['house_id']}",
        )


def _render_ledger(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    state = "active" if d["active"] else "inactive"
    console.print(
        Text(f"house {d['house_id']} / user {d['user_id']}", style="house.name"),
        Text(f"  ({state}, {len(d['memberships'])} activations)", style="dim"),
    )
    console.print(_ledger_table(d.get("entries", [])))


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render upgrade/migration results."""
    _status_line(console, result)
    d = result.data
    for key in ("applied_count", "pending_count", "current", "head", "backup_path", "message"):
        if key in d:
            _field(console, key, d[key])
    if verbose and d.get("pending"):
        console.print()
        for p in d["pending"]:
            console.print(f"  {p['revision']}: {p['description']}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Mutations
    "create_house": _render_mutation,
    "assign_user": _render_mutation,
    "remove_user": _render_mutation,
    "update_house": _render_mutation,
    "register_user": _render_mutation,
    # Queries
    "get_house": _render_house,
    "get_user": _render_user,
    "list_houses": _render_house_table,
    "houses_for_user": _render_house_table,
    "list_members": _render_members,
    "user_belongs_to_house": _render_check,
    "ledger_for": _render_ledger,
    # Upgrade
    "upgrade": _render_upgrade,
}
