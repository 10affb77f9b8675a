from __future__ import annotations

import html
import logging

from telegram.constants import ParseMode

from .. import view
from ..commands import ALERTS_USAGE
from ..models.alerts import COMPARISONS, SEVERITIES
from .common import get_state, guard

logger = logging.getLogger(__name__)

_BOOL_TRUE = {"true", "yes", "1", "on"}
_BOOL_FALSE = {"false", "no", "0", "off"}
_NUMERIC_FIELDS = {"threshold"}
_INT_FIELDS = {"cooldown_ms"}


def parse_context(tokens: list[str]) -> dict[str, str] | None:
    """Parse ``key=value`` tokens. Returns None if any token is malformed."""
    out: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or not key.strip():
            return None
        out[key.strip()] = value.strip()
    return out


def _parse_bool(text: str) -> bool | None:
    value = text.strip().lower()
    if value in _BOOL_TRUE:
        return True
    if value in _BOOL_FALSE:
        return False
    return None


def parse_rule_fields(tokens: list[str]) -> tuple[dict[str, object], str | None]:
    fields: dict[str, object] = {}
    for token in tokens:
        name, sep, raw = token.partition("=")
        name = name.strip()
        if not sep or not name:
            return {}, f"Expected field=value, got {token!r}"
        raw = raw.strip()
        if name in _NUMERIC_FIELDS or name in _INT_FIELDS:
            try:
                number = float(raw)
            except ValueError:
                return {}, f"{name} must be numeric"
            fields[name] = int(number) if name in _INT_FIELDS else number
        elif name == "enabled":
            parsed = _parse_bool(raw)
            if parsed is None:
                return {}, "enabled must be on/off"
            fields[name] = parsed
        elif name == "comparison":
            if raw not in COMPARISONS:
                return {}, f"comparison must be one of: {', '.join(COMPARISONS)}"
            fields[name] = raw
        elif name == "severity":
            if raw not in SEVERITIES:
                return {}, f"severity must be one of: {', '.join(SEVERITIES)}"
            fields[name] = raw
        elif name == "description":
            fields[name] = raw.replace("_", " ")
        else:
            return {}, f"Unknown field {name}"
    return fields, None


async def _reply(update, text: str) -> None:
    for part in view.chunk(text):
        await update.message.reply_text(part, parse_mode=ParseMode.HTML)


async def cmd_alerts(update, context) -> None:
    if not await guard(update, context):
        return
    state = get_state(context.application)
    engine = state.engine

    args = [a.strip() for a in (context.args or []) if a.strip()]
    action = args[0].lower() if args else "active"

    if action in {"active", "status", "list"}:
        await _reply(update, view.render_active_alerts(engine.list_active()))
        return

    if action == "config":
        await _reply(update, view.render_configuration(engine.configuration_snapshot()))
        return

    if action == "test":
        payload, results = await engine.test_notifications()
        lines = [f"Test notification {view.code(payload['id'])} sent:"]
        if not results:
            lines.append("No channels accept info alerts.")
        for result in results:
            status = "ok" if result.ok else f"failed ({html.escape(result.error or '')})"
            lines.append(f"• {view.code(result.channel)} {status}")
        await _reply(update, "\n".join(lines))
        return

    if action == "resolve":
        ctx = parse_context(args[2:]) if len(args) >= 2 else None
        if ctx is None:
            await _reply(update, "Usage: /alerts resolve &lt;type&gt; [key=value ...]")
            return
        resolved = engine.resolve(args[1], ctx)
        await _reply(update, "Alert resolved." if resolved else "Alert not found.")
        return

    if action == "trigger":
        ctx = parse_context(args[3:]) if len(args) >= 3 else None
        if ctx is None:
            await _reply(
                update, "Usage: /alerts trigger &lt;type&gt; &lt;value&gt; [key=value ...]"
            )
            return
        try:
            value = float(args[2])
        except ValueError:
            await _reply(update, "Value must be numeric.")
            return
        if engine.get_rule(args[1]) is None:
            await _reply(update, f"Unknown alert type {view.code(args[1])}.")
            return
        triggered = await engine.evaluate(args[1], value, ctx)
        await _reply(
            update, "Alert triggered." if triggered else "Alert condition not met."
        )
        return

    if action == "set":
        if len(args) < 3:
            await _reply(update, "Usage: /alerts set &lt;type&gt; &lt;field&gt;=&lt;value&gt; ...")
            return
        fields, error = parse_rule_fields(args[2:])
        if error:
            await _reply(update, f"Invalid update: {html.escape(error)}")
            return
        updated = engine.update_rule(args[1], fields)
        await _reply(update, "Rule updated." if updated else "Rule not found.")
        return

    if action == "channel":
        enabled = _parse_bool(args[2]) if len(args) >= 3 else None
        if enabled is None:
            await _reply(update, "Usage: /alerts channel &lt;id&gt; on|off")
            return
        if not engine.channels.set_enabled(args[1], enabled):
            await _reply(update, "Channel not found.")
            return
        await _reply(
            update, f"Channel {view.code(args[1])}: {'ON' if enabled else 'OFF'}"
        )
        return

    await _reply(update, view.pre(ALERTS_USAGE))
