"""View layer for formatting alert messages (plain text, HTML, Slack)."""

from __future__ import annotations

import html
import json
from typing import Any

from .models.alerts import AlertInstance

_SEVERITY_ICONS = {"critical": "🚨", "warning": "⚠️", "info": "ℹ️"}
_SLACK_COLORS = {"critical": "danger", "warning": "warning", "info": "good"}


def bold(text: str) -> str:
    return f"<b>{html.escape(str(text))}</b>"


def code(text: str) -> str:
    return f"<code>{html.escape(str(text))}</code>"


def pre(text: str) -> str:
    return f"<pre>{html.escape(str(text))}</pre>"


def chunk(msg: str, size: int = 4000) -> list[str]:
    """Split message into chunks ensuring no chunk exceeds size limit."""
    if len(msg) <= size:
        return [msg]

    lines = msg.splitlines()
    chunks: list[str] = []
    current = ""
    for line in lines:
        if len(line) > size:
            if current:
                chunks.append(current)
                current = ""
            start = 0
            while start < len(line):
                chunks.append(line[start : start + size])
                start += size
            continue
        added_length = len(line) + (1 if current else 0)
        if len(current) + added_length > size and current:
            chunks.append(current)
            current = line
        else:
            current = f"{current}\n{line}" if current else line
    if current:
        chunks.append(current)
    return chunks


def format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_context(context: dict[str, Any]) -> str:
    if not context:
        return "none"
    return ", ".join(f"{k}={v}" for k, v in sorted(context.items()))


def severity_icon(severity: str) -> str:
    return _SEVERITY_ICONS.get(severity, "🔔")


def render_console_lines(payload: dict[str, Any]) -> list[str]:
    severity = str(payload["severity"])
    lines = [
        f"{severity_icon(severity)} ALERT [{severity.upper()}]: {payload['description']}",
        f"   Type: {payload['type']}",
        f"   Value: {format_value(payload['value'])}",
        f"   Threshold: {format_value(payload['threshold'])}",
        f"   Time: {payload['timestamp']}",
    ]
    if payload.get("context"):
        lines.append(f"   Context: {format_context(payload['context'])}")
    return lines


def render_email_subject(payload: dict[str, Any], service: str = "Nebula") -> str:
    return f"[{str(payload['severity']).upper()}] {service} Alert: {payload['description']}"


def render_email_body(payload: dict[str, Any]) -> str:
    lines = [
        "Alert Details:",
        "==============",
        "",
        f"Type: {payload['type']}",
        f"Severity: {str(payload['severity']).upper()}",
        f"Description: {payload['description']}",
        "",
        "Metrics:",
        "--------",
        f"Current Value: {format_value(payload['value'])}",
        f"Threshold: {format_value(payload['threshold'])}",
        "",
        "Context:",
        "--------",
        json.dumps(payload.get("context") or {}, indent=2, sort_keys=True),
        "",
        f"Timestamp: {payload['timestamp']}",
        f"Alert ID: {payload['id']}",
    ]
    return "\n".join(lines)


def build_slack_payload(payload: dict[str, Any], channel: str | None) -> dict[str, Any]:
    severity = str(payload["severity"])
    body: dict[str, Any] = {
        "username": "Nebula Monitoring",
        "icon_emoji": ":rotating_light:" if severity == "critical" else ":warning:",
        "attachments": [
            {
                "color": _SLACK_COLORS.get(severity, "warning"),
                "title": f"Alert: {payload['description']}",
                "fields": [
                    {"title": "Type", "value": str(payload["type"]), "short": True},
                    {"title": "Severity", "value": severity.upper(), "short": True},
                    {"title": "Value", "value": format_value(payload["value"]), "short": True},
                    {
                        "title": "Threshold",
                        "value": format_value(payload["threshold"]),
                        "short": True,
                    },
                    {"title": "Time", "value": str(payload["timestamp"]), "short": False},
                ],
            }
        ],
    }
    if channel:
        body["channel"] = channel
    return body


def render_alert_html(payload: dict[str, Any]) -> str:
    severity = str(payload["severity"])
    lines = [
        f"{severity_icon(severity)} {bold(severity.upper())} {html.escape(str(payload['description']))}",
        f"{bold('Type:')} {code(payload['type'])}",
        f"{bold('Value:')} {code(format_value(payload['value']))} "
        f"(threshold {code(format_value(payload['threshold']))})",
    ]
    if payload.get("context"):
        lines.append(f"{bold('Context:')} {code(format_context(payload['context']))}")
    lines.append(f"<i>{html.escape(str(payload['timestamp']))}</i>")
    return "\n".join(lines)


def render_active_alerts(alerts: list[AlertInstance]) -> str:
    if not alerts:
        return "✅ No active alerts."
    lines = [bold(f"Active alerts ({len(alerts)}):")]
    ordered = sorted(alerts, key=lambda a: a.timestamp, reverse=True)
    for idx, alert in enumerate(ordered, start=1):
        lines.append(
            f"{idx}. {severity_icon(alert.severity)} {code(alert.type)} "
            f"value {code(format_value(alert.value))} "
            f"[{html.escape(format_context(alert.context))}] "
            f"<i>{html.escape(alert.timestamp)}</i>"
        )
    return "\n".join(lines)


def render_configuration(snapshot: dict[str, Any]) -> str:
    lines = [bold("Rules:")]
    for rule_id, rule in sorted(snapshot["rules"].items()):
        status = "on" if rule["enabled"] else "off"
        lines.append(
            f"• {code(rule_id)} {html.escape(str(rule['comparison']))} "
            f"{html.escape(format_value(rule['threshold']))} "
            f"[{html.escape(str(rule['severity']))}, "
            f"cooldown {int(rule['cooldown_ms']) // 1000}s, {status}]"
        )
    lines.append(bold("Channels:"))
    for channel_id, channel in sorted(snapshot["channels"].items()):
        status = "on" if channel["enabled"] else "off"
        severities = ", ".join(channel["severities"])
        lines.append(f"• {code(channel_id)} {status} ({html.escape(severities)})")
    lines.append(f"{bold('Active alerts:')} {snapshot['active_count']}")
    return "\n".join(lines)
