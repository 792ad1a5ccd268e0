"""Notifications toolset."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from ..errors import user_input_error
from ..params import optional_pagination_params, optional_param, optional_param_with_default, required_param
from ..runtime import Runtime
from ..schema import boolean_prop, string_prop, with_pagination
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import define_tool, format_timestamp, parse_rfc3339, query


def _thread_path(thread_id: str) -> str:
    return f"/notifications/threads/{quote(thread_id, safe='')}"


async def _tool_get_notifications(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    all_ = optional_param_with_default(arguments, "all", bool, False)
    participating = optional_param_with_default(arguments, "participating", bool, False)
    since = optional_param(arguments, "since", str)
    before = optional_param(arguments, "before", str)
    pagination = optional_pagination_params(arguments)

    since_value = format_timestamp(parse_rfc3339("since", since)) if since else None
    before_value = format_timestamp(parse_rfc3339("before", before)) if before else None

    params = {
        "all": "true" if all_ else "false",
        "participating": "true" if participating else "false",
        **query({"since": since_value, "before": before_value}),
        **pagination.to_query(),
    }
    data = await runtime.github.request_json(
        method="GET",
        path="/notifications",
        params=params,
        action="get notifications",
        budget=runtime.budget(),
    )
    return {"notifications": data}


async def _tool_get_notification_thread(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    thread_id = required_param(arguments, "threadID", str)

    data = await runtime.github.request_json(
        method="GET",
        path=_thread_path(thread_id),
        action="get notification thread",
        budget=runtime.budget(),
    )
    return {"thread": data}


async def _tool_mark_notification_read(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    thread_id = required_param(arguments, "threadID", str)

    await runtime.github.request_json(
        method="PATCH",
        path=_thread_path(thread_id),
        action="mark notification as read",
        budget=runtime.budget(),
    )
    return {"message": "Notification marked as read"}


async def _tool_mark_all_notifications_read(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    last_read_at = optional_param(arguments, "lastReadAt", str)

    if last_read_at:
        read_at = parse_rfc3339("lastReadAt", last_read_at)
    else:
        read_at = datetime.now(timezone.utc)

    await runtime.github.request_json(
        method="PUT",
        path="/notifications",
        json_body={"last_read_at": format_timestamp(read_at)},
        action="mark all notifications as read",
        budget=runtime.budget(),
    )
    return {"message": "All notifications marked as read"}


async def _tool_mark_notification_done(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    thread_id = required_param(arguments, "threadID", str)
    if not thread_id.isdigit():
        raise user_input_error("Invalid threadID: must be a numeric value")

    await runtime.github.request_json(
        method="DELETE",
        path=_thread_path(str(int(thread_id))),
        action="mark notification as done",
        budget=runtime.budget(),
    )
    return {"message": "Notification marked as done"}


def notifications_toolset(t: TranslateFunc) -> Toolset:
    thread_props = {"threadID": string_prop("The ID of the notification thread")}
    return (
        Toolset("notifications", "GitHub Notifications related tools")
        .add_read_tools(
            define_tool(
                t,
                name="get_notifications",
                title="List notifications",
                description="Get notifications for the authenticated GitHub user.",
                properties=with_pagination(
                    {
                        "all": boolean_prop("If true, show notifications marked as read. Default: false"),
                        "participating": boolean_prop(
                            "If true, only shows notifications in which the user is directly participating "
                            "or mentioned. Default: false"
                        ),
                        "since": string_prop("Only show notifications updated after the given time (ISO 8601 format)"),
                        "before": string_prop(
                            "Only show notifications updated before the given time (ISO 8601 format)"
                        ),
                    }
                ),
                read_only=True,
                handler=_tool_get_notifications,
            ),
            define_tool(
                t,
                name="get_notification_thread",
                title="Get notification thread",
                description="Get a specific notification thread.",
                properties=thread_props,
                required=["threadID"],
                read_only=True,
                handler=_tool_get_notification_thread,
            ),
        )
        .add_write_tools(
            define_tool(
                t,
                name="mark_notification_read",
                title="Mark notification as read",
                description="Mark a notification as read.",
                properties=thread_props,
                required=["threadID"],
                read_only=False,
                handler=_tool_mark_notification_read,
            ),
            define_tool(
                t,
                name="mark_all_notifications_read",
                title="Mark all notifications as read",
                description="Mark all notifications as read.",
                properties={
                    "lastReadAt": string_prop(
                        "Describes the last point that notifications were checked (optional). Default: Now"
                    ),
                },
                read_only=False,
                handler=_tool_mark_all_notifications_read,
            ),
            define_tool(
                t,
                name="mark_notification_done",
                title="Mark notification as done",
                description="Mark a notification as done.",
                properties=thread_props,
                required=["threadID"],
                read_only=False,
                handler=_tool_mark_notification_done,
            ),
        )
    )
