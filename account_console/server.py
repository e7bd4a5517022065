"""
Account Console MCP Server.

Exposes the client account page over stdio: view the profile, edit personal
information, manage saved payment methods, upload a profile photo, and sign out.
Every response carries the notifications the action produced.
"""
import asyncio
import json
import logging
import os
from datetime import datetime
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .auth import SessionManager
from .console import AccountConsole
from .gateway import MemoryGateway, PhotoFile, SessionContext
from .gateway.http import get_gateway
from .notifications import MemoryNotificationSink
from .output_sanitizer import redact_email, sanitize_output
from .profile.schema import PaymentMethod, Profile

logger = logging.getLogger(__name__)

# Debug log — records every tool call and response for session review
_DEBUG_LOG_DIR = Path(os.environ.get(
    "ACCOUNT_DEBUG_DIR",
    os.path.expanduser("~/.config/account-console/debug"),
))

DEMO_USER_ID = "demo-client"

_DEMO_RECORD = {
    "id": DEMO_USER_ID,
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "415-555-0100",
    "bio": "",
    "photo": None,
    "paymentMethods": [
        {"id": "pm_demo_1", "brand": "visa", "last4": "4242", "expMonth": 12, "expYear": 2030, "isDefault": True},
    ],
}


def _debug_log(tool_name: str, args: dict, result: str) -> None:
    """Append a tool call entry to the debug log file."""
    try:
        _DEBUG_LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = _DEBUG_LOG_DIR / f"session_{datetime.now().strftime('%Y-%m-%d')}.log"
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        entry = (
            f"\n{'='*80}\n"
            f"[{timestamp}] TOOL: {tool_name}\n"
            f"ARGS: {sanitize_output(json.dumps(args, indent=2))}\n"
            f"RESPONSE:\n{result}\n"
        )

        with open(log_file, "a") as f:
            f.write(entry)
    except OSError as e:
        logger.debug("Debug log write failed: %s", e)

server = Server("account-console")

# Lazy-initialized singletons
_session_manager: SessionManager | None = None
_console: AccountConsole | None = None


def _get_session_manager() -> SessionManager:
    global _session_manager
    if _session_manager is None:
        _session_manager = SessionManager()
    return _session_manager


def _session_from_env() -> SessionContext | None:
    user_id = os.environ.get("ACCOUNT_USER_ID")
    if not user_id:
        return None
    return SessionContext(
        user_id=user_id,
        access_token=os.environ.get("ACCOUNT_ACCESS_TOKEN") or None,
        email=os.environ.get("ACCOUNT_EMAIL") or None,
    )


def _get_console() -> AccountConsole:
    global _console
    if _console is None:
        if os.environ.get("ACCOUNT_API_BASE"):
            gateway = get_gateway()
            session = _session_from_env()
            sessions = _get_session_manager()
            if session is not None:
                sessions.save(session)
            else:
                session = sessions.load()
        else:
            logger.info("ACCOUNT_API_BASE not set, using in-memory demo account")
            gateway = MemoryGateway({DEMO_USER_ID: _DEMO_RECORD})
            session = SessionContext(user_id=DEMO_USER_ID, email=_DEMO_RECORD["email"])
        _console = AccountConsole(gateway, session, MemoryNotificationSink())
    return _console


async def _loaded_console() -> AccountConsole:
    console = _get_console()
    if not console.store.loaded:
        await console.load()
    return console


def _mask_phone(phone: str) -> str:
    digits = [c for c in phone if c.isdigit()]
    if len(digits) < 4:
        return phone
    return "***-" + "".join(digits[-4:])


def _profile_summary(profile: Profile) -> dict:
    """Profile view safe to return to the host — contact fields partially hidden."""
    return {
        "id": profile.id,
        "name": profile.display_name,
        "email": redact_email(profile.email),
        "phone": _mask_phone(profile.phone),
        "bio": profile.bio,
        "photo_url": profile.photo_url,
        "payment_methods": [
            {
                "id": m.id,
                "brand": m.brand.upper(),
                "last_four": m.last4,
                "expires": f"{m.exp_month:02d}/{m.exp_year}",
                "default": m.is_default,
            }
            for m in profile.payment_methods
        ],
    }


def _respond(console: AccountConsole, status: str, **extra) -> dict:
    result = {"status": status, "mode": console.editor.mode.value, **extra}
    sink = console.sink
    if isinstance(sink, MemoryNotificationSink):
        result["notifications"] = [n.model_dump() for n in sink.drain()]
    if console.store.loaded:
        result.setdefault("profile", _profile_summary(console.store.snapshot))
    return result


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

def _method_id_schema(description: str) -> dict:
    return {
        "type": "object",
        "properties": {
            "method_id": {"type": "string", "description": description},
        },
        "required": ["method_id"],
    }


@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="view_profile",
            description=(
                "Show the signed-in client's account: name, contact details (partially hidden), "
                "bio, photo, and saved payment methods. Use refresh=true to reload from the server."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "refresh": {
                        "type": "boolean",
                        "description": "Reload the profile from the server first",
                        "default": False,
                    },
                },
                "required": [],
            },
        ),
        Tool(
            name="begin_edit",
            description="Start editing personal information. Changes stay in a draft until save_profile.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="update_profile_field",
            description="Change one field of the draft. Only valid while editing.",
            inputSchema={
                "type": "object",
                "properties": {
                    "field": {
                        "type": "string",
                        "enum": ["first_name", "last_name", "email", "phone", "bio"],
                        "description": "Draft field to change",
                    },
                    "value": {
                        "type": "string",
                        "description": "New value",
                    },
                },
                "required": ["field", "value"],
            },
        ),
        Tool(
            name="cancel_edit",
            description="Discard the draft and return to viewing. Nothing is sent to the server.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="save_profile",
            description=(
                "Save the draft. On success the profile is updated; on failure the draft is kept "
                "so it can be corrected and saved again."
            ),
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="add_payment_method",
            description=(
                "Save a card that was already tokenized by the payment provider. "
                "Only the token id, brand, last 4 digits and expiry are accepted, never a full card number."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": "Payment provider's payment method id"},
                    "brand": {"type": "string", "description": "Card brand (visa, mastercard, amex, ...)"},
                    "last4": {"type": "string", "description": "Last 4 digits of the card"},
                    "exp_month": {"type": "integer", "description": "Expiry month (1-12)"},
                    "exp_year": {"type": "integer", "description": "Expiry year (4 digits)"},
                    "is_default": {
                        "type": "boolean",
                        "description": "Make this the default card",
                        "default": False,
                    },
                },
                "required": ["id", "brand", "last4", "exp_month", "exp_year"],
            },
        ),
        Tool(
            name="set_default_payment_method",
            description="Make a saved card the default for checkout.",
            inputSchema=_method_id_schema("Id of the saved payment method"),
        ),
        Tool(
            name="remove_payment_method",
            description="Remove a saved card. Removing the default card leaves no default.",
            inputSchema=_method_id_schema("Id of the saved payment method"),
        ),
        Tool(
            name="upload_photo",
            description="Upload a new profile photo from a local image file (max 5MB).",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Path to the image file"},
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="logout",
            description="Sign out of the account and forget the saved session.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
    ]


# ---------------------------------------------------------------------------
# Tool dispatch
# ---------------------------------------------------------------------------

@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    try:
        if name == "view_profile":
            result = await _handle_view_profile(arguments)
        elif name == "begin_edit":
            result = await _handle_begin_edit(arguments)
        elif name == "update_profile_field":
            result = await _handle_update_profile_field(arguments)
        elif name == "cancel_edit":
            result = await _handle_cancel_edit(arguments)
        elif name == "save_profile":
            result = await _handle_save_profile(arguments)
        elif name == "add_payment_method":
            result = await _handle_add_payment_method(arguments)
        elif name == "set_default_payment_method":
            result = await _handle_set_default_payment_method(arguments)
        elif name == "remove_payment_method":
            result = await _handle_remove_payment_method(arguments)
        elif name == "upload_photo":
            result = await _handle_upload_photo(arguments)
        elif name == "logout":
            result = await _handle_logout(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

        sanitized = sanitize_output(json.dumps(result, indent=2))

        _debug_log(name, arguments, sanitized)
        return [TextContent(type="text", text=sanitized)]

    except Exception as e:
        logger.exception("Tool %s failed", name)
        error_text = sanitize_output(f"Error: {str(e)}")
        _debug_log(name, arguments, error_text)
        return [TextContent(type="text", text=error_text)]


# ---------------------------------------------------------------------------
# Tool implementations
# ---------------------------------------------------------------------------

async def _handle_view_profile(args: dict) -> dict:
    """Show the profile, loading it on first use."""
    console = _get_console()
    if args.get("refresh") or not console.store.loaded:
        await console.load()
    result = _respond(console, "ok")
    if _session_manager is not None and _session_manager.exists():
        result["session"] = _session_manager.get_redacted_summary()
    return result


def _draft_summary(console: AccountConsole) -> dict | None:
    draft = console.editor.draft
    if draft is None:
        return None
    data = draft.model_dump()
    data["email"] = redact_email(data["email"])
    return data


async def _handle_begin_edit(args: dict) -> dict:
    console = await _loaded_console()
    console.editor.begin_edit()
    return _respond(console, "editing", draft=_draft_summary(console))


async def _handle_update_profile_field(args: dict) -> dict:
    console = await _loaded_console()
    console.editor.update_field(args["field"], args.get("value"))
    return _respond(console, "editing", draft=_draft_summary(console))


async def _handle_cancel_edit(args: dict) -> dict:
    console = await _loaded_console()
    console.editor.cancel()
    return _respond(console, "cancelled")


async def _handle_save_profile(args: dict) -> dict:
    console = await _loaded_console()
    saved = await console.editor.save()
    if saved:
        return _respond(console, "saved")
    return _respond(console, "not_saved", draft=_draft_summary(console))


async def _handle_add_payment_method(args: dict) -> dict:
    console = await _loaded_console()
    method = PaymentMethod(
        id=args["id"],
        brand=args["brand"],
        last4=args["last4"],
        exp_month=args["exp_month"],
        exp_year=args["exp_year"],
        is_default=args.get("is_default", False),
    )
    added = await console.payments.add(method)
    return _respond(console, "added" if added else "not_added")


async def _handle_set_default_payment_method(args: dict) -> dict:
    console = await _loaded_console()
    updated = await console.payments.set_default(args["method_id"])
    return _respond(console, "updated" if updated else "not_updated")


async def _handle_remove_payment_method(args: dict) -> dict:
    console = await _loaded_console()
    removed = await console.payments.remove(args["method_id"])
    return _respond(console, "removed" if removed else "not_removed")


async def _handle_upload_photo(args: dict) -> dict:
    console = await _loaded_console()
    path = Path(os.path.expanduser(args["path"]))
    if not path.is_file():
        return {"status": "error", "message": f"No file at {path}"}
    url = await console.upload_photo(PhotoFile.from_path(path))
    return _respond(console, "uploaded" if url else "not_uploaded")


async def _handle_logout(args: dict) -> dict:
    global _console
    console = _get_console()
    if not await console.logout():
        return _respond(console, "logout_failed")
    if _session_manager is not None or os.environ.get("ACCOUNT_API_BASE"):
        _get_session_manager().clear()
    _console = None
    await console.gateway.aclose()
    return _respond(console, "signed_out")


# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

async def main():
    """Run the MCP server over stdio."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logger.info("Account Console MCP server starting...")

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        if _console:
            await _console.gateway.aclose()


def run():
    """Sync entry point for console_scripts."""
    asyncio.run(main())
