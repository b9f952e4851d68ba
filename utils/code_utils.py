"""Helpers for decoding GitHub content payloads and deriving previews."""

import base64
import binascii
from typing import Any


class ContentDecodeError(ValueError):
    """A contents payload declared an encoding we could not decode."""


def decode_content(payload: Any) -> str | None:
    """
    Decode the `content` field of a GitHub contents resource.

    Returns None when the resource carries no inline content (directories,
    files over the inline size limit, submodules). Undecodable bytes are
    replaced rather than rejected so binary files still produce text.
    """
    if not isinstance(payload, dict):
        raise ContentDecodeError("contents payload is not an object")

    content = payload.get("content")
    encoding = (payload.get("encoding") or "").lower()
    if encoding == "none" or not isinstance(content, str):
        return None

    if encoding == "base64":
        try:
            # GitHub wraps base64 at 60 columns
            raw = base64.b64decode("".join(content.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ContentDecodeError(f"invalid base64 content: {e}") from e
        return raw.decode("utf-8", errors="replace")
    if encoding in ("", "utf-8", "utf8"):
        return content

    raise ContentDecodeError(f"unsupported content encoding: {encoding}")


def language_from_path(path: str, languages: dict[str, str]) -> str:
    """Guess an editor language id from a file extension."""
    name = (path or "").rsplit("/", 1)[-1]
    if "." not in name:
        return "plaintext"
    extension = name.rsplit(".", 1)[-1].lower()
    return languages.get(extension, "plaintext")


def count_lines(text: str) -> int:
    if not text:
        return 0
    return len(text.splitlines())


def build_preview(text: str, max_lines: int) -> tuple[str, int, int]:
    """
    Return (preview, line_end, total_lines) for the first `max_lines` lines.

    `line_end` is 1-based and inclusive; an empty text yields line_end 0.
    """
    lines = text.splitlines()
    preview_lines = lines[:max_lines]
    return "\n".join(preview_lines), len(preview_lines), len(lines)


def trim_text(text: str, limit: int) -> str:
    raw = (text or "").strip()
    if len(raw) <= limit:
        return raw
    return raw[: max(0, limit - 3)].rstrip() + "..."
