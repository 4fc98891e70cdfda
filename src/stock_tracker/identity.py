"""Scannable code identity: payload encoding, lookup and code rendering."""

import io
import json
import logging
from pathlib import Path

import qrcode

from .item_store import ItemStore
from .models import InventoryItem

logger = logging.getLogger(__name__)

# Structured records from earlier labels can be longer than an id.
MAX_PAYLOAD_LENGTH = 4096

_FNV_OFFSET_BASIS = 2166136261
_MASK_32 = 0xFFFFFFFF


def encode_identity(item: InventoryItem) -> str:
    """Payload to embed in a generated code for this item.

    Only the opaque id is encoded, so a printed label reveals nothing else
    about the item.
    """
    return item.id


def hash_identity(item_id: str) -> str:
    """Hashed form of an id used by earlier printed labels.

    A 32-bit FNV-1a variant over UTF-16 code units, as lowercase hex.
    """
    h = _FNV_OFFSET_BASIS
    data = item_id.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h + (h << 1) + (h << 4) + (h << 7) + (h << 8) + (h << 24)) & _MASK_32
    return format(h, "x")


def _structured_id(payload: str) -> str | None:
    """Pull the id out of a JSON record payload such as {"id", "name", "type"}."""
    if not payload.startswith("{"):
        return None
    try:
        record = json.loads(payload)
    except ValueError:
        return None
    if isinstance(record, dict):
        item_id = record.get("id")
        if isinstance(item_id, str) and item_id:
            return item_id
    return None


def resolve_identity(payload: object, store: ItemStore) -> InventoryItem | None:
    """Look up the item a scanned payload refers to.

    An exact id match always wins, so every payload from encode_identity
    resolves to its own item whatever characters the id contains. After
    that, tries a structured JSON record, then the stripped payload as an
    id, then the hashed id format of earlier labels. Never modifies the
    store.

    Args:
        payload: Decoded text from a scanned code
        store: Item store to search

    Returns:
        The matching item, or None when nothing matches or the payload is
        malformed
    """
    if not isinstance(payload, str) or not payload or len(payload) > MAX_PAYLOAD_LENGTH:
        return None

    item = store.get_by_id(payload)
    if item is not None:
        return item

    text = payload.strip()
    if not text:
        return None

    item_id = _structured_id(text)
    if item_id is not None:
        item = store.get_by_id(item_id)
        if item is not None:
            return item

    if text != payload:
        item = store.get_by_id(text)
        if item is not None:
            return item

    lowered = text.lower()
    for candidate in store.list():
        if hash_identity(candidate.id) == lowered:
            return candidate

    logger.debug("No item matches scanned payload %r", text[:64])
    return None


def render_identity_code(item: InventoryItem, path: Path | None = None) -> str | None:
    """Render the item's identity payload as a QR code.

    Args:
        item: Item to label
        path: Where to write a PNG image. When omitted, the code is
              returned as terminal text instead

    Returns:
        The text rendering when no path is given, else None
    """
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(encode_identity(item))
    qr.make(fit=True)

    if path is None:
        buffer = io.StringIO()
        qr.print_ascii(out=buffer)
        return buffer.getvalue()

    path.parent.mkdir(parents=True, exist_ok=True)
    image = qr.make_image(fill_color="black", back_color="white")
    image.save(str(path))
    logger.info("Wrote code for item %s to %s", item.id, path)
    return None
