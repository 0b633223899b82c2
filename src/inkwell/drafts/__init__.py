"""Draft domain — snapshot model, serialization contract, store, and autosave."""

from inkwell.drafts.autosave import DraftAutosaver
from inkwell.drafts.codec import decode_form, encode_form
from inkwell.drafts.models import Draft
from inkwell.drafts.store import DraftStore

__all__ = [
    "Draft",
    "DraftAutosaver",
    "DraftStore",
    "decode_form",
    "encode_form",
]
