"""
Turkish user-facing messages.

Every string the bot sends on its own (re-asks, validation feedback,
classification acknowledgements) lives here, keyed by :class:`MessageCode`.
Vocabulary lists are interpolated from :mod:`sarkibot.nlu.vocabulary` so a
new genre shows up in every prompt at once.

Usage::

    from sarkibot.i18n.messages import tr, MessageCode

    msg = tr(MessageCode.STORY_TOO_LONG, length=950, limit=900)
"""

from __future__ import annotations

import logging
from enum import Enum, unique
from typing import Any, Dict, Optional

from sarkibot.nlu.limits import COMBINED_MAX_CHARS, NOTES_MAX_CHARS, STORY_MAX_CHARS
from sarkibot.nlu.types import PartialOrderState, Slot, Vocal
from sarkibot.nlu.vocabulary import GENRES, MOODS, VOCAL_OPTIONS, join_options

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────
# Message Codes
# ─────────────────────────────────────────────────────────────────


@unique
class MessageCode(str, Enum):
    """Keys for every bot-authored message."""

    # ── Questions / re-asks ───────────────────────────────────
    ASK_SONG_TYPE = "ask_song_type"
    ASK_SONG_STYLE = "ask_song_style"
    ASK_VOCAL = "ask_vocal"
    ASK_SONG_SETTINGS = "ask_song_settings"
    ASK_RECIPIENT_RELATION = "ask_recipient_relation"
    ASK_INCLUDE_NAME = "ask_include_name"
    ASK_RECIPIENT_NAME = "ask_recipient_name"
    ASK_RECIPIENT_INFO = "ask_recipient_info"
    ASK_STORY = "ask_story"
    ASK_NOTES = "ask_notes"
    ASK_STORY_AND_NOTES = "ask_story_and_notes"
    ASK_CONFIRMATION = "ask_confirmation"
    ASK_LYRICS_REVIEW = "ask_lyrics_review"

    # ── Re-ask prefix ─────────────────────────────────────────
    DID_NOT_UNDERSTAND = "did_not_understand"

    # ── Validation ────────────────────────────────────────────
    STORY_TOO_LONG = "story_too_long"
    STORY_TOO_SHORT = "story_too_short"
    COMBINED_TOO_LONG = "combined_too_long"
    NOTES_TOO_LONG = "notes_too_long"

    # ── Acknowledgements ──────────────────────────────────────
    STORY_ACCEPTED = "story_accepted"
    NOTES_ACCEPTED = "notes_accepted"
    NOTES_SKIPPED = "notes_skipped"
    INCLUDE_NAME_YES = "include_name_yes"
    INCLUDE_NAME_NO = "include_name_no"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_CANCELLED = "order_cancelled"
    LYRICS_APPROVED = "lyrics_approved"
    LYRICS_REVISING = "lyrics_revising"

    # ── Generic ───────────────────────────────────────────────
    UNKNOWN = "unknown"


_GENRES = join_options(GENRES)
_MOODS = join_options(MOODS)
_VOCALS = join_options(VOCAL_OPTIONS)


# ─────────────────────────────────────────────────────────────────
# Turkish Message Registry
# ─────────────────────────────────────────────────────────────────

_MESSAGES_TR: Dict[str, str] = {
    MessageCode.ASK_SONG_TYPE:
        "Hangi türde bir şarkı istersiniz? 🎵\n\n"
        f"{_GENRES} türlerinden birini seçebilirsiniz. "
        "İstediğiniz türü yazmanız yeterli!",
    MessageCode.ASK_SONG_STYLE:
        "Hangi tarzı tercih edersiniz? 😊\n\n"
        f"{_MOODS} tarzlarından birini seçebilirsiniz!",
    MessageCode.ASK_VOCAL:
        "Şarkıyı hangi seste dinlemek istersiniz? 🎤\n\n"
        f"{_VOCALS} diyebilirsiniz!",
    MessageCode.ASK_SONG_SETTINGS:
        "Şarkınızı özelleştirelim! Eksik bilgiler:\n\n{missing}\n"
        'Örnek: "Arabesk Rock, Eğlenceli"',
    MessageCode.ASK_RECIPIENT_RELATION:
        "Bu şarkı kim ya da ne için? 💝\n\n"
        "Örneğin: Annem, Sevgilim, En yakın arkadaşım, kafemiz ya da memleketim...",
    MessageCode.ASK_INCLUDE_NAME:
        "Şarkıda hediye edeceğiniz kişinin ismi geçsin mi? 😊\n\n"
        "Evet veya Hayır yazabilirsiniz!",
    MessageCode.ASK_RECIPIENT_NAME:
        "Hediye edeceğiniz kişinin adı nedir? 😊\n\nİsmini yazabilirsiniz:",
    MessageCode.ASK_RECIPIENT_INFO:
        "Hediye bilgileri:\n\n{missing}\n"
        'Örnek: "Annem, Evet, Ayşe"',
    MessageCode.ASK_STORY:
        "📖 Şimdi sıra hikayenizde!\n\n"
        "Şarkıda geçmesini istediğiniz duyguları, anıları, hikayenizi yazın... "
        "Ne kadar samimi olursanız, şarkı o kadar özel olacak! 💝\n\n"
        "(En az birkaç cümle yazın, maksimum {story_max} karakter)",
    MessageCode.ASK_NOTES:
        "📝 Son bir soru: Ek notlarınız var mı?\n\n"
        "Şarkı ile ilgili özellikle belirtmek istediğiniz bir şey varsa yazabilirsiniz. "
        "(Maksimum {notes_max} karakter)\n\n"
        'Yoksa "hayır" veya "yok" yazabilirsiniz.',
    MessageCode.ASK_STORY_AND_NOTES:
        "📖 Hikayenizi ve varsa özel isteklerinizi yazın! 💝\n\n"
        'Notlarınızı "Not:" diye ayırabilirsiniz. '
        "(En az birkaç cümle, toplam en fazla {combined_max} karakter)",
    MessageCode.ASK_CONFIRMATION:
        "{summary}\n\nSiparişi onaylıyor musunuz? 😊\n\n"
        '"Evet" veya "Hayır" yazabilirsiniz.',
    MessageCode.ASK_LYRICS_REVIEW:
        "Şarkı sözlerini onaylıyor musunuz yoksa değişiklik mi istiyorsunuz? ✍️\n\n"
        "1️⃣ Onayla\n"
        "2️⃣ Değişiklik İstiyorum (ne değiştirmek istediğinizi yazın)",

    MessageCode.DID_NOT_UNDERSTAND:
        "Kusura bakmayın, tam anlayamadım 😊",

    MessageCode.STORY_TOO_LONG:
        "Hikayeniz çok uzun oldu 😊\n\n"
        "Lütfen {limit} karakteri geçmeyecek şekilde özetleyebilir misiniz? "
        "Şu anda {length} karakter.",
    MessageCode.STORY_TOO_SHORT:
        "Biraz daha detay verebilir misiniz? 😊\n\n"
        "Şarkının özel olması için duygularınızı, anılarınızı paylaşın. "
        "En az {limit} karakter yazmanız yeterli!",
    MessageCode.COMBINED_TOO_LONG:
        "Mesajınız biraz uzun oldu ({length} karakter) 😊 "
        "Lütfen {limit} karakter altında yazabilir misiniz?",
    MessageCode.NOTES_TOO_LONG:
        "Notunuz biraz uzun oldu 😊 Lütfen {limit} karakter içinde yazabilir misiniz? "
        "Şu anda {length} karakter.",

    MessageCode.STORY_ACCEPTED:
        "✅ Teşekkürler! Hikayenizi aldık 💝",
    MessageCode.NOTES_ACCEPTED:
        "✅ Notunuz alındı! Teşekkürler.",
    MessageCode.NOTES_SKIPPED:
        "✅ Tamam, ek not yok.",
    MessageCode.INCLUDE_NAME_YES:
        "Harika! İsmi şarkıya ekleyeceğiz 💝",
    MessageCode.INCLUDE_NAME_NO:
        "Tamam, şarkıda isim geçmeyecek 😊",
    MessageCode.ORDER_CONFIRMED:
        "✅ Harika! Siparişinizi oluşturuyoruz...",
    MessageCode.ORDER_CANCELLED:
        'Siparişiniz iptal edildi. Yeni sipariş için "merhaba" yazabilirsiniz 😊',
    MessageCode.LYRICS_APPROVED:
        "✅ Şarkı sözleri onaylandı! Devam ediyoruz...",
    MessageCode.LYRICS_REVISING:
        "✏️ Anladım! Şarkı sözlerini düzenliyoruz...",

    MessageCode.UNKNOWN:
        "Kusura bakmayın, bir şeyler ters gitti 😊 Son mesajınızı tekrar yazabilir misiniz?",
}

_FALLBACK_TR = _MESSAGES_TR[MessageCode.UNKNOWN]

_LIMIT_DEFAULTS: Dict[str, int] = {
    "story_max": STORY_MAX_CHARS,
    "notes_max": NOTES_MAX_CHARS,
    "combined_max": COMBINED_MAX_CHARS,
}

_SLOT_LABELS: Dict[Slot, str] = {
    Slot.SONG_TYPE: "Tür",
    Slot.ARTIST_STYLE: "Müzikal tarz",
    Slot.SONG_STYLE: "Tarz",
    Slot.VOCAL: "Vokal",
    Slot.RECIPIENT_RELATION: "Kimin için",
    Slot.RECIPIENT_NAME: "İsim",
    Slot.INCLUDE_NAME: "İsim geçsin mi",
    Slot.STORY: "Hikaye",
    Slot.NOTES: "Notlar",
    Slot.CONFIRMED: "Onay",
    Slot.LYRICS_REVIEW: "Söz incelemesi",
}

_MISSING_LINES: Dict[Slot, str] = {
    Slot.SONG_TYPE: f"🎵 Tür: {', '.join(GENRES)}",
    Slot.SONG_STYLE: f"🎭 Tarz: {', '.join(MOODS)}",
    Slot.VOCAL: f"🎤 Vokal: {', '.join(VOCAL_OPTIONS)}",
    Slot.RECIPIENT_RELATION: "💝 Bu şarkı kim ya da ne için? (Annem, Sevgilim, kafemiz, vb.)",
    Slot.INCLUDE_NAME: "📝 Şarkıda ismi geçsin mi? (Evet/Hayır)",
    Slot.RECIPIENT_NAME: "✏️ İsmi nedir? (Geçecekse)",
}


# ─────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────


def tr(code: str | MessageCode, **kwargs: Any) -> str:
    """Get the Turkish message for ``code``, formatted with ``kwargs``."""
    key = code.value if isinstance(code, MessageCode) else str(code)

    template: Optional[str] = None
    if isinstance(code, MessageCode):
        template = _MESSAGES_TR.get(code)
    if template is None:
        for mc, msg in _MESSAGES_TR.items():
            if mc.value == key:
                template = msg
                break

    if template is None:
        logger.warning("No Turkish message for code: %s", key)
        template = _FALLBACK_TR

    params = dict(_LIMIT_DEFAULTS)
    params.update(kwargs)
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template


def slot_label(slot: Slot) -> str:
    return _SLOT_LABELS.get(slot, slot.value)


def missing_lines(slots: tuple[Slot, ...]) -> str:
    """One line per missing slot, vocabulary spelled out."""
    return "\n".join(_MISSING_LINES[s] for s in slots if s in _MISSING_LINES)


def display_value(value: Any) -> str:
    """Render a stored slot value for the user."""
    if isinstance(value, Vocal):
        return value.label
    if value is True:
        return "Evet"
    if value is False:
        return "Hayır"
    if value == "":
        return "Yok"
    return str(value)


def summarize_order(state: PartialOrderState) -> str:
    """Order summary shown before confirmation."""
    lines = ["📋 Sipariş özeti:"]
    for slot in (
        Slot.SONG_TYPE,
        Slot.SONG_STYLE,
        Slot.VOCAL,
        Slot.RECIPIENT_RELATION,
        Slot.RECIPIENT_NAME,
        Slot.STORY,
        Slot.NOTES,
    ):
        if not state.is_set(slot):
            continue
        text = display_value(state.get(slot))
        if slot == Slot.STORY and len(text) > 80:
            text = text[:77] + "..."
        lines.append(f"• {slot_label(slot)}: {text}")
    return "\n".join(lines)
