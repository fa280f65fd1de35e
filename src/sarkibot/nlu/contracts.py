"""Declarative extraction contracts.

Each oracle request is described by an :class:`ExtractionContract`: the
fields to extract, their closed vocabularies, the companion slots whose
current values are shown to the oracle, worked examples, forbidden outputs
and the sampling temperature. :func:`render_prompt` turns a contract plus a
user turn plus the current state into prompt text.

Adding a genre or an example is a data change here (or in
:mod:`sarkibot.nlu.vocabulary`); merge and validation never look at prompts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

from sarkibot.nlu.schemas import (
    ExtractionPayload,
    RecipientInfoPayload,
    RecipientNamePayload,
    RecipientRelationPayload,
    SongSettingsPayload,
    SongStylePayload,
    SongTypePayload,
    StoryAndNotesPayload,
    StoryQualityPayload,
    VocalPayload,
)
from sarkibot.nlu.types import PartialOrderState, Slot, Vocal
from sarkibot.nlu.vocabulary import GENRES, MOODS, VOCAL_OPTIONS
from sarkibot.text.normalize import quote_for_prompt

DEFAULT_TEMPERATURE = 0.3
CREATIVE_TEMPERATURE = 0.5

# Forbidden inside artistStyleDescription
STYLE_FORBIDDEN: Tuple[str, ...] = (
    "female vocals",
    "male vocals",
    "style",
    "like",
    "tarzında",
    "gibi",
)


class ContractName(str, Enum):
    """Registered extraction contracts."""

    SONG_TYPE = "song_type"
    SONG_STYLE = "song_style"
    VOCAL = "vocal"
    SONG_SETTINGS = "song_settings"
    RECIPIENT_RELATION = "recipient_relation"
    RECIPIENT_NAME = "recipient_name"
    RECIPIENT_INFO = "recipient_info"
    STORY_QUALITY = "story_quality"
    STORY_AND_NOTES = "story_and_notes"


@dataclass(frozen=True)
class ContractField:
    """One JSON key the oracle must return."""

    key: str
    description: str
    slot: Optional[Slot] = None
    options: Tuple[str, ...] = ()
    kind: str = "string"  # "string" | "bool"

    def format_line(self) -> str:
        if self.kind == "bool":
            return f'  "{self.key}": true/false/null'
        return f'  "{self.key}": "{self.description}" veya null'


@dataclass(frozen=True)
class Example:
    """Worked example: user text → expected JSON (optionally a wrong one)."""

    user_text: str
    output: Dict[str, Any]
    wrong: Optional[Dict[str, Any]] = None
    note: str = ""
    current: Dict[Slot, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractionContract:
    """Data-only description of one oracle extraction request."""

    name: ContractName
    task: str
    payload_model: Type[ExtractionPayload]
    fields: Tuple[ContractField, ...] = ()
    companions: Tuple[Slot, ...] = ()
    rules: Tuple[str, ...] = ()
    examples: Tuple[Example, ...] = ()
    forbidden: Tuple[str, ...] = ()
    temperature: float = DEFAULT_TEMPERATURE

    @property
    def target_slots(self) -> Tuple[Slot, ...]:
        return tuple(f.slot for f in self.fields if f.slot is not None)

    @property
    def has_style_field(self) -> bool:
        return Slot.ARTIST_STYLE in self.target_slots


# ============================================================================
# Prompt rendering
# ============================================================================

_PROMPT_LABELS: Dict[Slot, str] = {
    Slot.SONG_TYPE: "Tür",
    Slot.ARTIST_STYLE: "Artist Style",
    Slot.SONG_STYLE: "Tarz",
    Slot.VOCAL: "Vokal",
    Slot.RECIPIENT_RELATION: "İlişki",
    Slot.INCLUDE_NAME: "İsim geçsin mi",
    Slot.RECIPIENT_NAME: "İsim",
}


def _prompt_value(value: Any) -> str:
    if value is None:
        return "YOK"
    if isinstance(value, Vocal):
        return value.label
    if value is True:
        return "Evet"
    if value is False:
        return "Hayır"
    return str(value)


def _dump(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def render_prompt(
    contract: ExtractionContract,
    message: str,
    state: Optional[PartialOrderState] = None,
) -> str:
    """Render the full oracle instruction for one turn."""
    state = state or PartialOrderState.empty()
    sections = [contract.task.format(message=quote_for_prompt(message))]

    if contract.companions:
        lines = ["MEVCUT BİLGİLER (daha önce alındı):"]
        for slot in contract.companions:
            lines.append(f"- {_PROMPT_LABELS.get(slot, slot.value)}: {_prompt_value(state.get(slot))}")
        lines.append(
            "DOLU olanları KORU. Bir alanı bilmiyorsan null yaz; null DOLU bir alanı silmez. "
            "Kullanıcı açıkça düzeltiyorsa (örn: \"kadın değil erkek olsun\") yeni değeri yaz."
        )
        sections.append("\n".join(lines))

    vocab = [
        f"{f.key.upper()} SEÇENEKLERİ: {', '.join(f.options)}"
        for f in contract.fields
        if f.options
    ]
    if vocab:
        sections.append("\n".join(vocab))

    if contract.rules:
        sections.append(
            "KURALLAR:\n" + "\n".join(f"{i}. {rule}" for i, rule in enumerate(contract.rules, 1))
        )

    if contract.examples:
        blocks = ["ÖRNEKLER:"]
        for ex in contract.examples:
            block = []
            if ex.current:
                current = ", ".join(
                    f"{_PROMPT_LABELS.get(s, s.value)}={_prompt_value(v)}" for s, v in ex.current.items()
                )
                block.append(f"(Mevcut: {current})")
            block.append(f'Girdi: "{ex.user_text}"')
            block.append(f"✅ DOĞRU:\n{_dump(ex.output)}")
            if ex.wrong is not None:
                note = f" ({ex.note})" if ex.note else ""
                block.append(f"❌ YANLIŞ{note}:\n{_dump(ex.wrong)}")
            blocks.append("\n".join(block))
        sections.append("\n---\n".join(blocks))

    if contract.forbidden:
        sections.append(
            "CEVAP VERMEDEN ÖNCE KONTROL ET - artistStyleDescription içinde:\n"
            "- Sanatçı ismi var mı? → SİL!\n"
            + "\n".join(f'- "{term}" var mı? → SİL!' for term in contract.forbidden)
            + "\n- Sadece İngilizce müzikal terimler mi var? → İYİ"
        )

    format_lines = [f.format_line() for f in contract.fields]
    format_lines.append('  "response": "Kullanıcıya gönderilecek samimi Türkçe mesaj"')
    sections.append(
        "CEVAP FORMATI:\n{\n" + ",\n".join(format_lines) + "\n}\n\n"
        "SADECE JSON DÖNDÜR! JSON dışında tek kelime bile yazma."
    )

    return "\n\n".join(sections)


# ============================================================================
# Contracts
# ============================================================================

_TYPE_FIELD = ContractField("type", "tür", Slot.SONG_TYPE, GENRES)
_STYLE_DESC_FIELD = ContractField(
    "artistStyleDescription",
    "İngilizce müzikal özellikler (isim ve vokal YOK)",
    Slot.ARTIST_STYLE,
)
_MOOD_FIELD = ContractField("style", "tarz", Slot.SONG_STYLE, MOODS)
_VOCAL_FIELD = ContractField("vocal", "vokal", Slot.VOCAL, VOCAL_OPTIONS)

_DEIDENTIFY_RULES: Tuple[str, ...] = (
    "Kullanıcı birden fazla tür yazarsa \"type\" olarak ilk türü döndür, "
    "sentezi İngilizce olarak artistStyleDescription'a yaz.",
    "Kullanıcı bir sanatçı ismi yazarsa (örn: \"Dua Lipa\", \"Tarkan tarzında\", \"Adele gibi\") "
    "o sanatçının müzikal özelliklerini İngilizce tanımla. ASLA sanatçı ismini yazma.",
    "artistStyleDescription içinde ASLA vokal cinsiyeti yazma (female/male vocals); "
    "vokal tercihi ayrıca soruluyor.",
    "Büyük harfle başlayan iki kelimelik isimler sanatçı ismidir (örn: Dua Lipa, Melike Şahin, Mabel Matiz).",
    "Listede olmayan bir tür yazılırsa kullanıcının yazdığı türü aynen döndür.",
)

SONG_TYPE_CONTRACT = ExtractionContract(
    name=ContractName.SONG_TYPE,
    task='Sen bir müzik stili çevirme uzmanısın. Kullanıcı şarkı türü seçiyor: "{message}"',
    payload_model=SongTypePayload,
    fields=(_TYPE_FIELD, _STYLE_DESC_FIELD),
    companions=(Slot.SONG_TYPE, Slot.VOCAL),
    rules=_DEIDENTIFY_RULES,
    examples=(
        Example(
            "pop arabesk",
            {
                "type": "Pop",
                "artistStyleDescription": "modern Turkish pop with arabesque influences",
                "response": "Harika! Pop-Arabesk karışımı bir şarkı hazırlayacağız ✨",
            },
        ),
        Example(
            "Melike Şahin",
            {
                "type": "Pop",
                "artistStyleDescription": "indie pop with alternative influences",
                "response": "Harika! Bu tarzda bir şarkı hazırlayacağız 🎵",
            },
            wrong={"artistStyleDescription": "indie pop with emotional female vocals"},
            note="vokal belirtme",
        ),
        Example(
            "Tarkan tarzında",
            {
                "type": "Pop",
                "artistStyleDescription": "energetic Turkish pop with dance rhythms",
                "response": "Mükemmel! Enerjik bir pop şarkısı yapacağız 🎶",
            },
            wrong={"artistStyleDescription": "Tarkan style pop with powerful male vocals"},
            note="isim ve vokal var",
        ),
        Example(
            "Pop",
            {"type": "Pop", "artistStyleDescription": None, "response": "Pop müzik seçildi! ✨"},
        ),
    ),
    forbidden=STYLE_FORBIDDEN,
)

SONG_STYLE_CONTRACT = ExtractionContract(
    name=ContractName.SONG_STYLE,
    task='Kullanıcı şarkısı için tarz seçiyor. Mesajı: "{message}"',
    payload_model=SongStylePayload,
    fields=(_MOOD_FIELD,),
    companions=(Slot.SONG_TYPE, Slot.SONG_STYLE),
    rules=(
        "\"style\" değeri mümkünse seçeneklerden TAM OLARAK biri olmalı.",
        "\"romantik bir şey\", \"romantik tarz\" → \"Romantik\"; \"coşkulu\", \"hareketli\" → \"Eğlenceli\".",
        "Anlaşılmıyorsa null döndür ve response'da seçenekleri nazikçe hatırlat.",
    ),
    examples=(
        Example("romantik bir şey olsun", {"style": "Romantik", "response": "Romantik bir şarkı olacak 💕"}),
        Example("hüzünlü", {"style": "Duygusal", "response": "Duygusal bir şarkı hazırlayacağız 🥹"}),
    ),
)

VOCAL_CONTRACT = ExtractionContract(
    name=ContractName.VOCAL,
    task='Kullanıcı vokal tercihi belirtiyor. Mesajı: "{message}"',
    payload_model=VocalPayload,
    fields=(_VOCAL_FIELD,),
    companions=(Slot.VOCAL,),
    rules=(
        "\"vocal\" değeri MUTLAKA \"Kadın\", \"Erkek\" veya \"Fark etmez\" olmalı.",
        "\"kadın sesi\", \"bayan\", \"kız\" → \"Kadın\"; \"erkek sesi\", \"bay\" → \"Erkek\".",
        "\"farketmez\", \"fark etmez\", \"önemli değil\" → \"Fark etmez\".",
        "Anlaşılmıyorsa null döndür.",
    ),
    examples=(
        Example("bayan sesi olsun", {"vocal": "Kadın", "response": "Kadın sesiyle hazırlayacağız 🎤"}),
        Example(
            "kadın değil erkek olsun",
            {"vocal": "Erkek", "response": "Tamam, erkek sesiyle hazırlıyoruz 🎤"},
            current={Slot.VOCAL: Vocal.FEMALE},
        ),
    ),
)

SONG_SETTINGS_CONTRACT = ExtractionContract(
    name=ContractName.SONG_SETTINGS,
    task='Kullanıcı şarkı ayarları veriyor: "{message}"',
    payload_model=SongSettingsPayload,
    fields=(_TYPE_FIELD, _MOOD_FIELD, _VOCAL_FIELD, _STYLE_DESC_FIELD),
    companions=(Slot.SONG_TYPE, Slot.SONG_STYLE, Slot.VOCAL, Slot.ARTIST_STYLE),
    rules=(
        "Kullanıcının yeni mesajından EKSİK olan bilgileri çıkar.",
        "\"arabesk rock\" → type: \"Arabesk\" (birden fazla tür = ilk tür), sentez artistStyleDescription'a.",
        "\"eğlenceli çoşturan\" → style: \"Eğlenceli\"; \"fark etmez\" → vocal: \"Fark etmez\".",
        "Kullanıcı tam kelimeyi yazmasa da anla (örn: \"coşkun\" → \"Eğlenceli\").",
    ) + _DEIDENTIFY_RULES[1:4],
    examples=(
        Example(
            "Arabesk Rock, Eğlenceli",
            {
                "type": "Arabesk",
                "style": "Eğlenceli",
                "vocal": None,
                "artistStyleDescription": "arabesque rock fusion with electric guitars",
                "response": "Harika! Arabesk-Rock, eğlenceli. Vokal tercihiniz nedir? 🎤",
            },
        ),
        Example(
            "kadın değil erkek olsun",
            {
                "type": None,
                "style": None,
                "vocal": "Erkek",
                "artistStyleDescription": None,
                "response": "Tamam, erkek sesiyle devam ediyoruz 🎤",
            },
            current={Slot.SONG_TYPE: "Pop", Slot.SONG_STYLE: "Romantik", Slot.VOCAL: Vocal.FEMALE},
        ),
    ),
    forbidden=STYLE_FORBIDDEN,
)

RECIPIENT_RELATION_CONTRACT = ExtractionContract(
    name=ContractName.RECIPIENT_RELATION,
    task='Kullanıcı şarkının kim ya da ne için olduğunu söylüyor. Mesajı: "{message}"',
    payload_model=RecipientRelationPayload,
    fields=(ContractField("relation", "şarkının konusu (örn: Sevgilim, Annem, kafemiz)", Slot.RECIPIENT_RELATION),),
    companions=(Slot.RECIPIENT_RELATION,),
    rules=(
        "Bir kişi (Annem, Sevgilim, Arkadaşım), bir işletme (kafemiz, dükkanımız), "
        "bir yer (memleketim, İstanbul) ya da bir tema (mezuniyet, doğum günü) olabilir; hepsini kabul et.",
        "Kullanıcının ifadesini kısa ve doğal haliyle döndür.",
        "Hiçbir şey anlaşılmıyorsa null döndür.",
    ),
    examples=(
        Example("en yakın arkadaşım için", {"relation": "En yakın arkadaşım", "response": "Ne güzel bir hediye olacak 💝"}),
        Example("kafemizin açılışı için", {"relation": "Kafemiz", "response": "Kafeniz için harika bir şarkı yapacağız ☕"}),
    ),
    temperature=CREATIVE_TEMPERATURE,
)

RECIPIENT_NAME_CONTRACT = ExtractionContract(
    name=ContractName.RECIPIENT_NAME,
    task='Kullanıcı şarkıda geçecek ismi söylüyor. Mesajı: "{message}"',
    payload_model=RecipientNamePayload,
    fields=(ContractField("name", "temiz isim", Slot.RECIPIENT_NAME),),
    companions=(Slot.RECIPIENT_RELATION, Slot.RECIPIENT_NAME),
    rules=(
        "Sadece ismi al (örn: \"Ahmet\", \"Ayşe\", \"Mehmet Ali\").",
        "Gereksiz kelimeleri atla (\"İsmi Ahmet\" → \"Ahmet\").",
        "İsim yoksa veya anlamsızsa null döndür.",
    ),
    examples=(
        Example("ismi Ayşe", {"name": "Ayşe", "response": "Harika! Ayşe için özel bir şarkı hazırlayacağız 💝"}),
    ),
)

RECIPIENT_INFO_CONTRACT = ExtractionContract(
    name=ContractName.RECIPIENT_INFO,
    task='Kullanıcı hediye bilgilerini veriyor: "{message}"',
    payload_model=RecipientInfoPayload,
    fields=(
        ContractField("relation", "şarkının konusu", Slot.RECIPIENT_RELATION),
        ContractField("includeNameInSong", "isim geçsin mi", Slot.INCLUDE_NAME, kind="bool"),
        ContractField("name", "isim (sadece geçecekse)", Slot.RECIPIENT_NAME),
    ),
    companions=(Slot.RECIPIENT_RELATION, Slot.INCLUDE_NAME, Slot.RECIPIENT_NAME),
    rules=(
        "İlişki bir kişi, işletme, yer ya da tema olabilir.",
        "Kullanıcı bir isim verdiyse includeNameInSong true kabul edilir.",
        "Eksik varsa response'da sadece eksikleri sor.",
    ),
    examples=(
        Example(
            "Annem, Evet, Ayşe",
            {"relation": "Annem", "includeNameInSong": True, "name": "Ayşe", "response": "Harika! Ayşe için hazırlıyoruz 💝"},
        ),
        Example(
            "sevgilim için, isim geçmesin",
            {"relation": "Sevgilim", "includeNameInSong": False, "name": None, "response": "Tamam, isim geçmeyecek 😊"},
        ),
    ),
)

STORY_QUALITY_CONTRACT = ExtractionContract(
    name=ContractName.STORY_QUALITY,
    task=(
        'Kullanıcı şarkı için hikaye yazdı. Hikaye: "{message}"\n\n'
        "Bu hikaye şarkı sözü yazmak için uygun mu? Duygusal içerik ve yeterli detay var mı?"
    ),
    payload_model=StoryQualityPayload,
    fields=(ContractField("isValid", "uygun mu", kind="bool"),),
    rules=(
        "Hikaye uygunsa ve duygusal içerik varsa → isValid: true.",
        "Çok genel, anlamsız veya içeriksizse → isValid: false ve response'da nazikçe detay iste.",
    ),
    temperature=CREATIVE_TEMPERATURE,
)

STORY_AND_NOTES_CONTRACT = ExtractionContract(
    name=ContractName.STORY_AND_NOTES,
    task='Kullanıcı hikaye ve notları yazdı: "{message}"',
    payload_model=StoryAndNotesPayload,
    fields=(
        ContractField("story", "hikaye kısmı", Slot.STORY),
        ContractField("notes", "not kısmı", Slot.NOTES),
    ),
    rules=(
        "Kullanıcı \"Not:\" veya benzer bir ayırıcı kullanmış olabilir.",
        "Ayırıcı yoksa tüm metni hikaye olarak al, notes null olsun.",
        "Metni özetleme veya değiştirme; kullanıcının yazdığını aynen böl.",
    ),
)
