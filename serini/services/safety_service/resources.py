"""Malaysian crisis resources and canned safety messages.

These texts are served without any model involvement, so they are the
last line of defense: every one of them names at least the two 24/7
hotlines.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class Hotline:
    name: str
    name_localized: str
    number: str
    description: str
    description_localized: str
    available: str
    available_localized: str
    priority: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nameMs": self.name_localized,
            "number": self.number,
            "description": self.description,
            "descriptionMs": self.description_localized,
            "available": self.available,
            "availableMs": self.available_localized,
            "priority": self.priority,
        }


MALAYSIA_HOTLINES: Tuple[Hotline, ...] = (
    Hotline(
        name="Talian Kasih",
        name_localized="Talian Kasih",
        number="15999",
        description="Government helpline for crisis support",
        description_localized="Talian bantuan kerajaan untuk sokongan krisis",
        available="24 hours, 7 days",
        available_localized="24 jam, 7 hari",
        priority=1,
    ),
    Hotline(
        name="Befrienders KL",
        name_localized="Befrienders KL",
        number="03-7956 8145",
        description="Emotional support and suicide prevention",
        description_localized="Sokongan emosi dan pencegahan bunuh diri",
        available="24 hours, 7 days",
        available_localized="24 jam, 7 hari",
        priority=2,
    ),
    Hotline(
        name="Emergency Services",
        name_localized="Perkhidmatan Kecemasan",
        number="999",
        description="For immediate emergencies",
        description_localized="Untuk kecemasan segera",
        available="24 hours, 7 days",
        available_localized="24 jam, 7 hari",
        priority=3,
    ),
    Hotline(
        name="MIASA Crisis Line",
        name_localized="Talian Krisis MIASA",
        number="03-7932 1740",
        description="Mental Illness Awareness & Support Association",
        description_localized="Persatuan Kesedaran & Sokongan Penyakit Mental",
        available="Mon-Fri, 9am-5pm",
        available_localized="Isnin-Jumaat, 9pg-5ptg",
        priority=4,
    ),
)

TALIAN_KASIH = MALAYSIA_HOTLINES[0]
BEFRIENDERS_KL = MALAYSIA_HOTLINES[1]


CRISIS_RESPONSE: Dict[str, str] = {
    "en": """I'm concerned about what you're sharing. Your safety is the most important thing right now.

Please reach out for immediate support:
- Talian Kasih: 15999 (24/7)
- Befrienders KL: 03-7956 8145 (24/7)
- Emergency Services: 999

You are not alone. These feelings can be overwhelming, but help is available right now. Would you like to talk about what's happening while we wait for you to connect with professional support?""",
    "ms": """Saya bimbang dengan apa yang anda kongsi. Keselamatan anda adalah yang paling penting sekarang.

Sila hubungi untuk sokongan segera:
- Talian Kasih: 15999 (24/7)
- Befrienders KL: 03-7956 8145 (24/7)
- Perkhidmatan Kecemasan: 999

Anda tidak keseorangan. Perasaan ini boleh menjadi sangat berat, tetapi bantuan tersedia sekarang. Adakah anda ingin bercakap tentang apa yang berlaku semasa menunggu anda berhubung dengan sokongan profesional?""",
}

CHAT_BLOCKED_MESSAGE: Dict[str, str] = {
    "en": """For your safety, the chat feature has been temporarily disabled.

Please reach out for immediate support:
- Talian Kasih: 15999 (24/7)
- Befrienders KL: 03-7956 8145 (24/7)

You are not alone. Help is available.""",
    "ms": """Demi keselamatan anda, ciri sembang telah dinyahaktifkan buat sementara waktu.

Sila hubungi untuk sokongan segera:
- Talian Kasih: 15999 (24/7)
- Befrienders KL: 03-7956 8145 (24/7)

Anda tidak keseorangan. Bantuan sentiasa ada.""",
}

CHAT_FALLBACK_MESSAGE: Dict[str, str] = {
    "en": """I apologize, but I'm having trouble responding right now.

If you need immediate support, please contact:
- Talian Kasih: 15999 (24/7)
- Befrienders KL: 03-7956 8145 (24/7)""",
    "ms": """Maaf, saya menghadapi masalah untuk membalas sekarang.

Jika anda memerlukan sokongan segera, sila hubungi:
- Talian Kasih: 15999 (24/7)
- Befrienders KL: 03-7956 8145 (24/7)""",
}

EMERGENCY_DISCLAIMER: Dict[str, str] = {
    "en": "If you are in a life threatening situation or any other person may be in danger, "
          "do not use this site. Call the free, 24-hour hotlines: Talian Kasih at 15999 or "
          "Befrienders at 03-7956 8145 for immediate help. If you are in an emergency, call "
          "999 or go to your nearest hospital.",
    "ms": "Jika anda dalam keadaan mengancam nyawa atau mana-mana orang lain mungkin dalam "
          "bahaya, jangan gunakan laman ini. Hubungi talian percuma 24 jam: Talian Kasih di "
          "15999 atau Befrienders di 03-7956 8145 untuk bantuan segera. Jika anda dalam "
          "kecemasan, hubungi 999 atau pergi ke hospital terdekat.",
}

SCREENING_DISCLAIMER: Dict[str, str] = {
    "en": "This screening is not a diagnosis. Only a licensed professional can provide a "
          "complete assessment. This is simply an initial step to help you understand your "
          "mental well-being better.",
    "ms": "Saringan ini bukan diagnosis. Hanya profesional berlesen boleh memberikan penilaian "
          "lengkap. Ini hanyalah langkah awal untuk membantu anda memahami kesejahteraan mental "
          "anda dengan lebih baik.",
}


# Common function words that rarely appear in English text
_MALAY_MARKERS = frozenset({
    "saya", "aku", "anda", "awak", "kamu", "tidak", "tak", "tiada", "dengan", "yang",
    "dan", "ini", "itu", "sangat", "rasa", "mahu", "nak", "boleh", "sudah", "dah",
    "kerana", "sebab", "untuk", "apa", "bagaimana", "kenapa", "mengapa", "hidup",
    "sedih", "tolong", "bantu", "lagi", "pun", "juga", "ada", "sahaja", "je",
})
_WORD_RE = re.compile(r"[a-zA-Z']+")


def detect_language(text: Any) -> str:
    """Best-effort EN/MS detection for language-matching canned messages.

    Returns "ms" when at least two Malay marker words appear (one for
    messages of three words or fewer), otherwise "en".
    """
    if not isinstance(text, str):
        return "en"
    words = [w.lower() for w in _WORD_RE.findall(text)]
    if not words:
        return "en"
    hits = sum(1 for w in words if w in _MALAY_MARKERS)
    needed = 1 if len(words) <= 3 else 2
    return "ms" if hits >= needed else "en"


def _pick(messages: Dict[str, str], language: str) -> str:
    return messages.get(language, messages["en"])


def crisis_response(language: str = "en") -> str:
    return _pick(CRISIS_RESPONSE, language)


def chat_blocked_message(language: str = "en") -> str:
    return _pick(CHAT_BLOCKED_MESSAGE, language)


def chat_fallback_message(language: str = "en") -> str:
    return _pick(CHAT_FALLBACK_MESSAGE, language)


def hotlines_payload() -> List[Dict[str, Any]]:
    return [h.to_dict() for h in sorted(MALAYSIA_HOTLINES, key=lambda h: h.priority)]
