import regex as re
from unidecode import unidecode

_sp = re.compile(r"\s+")


def normalize_text(s: str) -> str:
    """Texto para busca: minúsculas, sem acentos, pontuação colapsada."""
    if not s:
        return ""
    s = unidecode(str(s).lower())
    s = re.sub(r"[^a-z0-9\s\+\#\.\-_/]", " ", s)  # mantem +, #, ., -, _, /
    s = _sp.sub(" ", s).strip()
    return s


def compact_text(s: str) -> str:
    """Colapsa espaços/quebras de linha (texto extraído de PDF)."""
    if not s:
        return ""
    return _sp.sub(" ", str(s)).strip()


def matches_query(query: str, *fields: str) -> bool:
    q = normalize_text(query)
    if not q:
        return True
    return any(q in normalize_text(f) for f in fields)
