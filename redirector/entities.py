"""
Minimal HTML entity handling for the two entities that show up in redirect URLs.

Both directions scan the input once, left to right, and never rescan their own
output. encode() is therefore not idempotent: encode("&amp;") == "&amp;amp;".
"""

ENCODE_MAP = {
    "&": "&amp;",
    "<": "&lt;",
}

DECODE_MAP = {
    "&amp;": "&",
    "&lt;": "<",
}

# Longest first, so the longest applicable entity wins at each position
_ENTITIES = sorted(DECODE_MAP, key=len, reverse=True)


def encode(text: str) -> str:
    return "".join(ENCODE_MAP.get(ch, ch) for ch in text)


def decode(text: str) -> str:
    out = []
    idx = 0
    while idx < len(text):
        if text[idx] == "&":
            for entity in _ENTITIES:
                if text.startswith(entity, idx):
                    out.append(DECODE_MAP[entity])
                    idx += len(entity)
                    break
            else:
                out.append("&")
                idx += 1
        else:
            out.append(text[idx])
            idx += 1
    return "".join(out)
