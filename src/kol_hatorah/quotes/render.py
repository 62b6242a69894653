"""Pretty-printer for corpus-wide quotation scans.

Confirmed quotations are listed with their Tanakh verse; unconfirmed ones are
listed on their own and never shown next to a Tanakh reference.
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple

from kol_hatorah.refs import format_hebrew_ref
from kol_hatorah.taxonomy import display_work_name

# extractor signal names shown to readers
SIGNAL_LABELS = {"quotes": "מרכאות"}


def _clip(text: str, max_chars: int = 80) -> str:
    if not text:
        return ""
    return f"{text[:max_chars]}…" if len(text) > max_chars else text


def _display_tanakh_ref(ref: str) -> str:
    book, _, chapter_verse = (ref or "").rpartition(" ")
    if not book:
        return ref
    return format_hebrew_ref(f"{display_work_name(book)} {chapter_verse}")


def _source_line(row: Any, qr: Any) -> str:
    cand = qr.candidate
    signal = SIGNAL_LABELS.get(cand.signal, cand.signal) or "ציטוט"
    return f"{format_hebrew_ref(row.ref)} — {signal}: {_clip(cand.raw_text, 120)}"


def render_quote_results(
    result: Any,
    show_tanakh_text: bool = False,
    show_mishnah_text: bool = False,
    limit: Optional[int] = None,
    offset: int = 0,
) -> str:
    if result.kind != "OK":
        return result.message if result.kind == "REFUSAL" else ""
    totals = result.totals
    with_candidates = totals.with_candidates if totals else 0
    confirmed_total = totals.confirmed if totals else 0
    unconfirmed_total = totals.unconfirmed if totals else 0
    header = (
        f'נמצאו {with_candidates} מקורות עם סימני ציטוט תנ"ך. '
        f"שויכו בוודאות {confirmed_total}. ללא שיוך ודאי {unconfirmed_total}."
    )

    confirmed: List[Tuple[Any, Any]] = []
    unconfirmed: List[Tuple[Any, Any]] = []
    for row in result.rows or []:
        for qr in row.quote_results or []:
            if qr.confirmed and qr.links:
                confirmed.append((row, qr))
            else:
                unconfirmed.append((row, qr))

    confirmed_blocks = []
    for row, qr in confirmed:
        best = qr.links[0]
        lines = [
            _source_line(row, qr),
            f"שויך ל: {_display_tanakh_ref(best.tanakh_ref)} (ציון {best.score:.2f})",
        ]
        if show_tanakh_text and best.tanakh_text:
            lines.append(f"פסוק: {_clip(best.tanakh_text, 90)}")
        if show_mishnah_text:
            lines.append(f"טקסט מלא: {_clip(row.text, 120)}")
        confirmed_blocks.append("\n".join(lines))

    unconfirmed_lines = [_source_line(row, qr) for row, qr in unconfirmed]

    partial = ""
    scanned = totals.scanned if totals else 0
    if (totals and totals.limited) or (limit is not None and scanned > limit + offset):
        partial = f"הצגה חלקית: מוצגים {limit or scanned} מקורות. השתמש ב --limit או --offset."

    sections = [
        header,
        "✅ ציטוטים עם שיוך ודאי" if confirmed else "",
        "\n\n".join(confirmed_blocks),
        "⚠️ ציטוטים ללא שיוך ודאי" if unconfirmed else "",
        "לא נמצא פסוק תואם בוודאות לפי הכללים השמרניים. אפשר להרחיב כללים/לחפש ידנית." if unconfirmed else "",
        "\n".join(unconfirmed_lines),
        partial,
    ]
    return "\n".join(s for s in sections if s).strip()
