MESSAGES = {
    "DISAMBIG_BOOK_OR_MASEKHET": "לא זיהיתי את שם הספר/מסכת.",
    "DISAMBIG_CHAPTER_NEEDS_WORK": "נדרש לציין ספר/מסכת יחד עם מספר פרק.",
    "DISAMBIG_CHAPTER_WORK": "לא זיהיתי את שם הספר/מסכת עבור פרק.",
    "DISAMBIG_TRACTATES_WHICH_CORPUS": "האם הכוונה למסכתות במשנה או בבבלי?",
    "DISAMBIG_MISSING_TERM": "לא זיהיתי איזו מילה לחפש.",
    "REFUSAL_INSUFFICIENT": "אין לי מספיק מקורות בקורפוס כדי לענות.",
    "REFUSAL_PLANNING_ERROR": "שגיאת תכנון שאילתה",
    "HEBREW_ONLY": "בשלב זה עדיף לשאול בעברית בלבד. נסה לנסח מחדש בעברית.",
    "HEBREW_PREFERRED_NOTE": "הערה: בשלב זה עדיף לשאול בעברית.",
}

EXACT_REF_SUGGESTIONS = [
    'נסה לכתוב את שם הספר בעברית מלאה, למשל: "בראשית 1:1"',
    'לפרק בתנ"ך כתוב: "ישעיה 40:1"',
    'למסכת משנה כתוב: "ברכות 3:1"',
]

LIST_WORKS_SUGGESTIONS = [
    "איזה מסכתות במשנה מזכירות את רבי עקיבא?",
    "איזה מסכתות בבבלי מזכירות את רבי עקיבא?",
]

CORPUS_QUOTE_SUGGESTIONS = [
    'תן לי את כל המשניות במסכת סוטה שמצטטים פסוק מהתנ"ך',
]


def message(code: str) -> str:
    return MESSAGES[code]
