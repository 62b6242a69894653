import os
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Storage
SQLITE_PATH = os.getenv("SQLITE_PATH", os.path.join(PROJECT_ROOT, ".local", "kol_hatorah_lexical.sqlite"))
QA_INDEX_PATH = os.getenv("QA_INDEX_PATH", os.path.join(PROJECT_ROOT, "models", "qa_index.pkl"))

# Planner result limits
EXACT_REF_MAX_RESULTS = int(os.getenv("EXACT_REF_MAX_RESULTS", "50"))
EXACT_REF_MAX_SEGMENTS = int(os.getenv("EXACT_REF_MAX_SEGMENTS", "10"))
WORD_OCCURRENCES_MAX_RESULTS = int(os.getenv("WORD_OCCURRENCES_MAX_RESULTS", "20"))
CHAPTER_ABOUT_MAX_RESULTS = int(os.getenv("CHAPTER_ABOUT_MAX_RESULTS", "200"))
CHAPTER_ABOUT_MAX_SEGMENTS = int(os.getenv("CHAPTER_ABOUT_MAX_SEGMENTS", "40"))
QUOTE_ENTITY_MAX_RESULTS = int(os.getenv("QUOTE_ENTITY_MAX_RESULTS", "50"))
LIST_WORKS_MAX_RESULTS = int(os.getenv("LIST_WORKS_MAX_RESULTS", "100"))
CORPUS_QUOTE_MAX_RESULTS = int(os.getenv("CORPUS_QUOTE_MAX_RESULTS", "100"))
CORPUS_QUOTE_DISAMBIG_MAX_RESULTS = int(os.getenv("CORPUS_QUOTE_DISAMBIG_MAX_RESULTS", "50"))
GENERAL_QA_TOP_K = int(os.getenv("GENERAL_QA_TOP_K", "8"))

# Quotation detection
QUOTE_MIN_LEN_CHARS = int(os.getenv("QUOTE_MIN_LEN_CHARS", "8"))
QUOTE_MAX_LEN_CHARS = int(os.getenv("QUOTE_MAX_LEN_CHARS", "200"))
QUOTE_MIN_WORDS = int(os.getenv("QUOTE_MIN_WORDS", "2"))
QUOTE_INTRO_WINDOW = int(os.getenv("QUOTE_INTRO_WINDOW", "140"))

# Quotation linking against Tanakh
TANAKH_TOP_K = int(os.getenv("TANAKH_TOP_K", "5"))
TANAKH_MIN_SHARED_WORDS = int(os.getenv("TANAKH_MIN_SHARED_WORDS", "3"))
TANAKH_MIN_SCORE = float(os.getenv("TANAKH_MIN_SCORE", "0.45"))

# General QA gating; RAG_MIN_SCORE is skipped when unset
RAG_MIN_SOURCES = int(os.getenv("RAG_MIN_SOURCES", "2"))
RAG_MIN_SCORE = float(os.environ["RAG_MIN_SCORE"]) if os.getenv("RAG_MIN_SCORE") else None
