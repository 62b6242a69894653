"""Query intent planning.

plan_query() runs an ordered list of PlanRule entries over the normalized query;
the first rule whose matcher fires builds the plan. Anything no rule claims
becomes a GENERAL_QA plan.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional, Tuple

from kol_hatorah import config
from kol_hatorah.planner.messages import (
    CORPUS_QUOTE_SUGGESTIONS,
    EXACT_REF_SUGGESTIONS,
    LIST_WORKS_SUGGESTIONS,
    message,
)
from kol_hatorah.planner.registry import WorkRegistry
from kol_hatorah.planner.resolver import ScopeResolution, resolve_scope_node
from kol_hatorah.planner.types import (
    Disambiguation,
    ExecutionStrategy,
    ParsedRef,
    PlanDebug,
    QueryIntent,
    QueryPlan,
    ResultLimits,
    ScopeConstraint,
    ScopeNode,
    ScopeNodeType,
)
from kol_hatorah.taxonomy import SEDER_WORD, is_tractate
from kol_hatorah.text import has_hebrew, has_latin, normalize_query_input

logger = logging.getLogger(__name__)

EXACT_REF_RE = re.compile(r"(\S+)\s+(\d+):(\d+)")
CHAPTER_RE = re.compile(r"פרק\s+(\d+)")

OCCURRENCE_TRIGGERS = (
    "איפה מופיעה",
    "איפה מופיע",
    "היכן מופיעה",
    "היכן מופיע",
    "היכן כתוב",
    "הבא את כל המופעים",
    "מופיע הביטוי",
    "מופיעה המילה",
)
OCCURRENCE_RE = re.compile("|".join(re.escape(t) for t in OCCURRENCE_TRIGGERS))
# a quote glyph inside a word is gershayim or geresh (תנ"ך, שמואל א'), not a delimiter
QUOTED_TERM_RE = re.compile(r"""(?:^|(?<=[\s(]))["'](.+?)["'](?=$|[\s?.!,;:)])""")
TERM_FILLERS = {"המילה", "הביטוי", "המונח", "את", "של", "כל", "ה"}
EDGE_PUNCT = "?!.,;:\"'()"

CHAPTER_ABOUT_RE = re.compile(r"(?:על מה מדבר|על מה מדברת|מה הנושא של)\s+פרק\s+(\d+)\s+ב(.+)")
WORK_KIND_PREFIX_RE = re.compile(r"^(?:ספר|מסכת)\s+")

QUOTE_ENTITY_RE = re.compile(r"משניות שמזכירות\s+(.+)")
TRACTATE_SCOPE_RE = re.compile(r"במסכת\s+(\S+(?:\s+\S+)?)")
SEDER_SCOPE_RE = re.compile(r"בסדר\s+(\S+)")
ENTITY_CUT_RE = re.compile(r"(?:^|\s+)(?:במסכת|בסדר)(?:\s+.*)?$")

LIST_WORKS_RE = re.compile(r"מסכתות.*?(מזכירות|מזכירים|מזכיר)\s*(.*)")
MISHNAH_MENTION_RE = re.compile(r"במשנה|המשנה")
BAVLI_MENTION_RE = re.compile(r"בבבלי|הבבלי|בתלמוד|בגמרא")
COLLECTION_MENTION_TOKENS = {"במשנה", "המשנה", "בבבלי", "הבבלי", "בתלמוד", "בגמרא"}

QUOTE_TERM_RE = re.compile(r"מצטט|ציטוט")
VERSE_TERM_RE = re.compile(r"פסוק")
TANAKH_TERM_RE = re.compile(r'תנ"ך|תנך')

SCOPE_SKIP_TOKENS = {"בפרק", "בכל", "בין", "בו", "בה", "בהם"}
WORK_INTRODUCERS = {"בספר", "במסכת"}


@dataclass
class PlanContext:
    query: str
    registry: WorkRegistry
    notes: List[str] = field(default_factory=list)

    def debug(self, rule: str) -> PlanDebug:
        return PlanDebug(matched_rule=rule, notes=list(self.notes))


class PlanRule(NamedTuple):
    name: str
    matcher: Callable[[str], Optional[re.Match]]
    builder: Callable[[PlanContext, re.Match], QueryPlan]


def _clean(token: str) -> str:
    return token.strip(EDGE_PUNCT)


def _scope_from(res: ScopeResolution) -> ScopeConstraint:
    return ScopeConstraint(node=res.node, work=res.work)


def script_note(query: str) -> Optional[str]:
    latin, hebrew = has_latin(query), has_hebrew(query)
    if latin and not hebrew:
        return message("HEBREW_ONLY")
    if latin and hebrew:
        return message("HEBREW_PREFERRED_NOTE")
    return None


# EXACT_REF

def build_exact_ref(ctx: PlanContext, m: re.Match) -> QueryPlan:
    chapter, verse = int(m.group(2)), int(m.group(3))
    words = ctx.query[: m.end(1)].split()
    resolved = ScopeResolution()
    work_raw = m.group(1)
    # multi-word names: "שיר השירים", "מלכים א", "דברי הימים ב"
    for size in (3, 2, 1):
        if len(words) < size:
            continue
        candidate = " ".join(words[-size:])
        res = resolve_scope_node(candidate, ctx.registry)
        if res.work:
            resolved, work_raw = res, candidate
            break

    limits = ResultLimits(
        max_results=config.EXACT_REF_MAX_RESULTS,
        max_segments_for_synthesis=config.EXACT_REF_MAX_SEGMENTS,
    )
    if not resolved.work:
        return QueryPlan(
            intent=QueryIntent.EXACT_REF,
            strategy=ExecutionStrategy.SQL_ONLY,
            limits=limits,
            disambiguation=Disambiguation(
                reason=message("DISAMBIG_BOOK_OR_MASEKHET"),
                suggestions=EXACT_REF_SUGGESTIONS,
            ),
            debug=ctx.debug("EXACT_REF"),
        )

    work = resolved.work
    return QueryPlan(
        intent=QueryIntent.EXACT_REF,
        scope=ScopeConstraint(node=resolved.node, work=work),
        ref=ParsedRef(
            raw=f"{work_raw} {chapter}:{verse}",
            normalized_ref=f"{work} {chapter}:{verse}",
            work=work,
            chapter=chapter,
            verse=verse,
        ),
        strategy=ExecutionStrategy.SQL_ONLY,
        limits=limits,
        debug=ctx.debug("EXACT_REF"),
    )


# WORD_OCCURRENCES

def _unquoted_term(query: str) -> Tuple[str, Optional[Tuple[int, int]]]:
    """First word after the last trigger phrase, skipping filler words."""
    last_end = max(m.end() for m in OCCURRENCE_RE.finditer(query))
    for token in re.finditer(r"\S+", query[last_end:]):
        word = _clean(token.group())
        if word and word not in TERM_FILLERS:
            return word, (last_end + token.start(), last_end + token.end())
    return "", None


def _scan_scope(tokens: List[str], registry: WorkRegistry) -> ScopeResolution:
    """Find a scope among ב-prefixed tokens; a work beats a corpus or division."""
    first_node = ScopeResolution()
    i = 0
    while i < len(tokens):
        tok = _clean(tokens[i])
        nxt = [_clean(t) for t in tokens[i + 1:i + 3]]
        candidates: List[str] = []
        if tok in WORK_INTRODUCERS and nxt:
            if len(nxt) > 1:
                candidates.append(" ".join(nxt))
            candidates.append(nxt[0])
        elif tok == f"ב{SEDER_WORD}" and nxt:
            candidates.append(f"{SEDER_WORD} {nxt[0]}")
        elif tok.startswith("ב") and len(tok) > 1 and tok not in SCOPE_SKIP_TOKENS:
            if nxt:
                candidates.append(f"{tok} {nxt[0]}")
            candidates.append(tok)
        for candidate in candidates:
            res = resolve_scope_node(candidate, registry)
            if res.work:
                return res
            if res.node and first_node.node is None:
                first_node = res
        i += 1
    return first_node


def build_word_occurrences(ctx: PlanContext, m: re.Match) -> QueryPlan:
    query = ctx.query
    quoted = QUOTED_TERM_RE.search(query)
    if quoted:
        term = quoted.group(1).strip()
        remainder = query[: quoted.start()] + " " + query[quoted.end():]
    else:
        term, span = _unquoted_term(query)
        remainder = query[: span[0]] + " " + query[span[1]:] if span else query
    # trigger words never name a scope
    remainder = OCCURRENCE_RE.sub(" ", remainder)

    res = _scan_scope(remainder.split(), ctx.registry)
    chapter_match = CHAPTER_RE.search(query)
    chapter = int(chapter_match.group(1)) if chapter_match else None
    limits = ResultLimits(max_results=config.WORD_OCCURRENCES_MAX_RESULTS)
    debug = ctx.debug("WORD_OCCURRENCES")

    disambiguation = None
    scope = _scope_from(res)
    if not term:
        disambiguation = Disambiguation(
            reason=message("DISAMBIG_MISSING_TERM"),
            suggestions=['איפה מופיעה המילה "אור" בנביאים?'],
        )
    elif chapter is not None and not res.work:
        where = res.node.name if res.node else "ספר"
        disambiguation = Disambiguation(
            reason=message("DISAMBIG_CHAPTER_NEEDS_WORK"),
            suggestions=[
                f'איפה מופיעה המילה "{term}" ב{where} פרק {chapter}?',
                f'איפה מופיעה המילה "{term}" בנביאים בספר ישעיה פרק {chapter}?',
            ],
        )
    elif chapter is not None:
        scope = ScopeConstraint(node=res.node, work=res.work, chapter=chapter)

    return QueryPlan(
        intent=QueryIntent.WORD_OCCURRENCES,
        scope=scope,
        term=term or None,
        strategy=ExecutionStrategy.SQL_ONLY,
        limits=limits,
        disambiguation=disambiguation,
        debug=debug,
    )


# CHAPTER_ABOUT

def build_chapter_about(ctx: PlanContext, m: re.Match) -> QueryPlan:
    chapter = int(m.group(1))
    work_raw = WORK_KIND_PREFIX_RE.sub("", _clean(m.group(2).strip()))
    res = resolve_scope_node(work_raw, ctx.registry)
    limits = ResultLimits(
        max_results=config.CHAPTER_ABOUT_MAX_RESULTS,
        max_segments_for_synthesis=config.CHAPTER_ABOUT_MAX_SEGMENTS,
    )
    if not res.work:
        return QueryPlan(
            intent=QueryIntent.CHAPTER_ABOUT,
            strategy=ExecutionStrategy.HYBRID_SQL_THEN_LLM,
            limits=limits,
            disambiguation=Disambiguation(
                reason=message("DISAMBIG_CHAPTER_WORK"),
                suggestions=[
                    f"על מה מדבר פרק {chapter} בישעיה?",
                    f"מה הנושא של פרק {chapter} בברכות?",
                ],
            ),
            debug=ctx.debug("CHAPTER_ABOUT"),
        )
    return QueryPlan(
        intent=QueryIntent.CHAPTER_ABOUT,
        scope=ScopeConstraint(node=res.node, work=res.work, chapter=chapter),
        strategy=ExecutionStrategy.HYBRID_SQL_THEN_LLM,
        limits=limits,
        debug=ctx.debug("CHAPTER_ABOUT"),
    )


# QUOTE_ENTITY

def _strip_object_marker(text: str) -> str:
    text = _clean(text.strip())
    return re.sub(r"^את\s+", "", text).strip()


def build_quote_entity(ctx: PlanContext, m: re.Match) -> QueryPlan:
    entity = _strip_object_marker(ENTITY_CUT_RE.sub("", m.group(1)))
    scope = ScopeConstraint(node=ScopeNode(type=ScopeNodeType.CORPUS, name="mishnah"))
    limits = ResultLimits(max_results=config.QUOTE_ENTITY_MAX_RESULTS)
    unresolved = None

    tractate = TRACTATE_SCOPE_RE.search(ctx.query)
    seder = SEDER_SCOPE_RE.search(ctx.query)
    if tractate:
        words = [_clean(w) for w in tractate.group(1).split()]
        res = ScopeResolution()
        for size in (2, 1):
            if len(words) >= size:
                res = resolve_scope_node(" ".join(words[:size]), ctx.registry)
                if res.work:
                    break
        if res.work:
            scope = ScopeConstraint(node=scope.node, work=res.work)
        else:
            unresolved = words[0]
    elif seder:
        res = resolve_scope_node(f"{SEDER_WORD} {_clean(seder.group(1))}", ctx.registry)
        if res.node:
            scope = ScopeConstraint(node=res.node)
        else:
            unresolved = _clean(seder.group(1))

    disambiguation = None
    if not entity:
        disambiguation = Disambiguation(
            reason=message("DISAMBIG_MISSING_TERM"),
            suggestions=["משניות שמזכירות את רבי עקיבא"],
        )
    elif unresolved:
        disambiguation = Disambiguation(
            reason=message("DISAMBIG_BOOK_OR_MASEKHET"),
            suggestions=[
                f"משניות שמזכירות {entity} במסכת ברכות",
                f"משניות שמזכירות {entity} בסדר זרעים",
            ],
        )

    return QueryPlan(
        intent=QueryIntent.QUOTE_ENTITY,
        scope=scope,
        term=entity or None,
        strategy=ExecutionStrategy.SQL_ONLY,
        limits=limits,
        disambiguation=disambiguation,
        debug=ctx.debug("QUOTE_ENTITY"),
    )


# LIST_WORKS_MENTIONING_ENTITY

def build_list_works(ctx: PlanContext, m: re.Match) -> QueryPlan:
    mishnah = MISHNAH_MENTION_RE.search(ctx.query) is not None
    bavli = BAVLI_MENTION_RE.search(ctx.query) is not None
    limits = ResultLimits(max_results=config.LIST_WORKS_MAX_RESULTS)
    debug = ctx.debug("LIST_WORKS_MENTIONING_ENTITY")

    if mishnah == bavli:
        return QueryPlan(
            intent=QueryIntent.LIST_WORKS_MENTIONING_ENTITY,
            strategy=ExecutionStrategy.SQL_ONLY,
            limits=limits,
            aggregate_works=True,
            disambiguation=Disambiguation(
                reason=message("DISAMBIG_TRACTATES_WHICH_CORPUS"),
                suggestions=LIST_WORKS_SUGGESTIONS,
            ),
            debug=debug,
        )

    collection = "mishnah" if mishnah else "bavli"
    words = [w for w in m.group(2).split() if _clean(w) not in COLLECTION_MENTION_TOKENS]
    entity = _strip_object_marker(" ".join(words))
    disambiguation = None
    if not entity:
        disambiguation = Disambiguation(
            reason=message("DISAMBIG_MISSING_TERM"),
            suggestions=[LIST_WORKS_SUGGESTIONS[0] if mishnah else LIST_WORKS_SUGGESTIONS[1]],
        )
    return QueryPlan(
        intent=QueryIntent.LIST_WORKS_MENTIONING_ENTITY,
        scope=ScopeConstraint(node=ScopeNode(type=ScopeNodeType.CORPUS, name=collection)),
        term=entity or None,
        strategy=ExecutionStrategy.SQL_ONLY,
        limits=limits,
        aggregate_works=True,
        disambiguation=disambiguation,
        debug=debug,
    )


# CORPUS_QUOTE_QUERY

def match_corpus_quote(query: str) -> Optional[re.Match]:
    if not (VERSE_TERM_RE.search(query) and TANAKH_TERM_RE.search(query)):
        return None
    return QUOTE_TERM_RE.search(query)


def _find_tractate(query: str, registry: WorkRegistry) -> Optional[str]:
    explicit = TRACTATE_SCOPE_RE.search(query)
    if explicit:
        words = [_clean(w) for w in explicit.group(1).split()]
        for size in (2, 1):
            if len(words) >= size:
                res = resolve_scope_node(" ".join(words[:size]), registry)
                if res.work and is_tractate(res.work):
                    return res.work
        return None
    for token in query.split():
        token = _clean(token)
        if token.startswith("ב") and token not in SCOPE_SKIP_TOKENS:
            res = resolve_scope_node(token, registry)
            if res.work and is_tractate(res.work):
                return res.work
    return None


def build_corpus_quote(ctx: PlanContext, m: re.Match) -> QueryPlan:
    # Mishnah unless the Bavli is named explicitly
    collection = "bavli" if BAVLI_MENTION_RE.search(ctx.query) else "mishnah"
    node = ScopeNode(type=ScopeNodeType.CORPUS, name=collection)
    work = _find_tractate(ctx.query, ctx.registry)
    debug = ctx.debug("CORPUS_QUOTE_QUERY")
    if not work:
        return QueryPlan(
            intent=QueryIntent.CORPUS_QUOTE_QUERY,
            scope=ScopeConstraint(node=node),
            strategy=ExecutionStrategy.SQL_ONLY,
            limits=ResultLimits(max_results=config.CORPUS_QUOTE_DISAMBIG_MAX_RESULTS),
            disambiguation=Disambiguation(
                reason=message("DISAMBIG_BOOK_OR_MASEKHET"),
                suggestions=CORPUS_QUOTE_SUGGESTIONS,
            ),
            debug=debug,
        )
    return QueryPlan(
        intent=QueryIntent.CORPUS_QUOTE_QUERY,
        scope=ScopeConstraint(node=node, work=work),
        strategy=ExecutionStrategy.SQL_ONLY,
        limits=ResultLimits(max_results=config.CORPUS_QUOTE_MAX_RESULTS),
        debug=debug,
    )


RULES: List[PlanRule] = [
    PlanRule("EXACT_REF", EXACT_REF_RE.search, build_exact_ref),
    PlanRule("WORD_OCCURRENCES", OCCURRENCE_RE.search, build_word_occurrences),
    PlanRule("CHAPTER_ABOUT", CHAPTER_ABOUT_RE.search, build_chapter_about),
    PlanRule("QUOTE_ENTITY", QUOTE_ENTITY_RE.search, build_quote_entity),
    PlanRule("LIST_WORKS_MENTIONING_ENTITY", LIST_WORKS_RE.search, build_list_works),
    PlanRule("CORPUS_QUOTE_QUERY", match_corpus_quote, build_corpus_quote),
]


def general_qa_plan(ctx: PlanContext) -> QueryPlan:
    return QueryPlan(
        intent=QueryIntent.GENERAL_QA,
        strategy=ExecutionStrategy.VECTOR_ONLY,
        limits=ResultLimits(max_results=config.GENERAL_QA_TOP_K),
        debug=ctx.debug("GENERAL_QA"),
    )


def plan_query(query: str, registry: WorkRegistry, rules: Optional[List[PlanRule]] = None) -> QueryPlan:
    """Turn a free-form Hebrew question into a QueryPlan. Never raises for user input."""
    normalized = normalize_query_input(query)
    ctx = PlanContext(query=normalized, registry=registry)
    note = script_note(normalized)
    if note:
        ctx.notes.append(note)

    for rule in RULES if rules is None else rules:
        match = rule.matcher(normalized)
        if match:
            plan = rule.builder(ctx, match)
            logger.debug(f"plan: rule={rule.name} intent={plan.intent.value} disambiguation={plan.requires_disambiguation}")
            return plan

    logger.debug("plan: no rule matched, falling back to GENERAL_QA")
    return general_qa_plan(ctx)


__all__ = ["PlanContext", "PlanRule", "RULES", "plan_query", "script_note", "general_qa_plan"]
