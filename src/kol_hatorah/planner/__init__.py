from kol_hatorah.planner.executor import build_scope_filter, execute_plan
from kol_hatorah.planner.messages import MESSAGES
from kol_hatorah.planner.plan import RULES, PlanRule, plan_query
from kol_hatorah.planner.registry import WorkRegistry
from kol_hatorah.planner.render import render_answer, render_result, render_word_occurrences
from kol_hatorah.planner.resolver import ScopeResolution, expand_subcorpus, resolve_scope_node
from kol_hatorah.planner.types import (
    Disambiguation,
    DisambiguationRequired,
    ExecutionStrategy,
    ParsedRef,
    PlanDebug,
    PlanOk,
    PlanResult,
    QueryIntent,
    QueryPlan,
    Refusal,
    ResultLimits,
    ResultRow,
    ScanTotals,
    ScopeConstraint,
    ScopeNode,
    ScopeNodeType,
    WorkHit,
)

__all__ = [
    "build_scope_filter",
    "execute_plan",
    "MESSAGES",
    "RULES",
    "PlanRule",
    "plan_query",
    "WorkRegistry",
    "render_answer",
    "render_result",
    "render_word_occurrences",
    "ScopeResolution",
    "expand_subcorpus",
    "resolve_scope_node",
    "Disambiguation",
    "DisambiguationRequired",
    "ExecutionStrategy",
    "ParsedRef",
    "PlanDebug",
    "PlanOk",
    "PlanResult",
    "QueryIntent",
    "QueryPlan",
    "Refusal",
    "ResultLimits",
    "ResultRow",
    "ScanTotals",
    "ScopeConstraint",
    "ScopeNode",
    "ScopeNodeType",
    "WorkHit",
]
