from typing import Any, Optional
import threading

from kol_hatorah.planner.registry import WorkRegistry
from kol_hatorah.qa.pipeline import GeneralQA

# Work registry snapshot, replaced as a whole on rebuild
registry: Optional[WorkRegistry] = None
registry_lock = threading.Lock()

# General QA (retrieval-only), None when no index is available
general_qa: Optional[GeneralQA] = None

# Metrics
REQUEST_COUNT: Any = None
REQUEST_LATENCY: Any = None
PLANS_TOTAL: Any = None
QUOTE_VERDICTS_TOTAL: Any = None
