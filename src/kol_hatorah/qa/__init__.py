from kol_hatorah.qa.index import QAIndexError, build_qa_index, load_qa_index
from kol_hatorah.qa.pipeline import GeneralQA, should_answer

__all__ = ["QAIndexError", "build_qa_index", "load_qa_index", "GeneralQA", "should_answer"]
