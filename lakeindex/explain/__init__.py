from .reporter import ExplainReporter, ExplainReport, OperatorStat

__all__ = ['ExplainReporter', 'ExplainReport', 'OperatorStat']
