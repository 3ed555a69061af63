"""bbcount Pipeline — orchestration of a counting run."""

from bbcount.pipeline.engine import AnalysisEngine, PipelineContext, RunResult

__all__ = ["AnalysisEngine", "PipelineContext", "RunResult"]
