"""Who-Is-Out Pipeline - reports which support team members are out of office."""

from pipelines.who_is_out.pipeline import build_pipeline, run_report, PIPELINE_NAME
from pipelines.who_is_out.config import RunConfig, load_run_config

__all__ = ["build_pipeline", "run_report", "PIPELINE_NAME", "RunConfig", "load_run_config"]
