from .loader import load_config, load_config_with_overrides
from .schema import PipelineConfig, AspectConfig, OutputConfig

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "PipelineConfig",
    "AspectConfig",
    "OutputConfig",
]
