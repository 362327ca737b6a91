"""Issue-to-pull-request automation pipeline.

This package provides:
- Issue analysis into normalized task descriptions
- Code generation through a live generative backend or a deterministic
  fallback, with fenced-block parsing of model output
- Pull request submission through the GitHub git data API
- A sequential orchestrator with an explicit run state machine
"""

__version__ = "0.1.0"
