"""Live code explanation: debounced LLM analysis with an animated step view."""

from .api import build_reasoner, build_session, explain_source  # noqa: F401
from .session import ExplanationSession  # noqa: F401
from .session_types import ExplainerConfig  # noqa: F401
from .step_types import SourceSnapshot, Step, StepSequence  # noqa: F401
