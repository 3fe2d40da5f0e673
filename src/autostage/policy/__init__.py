"""Policy layer — path patterns and the ordered accept/reject filter."""

from autostage.policy.filter import PolicyDecision, PolicyFilter
from autostage.policy.patterns import PathPattern, compile_patterns

__all__ = ["PathPattern", "PolicyDecision", "PolicyFilter", "compile_patterns"]
