"""Service modules"""
from .bootstrap import Environment, build_environment, build_oracle, build_pools
from .inspector import Inspector

__all__ = ["Environment", "Inspector", "build_environment", "build_oracle", "build_pools"]
