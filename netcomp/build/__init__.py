from .plan import BuildPlan
from .driver import prepare, build


__all__ = ["BuildPlan", "prepare", "build"]
