"""aptscore - fixed-point decision scoring and ranking engine."""

__version__ = "0.4.0"
