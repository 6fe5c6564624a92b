"""NATS access checker."""

from querysvc.adapters.nats.adapter import NatsAccessChecker

__all__ = ["NatsAccessChecker"]
