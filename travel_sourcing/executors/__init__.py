"""Adapter executors for the fan-out stage."""

from travel_sourcing.executors.base import run_adapter_with_status

__all__ = ["run_adapter_with_status"]
