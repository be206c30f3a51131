"""State layer.

The reconciler is the single writer of the accessory's lock state: both
polling and push samples, and the dispatcher's jam marker, go through it.
"""

from pysesame.state.events import StateChange
from pysesame.state.reconciler import StateReconciler

__all__ = ["StateChange", "StateReconciler"]
