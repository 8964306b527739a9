from .metrics import domain_accuracy, greedy_policy, history_frame, qtable_frame

__all__ = ["domain_accuracy", "greedy_policy", "history_frame", "qtable_frame"]
