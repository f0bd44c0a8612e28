"""
Bots module - Computer opponent implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicEvaluator: Scores battle states
- OpponentPlanner: Tiered opponent with lethal search and lookahead
- Personality: Per-tier play styles
"""

from .policy import BotPolicy, BotDecision, ExpectedRandom, RandomPolicy, FirstLegalPolicy
from .evaluator import HeuristicEvaluator, EvaluationWeights
from .personality import Personality, PERSONALITIES, personality_for
from .candidates import Candidate, PlanningContext, CANDIDATE_GENERATORS, find_lethal
from .planner import OpponentPlanner, plan_opponent_turn

__all__ = [
    "BotPolicy",
    "BotDecision",
    "ExpectedRandom",
    "RandomPolicy",
    "FirstLegalPolicy",
    "HeuristicEvaluator",
    "EvaluationWeights",
    "Personality",
    "PERSONALITIES",
    "personality_for",
    "Candidate",
    "PlanningContext",
    "CANDIDATE_GENERATORS",
    "find_lethal",
    "OpponentPlanner",
    "plan_opponent_turn",
]
